import sys
import logging
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from chartchat.api.routes import router, limiter
from chartchat.api.metrics import router as metrics_router
from chartchat.core.config import get_settings
from chartchat.core.errors import EngineError, ErrorCodes, get_error_response
from chartchat.core.logging import configure_logging
from chartchat.core.middleware import CorrelationIDMiddleware, CORRELATION_HEADER

# Load environment variables
load_dotenv()

# Load and validate configuration
try:
    settings = get_settings()
except Exception as e:
    # Basic logger for startup errors
    logging.basicConfig(level=logging.ERROR)
    logger = logging.getLogger(__name__)
    logger.error(f"Failed to load configuration: {e}")
    sys.exit(1)

configure_logging(settings)
logger = logging.getLogger(__name__)

# Status codes for engine errors; anything unlisted is a 400
STATUS_BY_CODE = {
    ErrorCodes.INVALID_RESPONSE_SHAPE: 422,
    ErrorCodes.INVALID_CHART_SPEC: 422,
}

app = FastAPI(
    title="Chartchat API",
    description="Statistics and chart specs for natural-language questions about tabular data",
    version="1.0.0"
)

app.state.limiter = limiter
app.state.settings = settings


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded with structured error response."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    error_info = get_error_response(ErrorCodes.RATE_LIMIT_EXCEEDED)
    error_info['correlation_id'] = correlation_id
    return JSONResponse(
        status_code=429,
        content=error_info,
        headers={"Retry-After": "60", CORRELATION_HEADER: correlation_id}
    )


def engine_error_handler(request: Request, exc: EngineError):
    """Map engine failures onto JSON error bodies carrying the issue list."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    error_info = exc.to_dict()
    error_info['correlation_id'] = correlation_id
    logger.info(f"Engine error {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 400),
        content=error_info,
        headers={CORRELATION_HEADER: correlation_id}
    )


app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(EngineError, engine_error_handler)

# Last added is first executed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", CORRELATION_HEADER],
    expose_headers=[CORRELATION_HEADER]
)
app.add_middleware(CorrelationIDMiddleware)

logger.info(f"CORS allowed origins: {settings.allowed_origins_list}")

app.include_router(router, prefix="/api")
app.include_router(metrics_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Chartchat API is running"}

logger.info("Application started successfully")
