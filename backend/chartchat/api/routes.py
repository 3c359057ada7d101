import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from chartchat.core.config import get_settings
from chartchat.core.context import RequestContext
from chartchat.core.errors import InvalidChartSpecError
from chartchat.core.schemas import (
    ChartValidation,
    ChartValidationRequest,
    DatasetProfile,
    ProfileRequest,
    RespondRequest,
    StatisticsRequest,
)
from chartchat.services.charts import decorate_chart_spec, validate_chart_spec
from chartchat.services.profiler import build_profile
from chartchat.services.responses import envelope_to_dict, normalize_response
from chartchat.services.statistics import compute_statistic, compute_statistics

logger = logging.getLogger(__name__)

router = APIRouter()

limiter = Limiter(key_func=get_remote_address)


def _rate_limit() -> str:
    return f"{get_settings().rate_limit_per_minute}/minute"


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True, mode="json")


@router.get("/health")
async def health_check():
    return {"status": "ok"}


@router.post("/profile", response_model=DatasetProfile)
@limiter.limit(_rate_limit)
def profile_dataset(request: Request, payload: ProfileRequest):
    """Profile the posted rows: columns, semantic types and sample values."""
    return build_profile(payload.data, get_settings())


@router.post("/statistics")
@limiter.limit(_rate_limit)
def statistics(request: Request, payload: StatisticsRequest):
    """
    Compute one statistic (``request``) or several (``requests``) over the
    posted rows. Failed computations still return 200 with ``success: false``.
    """
    if payload.request is None and not payload.requests:
        raise HTTPException(status_code=422, detail="Either 'request' or 'requests' is required")

    context = RequestContext.from_rows(payload.data, get_settings())
    if payload.requests:
        return [_dump(result) for result in compute_statistics(payload.requests, context)]
    return _dump(compute_statistic(payload.request, context))


@router.post("/charts/validate", response_model=ChartValidation)
@limiter.limit(_rate_limit)
def validate_chart(request: Request, payload: ChartValidationRequest):
    """Validate a chart spec, against the posted rows' profile when rows are given."""
    settings = get_settings()
    profile: Optional[DatasetProfile] = build_profile(payload.data, settings) if payload.data else None
    return validate_chart_spec(payload.chart_spec, profile, settings=settings)


@router.post("/respond")
@limiter.limit(_rate_limit)
def respond(request: Request, payload: RespondRequest):
    """
    Turn a chart spec and/or computed output into a response envelope.

    The chart spec is validated against the dataset profile and decorated
    with the dataset values before normalization.
    """
    settings = get_settings()
    context = RequestContext.from_rows(payload.data, settings)
    chart_spec = payload.chart_spec

    if chart_spec is not None:
        profile = build_profile(context.dataset, settings)
        validation = validate_chart_spec(chart_spec, profile, settings=settings)
        if not validation.valid:
            raise InvalidChartSpecError("Chart specification failed validation", validation.issues)
        chart_spec = decorate_chart_spec(chart_spec, context.dataset, settings, columns=context.columns)

    envelope = normalize_response({
        "chartSpec": chart_spec,
        "output": payload.output,
        "description": payload.description,
    })
    logger.info(f"Responding with {envelope.kind} envelope")
    return envelope_to_dict(envelope)
