"""
Error codes, user-facing messages and the engine exception hierarchy.

Every engine failure is recoverable by the caller. Exceptions carry a code,
a human-readable message and an optional list of issues so the transport
layer can map them onto its own status conventions.
"""
from typing import Dict, List, Optional, Any

# Error codes
class ErrorCodes:
    EMPTY_DATASET = "EMPTY_DATASET"
    FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
    NO_VALID_DATA = "NO_VALID_DATA"
    INVALID_RESPONSE_SHAPE = "INVALID_RESPONSE_SHAPE"
    INVALID_CHART_SPEC = "INVALID_CHART_SPEC"
    INVALID_OPERATION = "INVALID_OPERATION"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    NON_FINITE_RESULT = "NON_FINITE_RESULT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"

ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.EMPTY_DATASET: {
        "message": "Dataset is empty or not loaded",
        "detail": "There are no rows to analyze.",
        "suggestion": "Upload a file with at least one data row and ask again."
    },
    ErrorCodes.FIELD_NOT_FOUND: {
        "message": "We couldn't find that column",
        "detail": "The requested field does not match any column in the dataset.",
        "suggestion": "Pick one of the available column names listed in the issues."
    },
    ErrorCodes.NO_VALID_DATA: {
        "message": "No usable values to compute with",
        "detail": "After filtering and cleaning, no valid values were left for this field.",
        "suggestion": "Relax the filters or choose a column that contains numbers."
    },
    ErrorCodes.INVALID_RESPONSE_SHAPE: {
        "message": "The answer had nothing to show",
        "detail": "A response must include a chart specification, a computed output, or both.",
        "suggestion": "Try rephrasing the question."
    },
    ErrorCodes.INVALID_CHART_SPEC: {
        "message": "The chart specification is not valid",
        "detail": "The chart is missing required parts or refers to unknown columns.",
        "suggestion": "Check the listed issues and regenerate the chart."
    },
    ErrorCodes.INVALID_OPERATION: {
        "message": "That operation isn't supported",
        "detail": "The requested statistic is not one the engine can compute.",
        "suggestion": "Use one of: count, mean, median, sum, min, max, correlation."
    },
    ErrorCodes.SCHEMA_MISMATCH: {
        "message": "Rows don't share the same columns",
        "detail": "Some rows have different keys than the first row.",
        "suggestion": "Make sure every row has the same set of columns."
    },
    ErrorCodes.NON_FINITE_RESULT: {
        "message": "The result is undefined",
        "detail": "The computation did not produce a finite number.",
        "suggestion": "Correlation needs both fields to vary; check for constant columns."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Too many requests",
        "detail": "Too many requests from this IP.",
        "suggestion": "Please try again after a minute."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Hmm, something unexpected happened",
        "detail": "We encountered an issue we weren't expecting.",
        "suggestion": "Give it another try in a moment."
    }
}

def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Get user-friendly error response for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional additional detail to append

    Returns:
        Dictionary with code, message, detail, and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response


class EngineError(Exception):
    """Base class for recoverable engine failures."""

    code = ErrorCodes.UNKNOWN_ERROR

    def __init__(self, message: str, issues: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.issues = list(issues or [])

    def to_dict(self) -> Dict[str, Any]:
        response: Dict[str, Any] = get_error_response(self.code, self.message)
        response["issues"] = self.issues
        return response


class EmptyDatasetError(EngineError):
    code = ErrorCodes.EMPTY_DATASET


class FieldNotFoundError(EngineError):
    """Raised when a requested field matches no column.

    ``available`` keeps the column names verbatim so callers can self-correct.
    """

    code = ErrorCodes.FIELD_NOT_FOUND

    def __init__(self, requested: str, available: List[str], message: Optional[str] = None):
        self.requested = requested
        self.available = list(available)
        message = message or (
            f'Field "{requested}" not found. Available fields are: {", ".join(self.available)}'
        )
        super().__init__(message, issues=[f"Available field: {name}" for name in self.available])


class SchemaMismatchError(EngineError):
    code = ErrorCodes.SCHEMA_MISMATCH


class InvalidResponseShapeError(EngineError):
    code = ErrorCodes.INVALID_RESPONSE_SHAPE


class InvalidChartSpecError(EngineError):
    code = ErrorCodes.INVALID_CHART_SPEC
