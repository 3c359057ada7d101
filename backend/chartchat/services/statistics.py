"""
Statistics engine.

Computes count/mean/median/sum/min/max, optionally per group, and Pearson
correlation over the filtered rows of a request context. Every recoverable
problem (unknown field, no usable data, ...) comes back as a failed
StatisticResult rather than an exception.
"""
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from chartchat.core.config import SUPPORTED_OPERATIONS
from chartchat.core.context import RequestContext
from chartchat.core.errors import EngineError, ErrorCodes, FieldNotFoundError
from chartchat.core.performance import track_performance
from chartchat.core.sanitization import sanitize_for_logging
from chartchat.core.schemas import OperationRequest, Row, StatisticResult
from chartchat.services.fields import resolve_field
from chartchat.services.filters import apply_filters
from chartchat.services.numeric import coerce_number, is_missing, parse_number, round_half_up

logger = logging.getLogger(__name__)

STAT_DECIMALS = 2
CORRELATION_DECIMALS = 3


def calculate_stat(values: Sequence[Any], operation: str) -> float:
    """
    Apply one aggregate to a list of values.

    ``count`` accepts any values; every other operation expects numbers.
    Results are rounded half away from zero to two decimals. The input is
    never reordered. An aggregate that overflows comes back as inf.
    """
    if operation == 'count':
        return len(values)

    arr = np.asarray(values, dtype=float)
    # Overflow yields inf; callers report it as a non-finite result
    with np.errstate(over='ignore', invalid='ignore'):
        if operation == 'mean':
            result = arr.mean()
        elif operation == 'median':
            result = np.median(arr)
        elif operation == 'sum':
            result = arr.sum()
        elif operation == 'min':
            result = arr.min()
        elif operation == 'max':
            result = arr.max()
        else:
            raise ValueError(f"Invalid operation: {operation}")
    return round_half_up(float(result), STAT_DECIMALS)


def calculate_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation using population (not sample) moments.

    Raises:
        ValueError: lengths differ, inputs are empty, either side has
            zero variance, or the moments overflow (the coefficient is
            undefined or not finite)
    """
    if len(x) != len(y) or len(x) == 0:
        raise ValueError("Arrays must have the same length and not be empty")

    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    with np.errstate(over='ignore', invalid='ignore'):
        dx = xs - xs.mean()
        dy = ys - ys.mean()

        cov_xy = float(np.mean(dx * dy))
        var_x = float(np.mean(dx ** 2))
        var_y = float(np.mean(dy ** 2))
        if not all(math.isfinite(m) for m in (cov_xy, var_x, var_y)):
            raise ValueError("Values are too large to correlate without overflow")
        if var_x == 0 or var_y == 0:
            raise ValueError("Correlation is undefined when a field has zero variance")

        denominator = math.sqrt(var_x) * math.sqrt(var_y)
        if denominator == 0:
            raise ValueError("Correlation is undefined when a field has zero variance")
        result = cov_xy / denominator

    if not math.isfinite(result):
        raise ValueError("Correlation is not a finite number")
    return result


def group_key(value: Any) -> str:
    """Stringify a raw group-by value: None -> 'null', True -> 'true', 3.0 -> '3'."""
    if is_missing(value):
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _resolve(requested: Optional[str], columns: Sequence[str], role: Optional[str] = None) -> str:
    """Resolve a request field; ``role`` scopes the error message to that field."""
    try:
        if not requested:
            raise FieldNotFoundError(requested, columns)
        return resolve_field(requested, columns)
    except FieldNotFoundError as e:
        if role is None:
            raise
        shown = f'"{requested}" ' if requested else ""
        raise FieldNotFoundError(
            requested, columns,
            message=f"{role} field {shown}not found. Available fields are: {', '.join(columns)}",
        ) from e


def _failure(code: str, message: str, **extra) -> StatisticResult:
    return StatisticResult(success=False, output=message, error_code=code, **extra)


def _failure_from(error: EngineError) -> StatisticResult:
    return _failure(error.code, error.message, issues=error.issues)


def _no_valid_data(operation: str, field: str) -> StatisticResult:
    kind = "data" if operation == 'count' else "numerical data"
    return _failure(
        ErrorCodes.NO_VALID_DATA,
        f'No valid {kind} available for field "{field}"',
        operation=operation,
        field=field,
    )


def _summary(values: Sequence[float]) -> Dict[str, float]:
    return {op: calculate_stat(values, op) for op in ('mean', 'min', 'max')}


def _non_finite(operation: str, field: str, detail: str, **extra) -> StatisticResult:
    return _failure(
        ErrorCodes.NON_FINITE_RESULT,
        f'{operation} of "{field}" is not a finite number: {detail}',
        operation=operation,
        field=field,
        **extra,
    )


def _correlation(operation: str, field: str, field2: str, rows: Sequence[Row]) -> StatisticResult:
    values1: List[float] = []
    values2: List[float] = []
    for row in rows:
        val1, val2 = parse_number(row.get(field)), parse_number(row.get(field2))
        if val1 is not None and val2 is not None:
            values1.append(val1)
            values2.append(val2)

    if not values1:
        return _failure(
            ErrorCodes.NO_VALID_DATA,
            f'No valid numerical data available for fields "{field}" and "{field2}"',
            operation=operation, field=field, field2=field2,
        )

    try:
        correlation = calculate_correlation(values1, values2)
    except ValueError as e:
        return _failure(
            ErrorCodes.NON_FINITE_RESULT,
            f'Correlation between "{field}" and "{field2}" is undefined: {e}',
            operation=operation, field=field, field2=field2,
        )

    field1_stats, field2_stats = _summary(values1), _summary(values2)
    overflowed = [name for name, stats in ((field, field1_stats), (field2, field2_stats))
                  if not all(math.isfinite(v) for v in stats.values())]
    if overflowed:
        return _non_finite(
            operation, field, f'summary of "{overflowed[0]}" overflowed', field2=field2,
        )

    return StatisticResult(
        success=True,
        output={
            "correlation": round_half_up(correlation, CORRELATION_DECIMALS),
            "field1Stats": field1_stats,
            "field2Stats": field2_stats,
        },
        operation=operation,
        field=field,
        field2=field2,
        processed_count=len(values1),
        total_count=len(rows),
    )


def _grouped(operation: str, field: str, group_field: str, rows: Sequence[Row]) -> StatisticResult:
    groups: Dict[str, List[Any]] = {}
    for row in rows:
        bucket = groups.setdefault(group_key(row.get(group_field)), [])
        if operation == 'count':
            bucket.append(row)
        else:
            number = coerce_number(row.get(field))
            if number is not None:
                bucket.append(number)

    # Groups with nothing left after coercion are left out, not reported as 0
    results = {
        key: calculate_stat(groups[key], operation)
        for key in sorted(groups)
        if groups[key]
    }
    if not results:
        return _no_valid_data(operation, field)
    overflowed = [key for key, value in results.items() if not math.isfinite(value)]
    if overflowed:
        return _non_finite(
            operation, field, f'group "{overflowed[0]}" overflowed', group_by=group_field,
        )

    return StatisticResult(
        success=True,
        output=results,
        operation=operation,
        field=field,
        group_by=group_field,
        processed_count=sum(len(values) for values in groups.values()),
        total_count=len(rows),
    )


def _ungrouped(operation: str, field: str, rows: Sequence[Row]) -> StatisticResult:
    if operation == 'count':
        values = [row.get(field) for row in rows]
    else:
        values = [n for n in (coerce_number(row.get(field)) for row in rows) if n is not None]

    if not values:
        return _no_valid_data(operation, field)

    output = calculate_stat(values, operation)
    if not math.isfinite(output):
        return _non_finite(operation, field, "the aggregate overflowed")

    return StatisticResult(
        success=True,
        output=output,
        operation=operation,
        field=field,
        processed_count=len(values),
        total_count=len(rows),
    )


@track_performance("compute_statistic")
def compute_statistic(
    request: Union[OperationRequest, Mapping[str, Any]],
    context: RequestContext,
) -> StatisticResult:
    """
    Compute one statistic over the context's dataset.

    Filters are applied first, then the request is dispatched to
    correlation, grouped or whole-dataset aggregation.

    Args:
        request: Operation request (model or plain mapping)
        context: Request context holding the dataset and settings

    Returns:
        StatisticResult; ``success`` is False with an ``error_code`` and a
        human-readable ``output`` when the request cannot be answered
    """
    if not isinstance(request, OperationRequest):
        request = OperationRequest.model_validate(request)

    if context.is_empty:
        return _failure(ErrorCodes.EMPTY_DATASET, "Dataset is empty or not loaded.")

    operation = request.operation.strip().lower()
    enabled = context.settings.enabled_operations_list
    if operation not in SUPPORTED_OPERATIONS or operation not in enabled:
        return _failure(
            ErrorCodes.INVALID_OPERATION,
            f"Invalid operation: {request.operation}. Supported operations are: {', '.join(enabled)}",
            issues=[f"Supported operation: {op}" for op in enabled],
        )

    columns = context.columns
    try:
        field = _resolve(request.field, columns)

        field2 = None
        if operation == 'correlation':
            field2 = _resolve(request.field2, columns, role="Second")

        group_field = None
        if request.group_by and operation != 'correlation':
            group_field = _resolve(request.group_by, columns, role="GroupBy")
    except FieldNotFoundError as e:
        logger.info(f"Field not found for {operation}: {sanitize_for_logging(str(e.requested))}")
        return _failure_from(e)

    rows = apply_filters(context.dataset, request.filters, columns)

    if field2 is not None:
        result = _correlation(operation, field, field2, rows)
    elif group_field is not None:
        result = _grouped(operation, field, group_field, rows)
    else:
        result = _ungrouped(operation, field, rows)

    logger.info(
        f"Computed {operation} on {sanitize_for_logging(field)}: success={result.success}",
        extra={"operation": operation, "rows": len(rows)}
    )
    return result


def compute_statistics(
    requests: Sequence[Union[OperationRequest, Mapping[str, Any]]],
    context: RequestContext,
) -> List[StatisticResult]:
    """Evaluate several requests against the same dataset."""
    return [compute_statistic(request, context) for request in requests]
