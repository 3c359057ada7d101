import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from chartchat.core.errors import FieldNotFoundError
from chartchat.core.sanitization import sanitize_for_logging
from chartchat.core.schemas import Filter, Row
from chartchat.services.fields import resolve_field
from chartchat.services.numeric import coerce_number

logger = logging.getLogger(__name__)


def values_equal(item_value: Any, filter_value: Any) -> bool:
    """
    Loose equality used by '==' and '!='.

    Strings compare case-insensitively. A string compared with a number is
    equal when it parses to the same number ('3' == 3), and a boolean matches
    its lower-case spelling ('true' == True).
    """
    if isinstance(item_value, str) and isinstance(filter_value, str):
        return item_value.lower() == filter_value.lower()
    if item_value is None or filter_value is None:
        return item_value is None and filter_value is None

    if isinstance(item_value, bool) and isinstance(filter_value, str):
        return str(item_value).lower() == filter_value.strip().lower()
    if isinstance(filter_value, bool) and isinstance(item_value, str):
        return str(filter_value).lower() == item_value.strip().lower()

    if isinstance(item_value, str) or isinstance(filter_value, str):
        left, right = coerce_number(item_value), coerce_number(filter_value)
        return left is not None and left == right

    return item_value == filter_value


def _compare(op: Callable[[float, float], bool]) -> Callable[[Any, Any], bool]:
    def predicate(item_value: Any, filter_value: Any) -> bool:
        left, right = coerce_number(item_value), coerce_number(filter_value)
        if left is None or right is None:
            return False
        return op(left, right)
    return predicate


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": values_equal,
    "!=": lambda a, b: not values_equal(a, b),
    ">": _compare(lambda a, b: a > b),
    "<": _compare(lambda a, b: a < b),
    ">=": _compare(lambda a, b: a >= b),
    "<=": _compare(lambda a, b: a <= b),
}


def resolve_filters(filters: Optional[Sequence[Filter]], columns: Sequence[str]) -> List[Tuple[str, Filter]]:
    """
    Pair each filter with its resolved column.

    Filters naming an unknown column are dropped with a warning so that one
    bad filter does not discard the whole analysis.
    """
    resolved = []
    for flt in filters or []:
        try:
            column = resolve_field(flt.field, columns)
        except FieldNotFoundError:
            logger.warning(f"Skipping filter on unknown field: {sanitize_for_logging(str(flt.field))}")
            continue
        resolved.append((column, flt))
    return resolved


def apply_filters(rows: Sequence[Row], filters: Optional[Sequence[Filter]], columns: Sequence[str]) -> List[Row]:
    """
    Keep the rows that satisfy every filter.

    Args:
        rows: Source rows; never modified
        filters: Conjunctive (field, operator, value) predicates
        columns: Dataset column names used to resolve filter fields

    Returns:
        A new list holding the matching rows in their original order
    """
    active = resolve_filters(filters, columns)
    if not active:
        return list(rows)

    matched = [
        row for row in rows
        if all(OPERATORS[flt.operator](row.get(column), flt.value) for column, flt in active)
    ]
    logger.debug(f"Filters kept {len(matched)} of {len(rows)} rows")
    return matched
