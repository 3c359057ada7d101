"""
Semantic type inference.

Classifies a column of raw values as quantitative, temporal, ordinal or
nominal, the four Vega-Lite field types, from a bounded sample of the column.
"""
import logging
import re
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

import pandas as pd

from chartchat.core.config import Settings, get_settings
from chartchat.services.numeric import is_missing, parse_number

logger = logging.getLogger(__name__)

_HAS_DIGIT_RE = re.compile(r'\d')


def is_temporal_value(value: Any) -> bool:
    """True if the value is a date/time or a string that parses as one."""
    if isinstance(value, (datetime, date)):
        return True
    if not isinstance(value, str):
        return False

    text = value.strip()
    # Bare words such as "March" or "Yes" are not treated as dates
    if not text or not _HAS_DIGIT_RE.search(text):
        return False
    try:
        parsed = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError):
        return False
    return not pd.isna(parsed)


def sample_column(values: Sequence[Any], sample_size: int) -> List[Any]:
    """
    Draw a representative sample of a column.

    Takes up to ``sample_size`` values from the start, from the one-third
    point and from the end. Overlapping slices are not double counted, so a
    short column is sampled exactly once and its distinct-value ratio is not
    deflated by repeats: ["a", "b", "c", "a"] stays nominal rather than
    dropping under ``ordinal_threshold``. Missing values are dropped.
    """
    n = len(values)
    spread = n // 3
    indexes = set(range(0, min(sample_size, n)))
    indexes.update(range(spread, min(spread + sample_size, n)))
    indexes.update(range(max(n - sample_size, 0), n))
    return [values[i] for i in sorted(indexes) if not is_missing(values[i])]


def _distinct_key(value: Any) -> Any:
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return (type(value).__name__, value)


def infer_semantic_type(values: Sequence[Any], settings: Optional[Settings] = None) -> str:
    """
    Infer the semantic type of a column.

    Checks are applied in order and the first match wins:
    1. quantitative - every sampled value parses as a finite number
    2. temporal - every sampled value parses as a date/time
    3. ordinal - few distinct values relative to the sample
       (ratio below ``settings.ordinal_threshold``), or a constant column
    4. nominal - everything else, including empty columns

    Args:
        values: Raw column values in row order
        settings: Settings supplying the sample size and ordinal threshold

    Returns:
        One of 'quantitative', 'temporal', 'ordinal', 'nominal'
    """
    settings = settings or get_settings()
    sample = sample_column(values, settings.type_sample_size)

    if not sample:
        return 'nominal'

    if all(parse_number(v) is not None for v in sample):
        return 'quantitative'

    if all(is_temporal_value(v) for v in sample):
        return 'temporal'

    distinct = len({_distinct_key(v) for v in sample})
    if len(sample) > 1 and (distinct == 1 or distinct / len(sample) < settings.ordinal_threshold):
        return 'ordinal'

    return 'nominal'
