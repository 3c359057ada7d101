"""
Numeric coercion and rounding helpers shared by inference, filtering and
statistics.
"""
import math
import re
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Optional

import pandas as pd

_NUMBER_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
_CURRENCY_CHARS_RE = re.compile(r'[$,]')


def is_missing(value: Any) -> bool:
    """True for None, NaN and NaT."""
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a raw value as a finite number.

    Numbers pass through, strings must be a plain decimal literal after
    trimming. Booleans, blanks and non-finite values yield None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.match(text):
            return None
        number = float(text)
    else:
        # numpy scalars and Decimals
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None

    return number if math.isfinite(number) else None


def coerce_number(value: Any) -> Optional[float]:
    """
    Parse a value that may carry currency formatting.

    '$' and thousands separators are stripped from strings first, so
    '$1,200.50' becomes 1200.5. Anything still unparseable yields None.
    """
    if isinstance(value, str):
        value = _CURRENCY_CHARS_RE.sub('', value)
    return parse_number(value)


def round_half_up(value: float, places: int = 2) -> float:
    """
    Round half away from zero on the value's shortest decimal form.

    round_half_up(1.005) == 1.01 and round_half_up(-2.5, 0) == -3.0, unlike
    the built-in round(), which rounds the binary value half to even.
    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    exact = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # Room for every integer digit plus the kept places (floats reach ~1e308)
        ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))
