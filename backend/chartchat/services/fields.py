"""
Field name resolution.

Maps a user- or model-supplied field name onto the exact dataset column.
Matching is exact after normalization (case, whitespace and underscores are
ignored); there is no fuzzy matching, so an unknown name always fails.
"""
import re
from typing import Iterable

from chartchat.core.errors import FieldNotFoundError

_IGNORED_CHARS_RE = re.compile(r'[\s_]')


def normalize_field_name(name: str) -> str:
    """Lower-case and drop whitespace and underscores: ' Sale_Price ' -> 'saleprice'."""
    return _IGNORED_CHARS_RE.sub('', str(name).lower())


def resolve_field(requested: str, available: Iterable[str]) -> str:
    """
    Resolve a requested field name to a column name.

    Args:
        requested: Name as supplied by the caller
        available: Column names of the dataset, in order

    Returns:
        The matching column name, verbatim

    Raises:
        FieldNotFoundError: no column matches; lists every available column
    """
    columns = list(available)
    if requested is not None:
        target = normalize_field_name(requested)
        for column in columns:
            if normalize_field_name(column) == target:
                return column
    raise FieldNotFoundError(requested, columns)
