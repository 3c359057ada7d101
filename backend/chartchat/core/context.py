"""
Per-request engine context.

A context owns exactly one dataset and the settings used to interpret it.
It is built once per incoming request and handed to every engine call, so
no dataset is ever held in module-level state.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from chartchat.core.config import Settings, get_settings
from chartchat.core.errors import SchemaMismatchError
from chartchat.core.schemas import Row

logger = logging.getLogger(__name__)

# Cap on per-row issues reported for a schema mismatch.
MAX_SCHEMA_ISSUES = 20


def derive_columns(rows: Sequence[Row], settings: Settings) -> List[str]:
    """
    Derive the column list for a dataset.

    In 'strict' mode the first row's keys are the schema and every other row
    must carry exactly the same keys. In 'union' mode the keys seen across the
    first ``schema_sample_rows`` rows are merged in first-seen order.
    """
    if not rows:
        return []

    if settings.schema_strictness == "union":
        seen: Dict[str, None] = {}
        for row in rows[:settings.schema_sample_rows]:
            for key in row:
                seen.setdefault(key, None)
        return list(seen)

    columns = list(rows[0].keys())
    expected = set(columns)
    issues = []
    mismatched = 0
    for index, row in enumerate(rows):
        keys = set(row.keys())
        if keys == expected:
            continue
        mismatched += 1
        if len(issues) < MAX_SCHEMA_ISSUES:
            missing = sorted(expected - keys)
            unexpected = sorted(keys - expected)
            issues.append(f"Row {index}: missing {missing}, unexpected {unexpected}")

    if mismatched:
        raise SchemaMismatchError(
            f"{mismatched} of {len(rows)} rows do not match the columns of the first row: "
            f"{', '.join(columns)}",
            issues=issues,
        )
    return columns


@dataclass(frozen=True)
class RequestContext:
    """Dataset plus settings for one request. Immutable once built."""

    dataset: Tuple[Row, ...]
    settings: Settings = field(default_factory=get_settings)
    columns: Tuple[str, ...] = field(init=False)

    def __post_init__(self):
        dataset = tuple(self.dataset)
        object.__setattr__(self, "dataset", dataset)
        object.__setattr__(self, "columns", tuple(derive_columns(dataset, self.settings)))

    @classmethod
    def from_rows(cls, rows: Iterable[Row], settings: Optional[Settings] = None) -> "RequestContext":
        return cls(dataset=tuple(rows), settings=settings or get_settings())

    @property
    def is_empty(self) -> bool:
        return len(self.dataset) == 0

    def column_values(self, column: str) -> List[Any]:
        """All values of one column; rows lacking the key read as None."""
        return [row.get(column) for row in self.dataset]
