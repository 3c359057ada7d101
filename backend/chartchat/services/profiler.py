import logging
from typing import Any, Dict, List, Optional, Sequence

from chartchat.core.config import Settings, get_settings
from chartchat.core.context import derive_columns
from chartchat.core.errors import EmptyDatasetError
from chartchat.core.performance import track_performance
from chartchat.core.schemas import ColumnProfile, DatasetProfile, Row
from chartchat.services.inference import infer_semantic_type

logger = logging.getLogger(__name__)

SAMPLE_VALUE_COUNT = 3
INSPECT_ROW_COUNT = 5


@track_performance("build_profile")
def build_profile(dataset: Sequence[Row], settings: Optional[Settings] = None) -> DatasetProfile:
    """
    Profile a dataset: column names, semantic types and leading sample values.

    Raises:
        EmptyDatasetError: the dataset has no rows
        SchemaMismatchError: rows disagree with the first row's keys (strict mode)
    """
    settings = settings or get_settings()
    if not dataset:
        raise EmptyDatasetError("Dataset is empty or not loaded.")

    columns = []
    for name in derive_columns(dataset, settings):
        values = [row.get(name) for row in dataset]
        columns.append(ColumnProfile(
            name=name,
            semantic_type=infer_semantic_type(values, settings),
            sample_values=values[:SAMPLE_VALUE_COUNT],
        ))

    logger.info(f"Profiled dataset: {len(dataset)} rows, {len(columns)} columns")
    return DatasetProfile(row_count=len(dataset), columns=columns)


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def inspect_dataset(dataset: Any) -> Dict[str, Any]:
    """
    Debug helper: report columns whose leading rows mix value types.

    Only the first few rows are looked at; this is a quick sanity check for
    uploads, not a validation of the whole dataset.
    """
    if not isinstance(dataset, (list, tuple)):
        return {"valid": False, "issues": ["Dataset is not a list of rows"]}

    sample = list(dataset[:INSPECT_ROW_COUNT])
    column_types: Dict[str, List[str]] = {}
    issues = []

    if sample:
        for col in sample[0].keys():
            types = sorted({_type_name(row.get(col)) for row in sample})
            column_types[col] = types
            if len(types) > 1:
                issues.append(f'Mixed types in column "{col}": {", ".join(types)}')

    return {
        "valid": not issues,
        "issues": issues,
        "debug_info": {
            "total_rows": len(dataset),
            "sample_data": sample,
            "column_types": column_types,
        },
    }
