"""
Vega-Lite chart spec validation and decoration.

Chart specs are drafted upstream (by the language-model integration); this
module checks their structure against the dataset profile and fills in the
parts the presentation layer needs (schema URL, inline data, default config).
"""
import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from chartchat.core.config import Settings, get_settings
from chartchat.core.errors import FieldNotFoundError
from chartchat.core.schemas import ChartValidation, DatasetProfile, Row
from chartchat.services.fields import resolve_field

logger = logging.getLogger(__name__)

REQUIRED_PROPERTIES = ("mark", "encoding")

LENIENT_CHANNELS = ("x", "y", "color", "size", "shape")
STRICT_CHANNELS = LENIENT_CHANNELS + ("tooltip", "detail", "opacity")

FIELD_TYPES = {"quantitative", "temporal", "ordinal", "nominal", "geojson"}

DEFAULT_CONFIG = {
    "axis": {
        "labelFontSize": 12,
        "titleFontSize": 14
    },
    "title": {
        "fontSize": 16,
        "anchor": "start"
    }
}


def _derived_fields(spec: Dict[str, Any]) -> Set[str]:
    """Field names created by transforms ("as" targets), which no column backs."""
    derived: Set[str] = set()

    def collect(node: Any):
        if isinstance(node, dict):
            target = node.get("as")
            if isinstance(target, str):
                derived.add(target)
            elif isinstance(target, list):
                derived.update(t for t in target if isinstance(t, str))
            for value in node.values():
                collect(value)
        elif isinstance(node, list):
            for item in node:
                collect(item)

    collect(spec.get("transform", []))
    return derived


def _channel_definitions(definition: Any) -> Iterable[Dict[str, Any]]:
    # tooltip and detail may hold a list of field definitions
    if isinstance(definition, dict):
        yield definition
    elif isinstance(definition, list):
        for item in definition:
            if isinstance(item, dict):
                yield item


def validate_chart_spec(
    spec: Optional[Dict[str, Any]],
    profile: Optional[DatasetProfile] = None,
    strictness: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ChartValidation:
    """
    Structurally validate a Vega-Lite spec.

    All problems are collected; nothing is raised, so the full list can be
    fed back upstream for self-correction.

    Args:
        spec: The chart spec to check
        profile: Optional dataset profile; encoding fields must resolve against it
        strictness: 'lenient' or 'strict'; defaults to settings.chart_strictness
        settings: Settings supplying the default strictness and Vega-Lite version

    Returns:
        ChartValidation with ``valid`` and the list of ``issues``
    """
    settings = settings or get_settings()
    strictness = (strictness or settings.chart_strictness).lower()
    strict = strictness == "strict"

    if spec is None:
        return ChartValidation(valid=False, issues=["Specification is null or undefined"])
    if not isinstance(spec, dict):
        return ChartValidation(valid=False, issues=["Specification must be an object"])

    issues: List[str] = []
    for prop in REQUIRED_PROPERTIES:
        if not spec.get(prop):
            issues.append(f"Missing required property: {prop}")

    if strict:
        schema = spec.get("$schema")
        expected = f"vega-lite/{settings.vega_lite_version}"
        if not isinstance(schema, str) or expected not in schema:
            issues.append(f"Specification must declare a $schema using {expected}")

    encoding = spec.get("encoding")
    if encoding and not isinstance(encoding, dict):
        issues.append("Encoding must be an object")
        encoding = None

    if encoding:
        channels = STRICT_CHANNELS if strict else LENIENT_CHANNELS
        present = [channel for channel in encoding if channel in channels]
        if not present:
            issues.append("No valid encoding channels found")

        derived = _derived_fields(spec)
        for channel in present:
            for definition in _channel_definitions(encoding[channel]):
                field = definition.get("field")
                if strict and "type" in definition and definition["type"] not in FIELD_TYPES:
                    issues.append(f"Unknown type in encoding.{channel}: {definition['type']}")
                if profile is None or not isinstance(field, str) or field in derived:
                    continue
                try:
                    resolve_field(field, profile.column_names)
                except FieldNotFoundError:
                    issues.append(f"Unexpected field in encoding.{channel}: {field}")

    if issues:
        logger.info(f"Chart spec failed validation with {len(issues)} issue(s)")
    return ChartValidation(valid=not issues, issues=issues)


def canonicalize_fields(spec: Dict[str, Any], columns: Sequence[str]) -> Dict[str, Any]:
    """
    Return a copy of the spec whose encoding fields name columns verbatim.

    Field lookup in Vega-Lite is exact, so a loosely matched name such as
    "mpg" is rewritten to the column it resolved to ("MPG"). Transform
    outputs and names that match no column are left as they are.
    """
    canonical = copy.deepcopy(spec)
    encoding = canonical.get("encoding")
    if not isinstance(encoding, dict):
        return canonical

    derived = _derived_fields(canonical)
    for definition in encoding.values():
        for field_def in _channel_definitions(definition):
            field = field_def.get("field")
            if not isinstance(field, str) or field in derived:
                continue
            try:
                field_def["field"] = resolve_field(field, columns)
            except FieldNotFoundError:
                continue
    return canonical


def decorate_chart_spec(
    spec: Dict[str, Any],
    dataset: Sequence[Row],
    settings: Optional[Settings] = None,
    columns: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    """
    Return a copy of the spec ready for rendering.

    Rewrites encoding fields to the exact column names, sets the configured
    Vega-Lite ``$schema``, embeds the dataset rows as inline ``data.values``
    (capped at ``max_dataset_rows``) and adds a default ``config`` when the
    spec has none. The input spec is left untouched.

    ``columns`` defaults to the keys of the first row.
    """
    settings = settings or get_settings()
    if columns is None:
        columns = list(dataset[0].keys()) if dataset else []
    decorated = canonicalize_fields(spec, columns)

    decorated["$schema"] = settings.vega_lite_schema_url
    if len(dataset) > settings.max_dataset_rows:
        logger.info(
            f"Chart data truncated from {len(dataset)} to {settings.max_dataset_rows} rows"
        )
    decorated["data"] = {"values": [dict(row) for row in dataset[:settings.max_dataset_rows]]}

    if not decorated.get("config"):
        decorated["config"] = copy.deepcopy(DEFAULT_CONFIG)

    return decorated
