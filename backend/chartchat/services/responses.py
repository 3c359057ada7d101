"""
Response normalization.

Merges an optional chart spec and an optional computed output into exactly
one of three envelope shapes:

    statistics     {output, description}
    visualization  {chartSpec, description}
    combined       {chartSpec, description, output}
"""
import logging
from typing import Any, Mapping, Union

from pydantic import BaseModel, TypeAdapter

from chartchat.core.errors import InvalidResponseShapeError
from chartchat.core.schemas import (
    CombinedEnvelope,
    Envelope,
    StatisticsEnvelope,
    VisualizationEnvelope,
)

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTIONS = {
    "combined": "Analysis results",
    "visualization": "Visualization results",
    "statistics": "Statistical analysis results",
}

envelope_adapter = TypeAdapter(Envelope)


def _has_chart_spec(candidate: Mapping[str, Any]) -> bool:
    spec = candidate.get("chartSpec", candidate.get("chart_spec"))
    return isinstance(spec, Mapping) and len(spec) > 0


def _has_output(candidate: Mapping[str, Any]) -> bool:
    # 0, False and "" are legitimate results; only an absent/None output is missing
    return candidate.get("output") is not None


def normalize_response(candidate: Union[Mapping[str, Any], BaseModel]) -> Envelope:
    """
    Normalize a candidate response into a tagged envelope.

    A missing or blank description is replaced by the default for the shape.

    Raises:
        InvalidResponseShapeError: the candidate has neither a chart spec
            nor an output, or its chart spec is empty or not an object
    """
    if isinstance(candidate, BaseModel):
        candidate = candidate.model_dump(by_alias=True)
    if not isinstance(candidate, Mapping):
        raise InvalidResponseShapeError(
            "Invalid response format: expected an object",
            issues=[f"Got {type(candidate).__name__}"],
        )

    has_chart = _has_chart_spec(candidate)
    has_output = _has_output(candidate)
    supplied_spec = candidate.get("chartSpec", candidate.get("chart_spec"))
    if supplied_spec is not None and not has_chart:
        logger.warning("Rejected response with an empty or malformed chartSpec")
        raise InvalidResponseShapeError(
            "Invalid response format: chartSpec must be a non-empty object",
            issues=["Empty chartSpec" if isinstance(supplied_spec, Mapping) else "chartSpec is not an object"],
        )

    description = candidate.get("description")
    if not isinstance(description, str) or not description.strip():
        description = None

    if has_chart and has_output:
        kind = "combined"
    elif has_chart:
        kind = "visualization"
    elif has_output:
        kind = "statistics"
    else:
        logger.warning("Rejected response without chartSpec or output")
        raise InvalidResponseShapeError(
            "Invalid response format: must include chartSpec and/or output",
            issues=["Missing chartSpec", "Missing output"],
        )

    description = description or DEFAULT_DESCRIPTIONS[kind]
    chart_spec = candidate.get("chartSpec", candidate.get("chart_spec"))

    if kind == "combined":
        return CombinedEnvelope(chart_spec=chart_spec, description=description, output=candidate["output"])
    if kind == "visualization":
        return VisualizationEnvelope(chart_spec=chart_spec, description=description)
    return StatisticsEnvelope(output=candidate["output"], description=description)


def envelope_to_dict(envelope: Envelope) -> dict:
    """Serialize an envelope with the presentation layer's camelCase keys."""
    return envelope_adapter.dump_python(envelope, by_alias=True, mode="json")
