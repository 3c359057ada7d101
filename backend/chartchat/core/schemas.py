from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, List, Optional, Any, Dict, Union, Literal

Row = Dict[str, Any]

SemanticType = Literal["quantitative", "temporal", "ordinal", "nominal"]
FilterOperator = Literal["==", "!=", ">", "<", ">=", "<="]


class ColumnProfile(BaseModel):
    name: str
    semantic_type: SemanticType
    sample_values: List[Any]  # up to 3 leading raw values, untouched


class DatasetProfile(BaseModel):
    row_count: int
    columns: List[ColumnProfile]

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def data_types(self) -> Dict[str, str]:
        return {c.name: c.semantic_type for c in self.columns}

    @property
    def sample_values(self) -> Dict[str, List[Any]]:
        return {c.name: c.sample_values for c in self.columns}


class Filter(BaseModel):
    field: str
    operator: FilterOperator
    value: Any = None


class OperationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    operation: str
    field: str
    field2: Optional[str] = None
    group_by: Optional[str] = Field(default=None, alias="groupBy")
    filters: List[Filter] = []


class StatisticResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    # number, {group: number}, correlation bundle, or a message on failure
    output: Any
    operation: Optional[str] = None
    field: Optional[str] = None
    field2: Optional[str] = None
    group_by: Optional[str] = Field(default=None, alias="groupBy")
    processed_count: Optional[int] = Field(default=None, alias="processedCount")
    total_count: Optional[int] = Field(default=None, alias="totalCount")
    error_code: Optional[str] = Field(default=None, alias="errorCode")
    issues: List[str] = []


class ChartValidation(BaseModel):
    valid: bool
    issues: List[str] = []


class StatisticsEnvelope(BaseModel):
    kind: Literal["statistics"] = "statistics"
    output: Any
    description: str


class VisualizationEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["visualization"] = "visualization"
    chart_spec: Dict[str, Any] = Field(alias="chartSpec")
    description: str


class CombinedEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["combined"] = "combined"
    chart_spec: Dict[str, Any] = Field(alias="chartSpec")
    description: str
    output: Any


Envelope = Annotated[
    Union[StatisticsEnvelope, VisualizationEnvelope, CombinedEnvelope],
    Field(discriminator="kind"),
]


# API payloads

class ProfileRequest(BaseModel):
    data: List[Row]


class StatisticsRequest(BaseModel):
    data: List[Row]
    request: Optional[OperationRequest] = None
    requests: Optional[List[OperationRequest]] = None


class ChartValidationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: Optional[List[Row]] = None
    chart_spec: Optional[Dict[str, Any]] = Field(default=None, alias="chartSpec")


class RespondRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[Row]
    chart_spec: Optional[Dict[str, Any]] = Field(default=None, alias="chartSpec")
    output: Any = None
    description: Optional[str] = None
