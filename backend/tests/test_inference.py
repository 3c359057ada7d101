"""
Unit tests for semantic type inference.
"""
import pytest
from datetime import date, datetime
from chartchat.core.config import Settings
from chartchat.services.inference import infer_semantic_type, is_temporal_value, sample_column


@pytest.fixture
def settings():
    return Settings()


@pytest.mark.unit
def test_numeric_strings_are_quantitative(settings):
    """Numeric strings win over the distinct-value ratio."""
    assert infer_semantic_type(["1", "2", "3"], settings) == "quantitative"


@pytest.mark.unit
def test_mixed_numbers_and_numeric_strings(settings):
    assert infer_semantic_type([1.5, 2, "3.14", " 4 "], settings) == "quantitative"


@pytest.mark.unit
def test_currency_strings_are_not_quantitative(settings):
    """Type inference does not strip currency symbols."""
    assert infer_semantic_type(["$10", "$20", "$30"], settings) != "quantitative"


@pytest.mark.unit
def test_date_strings_are_temporal(settings):
    values = ["2024-01-01", "2024-02-15", "2024-03-31", "2024-04-30"]
    assert infer_semantic_type(values, settings) == "temporal"


@pytest.mark.unit
def test_date_objects_are_temporal(settings):
    values = [datetime(2024, 1, 1, 12, 30), date(2024, 1, 2), datetime(2024, 1, 3)]
    assert infer_semantic_type(values, settings) == "temporal"


@pytest.mark.unit
def test_words_are_not_dates():
    assert not is_temporal_value("March")
    assert not is_temporal_value("Yes")
    assert not is_temporal_value(42)
    assert is_temporal_value("2024-06-01T10:00:00")


@pytest.mark.unit
def test_low_cardinality_is_ordinal(settings):
    values = ["Low", "High"] * 20
    assert infer_semantic_type(values, settings) == "ordinal"


@pytest.mark.unit
def test_high_cardinality_is_nominal(settings):
    values = ["Alice", "Bob", "Carol", "Dan", "Eve"]
    assert infer_semantic_type(values, settings) == "nominal"


@pytest.mark.unit
def test_booleans_are_not_quantitative(settings):
    values = [True, False] * 10
    assert infer_semantic_type(values, settings) == "ordinal"


@pytest.mark.unit
def test_empty_column_is_nominal(settings):
    assert infer_semantic_type([], settings) == "nominal"
    assert infer_semantic_type([None, None, float("nan")], settings) == "nominal"


@pytest.mark.unit
def test_constant_column(settings):
    """A constant column is ordinal unless only one value was sampled."""
    assert infer_semantic_type(["x", "x", "x"], settings) == "ordinal"
    assert infer_semantic_type(["x"], settings) == "nominal"


@pytest.mark.unit
def test_ordinal_threshold_is_configurable():
    values = ["A", "B", "C"] * 4  # ratio 0.25

    assert infer_semantic_type(values, Settings(ordinal_threshold=0.3)) == "ordinal"
    assert infer_semantic_type(values, Settings(ordinal_threshold=0.2)) == "nominal"


@pytest.mark.unit
def test_sample_includes_middle_of_column(settings):
    """A bad value at the one-third point is seen even though the prefix is clean."""
    values = [str(i) for i in range(300)]
    values[110] = "n/a"

    assert infer_semantic_type(values, settings) == "nominal"


@pytest.mark.unit
def test_sample_is_bounded(settings):
    """Values outside the three sampled slices do not affect the result."""
    values = [str(i) for i in range(300)]
    values[200] = "n/a"

    assert infer_semantic_type(values, settings) == "quantitative"


@pytest.mark.unit
def test_sample_column_does_not_double_count_short_columns():
    assert sample_column(list(range(10)), 30) == list(range(10))
    assert sample_column([None, 1, None], 30) == [1]


@pytest.mark.unit
def test_sample_column_slices():
    sample = sample_column(list(range(100)), 5)

    assert sample == [0, 1, 2, 3, 4, 33, 34, 35, 36, 37, 95, 96, 97, 98, 99]


@pytest.mark.unit
def test_inference_is_deterministic(settings):
    values = ["2024-01-01", "red", "3", None, "blue"] * 30
    assert infer_semantic_type(values, settings) == infer_semantic_type(list(values), settings)


@pytest.mark.unit
def test_short_column_ratio_uses_each_value_once(settings):
    """Overlapping slices would repeat values and push a short column under the ordinal threshold."""
    assert sample_column(["a", "b", "c", "a"], 30) == ["a", "b", "c", "a"]
    assert infer_semantic_type(["a", "b", "c", "a"], settings) == "nominal"
