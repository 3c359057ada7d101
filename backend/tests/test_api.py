"""
Integration tests for API endpoints.
"""
import pytest
import uuid
from fastapi.testclient import TestClient
from main import app

CARS = [
    {"Name": "chevrolet", "Origin": "USA", "MPG": 18},
    {"Name": "ford", "Origin": "USA", "MPG": 32},
    {"Name": "toyota", "Origin": "Japan", "MPG": 40},
]

BAR_SPEC = {
    "mark": "bar",
    "encoding": {
        "x": {"field": "Origin", "type": "nominal"},
        "y": {"field": "MPG", "type": "quantitative", "aggregate": "mean"},
    },
}


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.mark.integration
def test_health_check(client):
    """Test the health check endpoint."""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_root_endpoint(client):
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


@pytest.mark.integration
def test_profile_endpoint(client):
    response = client.post("/api/profile", json={"data": CARS})

    assert response.status_code == 200
    data = response.json()
    assert data["row_count"] == 3
    assert [c["name"] for c in data["columns"]] == ["Name", "Origin", "MPG"]
    assert data["columns"][2]["semantic_type"] == "quantitative"


@pytest.mark.integration
def test_profile_empty_dataset(client):
    """Engine errors come back as structured bodies with the error code."""
    response = client.post("/api/profile", json={"data": []})

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "EMPTY_DATASET"
    assert "suggestion" in data
    assert "correlation_id" in data


@pytest.mark.integration
def test_profile_schema_mismatch(client):
    response = client.post("/api/profile", json={"data": [{"a": 1}, {"b": 2}]})

    assert response.status_code == 400
    assert response.json()["code"] == "SCHEMA_MISMATCH"
    assert response.json()["issues"] == ["Row 1: missing ['a'], unexpected ['b']"]


@pytest.mark.integration
def test_statistics_single_request(client):
    response = client.post("/api/statistics", json={
        "data": CARS,
        "request": {"operation": "mean", "field": "mpg", "groupBy": "origin"},
    })

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["output"] == {"Japan": 40, "USA": 25}
    assert data["groupBy"] == "Origin"


@pytest.mark.integration
def test_statistics_batch(client):
    response = client.post("/api/statistics", json={
        "data": CARS,
        "requests": [
            {"operation": "count", "field": "Name"},
            {"operation": "mean", "field": "Horsepower"},
        ],
    })

    assert response.status_code == 200
    first, second = response.json()
    assert first["output"] == 3
    assert second["success"] is False
    assert second["errorCode"] == "FIELD_NOT_FOUND"


@pytest.mark.integration
def test_statistics_requires_a_request(client):
    response = client.post("/api/statistics", json={"data": CARS})

    assert response.status_code == 422


@pytest.mark.integration
def test_validate_chart_endpoint(client):
    spec = dict(BAR_SPEC, encoding={"x": {"field": "Cylinders"}})

    response = client.post("/api/charts/validate", json={"data": CARS, "chartSpec": spec})

    assert response.status_code == 200
    assert response.json() == {
        "valid": False,
        "issues": ["Unexpected field in encoding.x: Cylinders"],
    }


@pytest.mark.integration
def test_respond_combined(client):
    response = client.post("/api/respond", json={
        "data": CARS,
        "chartSpec": BAR_SPEC,
        "output": {"Japan": 40, "USA": 25},
        "description": "Average MPG by origin",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["kind"] == "combined"
    assert data["description"] == "Average MPG by origin"
    assert data["chartSpec"]["data"]["values"] == CARS
    assert data["chartSpec"]["$schema"].endswith("vega-lite/v5.json")


@pytest.mark.integration
def test_respond_statistics_only(client):
    response = client.post("/api/respond", json={"data": CARS, "output": 0})

    assert response.status_code == 200
    assert response.json() == {
        "kind": "statistics",
        "output": 0,
        "description": "Statistical analysis results",
    }


@pytest.mark.integration
def test_respond_without_chart_or_output(client):
    response = client.post("/api/respond", json={"data": CARS, "description": "nothing"})

    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "INVALID_RESPONSE_SHAPE"
    assert data["issues"] == ["Missing chartSpec", "Missing output"]


@pytest.mark.integration
def test_respond_invalid_chart(client):
    response = client.post("/api/respond", json={"data": CARS, "chartSpec": {"mark": "bar"}})

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_CHART_SPEC"


@pytest.mark.integration
def test_correlation_id_header(client):
    """Test that correlation ID is returned in response headers."""
    correlation_id = str(uuid.uuid4())

    response = client.get("/api/health", headers={"X-Correlation-ID": correlation_id})

    assert response.status_code == 200
    assert response.headers["X-Correlation-ID"] == correlation_id
    assert "X-Response-Time" in response.headers


@pytest.mark.integration
def test_correlation_id_generated(client):
    """Test that correlation ID is generated if not provided."""
    response = client.get("/api/health")

    uuid.UUID(response.headers["X-Correlation-ID"])  # Will raise if invalid


@pytest.mark.integration
def test_metrics_endpoint(client):
    client.get("/api/health")

    response = client.get("/api/metrics")

    assert response.status_code == 200
    assert "request_duration" in response.json()["performance"]


@pytest.mark.integration
def test_respond_uses_exact_column_names(client):
    spec = {
        "mark": "bar",
        "encoding": {"x": {"field": "origin"}, "y": {"field": "mpg", "aggregate": "mean"}},
    }

    response = client.post("/api/respond", json={"data": CARS, "chartSpec": spec})

    assert response.status_code == 200
    encoding = response.json()["chartSpec"]["encoding"]
    assert encoding["x"]["field"] == "Origin"
    assert encoding["y"]["field"] == "MPG"
