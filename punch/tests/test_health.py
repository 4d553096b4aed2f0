"""
Tests for health endpoint
"""


def test_health_endpoint(client):
    """Test health endpoint returns correct response"""
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "ok"
    assert data["service"] == "punch"


def test_health_endpoint_before_init(client):
    """Test health does not need a project"""
    assert client.get("/api/v1/health").status_code == 200
