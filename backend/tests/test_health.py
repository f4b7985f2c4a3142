from fastapi.testclient import TestClient


def _get_client() -> TestClient:
    from companion.main import app

    return TestClient(app)


def test_health_endpoint_returns_ok() -> None:
    response = _get_client().get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_generated_when_missing() -> None:
    response = _get_client().get("/health")

    assert len(response.headers.get("X-Request-Id", "")) == 32


def test_request_id_echoed_from_header() -> None:
    response = _get_client().get("/health", headers={"X-Request-Id": "journal-req-7"})

    assert response.headers.get("X-Request-Id") == "journal-req-7"
