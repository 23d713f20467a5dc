from fastapi.testclient import TestClient

from around.main import app, init_state
from around.settings import Settings

client = TestClient(app)


class PingingEs:
    def __init__(self, up: bool):
        self.up = up

    async def ping(self):
        return self.up


class BrokenEs:
    async def ping(self):
        raise ConnectionError("cluster unavailable")


def test_healthcheck_returns_200():
    response = client.get("/health")
    assert response.status_code == 200


def test_healthcheck_reports_index_up():
    init_state(app, Settings(), PingingEs(up=True))
    response = client.get("/health")
    assert response.json() == {"status": "ok", "index": "up"}


def test_healthcheck_stays_ok_when_index_down():
    init_state(app, Settings(), BrokenEs())
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "index": "down"}


def test_healthcheck_response_structure():
    response = client.get("/health")
    data = response.json()
    assert "status" in data
    assert isinstance(data["status"], str)


def test_healthcheck_reports_unknown_without_client():
    init_state(app, Settings(), None)
    response = client.get("/health")
    assert response.json() == {"status": "ok", "index": "unknown"}
