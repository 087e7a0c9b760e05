"""Shared test fixtures."""

import json
from typing import Any, Dict, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from src.pusher.config import Config
from src.pusher.services.engine_service import EngineService, set_engine_service
from src.pusher.storage.memory import MemoryKVStore

ADMIN_TOKEN = "test-admin-token"


class FakeProvider:
    """Stands in for the provider APIs behind an httpx.MockTransport.

    Replies are queued per URL path; the last queued reply repeats.
    Unknown paths answer 404 with a plain-text body.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._replies: Dict[str, List[Tuple[int, Any]]] = {}

    def reply(self, path: str, *bodies: Any, status: int = 200) -> None:
        self._replies[path] = [(status, body) for body in bodies]

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._replies.get(request.url.path)
        if not queue:
            return httpx.Response(404, text="not found")
        status, body = queue[0] if len(queue) == 1 else queue.pop(0)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def http_client(provider: FakeProvider) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(provider))


@pytest.fixture
def engine(http_client: httpx.AsyncClient):
    """EngineService over an in-memory KV store, installed as the singleton."""
    service = EngineService(kv=MemoryKVStore(), http_client=http_client)
    set_engine_service(service)
    yield service
    set_engine_service(None)


@pytest.fixture
def admin_token(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(Config, "ADMIN_TOKEN", ADMIN_TOKEN)
    return ADMIN_TOKEN


@pytest.fixture
def client(engine: EngineService, admin_token: str):
    from src.pusher.app import app

    with TestClient(app) as test_client:
        yield test_client


def register(client: TestClient) -> str:
    """Create an account through the API and return its SendKey."""
    response = client.post("/api/v1/user/register", headers={"X-Admin-Token": ADMIN_TOKEN})
    assert response.status_code == 201
    return response.json()["data"]["sendKey"]


def bearer(send_key: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {send_key}"}
