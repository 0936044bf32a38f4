import json
import os
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional

# main builds its module-level app at import time and needs a key
os.environ.setdefault("FIRECRAWL_API_KEY", "test-key")

import httpx
import pytest
from fastapi.testclient import TestClient

from core.config import Settings

FIRECRAWL_BASE = "https://firecrawl.test"


def firecrawl_success(json_payload: Optional[Dict[str, Any]], metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {"json": json_payload}
    if metadata is not None:
        data["metadata"] = metadata
    return {"success": True, "data": data}


class RecordingTransport:
    """httpx.MockTransport handler that remembers every request it served."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_body(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


def json_responder(body: Any, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)
    return respond


def timeout_responder(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("upstream timed out", request=request)


@pytest.fixture
def make_transport():
    def factory(responder: Callable[[httpx.Request], httpx.Response]) -> RecordingTransport:
        return RecordingTransport(responder)
    return factory


@pytest.fixture
def mock_http_client():
    def factory(transport: RecordingTransport) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(transport))
    return factory


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        FIRECRAWL_API_KEY="test-key",
        FIRECRAWL_BASE_URL=FIRECRAWL_BASE,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'wist.db'}",
        DB_CONNECT_RETRIES=1,
        REQUEST_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture
def api_client(test_settings, make_transport, mock_http_client):
    """Start the whole app against a temp database and a fake Firecrawl."""
    from main import create_application

    @contextmanager
    def factory(responder=None, settings: Optional[Settings] = None):
        transport = make_transport(responder or json_responder(firecrawl_success({"title": "Thing"})))
        app = create_application(
            settings=settings or test_settings,
            http_client=mock_http_client(transport),
        )
        with TestClient(app) as client:
            yield client, transport
    return factory
