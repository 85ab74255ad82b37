from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional

import httpx
import pytest

from restcheck.http_client import HttpClient
from restcheck.settings import load_settings
from restcheck.types import CapturedResponse

JP_URL = "https://jsonplaceholder.test"
RU_URL = "https://randomuser.test"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    import os

    for key in list(os.environ):
        if key.startswith("RESTCHECK_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings():
    return load_settings(jsonplaceholder_url=JP_URL, randomuser_url=RU_URL, mode="live")


@pytest.fixture
def replay_settings():
    return load_settings(mode="replay")


def json_response(
    body: Any,
    status: int = 200,
    content_type: str = "application/json; charset=utf-8",
    headers: Optional[Dict[str, str]] = None,
) -> CapturedResponse:
    raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    return CapturedResponse(
        status_code=status,
        headers={"content-type": content_type, **(headers or {})},
        content=raw,
        elapsed_ms=5,
    )


def mock_factory(handler: Callable[[httpx.Request], httpx.Response]):
    """Client factory whose clients answer every request with ``handler``."""

    def factory(api: str) -> HttpClient:
        return HttpClient(transport=httpx.MockTransport(handler))

    return factory
