# restcheck/http_client.py
"""
Thin synchronous HTTP adapter over httpx.

One attempt per request, bounded timeout, no retries. Request failures
become NetworkError. A custom httpx transport can be plugged in (replay
cassettes, unit tests).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from restcheck.types import CapturedResponse, ConfigurationError, NetworkError, ResolvedRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0

_SENSITIVE_KEYS = {
    "authorization", "x-api-key", "api_key", "apikey", "token",
    "access_token", "cookie", "set-cookie", "x-auth-token", "x-access-token",
    "proxy-authorization",
}

_LOG_BODY_CHARS = 1000


def redact_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """Replace sensitive header values with a marker."""
    return {k: "[REDACTED]" if k.lower() in _SENSITIVE_KEYS else v for k, v in headers.items()}


def _excerpt(text: str, max_chars: int = _LOG_BODY_CHARS) -> str:
    return text if len(text) <= max_chars else text[:max_chars] + "..."


class HttpClient:
    """Send ResolvedRequests and capture responses."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        verify_ssl: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
        verbose: bool = False,
        follow_redirects: bool = True,
    ):
        self.timeout = float(timeout)
        self.verbose = verbose
        kwargs: Dict[str, Any] = {
            "timeout": httpx.Timeout(self.timeout),
            "follow_redirects": follow_redirects,
        }
        if transport is not None:
            kwargs["transport"] = transport
        else:
            kwargs["verify"] = verify_ssl
        self._client = httpx.Client(**kwargs)

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def send(self, request: ResolvedRequest) -> CapturedResponse:
        """Send ``request`` once and return the captured response."""
        headers = request.header_dict()
        if self.verbose:
            logger.info(f"→ {request.method} {request.url}")
            if headers:
                logger.info(f"  headers: {redact_headers(headers)}")
            if request.content:
                logger.info(f"  body: {_excerpt(request.content.decode('utf-8', errors='replace'))}")

        t0 = time.perf_counter()
        try:
            resp = self._client.request(
                request.method,
                request.url,
                headers=headers or None,
                content=request.content,
            )
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"invalid URL {request.url!r}: {e}") from e
        except httpx.RequestError as e:
            logger.debug(f"{request.method} {request.url} failed", exc_info=True)
            raise NetworkError(request.method, request.url, e) from e
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        captured = CapturedResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers.items()),
            content=resp.content,
            elapsed_ms=elapsed_ms,
            url=str(resp.url),
        )

        if self.verbose:
            logger.info(f"← {captured.status_code} {request.method} {request.url} ({elapsed_ms}ms)")
            logger.info(f"  body: {_excerpt(captured.text)}")
        else:
            logger.debug(f"{request.method} {request.url} → {captured.status_code} ({elapsed_ms}ms)")

        return captured
