# restcheck/cassette.py
"""
Recorded responses ("cassettes") for offline contract runs.

Modes:
    live: real network, nothing stored
    record: real network, every exchange stored per API
    replay: no network; requests are answered from stored exchanges

A cassette file holds ``{"api": ..., "interactions": [{"request": {...},
"response": {...}}]}``. Requests are matched on method, path + query and,
when present, body (JSON bodies compared structurally). Hosts are ignored,
so a cassette keeps working when the base URL is overridden.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from restcheck.types import ConfigurationError

logger = logging.getLogger(__name__)

MODES = ("live", "record", "replay")

# httpx has already decoded the body; these would no longer describe it
_DROP_HEADERS = {"content-encoding", "content-length", "transfer-encoding", "connection"}

_Key = Tuple[str, str, Optional[str]]


def _normalize_body(content: Optional[bytes]) -> Optional[str]:
    if not content:
        return None
    text = content.decode("utf-8", errors="replace")
    try:
        return json.dumps(json.loads(text), sort_keys=True, separators=(",", ":"))
    except ValueError:
        return text


def _target(url: httpx.URL) -> str:
    return url.raw_path.decode("ascii")


def _key(method: str, target: str, body: Optional[bytes]) -> _Key:
    return (method.upper(), target, _normalize_body(body))


def _clean_headers(headers: Dict[str, str]) -> Dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in _DROP_HEADERS}


def _atomic_json_dump(path: Path, data: Any) -> None:
    """Atomic JSON write"""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    tmp.replace(path)


class ReplayTransport(httpx.BaseTransport):
    """Answer requests from a cassette; unknown requests fail like a refused connection."""

    def __init__(self, interactions: List[Dict[str, Any]], name: str = "cassette"):
        self.name = name
        self._responses: Dict[_Key, Dict[str, Any]] = {}
        for item in interactions:
            req = item.get("request") or {}
            body = req.get("body")
            if body is not None and not isinstance(body, str):
                body = json.dumps(body)
            key = _key(
                str(req.get("method") or "GET"),
                str(req.get("target") or "/"),
                body.encode("utf-8") if body is not None else None,
            )
            self._responses[key] = item.get("response") or {}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ReplayTransport":
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigurationError(f"cassette not found: {p}") from e
        except ValueError as e:
            raise ConfigurationError(f"cassette {p} is not valid JSON: {e}") from e
        return cls(data.get("interactions") or [], name=p.name)

    def __len__(self) -> int:
        return len(self._responses)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        body = request.read()
        key = _key(request.method, _target(request.url), body)
        stored = self._responses.get(key)
        if stored is None:
            raise httpx.ConnectError(
                f"no recorded response in {self.name} for {request.method} {_target(request.url)}",
                request=request,
            )

        if "json" in stored:
            content = json.dumps(stored["json"], ensure_ascii=False).encode("utf-8")
        else:
            content = str(stored.get("body") or "").encode("utf-8")

        return httpx.Response(
            status_code=int(stored.get("status_code", 200)),
            headers=_clean_headers(dict(stored.get("headers") or {})),
            content=content,
            request=request,
        )


class RecordingTransport(httpx.BaseTransport):
    """Pass requests to a real transport and keep every exchange."""

    def __init__(self, api: str, inner: Optional[httpx.BaseTransport] = None, verify_ssl: bool = True):
        self.api = api
        self._inner = inner or httpx.HTTPTransport(verify=verify_ssl)
        self._interactions: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    @property
    def interactions(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._interactions)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        resp = self._inner.handle_request(request)
        resp.read()

        req_body = request.read()
        req_entry: Dict[str, Any] = {"method": request.method, "target": _target(request.url)}
        if req_body:
            req_entry["body"] = req_body.decode("utf-8", errors="replace")

        resp_entry: Dict[str, Any] = {
            "status_code": resp.status_code,
            "headers": _clean_headers(dict(resp.headers.items())),
        }
        try:
            resp_entry["json"] = json.loads(resp.content)
        except ValueError:
            resp_entry["body"] = resp.text

        with self._lock:
            self._interactions.append({"request": req_entry, "response": resp_entry})
        return resp

    def close(self) -> None:
        # Shared across clients; closed through shutdown()
        pass

    def shutdown(self) -> None:
        self._inner.close()

    def save(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        _atomic_json_dump(p, {
            "api": self.api,
            "recorded_at": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "interactions": self.interactions,
        })
        logger.info(f"Cassette saved → {p} ({len(self._interactions)} interactions)")
        return p


class CassetteLibrary:
    """Hands out one shared transport per API for the configured mode."""

    def __init__(self, mode: str = "live", directory: Optional[Union[str, Path]] = None, verify_ssl: bool = True):
        if mode not in MODES:
            raise ConfigurationError(f"unknown mode {mode!r}; expected one of {list(MODES)}")
        self.mode = mode
        self.directory = Path(directory) if directory else None
        self.verify_ssl = verify_ssl
        self._transports: Dict[str, httpx.BaseTransport] = {}
        self._lock = threading.Lock()

    def cassette_path(self, api: str) -> Path:
        if self.directory is not None:
            return self.directory / f"{api}.json"
        if self.mode == "record":
            return Path("cassettes") / f"{api}.json"
        with resources.as_file(resources.files("restcheck") / "cassettes" / f"{api}.json") as p:
            return Path(p)

    def transport_for(self, api: str) -> Optional[httpx.BaseTransport]:
        """None in live mode: the client uses its default transport."""
        if self.mode == "live":
            return None
        with self._lock:
            if api not in self._transports:
                if self.mode == "replay":
                    self._transports[api] = ReplayTransport.from_file(self.cassette_path(api))
                else:
                    self._transports[api] = RecordingTransport(api, verify_ssl=self.verify_ssl)
            return self._transports[api]

    def save(self) -> List[Path]:
        """Write recorded cassettes; no-op outside record mode."""
        saved: List[Path] = []
        with self._lock:
            transports = dict(self._transports)
        for api, transport in transports.items():
            if isinstance(transport, RecordingTransport):
                saved.append(transport.save(self.cassette_path(api)))
                transport.shutdown()
        return saved
