# restcheck/request_builder.py
"""
Request builder: RequestSpec + base URL -> ResolvedRequest.

Building is pure. Path placeholders (``/posts/{id}``) are filled from
``path_params``; a placeholder with no value is a ConfigurationError, raised
before anything is sent.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, urlencode

from restcheck.types import ConfigurationError, RequestSpec, ResolvedRequest

_PLACEHOLDER_RE = re.compile(r"\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}")

_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}


def placeholders(path_template: str) -> List[str]:
    """Names of the ``{param}`` placeholders in ``path_template``, in order."""
    return _PLACEHOLDER_RE.findall(path_template)


def resolve_path(path_template: str, path_params: Dict[str, Any]) -> str:
    missing = [name for name in placeholders(path_template) if name not in path_params]
    if missing:
        raise ConfigurationError(
            f"unresolved path placeholder(s) {', '.join(missing)} in {path_template!r}"
        )

    def replace(match: re.Match) -> str:
        value = path_params[match.group(1)]
        if value is None:
            raise ConfigurationError(f"path parameter {match.group(1)!r} is None")
        return quote(str(value), safe="")

    return _PLACEHOLDER_RE.sub(replace, path_template)


def join_url(base_url: str, path: str) -> str:
    if path.startswith(("http://", "https://")):
        return path
    if not base_url:
        raise ConfigurationError(f"no base URL configured for path {path!r}")
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def encode_body(body: Any) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (dict, list)):
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    raise ConfigurationError(f"unsupported body type {type(body).__name__}")


def build_request(spec: RequestSpec, base_url: str) -> ResolvedRequest:
    """Resolve ``spec`` against ``base_url``."""
    method = (spec.method or "").upper()
    if method not in _METHODS:
        raise ConfigurationError(f"unsupported HTTP method: {spec.method!r}")

    url = join_url(base_url, resolve_path(spec.path_template, dict(spec.path_params)))
    if spec.query:
        url = f"{url}{'&' if '?' in url else '?'}{urlencode(list(spec.query.items()), doseq=True)}"

    content = encode_body(spec.body)

    headers: List[Tuple[str, str]] = [(k, str(v)) for k, v in spec.headers.items()]
    has_ct = any(k.lower() == "content-type" for k, _ in headers)
    if not has_ct and (spec.content_type or content is not None):
        ct = spec.content_type or (
            "application/json" if isinstance(spec.body, (dict, list)) else "text/plain; charset=utf-8"
        )
        headers.append(("Content-Type", ct))

    return ResolvedRequest(method=method, url=url, headers=tuple(headers), content=content)
