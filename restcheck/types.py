# restcheck/types.py
"""
Shared types, enums, dataclasses and exceptions for the check harness.

Everything here is request-scoped: specs and expectations are frozen once
built, results are produced once per scenario run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


Body = Union[str, bytes, Dict[str, Any], List[Any], None]

JSON_CONTENT_TYPE = "application/json"


class ScenarioStatus(str, Enum):
    """Outcome of a single scenario."""
    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"
    SKIPPED = "SKIPPED"


# ==================== Exceptions ====================

class HarnessError(Exception):
    """Base exception for harness errors."""
    pass


class ConfigurationError(HarnessError):
    """Malformed scenario definition or settings; raised before any I/O."""
    pass


class NetworkError(HarnessError):
    """Any httpx request failure: no usable response arrived."""

    def __init__(self, method: str, url: str, cause: Exception):
        self.method = method
        self.url = url
        self.cause = cause
        super().__init__(f"{method} {url} failed: {type(cause).__name__}: {cause}")


class AssertionFailure(HarnessError):
    """One or more expectations did not hold."""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class SchemaValidationError(AssertionFailure):
    """Body does not conform to a JSON schema."""

    def __init__(self, schema_ref: str, violations: List[str]):
        self.schema_ref = schema_ref
        self.violations = list(violations)
        super().__init__([f"schema {schema_ref}: {v}" for v in self.violations])


class SelectorError(HarnessError):
    """A field selector did not resolve against a JSON document."""

    def __init__(self, selector: str, reason: str):
        self.selector = selector
        self.reason = reason
        super().__init__(f"{selector}: {reason}")


# ==================== Request / Response ====================

@dataclass(frozen=True)
class RequestSpec:
    """Declarative description of one HTTP request."""
    method: str
    path_template: str
    path_params: Mapping[str, Any] = field(default_factory=dict)
    body: Body = None
    content_type: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedRequest:
    """A fully built request, ready to send."""
    method: str
    url: str
    headers: Tuple[Tuple[str, str], ...] = ()
    content: Optional[bytes] = None

    def header_dict(self) -> Dict[str, str]:
        return dict(self.headers)


@dataclass
class CapturedResponse:
    """Status, headers and raw body of a received response."""
    status_code: int
    headers: Dict[str, str]
    content: bytes
    elapsed_ms: Optional[int] = None
    url: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        for k, v in self.headers.items():
            if k.lower() == name:
                return v
        return None

    @property
    def content_type(self) -> Optional[str]:
        return self.header("content-type")

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.content)


# ==================== Expectations ====================

@dataclass(frozen=True)
class FieldAssertion:
    """A predicate applied to the value a selector resolves to."""
    selector: str
    predicate: Any  # restcheck.predicates.Predicate


@dataclass(frozen=True)
class ResponseExpectation:
    """Everything a response must satisfy for the scenario to pass."""
    status: int
    content_type: Optional[str] = None
    fields: Tuple[FieldAssertion, ...] = ()
    schema_ref: Optional[str] = None


# ==================== Results ====================

@dataclass
class ScenarioResult:
    """Result of one scenario: outcome plus the captured response."""
    scenario: str
    api: str
    status: ScenarioStatus
    method: str = ""
    url: str = ""
    failures: List[str] = field(default_factory=list)
    error_kind: Optional[str] = None
    response: Optional[CapturedResponse] = None
    extracted: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status == ScenarioStatus.PASS

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "scenario": self.scenario,
            "api": self.api,
            "status": self.status.value,
            "method": self.method,
            "url": self.url,
            "failures": list(self.failures),
            "error_kind": self.error_kind,
            "extracted": dict(self.extracted),
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.response is not None:
            out["status_code"] = self.response.status_code
            out["elapsed_ms"] = self.response.elapsed_ms
        return out


@dataclass
class RunSummary:
    """Aggregated outcome of a scenario run."""
    run_id: str
    results: List[ScenarioResult] = field(default_factory=list)
    duration_s: float = 0.0
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    interrupted: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.status == ScenarioStatus.PASS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == ScenarioStatus.FAIL)

    @property
    def errors(self) -> int:
        return sum(1 for r in self.results if r.status == ScenarioStatus.ERROR)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.status == ScenarioStatus.SKIPPED)

    @property
    def ok(self) -> bool:
        return not self.interrupted and self.failed == 0 and self.errors == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "duration_s": self.duration_s,
            "interrupted": self.interrupted,
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "errors": self.errors,
            "skipped": self.skipped,
            "results": [r.to_dict() for r in self.results],
        }
