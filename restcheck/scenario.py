# restcheck/scenario.py
"""
Scenario definitions: one row of the check table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from restcheck.selectors import select
from restcheck.types import (
    CapturedResponse,
    FieldAssertion,
    RequestSpec,
    ResponseExpectation,
    SelectorError,
)


@dataclass(frozen=True)
class Scenario:
    """A named request + expectation pair."""
    name: str
    api: str
    request: RequestSpec
    expect: ResponseExpectation
    description: str = ""
    # {"var": "selector" | "$status" | "header.<name>"}
    extract: Mapping[str, str] = field(default_factory=dict)
    tags: Tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return f"{self.request.method.upper()} {self.request.path_template}"


def check(selector: str, predicate: Any) -> FieldAssertion:
    return FieldAssertion(selector=selector, predicate=predicate)


def expect(
    status: int,
    *fields: FieldAssertion,
    content_type: Optional[str] = None,
    schema: Optional[str] = None,
) -> ResponseExpectation:
    return ResponseExpectation(
        status=status,
        content_type=content_type,
        fields=tuple(fields),
        schema_ref=schema,
    )


def extract_values(resp: CapturedResponse, extract: Mapping[str, str]) -> Dict[str, Any]:
    """Extract variables from a response; unresolvable entries are left out."""
    out: Dict[str, Any] = {}
    data: Any = None
    parsed = False

    for var, source in extract.items():
        if source == "$status":
            out[var] = resp.status_code
        elif source == "$elapsed_ms":
            out[var] = resp.elapsed_ms
        elif source.startswith("header."):
            val = resp.header(source[len("header."):])
            if val is not None:
                out[var] = val
        else:
            if not parsed:
                parsed = True
                try:
                    data = resp.json()
                except ValueError:
                    data = None
            if data is None:
                continue
            try:
                out[var] = select(data, source)
            except SelectorError:
                continue

    return out
