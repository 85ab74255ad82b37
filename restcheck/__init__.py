# restcheck/__init__.py
"""Declarative HTTP contract checks: build a request, send it, validate the JSON that comes back."""

from restcheck.predicates import (
    equals,
    greater_than,
    is_empty_or_null,
    is_instance,
    matches_regex,
    matches_schema,
    not_null,
)
from restcheck.scenario import Scenario, check, expect
from restcheck.types import (
    AssertionFailure,
    ConfigurationError,
    NetworkError,
    RequestSpec,
    ResponseExpectation,
    RunSummary,
    ScenarioResult,
    ScenarioStatus,
    SchemaValidationError,
    SelectorError,
)

__version__ = "1.0.0"

__all__ = [
    "AssertionFailure",
    "ConfigurationError",
    "NetworkError",
    "RequestSpec",
    "ResponseExpectation",
    "RunSummary",
    "Scenario",
    "ScenarioResult",
    "ScenarioStatus",
    "SchemaValidationError",
    "SelectorError",
    "check",
    "equals",
    "expect",
    "greater_than",
    "is_empty_or_null",
    "is_instance",
    "matches_regex",
    "matches_schema",
    "not_null",
]
