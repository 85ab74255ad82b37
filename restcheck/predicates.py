# restcheck/predicates.py
"""
Predicates for field assertions.

Each predicate returns ``None`` when the value satisfies it, otherwise a
short explanation used in the failure message.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, List, Optional, Tuple, Type, Union

if TYPE_CHECKING:
    from restcheck.schema import SchemaStore


def compute_diff(expected: Any, actual: Any, path: str = "") -> List[str]:
    """Compute detailed diff between expected and actual values"""
    diffs: List[str] = []

    # bool is an int subclass; 1 == True must not pass as equal here
    if type(expected) != type(actual) and not (
        _is_number(expected) and _is_number(actual)
    ):
        diffs.append(
            f"{path or '$'}: type mismatch (expected {type(expected).__name__}, got {type(actual).__name__})"
        )
        return diffs

    if isinstance(expected, dict):
        for key in list(expected.keys()) + [k for k in actual.keys() if k not in expected]:
            new_path = f"{path}.{key}" if path else key
            if key not in expected:
                diffs.append(f"{new_path}: unexpected key in actual")
            elif key not in actual:
                diffs.append(f"{new_path}: missing key in actual")
            else:
                diffs.extend(compute_diff(expected[key], actual[key], new_path))

    elif isinstance(expected, list):
        if len(expected) != len(actual):
            diffs.append(f"{path or '$'}: length mismatch (expected {len(expected)}, got {len(actual)})")
        else:
            for i, (exp_item, act_item) in enumerate(zip(expected, actual)):
                diffs.extend(compute_diff(exp_item, act_item, f"{path}[{i}]"))

    elif expected != actual:
        diffs.append(f"{path or '$'}: {expected!r} != {actual!r}")

    return diffs


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


class Predicate:
    """Base predicate."""

    # A predicate that accepts a missing field sees ``None`` instead of a
    # selector failure.
    accepts_missing = False

    def check(self, value: Any, schemas: Optional["SchemaStore"] = None) -> Optional[str]:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.describe()


class Equals(Predicate):
    def __init__(self, expected: Any):
        self.expected = expected

    def check(self, value, schemas=None):
        diffs = compute_diff(self.expected, value)
        if diffs:
            return "; ".join(diffs)
        return None

    def describe(self) -> str:
        return f"equals({self.expected!r})"


class NotNull(Predicate):
    def check(self, value, schemas=None):
        if value is None:
            return "expected non-null value, got null"
        return None

    def describe(self) -> str:
        return "not_null()"


class IsEmptyOrNull(Predicate):
    """Null, absent, or an empty string / collection."""

    accepts_missing = True

    def check(self, value, schemas=None):
        if value is None:
            return None
        if isinstance(value, (str, list, dict)) and len(value) == 0:
            return None
        return f"expected empty or null, got {value!r}"

    def describe(self) -> str:
        return "is_empty_or_null()"


class GreaterThan(Predicate):
    def __init__(self, bound: Union[int, float]):
        self.bound = bound

    def check(self, value, schemas=None):
        if not _is_number(value):
            return f"expected a number greater than {self.bound}, got {value!r}"
        if not value > self.bound:
            return f"expected > {self.bound}, got {value!r}"
        return None

    def describe(self) -> str:
        return f"greater_than({self.bound!r})"


_TYPE_NAMES = {list: "array", dict: "object", str: "string", bool: "boolean"}


class IsInstance(Predicate):
    def __init__(self, *types: Type):
        self.types: Tuple[Type, ...] = types

    def check(self, value, schemas=None):
        # JSON booleans are not numbers
        if isinstance(value, bool) and bool not in self.types:
            ok = False
        else:
            ok = isinstance(value, self.types)
        if not ok:
            return f"expected {self.describe_types()}, got {type(value).__name__}"
        return None

    def describe_types(self) -> str:
        return " | ".join(_TYPE_NAMES.get(t, t.__name__) for t in self.types)

    def describe(self) -> str:
        return f"is_instance({self.describe_types()})"


class MatchesRegex(Predicate):
    def __init__(self, pattern: str):
        self.pattern = pattern
        self._re = re.compile(pattern)

    def check(self, value, schemas=None):
        if value is None:
            return f"expected a match for {self.pattern!r}, got null"
        if not self._re.search(str(value)):
            return f"value {value!r} doesn't match {self.pattern!r}"
        return None

    def describe(self) -> str:
        return f"matches_regex({self.pattern!r})"


class MatchesSchema(Predicate):
    """Validate a sub-document against a named schema."""

    def __init__(self, schema_ref: str):
        self.schema_ref = schema_ref

    def check(self, value, schemas=None):
        if schemas is None:
            return f"no schema store available for {self.schema_ref}"
        violations = schemas.validate(value, self.schema_ref)
        if violations:
            return f"schema {self.schema_ref}: " + "; ".join(violations)
        return None

    def describe(self) -> str:
        return f"matches_schema({self.schema_ref!r})"


# ==================== Factories ====================

def equals(expected: Any) -> Predicate:
    return Equals(expected)


def not_null() -> Predicate:
    return NotNull()


def is_empty_or_null() -> Predicate:
    return IsEmptyOrNull()


def greater_than(bound: Union[int, float]) -> Predicate:
    return GreaterThan(bound)


def is_instance(*types: Type) -> Predicate:
    return IsInstance(*types)


def matches_regex(pattern: str) -> Predicate:
    return MatchesRegex(pattern)


def matches_schema(schema_ref: str) -> Predicate:
    return MatchesSchema(schema_ref)
