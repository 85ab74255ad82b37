# restcheck/validator.py
"""
Response validation.

Order of evaluation:
    1. status code
    2. content type (media type only, parameters such as charset ignored)
    3. field assertions, all of them (collect-all)
    4. whole-body JSON schema

3 and 4 only run when 1 and 2 passed.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from restcheck.schema import SchemaStore
from restcheck.selectors import parse_selector
from restcheck.types import (
    AssertionFailure,
    CapturedResponse,
    ConfigurationError,
    ResponseExpectation,
    SchemaValidationError,
    SelectorError,
)

logger = logging.getLogger(__name__)


def media_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


class ResponseValidator:
    """Check a CapturedResponse against a ResponseExpectation."""

    def __init__(self, schemas: Optional[SchemaStore] = None):
        self.schemas = schemas or SchemaStore()

    def validate(self, resp: CapturedResponse, exp: ResponseExpectation) -> List[str]:
        """Return failure messages; an empty list means the response passed."""
        gate: List[str] = []

        if resp.status_code != int(exp.status):
            gate.append(f"status: expected {exp.status}, got {resp.status_code}")

        if exp.content_type is not None:
            want = media_type(exp.content_type)
            got = media_type(resp.content_type)
            if want != got:
                gate.append(f"content-type: expected {want}, got {got}")

        if gate:
            return gate

        if not exp.fields and not exp.schema_ref:
            return []

        try:
            data = resp.json()
        except ValueError:
            return ["body: response is not valid JSON"]

        errors = self._check_fields(data, exp)

        if exp.schema_ref:
            errors.extend(f"schema {exp.schema_ref}: {v}" for v in self.schemas.validate(data, exp.schema_ref))

        return errors

    def _check_fields(self, data: Any, exp: ResponseExpectation) -> List[str]:
        errors: List[str] = []
        for fa in exp.fields:
            pred = fa.predicate
            try:
                selector = parse_selector(fa.selector)
            except SelectorError as e:
                raise ConfigurationError(f"invalid field selector {e}") from e
            try:
                value = selector.resolve(data)
            except SelectorError as e:
                if not pred.accepts_missing:
                    errors.append(f"{fa.selector}: {e.reason} ({pred.describe()})")
                    continue
                value = None

            why = pred.check(value, self.schemas)
            if why:
                errors.append(f"{fa.selector}: {why} ({pred.describe()})")
        return errors

    def assert_response(self, resp: CapturedResponse, exp: ResponseExpectation) -> None:
        """Raise on any failure: SchemaValidationError if only the schema failed."""
        errors = self.validate(resp, exp)
        if not errors:
            return
        prefix = f"schema {exp.schema_ref}: " if exp.schema_ref else None
        if prefix and all(e.startswith(prefix) for e in errors):
            raise SchemaValidationError(exp.schema_ref, [e[len(prefix):] for e in errors])
        raise AssertionFailure(errors)
