from __future__ import annotations

import pytest

from conftest import json_response
from restcheck.predicates import equals, greater_than, is_empty_or_null, not_null
from restcheck.scenario import check, expect
from restcheck.types import AssertionFailure, ConfigurationError, SchemaValidationError
from restcheck.validator import ResponseValidator, media_type

POST = {"userId": 1, "id": 1, "title": "sunt aut facere", "body": "quia et suscipit"}


@pytest.fixture
def validator():
    return ResponseValidator()


def test_passing_response(validator):
    exp = expect(
        200,
        check("id", equals(1)),
        check("title", not_null()),
        check("userId", equals(1)),
        content_type="application/json",
    )
    assert validator.validate(json_response(POST), exp) == []


def test_list_response(validator):
    exp = expect(200, check("size()", greater_than(0)), check("[0].id", not_null()), check("[0].title", not_null()))
    assert validator.validate(json_response([POST]), exp) == []


def test_status_mismatch_skips_field_checks(validator):
    exp = expect(200, check("missingField", not_null()), check("id", equals(2)))
    errors = validator.validate(json_response({}, status=404), exp)
    assert errors == ["status: expected 200, got 404"]


def test_content_type_mismatch_skips_field_checks(validator):
    exp = expect(200, check("id", equals(1)), content_type="application/json")
    errors = validator.validate(json_response(b"<html></html>", content_type="text/html"), exp)
    assert errors == ["content-type: expected application/json, got text/html"]


def test_status_and_content_type_both_reported(validator):
    exp = expect(201, content_type="application/json")
    errors = validator.validate(json_response(b"oops", status=500, content_type="text/plain"), exp)
    assert len(errors) == 2


def test_charset_parameter_ignored():
    assert media_type("application/json; charset=utf-8") == "application/json"
    assert media_type("Application/JSON") == "application/json"
    assert media_type(None) is None


def test_collects_every_failing_field(validator):
    exp = expect(
        201,
        check("title", equals("foo")),
        check("body", equals("bar")),
        check("userId", equals(1)),
    )
    errors = validator.validate(json_response({"title": "x", "body": "y", "userId": 1}, status=201), exp)
    assert len(errors) == 2
    assert errors[0].startswith("title: ")
    assert errors[1].startswith("body: ")
    assert "equals('foo')" in errors[0]


def test_missing_field_fails(validator):
    errors = validator.validate(json_response(POST), expect(200, check("missingField", not_null())))
    assert len(errors) == 1
    assert "missing field 'missingField'" in errors[0]


def test_missing_field_accepted_by_empty_or_null(validator):
    created = {"body": "a body without a title", "userId": 1, "id": 101}
    exp = expect(201, check("title", is_empty_or_null()), check("id", not_null()))
    assert validator.validate(json_response(created, status=201), exp) == []


def test_non_json_body(validator):
    exp = expect(200, check("id", equals(1)))
    assert validator.validate(json_response(b"not json"), exp) == ["body: response is not valid JSON"]


def test_status_only_expectation_ignores_body(validator):
    assert validator.validate(json_response(b"", status=404, content_type=""), expect(404)) == []


def test_whole_body_schema(validator):
    exp = expect(200, schema="post-schema.json")
    assert validator.validate(json_response(POST), exp) == []

    errors = validator.validate(json_response({"id": "1"}), exp)
    assert "schema post-schema.json: $.id: '1' is not of type 'integer'" in errors


def test_assert_response_schema_only_failure(validator):
    with pytest.raises(SchemaValidationError) as exc:
        validator.assert_response(json_response({"id": 1}), expect(200, schema="post-schema.json"))
    assert exc.value.schema_ref == "post-schema.json"
    assert all(v.startswith("$") for v in exc.value.violations)


def test_assert_response_field_failure(validator):
    with pytest.raises(AssertionFailure) as exc:
        validator.assert_response(json_response(POST), expect(200, check("id", equals(2))))
    assert not isinstance(exc.value, SchemaValidationError)
    assert exc.value.messages == ["id: $: 2 != 1 (equals(2))"]


def test_assert_response_passes_silently(validator):
    validator.assert_response(json_response(POST), expect(200))


def test_malformed_selector_is_configuration_error(validator):
    with pytest.raises(ConfigurationError):
        validator.validate(json_response(POST), expect(200, check("a..b", not_null())))
