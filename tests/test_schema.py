from __future__ import annotations

import json

import pytest

from restcheck.schema import SchemaStore
from restcheck.types import ConfigurationError, SchemaValidationError

GOOD_POST = {"userId": 1, "id": 1, "title": "sunt aut facere", "body": "quia et suscipit"}


def test_bundled_schema_loads_with_or_without_extension():
    store = SchemaStore()
    assert store.load("post-schema.json") is store.load("post-schema")
    assert store.load("post-schema")["required"] == ["userId", "id", "title", "body"]


def test_valid_document_has_no_violations():
    assert SchemaStore().validate(GOOD_POST, "post-schema.json") == []


def test_violations_carry_json_paths_sorted():
    violations = SchemaStore().validate({"userId": 1, "id": "x", "title": "t"}, "post-schema.json")
    assert violations == [
        "$: 'body' is a required property",
        "$.id: 'x' is not of type 'integer'",
    ]


def test_assert_valid_raises_schema_error():
    with pytest.raises(SchemaValidationError) as exc:
        SchemaStore().assert_valid({"id": 1}, "post-schema")
    assert exc.value.schema_ref == "post-schema.json"
    assert len(exc.value.violations) == 3


def test_unknown_schema():
    with pytest.raises(ConfigurationError):
        SchemaStore().load("nope")


@pytest.mark.parametrize("ref", ["../post-schema.json", "sub/post-schema.json", ""])
def test_schema_ref_must_be_bare_name(ref):
    with pytest.raises(ConfigurationError):
        SchemaStore().load(ref)


def test_override_directory_takes_precedence(tmp_path):
    (tmp_path / "post-schema.json").write_text(json.dumps({"type": "array"}), encoding="utf-8")
    store = SchemaStore(tmp_path)
    assert store.validate([], "post-schema") == []
    assert store.validate(GOOD_POST, "post-schema") == ["$: " + repr(GOOD_POST) + " is not of type 'array'"]


def test_override_directory_falls_back_to_bundled(tmp_path):
    assert SchemaStore(tmp_path).validate(GOOD_POST, "post-schema") == []


def test_invalid_schema_document(tmp_path):
    (tmp_path / "broken.json").write_text(json.dumps({"type": 12}), encoding="utf-8")
    with pytest.raises(ConfigurationError) as exc:
        SchemaStore(tmp_path).load("broken")
    assert "invalid" in str(exc.value)


def test_schema_not_json(tmp_path):
    (tmp_path / "garbage.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        SchemaStore(tmp_path).load("garbage")
