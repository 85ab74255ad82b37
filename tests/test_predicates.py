from __future__ import annotations

import pytest

from restcheck.predicates import (
    compute_diff,
    equals,
    greater_than,
    is_empty_or_null,
    is_instance,
    matches_regex,
    matches_schema,
    not_null,
)
from restcheck.schema import SchemaStore


def test_equals():
    assert equals(1).check(1) is None
    assert equals(1).check(1.0) is None
    assert equals("foo").check("foo") is None
    assert "'foo' != 'bar'" in equals("foo").check("bar")


def test_equals_does_not_confuse_bool_and_int():
    assert "type mismatch" in equals(1).check(True)


def test_equals_structural_diff():
    why = equals({"id": 1, "tags": ["a", "b"]}).check({"id": 2, "tags": ["a"], "extra": True})
    assert "id: 1 != 2" in why
    assert "tags: length mismatch (expected 2, got 1)" in why
    assert "extra: unexpected key in actual" in why


def test_compute_diff_nested_list_paths():
    assert compute_diff([{"a": 1}], [{"a": 2}]) == ["[0].a: 1 != 2"]
    assert compute_diff({"a": 1}, {"a": 1}) == []


def test_not_null():
    assert not_null().check(0) is None
    assert not_null().check("") is None
    assert not_null().check(None) == "expected non-null value, got null"


@pytest.mark.parametrize("value", [None, "", [], {}])
def test_is_empty_or_null_accepts(value):
    assert is_empty_or_null().check(value) is None


def test_is_empty_or_null_rejects_content():
    assert is_empty_or_null().check("title") is not None
    assert is_empty_or_null().accepts_missing is True
    assert not_null().accepts_missing is False


def test_greater_than():
    assert greater_than(0).check(3) is None
    assert greater_than(0).check(0) == "expected > 0, got 0"
    assert "expected a number" in greater_than(0).check("3")
    assert "expected a number" in greater_than(0).check(True)


def test_is_instance():
    assert is_instance(list).check([]) is None
    assert is_instance(list).check({}) == "expected array, got dict"
    assert is_instance(int).check(True) is not None
    assert is_instance(int, float).check(2.5) is None


def test_matches_regex():
    assert matches_regex(r"^[^@]+@[^@]+$").check("Sincere@april.biz") is None
    assert "doesn't match" in matches_regex(r"^\d+$").check("abc")
    assert "got null" in matches_regex(".*").check(None)


def test_matches_schema_on_sub_document():
    store = SchemaStore()
    post = {"userId": 1, "id": 1, "title": "t", "body": "b"}
    assert matches_schema("post-schema").check(post, store) is None
    why = matches_schema("post-schema").check({"id": 1}, store)
    assert why.startswith("schema post-schema: ")
    assert "'title' is a required property" in why


def test_describe():
    assert equals(1).describe() == "equals(1)"
    assert greater_than(0).describe() == "greater_than(0)"
    assert is_instance(list).describe() == "is_instance(array)"
