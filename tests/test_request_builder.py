from __future__ import annotations

import json

import pytest

from restcheck.request_builder import build_request, placeholders
from restcheck.types import ConfigurationError, RequestSpec

BASE = "https://jsonplaceholder.test"


def test_path_params_substituted():
    req = build_request(RequestSpec("get", "/posts/{id}/comments", path_params={"id": 1}), BASE)
    assert req.method == "GET"
    assert req.url == "https://jsonplaceholder.test/posts/1/comments"
    assert req.content is None
    assert req.headers == ()


def test_building_twice_is_identical():
    spec = RequestSpec(
        "POST",
        "/posts/{id}",
        path_params={"id": 5},
        body='{"title": "foo", "body": "bar", "userId": 1}',
        content_type="application/json",
    )
    assert build_request(spec, BASE) == build_request(spec, BASE)


def test_unresolved_placeholder_is_configuration_error():
    with pytest.raises(ConfigurationError) as exc:
        build_request(RequestSpec("GET", "/posts/{id}/comments/{commentId}", path_params={"id": 1}), BASE)
    assert "commentId" in str(exc.value)


def test_none_path_param_rejected():
    with pytest.raises(ConfigurationError):
        build_request(RequestSpec("GET", "/posts/{id}", path_params={"id": None}), BASE)


def test_path_param_values_are_quoted():
    req = build_request(RequestSpec("GET", "/search/{q}", path_params={"q": "a/b c"}), BASE)
    assert req.url == "https://jsonplaceholder.test/search/a%2Fb%20c"


def test_raw_json_string_body_is_sent_verbatim():
    raw = '{"title": "foo", "body": "bar", "userId": 1}'
    req = build_request(RequestSpec("POST", "/posts", body=raw, content_type="application/json"), BASE)
    assert req.content == raw.encode("utf-8")
    assert req.header_dict() == {"Content-Type": "application/json"}


def test_structured_body_serialized_in_order():
    req = build_request(RequestSpec("POST", "/posts", body={"title": "foo", "userId": 1}), BASE)
    assert req.content == b'{"title":"foo","userId":1}'
    assert json.loads(req.content) == {"title": "foo", "userId": 1}
    assert req.header_dict()["Content-Type"] == "application/json"


def test_explicit_content_type_header_wins():
    spec = RequestSpec("POST", "/posts", body="x", content_type="application/json", headers={"content-type": "text/csv"})
    req = build_request(spec, BASE)
    assert req.header_dict() == {"content-type": "text/csv"}


def test_query_parameters_appended():
    req = build_request(RequestSpec("GET", "/comments", query={"postId": 1}), BASE)
    assert req.url == "https://jsonplaceholder.test/comments?postId=1"


def test_base_url_trailing_slash():
    req = build_request(RequestSpec("GET", "posts"), BASE + "/")
    assert req.url == "https://jsonplaceholder.test/posts"


def test_absolute_url_template_kept():
    req = build_request(RequestSpec("GET", "https://other.test/api/"), BASE)
    assert req.url == "https://other.test/api/"


def test_missing_base_url():
    with pytest.raises(ConfigurationError):
        build_request(RequestSpec("GET", "/posts"), "")


def test_unsupported_method():
    with pytest.raises(ConfigurationError):
        build_request(RequestSpec("FETCH", "/posts"), BASE)


def test_placeholders_listed_in_order():
    assert placeholders("/users/{userId}/posts/{ id }") == ["userId", "id"]
