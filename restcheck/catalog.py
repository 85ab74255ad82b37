# restcheck/catalog.py
"""
The scenario table.

JSONPlaceholder (fake blogging API) and Random User Generator checks.
Bodies are pre-serialized JSON strings, the way a client would send them.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from restcheck.predicates import equals, greater_than, is_empty_or_null, is_instance, not_null
from restcheck.scenario import Scenario, check, expect
from restcheck.types import JSON_CONTENT_TYPE, ConfigurationError, RequestSpec

JSON = JSON_CONTENT_TYPE

NON_EXISTENT_POST_ID = 99999


JSONPLACEHOLDER_SCENARIOS: List[Scenario] = [
    Scenario(
        name="get_posts",
        api="jsonplaceholder",
        description="GET /posts returns 200, JSON, and a non-empty list of posts",
        request=RequestSpec("GET", "/posts"),
        expect=expect(
            200,
            check("size()", greater_than(0)),
            check("[0].id", not_null()),
            check("[0].title", not_null()),
            content_type=JSON,
        ),
        tags=("posts", "read"),
    ),
    Scenario(
        name="get_single_post",
        api="jsonplaceholder",
        description="GET /posts/{id} returns the requested post",
        request=RequestSpec("GET", "/posts/{id}", path_params={"id": 1}),
        expect=expect(
            200,
            check("id", equals(1)),
            check("title", not_null()),
            check("userId", equals(1)),
            content_type=JSON,
        ),
        tags=("posts", "read"),
    ),
    Scenario(
        name="create_post",
        api="jsonplaceholder",
        description="POST /posts creates a post and echoes it back with a new id",
        request=RequestSpec(
            "POST",
            "/posts",
            body='{"title": "foo", "body": "bar", "userId": 1}',
            content_type=JSON,
        ),
        expect=expect(
            201,
            check("id", not_null()),
            check("title", equals("foo")),
            check("body", equals("bar")),
            check("userId", equals(1)),
            content_type=JSON,
        ),
        extract={"created_post_id": "id"},
        tags=("posts", "write"),
    ),
    Scenario(
        name="update_post",
        api="jsonplaceholder",
        description="PUT /posts/{id} replaces a post and returns the updated data",
        request=RequestSpec(
            "PUT",
            "/posts/{id}",
            path_params={"id": 1},
            body='{"id": 1, "title": "updated title", "body": "updated body", "userId": 1}',
            content_type=JSON,
        ),
        expect=expect(
            200,
            check("id", equals(1)),
            check("title", equals("updated title")),
            check("body", equals("updated body")),
            content_type=JSON,
        ),
        tags=("posts", "write"),
    ),
    Scenario(
        name="delete_post",
        api="jsonplaceholder",
        description="DELETE /posts/{id} returns 200",
        request=RequestSpec("DELETE", "/posts/{id}", path_params={"id": 1}),
        expect=expect(200),
        tags=("posts", "write"),
    ),
    Scenario(
        name="post_matches_schema",
        api="jsonplaceholder",
        description="GET /posts/{id} body conforms to post-schema.json",
        request=RequestSpec("GET", "/posts/{id}", path_params={"id": 1}),
        expect=expect(200, schema="post-schema.json"),
        tags=("posts", "read", "schema"),
    ),
    Scenario(
        name="get_post_comments",
        api="jsonplaceholder",
        description="GET /posts/{id}/comments returns the comments of that post",
        request=RequestSpec("GET", "/posts/{id}/comments", path_params={"id": 1}),
        expect=expect(
            200,
            check("size()", greater_than(0)),
            check("[0].postId", equals(1)),
            check("[0].id", not_null()),
            check("[0].name", not_null()),
            check("[0].email", not_null()),
            check("[0].body", not_null()),
            content_type=JSON,
        ),
        tags=("comments", "read"),
    ),
    Scenario(
        name="get_users",
        api="jsonplaceholder",
        description="GET /users returns a non-empty list of users",
        request=RequestSpec("GET", "/users"),
        expect=expect(
            200,
            check("size()", greater_than(0)),
            check("[0].id", not_null()),
            check("[0].name", not_null()),
            check("[0].username", not_null()),
            check("[0].email", not_null()),
            content_type=JSON,
        ),
        tags=("users", "read"),
    ),
    Scenario(
        name="get_missing_post",
        api="jsonplaceholder",
        description="GET /posts/{id} for an id that does not exist returns 404",
        request=RequestSpec("GET", "/posts/{id}", path_params={"id": NON_EXISTENT_POST_ID}),
        expect=expect(404),
        tags=("posts", "read", "negative"),
    ),
    Scenario(
        name="create_post_without_title",
        api="jsonplaceholder",
        description="POST /posts without a title still creates the post, title comes back empty",
        request=RequestSpec(
            "POST",
            "/posts",
            body='{"body": "a body without a title", "userId": 1}',
            content_type=JSON,
        ),
        expect=expect(
            201,
            check("id", not_null()),
            check("title", is_empty_or_null()),
            check("body", equals("a body without a title")),
            check("userId", equals(1)),
            content_type=JSON,
        ),
        tags=("posts", "write", "negative"),
    ),
]


RANDOMUSER_SCENARIOS: List[Scenario] = [
    Scenario(
        name="random_user_basic",
        api="randomuser",
        description="GET /api/ returns a generated user with the basic fields set",
        request=RequestSpec("GET", "/api/"),
        expect=expect(
            200,
            check("results", not_null()),
            check("results", is_instance(list)),
            check("results.size()", greater_than(0)),
            check("results[0].gender", not_null()),
            check("results[0].name.first", not_null()),
            check("results[0].name.last", not_null()),
            check("results[0].email", not_null()),
            check("results[0].login.username", not_null()),
            check("results[0].phone", not_null()),
            schema="randomuser-schema.json",
        ),
        extract={"username": "results[0].login.username"},
        tags=("users", "read"),
    ),
]


SCENARIOS: List[Scenario] = JSONPLACEHOLDER_SCENARIOS + RANDOMUSER_SCENARIOS

APIS = ("jsonplaceholder", "randomuser")


def select(
    names: Optional[Iterable[str]] = None,
    api: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    scenarios: Sequence[Scenario] = SCENARIOS,
) -> List[Scenario]:
    """Filter the table by name, API and tag, preserving table order."""
    wanted = set(names or ())
    unknown = wanted - {s.name for s in scenarios}
    if unknown:
        raise ConfigurationError(f"unknown scenario(s): {', '.join(sorted(unknown))}")
    if api is not None and api not in APIS:
        raise ConfigurationError(f"unknown API {api!r}; expected one of {list(APIS)}")
    tag_set = set(tags or ())

    out = []
    for s in scenarios:
        if wanted and s.name not in wanted:
            continue
        if api and s.api != api:
            continue
        if tag_set and not tag_set.intersection(s.tags):
            continue
        out.append(s)
    return out
