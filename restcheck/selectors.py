# restcheck/selectors.py
"""
Field selectors: path expressions into parsed JSON documents.

Grammar (dot separated segments):
    id                  object key
    name.first          nested keys
    [0].id              list index at the root
    results[0].email    key then index
    results.0           bare index segment (only against a list)
    size()              length of the current list / object / string
    results.size()

Unlike a lenient dotted lookup, resolution never falls back to ``None``:
a missing key, an out-of-range index or a step through a scalar raises
``SelectorError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Tuple, Union

from restcheck.types import SelectorError


class _Size:
    def __repr__(self) -> str:
        return "size()"


SIZE = _Size()

Token = Union[str, int, _Size]

_SEGMENT_RE = re.compile(r"^(?P<key>[^\[\]]*)(?P<idx>(?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")


@dataclass(frozen=True)
class FieldSelector:
    """A parsed selector."""
    expression: str
    tokens: Tuple[Token, ...]

    def resolve(self, document: Any) -> Any:
        return resolve_tokens(self.expression, self.tokens, document)

    def __str__(self) -> str:
        return self.expression


@lru_cache(maxsize=256)
def parse_selector(expression: str) -> FieldSelector:
    """Parse ``expression`` into tokens; malformed input raises ``SelectorError``."""
    expr = expression.strip()
    if expr.startswith("$"):
        expr = expr[1:].lstrip(".")

    tokens: List[Token] = []
    if not expr:
        return FieldSelector(expression, ())

    for segment in expr.split("."):
        if segment == "size()":
            tokens.append(SIZE)
            continue
        m = _SEGMENT_RE.match(segment)
        if not m or (not m.group("key") and not m.group("idx")):
            raise SelectorError(expression, f"malformed segment {segment!r}")
        key = m.group("key")
        if key:
            tokens.append(key)
        tokens.extend(int(i) for i in _INDEX_RE.findall(m.group("idx")))

    return FieldSelector(expression, tuple(tokens))


def resolve_tokens(expression: str, tokens: Tuple[Token, ...], document: Any) -> Any:
    cur = document
    walked = "$"

    for tok in tokens:
        if tok is SIZE:
            if not isinstance(cur, (list, dict, str)):
                raise SelectorError(expression, f"size() of {type(cur).__name__} at {walked}")
            cur = len(cur)
            walked += ".size()"
            continue

        if isinstance(cur, list):
            # a bare digit segment stays a key until it meets a list
            if isinstance(tok, str) and tok.isdigit():
                tok = int(tok)
            if not isinstance(tok, int):
                raise SelectorError(expression, f"key {tok!r} used on a list at {walked}")
            if tok >= len(cur):
                raise SelectorError(expression, f"index {tok} out of range (length {len(cur)}) at {walked}")
            cur = cur[tok]
            walked += f"[{tok}]"
        elif isinstance(cur, dict):
            key = str(tok)
            if key not in cur:
                raise SelectorError(expression, f"missing field {key!r} at {walked}")
            cur = cur[key]
            walked += f".{key}"
        else:
            raise SelectorError(expression, f"cannot step into {type(cur).__name__} at {walked}")

    return cur


def select(document: Any, expression: str) -> Any:
    """Resolve ``expression`` against ``document``."""
    return parse_selector(expression).resolve(document)
