# restcheck/schema.py
"""
JSON Schema loading and validation.

Schemas are looked up by reference name (``post-schema.json`` or
``post-schema``) in the bundled ``restcheck/schemas`` directory, or in an
override directory when one is configured.
"""

from __future__ import annotations

import json
import logging
import threading
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema
from jsonschema.validators import validator_for

from restcheck.types import ConfigurationError, SchemaValidationError

logger = logging.getLogger(__name__)


def _json_path(path) -> str:
    out = "$"
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}"
    return out


class SchemaStore:
    """Load, cache and apply JSON schemas."""

    def __init__(self, schemas_dir: Optional[Union[str, Path]] = None):
        self.schemas_dir = Path(schemas_dir) if schemas_dir else None
        self._cache: Dict[str, Any] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _normalize(ref: str) -> str:
        ref = ref.strip()
        if not ref:
            raise ConfigurationError("empty schema reference")
        if "/" in ref or "\\" in ref or ref.startswith("."):
            raise ConfigurationError(f"schema reference must be a bare file name: {ref!r}")
        return ref if ref.endswith(".json") else f"{ref}.json"

    def _read(self, name: str) -> str:
        if self.schemas_dir is not None:
            p = self.schemas_dir / name
            if p.is_file():
                return p.read_text(encoding="utf-8")
        bundled = resources.files("restcheck") / "schemas" / name
        if bundled.is_file():
            return bundled.read_text(encoding="utf-8")
        raise ConfigurationError(f"schema not found: {name}")

    def load(self, ref: str) -> Any:
        """Return the parsed schema document for ``ref``."""
        name = self._normalize(ref)
        with self._lock:
            if name in self._cache:
                return self._cache[name]

        try:
            schema = json.loads(self._read(name))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"schema {name} is not valid JSON: {e}") from e

        cls = validator_for(schema)
        try:
            cls.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ConfigurationError(f"schema {name} is invalid: {e.message}") from e

        logger.debug(f"Loaded schema {name} ({cls.__name__})")
        with self._lock:
            self._cache[name] = schema
        return schema

    def validate(self, instance: Any, ref: str) -> List[str]:
        """Return violations as ``"$.path: message"``, sorted by path. Empty means valid."""
        schema = self.load(ref)
        validator = validator_for(schema)(schema)
        errors = sorted(
            validator.iter_errors(instance),
            key=lambda e: (_json_path(e.absolute_path), e.message),
        )
        return [f"{_json_path(e.absolute_path)}: {e.message}" for e in errors]

    def assert_valid(self, instance: Any, ref: str) -> None:
        violations = self.validate(instance, ref)
        if violations:
            raise SchemaValidationError(self._normalize(ref), violations)
