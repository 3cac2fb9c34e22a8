"""Persistence for form schemas.

The persisted artifact is the nested, order-preserving record of the
schema tree (see ``FormSchema``) serialized as JSON. There is no versioning
or migration: a payload that does not match the current shape fails to
load with ``SchemaLoadError`` and nothing is installed.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from formcanvas.config import get_storage_dir
from formcanvas.schema import FormSchema

logger = logging.getLogger(__name__)

class SchemaLoadError(Exception):
    """A persisted schema could not be parsed.

    Attributes:
        key: Storage key the payload was read from, if any.
        cause: The underlying parse or validation error.
    """

    def __init__(
        self,
        message: str,
        key: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.key = key
        self.cause = cause


# =============================================================================
# Codec
# =============================================================================


def dump_schema(schema: FormSchema) -> dict[str, Any]:
    """Convert a schema to its persisted record format."""
    return schema.model_dump(mode="json")


def dumps_schema(schema: FormSchema, indent: int | None = 2) -> str:
    """Serialize a schema to JSON text."""
    return json.dumps(dump_schema(schema), indent=indent, ensure_ascii=False)


def parse_schema(data: Any, key: str | None = None) -> FormSchema:
    """Build a schema from its persisted record format.

    Raises:
        SchemaLoadError: If the data does not match the schema shape.
    """
    try:
        return FormSchema.model_validate(data)
    except ValidationError as e:
        raise SchemaLoadError(
            f"Invalid form schema ({e.error_count()} errors): {e}",
            key=key,
            cause=e,
        ) from e


def loads_schema(text: str | bytes, key: str | None = None) -> FormSchema:
    """Parse a schema from JSON text.

    Raises:
        SchemaLoadError: If the text is not JSON or not a valid schema.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaLoadError(f"Schema is not valid JSON: {e}", key=key, cause=e) from e
    return parse_schema(data, key=key)


# =============================================================================
# Backends
# =============================================================================


class JsonFileStorage:
    """Stores each schema as ``<base_dir>/<key>.json``.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash mid-write leaves the previous file intact.

    Args:
        base_dir: Directory for schema files. Defaults to configuration.
    """

    def __init__(self, base_dir: Path | str | None = None):
        self.base_dir = get_storage_dir(base_dir)

    def path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.base_dir / f"{key}.json"

    def save(self, key: str, schema: FormSchema) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(dumps_schema(schema))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info(f"Saved schema '{schema.id}' to {path}")

    def load(self, key: str) -> FormSchema | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        schema = loads_schema(path.read_text(encoding="utf-8"), key=key)
        logger.info(f"Loaded schema '{schema.id}' from {path}")
        return schema

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()


class MemoryStorage:
    """In-memory backend.

    Keeps serialized JSON rather than model objects so that loads exercise
    the same parser as the file backend.
    """

    def __init__(self):
        self._data: dict[str, str] = {}

    def save(self, key: str, schema: FormSchema) -> None:
        self._data[key] = dumps_schema(schema, indent=None)

    def save_raw(self, key: str, text: str) -> None:
        """Store an arbitrary payload (useful for exercising load failures)."""
        self._data[key] = text

    def load(self, key: str) -> FormSchema | None:
        if key not in self._data:
            return None
        return loads_schema(self._data[key], key=key)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        return key in self._data


__all__ = [
    "SchemaLoadError",
    "dump_schema",
    "dumps_schema",
    "parse_schema",
    "loads_schema",
    "JsonFileStorage",
    "MemoryStorage",
]
