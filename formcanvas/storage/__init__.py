"""Persistence for form schemas.

Example:
    >>> from formcanvas.storage import JsonFileStorage
    >>> storage = JsonFileStorage("/tmp/forms")
    >>> storage.save("form-builder-schema", schema)
    >>> restored = storage.load("form-builder-schema")
"""

from .lib import (
    JsonFileStorage,
    MemoryStorage,
    SchemaLoadError,
    dump_schema,
    dumps_schema,
    loads_schema,
    parse_schema,
)
from .protocol import SchemaStorage

__all__ = [
    "SchemaLoadError",
    "SchemaStorage",
    "dump_schema",
    "dumps_schema",
    "parse_schema",
    "loads_schema",
    "JsonFileStorage",
    "MemoryStorage",
]
