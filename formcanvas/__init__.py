"""formcanvas: schema state engine for a visual form builder."""

from formcanvas.builder import FormBuilder
from formcanvas.engine import BuilderState
from formcanvas.schema import (
    Column,
    FieldType,
    FormField,
    FormSchema,
    NodeKind,
    Row,
    Section,
    validate_schema,
)
from formcanvas.selection import Selection
from formcanvas.storage import SchemaLoadError, dump_schema, parse_schema
from formcanvas.targets import InsertionTarget, resolve_targets

__all__ = [
    # Schema
    "FormSchema",
    "Section",
    "Row",
    "Column",
    "FormField",
    "FieldType",
    "NodeKind",
    "validate_schema",
    # Editing
    "BuilderState",
    "FormBuilder",
    "Selection",
    "InsertionTarget",
    "resolve_targets",
    # Persistence
    "SchemaLoadError",
    "dump_schema",
    "parse_schema",
]
