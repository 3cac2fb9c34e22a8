"""Authoritative schema module for form definitions.

This module is the single source of truth for the shape of a form:
Form -> Section[] -> Row[] -> Column[] -> Field[]. It provides:
- The closed vocabularies (node kinds, field types)
- Immutable pydantic models mirroring the persisted record format
- Structural validation (duplicate ids, span overflow, field name clashes)
- JSON schema export for the persisted format

Nodes are frozen and hold their children in tuples. Editing a tree always
produces a new root; subtrees that did not change are shared by reference.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

# === VOCABULARIES ===


class NodeKind(str, Enum):
    """Variant tag shared by every node in the schema tree."""

    FORM = "form"
    SECTION = "section"
    ROW = "row"
    COLUMN = "column"
    FIELD = "field"


class FieldType(str, Enum):
    """Input control type of a form field.

    Fixed when the field is created; every other field attribute is
    editable afterwards.
    """

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"


# Palette order and display labels
FIELD_TYPE_LABELS: dict[FieldType, str] = {
    FieldType.TEXT: "Text",
    FieldType.TEXTAREA: "Textarea",
    FieldType.NUMBER: "Number",
    FieldType.DATE: "Date",
    FieldType.SELECT: "Select",
    FieldType.CHECKBOX: "Checkbox",
    FieldType.RADIO: "Radio",
}

# === DEFAULTS ===

MAX_ROW_SPAN = 4
DEFAULT_FORM_NAME = "Untitled form"
DEFAULT_SECTION_TITLE = "New section"
DEFAULT_FIELD_NAME_PREFIX = "field_"

# One full-width column per new row
DEFAULT_ROW_LAYOUT: tuple[int, ...] = (MAX_ROW_SPAN,)

_NODE_CONFIG = ConfigDict(frozen=True, extra="forbid", use_enum_values=True)


# === MODELS ===


class FormField(BaseModel):
    """Leaf node: a single input placed in a column.

    Attributes:
        id: Unique identifier, immutable after creation.
        type: Input control type, immutable after creation.
        name: Machine name used when the form is submitted.
        label: Optional human-readable caption.
    """

    kind: ClassVar[NodeKind] = NodeKind.FIELD

    id: str = Field(..., description="Unique identifier for the field")
    type: FieldType = Field(..., description="Input control type")
    name: str = Field(..., description="Submission name of the field")
    label: str | None = Field(None, description="Human-readable caption")

    model_config = _NODE_CONFIG


class Column(BaseModel):
    """A vertical slot inside a row holding an ordered list of fields."""

    kind: ClassVar[NodeKind] = NodeKind.COLUMN

    id: str = Field(..., description="Unique identifier for the column")
    span: Annotated[int, Field(ge=1, le=MAX_ROW_SPAN)] = Field(
        default=MAX_ROW_SPAN,
        description="Width in quarter units (1-4)",
    )
    fields: tuple[FormField, ...] = Field(
        default=(),
        description="Fields in display order",
    )

    model_config = _NODE_CONFIG


class Row(BaseModel):
    """A horizontal band inside a section.

    The column layout is fixed when the row is created.
    """

    kind: ClassVar[NodeKind] = NodeKind.ROW

    id: str = Field(..., description="Unique identifier for the row")
    columns: tuple[Column, ...] = Field(
        default=(),
        description="Columns in left-to-right order",
    )

    model_config = _NODE_CONFIG

    @property
    def total_span(self) -> int:
        return sum(column.span for column in self.columns)


class Section(BaseModel):
    """A titled group of rows."""

    kind: ClassVar[NodeKind] = NodeKind.SECTION

    id: str = Field(..., description="Unique identifier for the section")
    title: str = Field(..., description="Section heading")
    rows: tuple[Row, ...] = Field(default=(), description="Rows in display order")

    model_config = _NODE_CONFIG


class FormSchema(BaseModel):
    """Root of the schema tree.

    Attributes:
        id: Unique identifier, fixed at creation. Renaming keeps the id.
        name: Form name; may be empty.
        description: Optional free text shown under the name.
        sections: Sections in display order.
    """

    kind: ClassVar[NodeKind] = NodeKind.FORM

    id: str = Field(..., description="Unique identifier for the form")
    name: str = Field(default="", description="Form name (may be empty)")
    description: str | None = Field(None, description="Optional description")
    sections: tuple[Section, ...] = Field(
        default=(),
        description="Sections in display order",
    )

    model_config = _NODE_CONFIG


SchemaNode = FormSchema | Section | Row | Column | FormField

def coerce_field_type(value: FieldType | str) -> FieldType:
    """Convert a string to FieldType.

    Raises:
        ValueError: If the value is not one of the seven field types.
    """
    if isinstance(value, FieldType):
        return value
    try:
        return FieldType(value)
    except ValueError:
        valid = ", ".join(ft.value for ft in FieldType)
        raise ValueError(f"Unknown field type '{value}'. Valid: {valid}") from None


def coerce_node_kind(value: NodeKind | str) -> NodeKind:
    """Convert a string to NodeKind.

    Raises:
        ValueError: If the value is not a known node kind.
    """
    if isinstance(value, NodeKind):
        return value
    try:
        return NodeKind(value)
    except ValueError:
        valid = ", ".join(k.value for k in NodeKind)
        raise ValueError(f"Unknown node kind '{value}'. Valid: {valid}") from None


# === SCHEMA VALIDATION ===


@dataclass
class SchemaIssue:
    """Represents a structural problem in a schema tree.

    Attributes:
        node_id: ID of the node where the issue was found.
        message: Human-readable description.
        issue_type: Machine-readable classification.
    """

    node_id: str
    message: str
    issue_type: str


def validate_schema(schema: FormSchema) -> list[SchemaIssue]:
    """Validate a schema tree for structural issues.

    Checks for:
    - Duplicate IDs anywhere in the tree
    - Rows whose column spans add up to more than 4
    - Field names used more than once in the form

    Args:
        schema: Root of the tree to validate.

    Returns:
        List of SchemaIssue objects. Empty list if valid.
    """
    issues: list[SchemaIssue] = []
    id_counts: dict[str, int] = {schema.id: 1}
    name_owners: dict[str, list[str]] = {}

    def count(node_id: str) -> None:
        id_counts[node_id] = id_counts.get(node_id, 0) + 1

    for section in schema.sections:
        count(section.id)
        for row in section.rows:
            count(row.id)
            if row.total_span > MAX_ROW_SPAN:
                issues.append(
                    SchemaIssue(
                        node_id=row.id,
                        message=(
                            f"Row '{row.id}' spans {row.total_span} units "
                            f"(max {MAX_ROW_SPAN})"
                        ),
                        issue_type="span_overflow",
                    )
                )
            for column in row.columns:
                count(column.id)
                for form_field in column.fields:
                    count(form_field.id)
                    name_owners.setdefault(form_field.name, []).append(form_field.id)

    for node_id, occurrences in id_counts.items():
        if occurrences > 1:
            issues.append(
                SchemaIssue(
                    node_id=node_id,
                    message=f"Duplicate ID '{node_id}' appears {occurrences} times",
                    issue_type="duplicate_id",
                )
            )

    for name, owners in name_owners.items():
        if len(owners) > 1:
            issues.append(
                SchemaIssue(
                    node_id=owners[1],
                    message=f"Field name '{name}' is used by {len(owners)} fields",
                    issue_type="duplicate_field_name",
                )
            )

    return issues


def is_valid(schema: FormSchema) -> bool:
    """Check if a schema tree has no structural issues."""
    return not validate_schema(schema)


def export_json_schema() -> dict[str, Any]:
    """Export the JSON schema of the persisted form format."""
    return FormSchema.model_json_schema()


__all__ = [
    # Vocabularies
    "NodeKind",
    "FieldType",
    "FIELD_TYPE_LABELS",
    # Defaults
    "MAX_ROW_SPAN",
    "DEFAULT_FORM_NAME",
    "DEFAULT_SECTION_TITLE",
    "DEFAULT_FIELD_NAME_PREFIX",
    "DEFAULT_ROW_LAYOUT",
    # Models
    "FormField",
    "Column",
    "Row",
    "Section",
    "FormSchema",
    "SchemaNode",
    "coerce_field_type",
    "coerce_node_kind",
    # Validation
    "SchemaIssue",
    "validate_schema",
    "is_valid",
    "export_json_schema",
]
