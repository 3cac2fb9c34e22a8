"""Schema tree for form definitions.

Example usage:
    >>> from formcanvas.schema import FormSchema, Section, locate
    >>> schema = FormSchema(id="form_1", name="Intake")
    >>> locate(schema, "form_1").kind
    <NodeKind.FORM: 'form'>
"""

from .lib import (
    DEFAULT_FIELD_NAME_PREFIX,
    DEFAULT_FORM_NAME,
    DEFAULT_ROW_LAYOUT,
    DEFAULT_SECTION_TITLE,
    FIELD_TYPE_LABELS,
    MAX_ROW_SPAN,
    Column,
    FieldType,
    FormField,
    FormSchema,
    NodeKind,
    Row,
    SchemaIssue,
    SchemaNode,
    Section,
    coerce_field_type,
    coerce_node_kind,
    export_json_schema,
    is_valid,
    validate_schema,
)
from .lookup import (
    NodeLocation,
    collect_ids,
    count_nodes,
    find_column,
    find_field,
    find_row,
    find_section,
    first_column,
    iter_nodes,
    locate,
)

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
    "FormSchema",
    "Section",
    "Row",
    "Column",
    "FormField",
    "SchemaNode",
    "coerce_field_type",
    "coerce_node_kind",
    # Lookups
    "NodeLocation",
    "locate",
    "find_section",
    "find_row",
    "find_column",
    "find_field",
    "first_column",
    "iter_nodes",
    "collect_ids",
    "count_nodes",
    # Validation
    "SchemaIssue",
    "validate_schema",
    "is_valid",
    "export_json_schema",
]
