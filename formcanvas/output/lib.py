"""Output formatting for schema review.

Generates a human-readable outline of a schema tree for the CLI.
"""

from formcanvas.schema import (
    MAX_ROW_SPAN,
    Column,
    FormField,
    FormSchema,
    Row,
    SchemaNode,
    Section,
)
from formcanvas.selection import Selection


def _children(node: SchemaNode) -> tuple[SchemaNode, ...]:
    if isinstance(node, FormSchema):
        return node.sections
    if isinstance(node, Section):
        return node.rows
    if isinstance(node, Row):
        return node.columns
    if isinstance(node, Column):
        return node.fields
    return ()


def _describe(node: SchemaNode) -> str:
    if isinstance(node, FormSchema):
        return f"{node.name or '(untitled)'} [form, {node.id}]"
    if isinstance(node, Section):
        return f"{node.title} [section, {node.id}]"
    if isinstance(node, Row):
        return f"Row [{node.id}]"
    if isinstance(node, Column):
        pct = round(node.span / MAX_ROW_SPAN * 100)
        return f"Column [{pct}%, {node.id}]"
    if isinstance(node, FormField):
        caption = node.label or node.name
        return f"{caption} [{node.type}, {node.name}, {node.id}]"
    raise TypeError(f"Not a schema node: {type(node).__name__}")


def format_schema_tree(schema: FormSchema, selection: Selection | None = None) -> str:
    """Format a schema as an indented tree.

    Example output:
        Intake [form, form_1]
        ├── Contact [section, section_a]
        │   └── Row [row_a1]
        │       ├── Column [50%, column_a1]
        │       │   └── First name [text, first_name, field_a]
        │       └── Column [50%, column_a2]
        └── Preferences [section, section_b]

    The selected node, if any, is suffixed with ``*``.

    Args:
        schema: Tree to format.
        selection: Current selection to highlight.

    Returns:
        Formatted tree string.
    """
    selected_id = selection.id if selection else None
    lines: list[str] = []
    _format_node(
        schema, lines, "", is_last=True, selected_id=selected_id, is_root=True
    )
    return "\n".join(lines)


def _format_node(
    node: SchemaNode,
    lines: list[str],
    prefix: str,
    is_last: bool,
    selected_id: str | None,
    is_root: bool = False,
) -> None:
    """Recursively format a node and its children."""
    if is_root:
        connector = ""
        child_prefix = ""
    else:
        connector = "└── " if is_last else "├── "
        child_prefix = prefix + ("    " if is_last else "│   ")

    marker = " *" if node.id == selected_id else ""
    lines.append(f"{prefix}{connector}{_describe(node)}{marker}")

    children = _children(node)
    for i, child in enumerate(children):
        _format_node(child, lines, child_prefix, i == len(children) - 1, selected_id)


__all__ = ["format_schema_tree"]
