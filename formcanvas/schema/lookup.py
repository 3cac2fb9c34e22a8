"""Id-keyed lookups over a schema tree.

Every lookup is a full scan in level order: sections, then rows within
sections, then columns within rows, then fields within columns. Forms are
small enough that a scan is the simplest correct answer, and it never goes
stale the way a cached index could.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from .lib import Column, FormField, FormSchema, NodeKind, Row, SchemaNode, Section


@dataclass(frozen=True)
class NodeLocation:
    """A node together with its ancestors.

    Attributes:
        kind: Kind of the located node.
        node: The node itself.
        section: Owning section (None for forms and sections).
        row: Owning row (set for columns and fields).
        column: Owning column (set for fields).
    """

    kind: NodeKind
    node: SchemaNode
    section: Section | None = None
    row: Row | None = None
    column: Column | None = None

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def ancestor_ids(self) -> tuple[str, ...]:
        """Ids of the section/row/column above this node, outermost first."""
        return tuple(n.id for n in (self.section, self.row, self.column) if n)


def _iter_rows(schema: FormSchema) -> Iterator[tuple[Section, Row]]:
    for section in schema.sections:
        for row in section.rows:
            yield section, row


def _iter_columns(schema: FormSchema) -> Iterator[tuple[Section, Row, Column]]:
    for section, row in _iter_rows(schema):
        for column in row.columns:
            yield section, row, column


def _iter_fields(
    schema: FormSchema,
) -> Iterator[tuple[Section, Row, Column, FormField]]:
    for section, row, column in _iter_columns(schema):
        for form_field in column.fields:
            yield section, row, column, form_field


def find_section(schema: FormSchema, section_id: str) -> Section | None:
    """Find a section by id."""
    for section in schema.sections:
        if section.id == section_id:
            return section
    return None


def find_row(schema: FormSchema, row_id: str) -> Row | None:
    """Find a row by id, searching every section."""
    location = locate(schema, row_id, NodeKind.ROW)
    return location.node if location else None


def find_column(schema: FormSchema, column_id: str) -> Column | None:
    """Find a column by id, searching every row."""
    location = locate(schema, column_id, NodeKind.COLUMN)
    return location.node if location else None


def find_field(schema: FormSchema, field_id: str) -> FormField | None:
    """Find a field by id, searching every column."""
    location = locate(schema, field_id, NodeKind.FIELD)
    return location.node if location else None


def locate(
    schema: FormSchema,
    node_id: str,
    kind: NodeKind | None = None,
) -> NodeLocation | None:
    """Locate a node and its ancestors by id.

    Args:
        schema: Tree to search.
        node_id: Id to look for.
        kind: Restrict the search to one level of the tree.

    Returns:
        NodeLocation if found, None otherwise.
    """
    if kind in (None, NodeKind.FORM) and schema.id == node_id:
        return NodeLocation(NodeKind.FORM, schema)

    if kind in (None, NodeKind.SECTION):
        section = find_section(schema, node_id)
        if section is not None:
            return NodeLocation(NodeKind.SECTION, section)

    if kind in (None, NodeKind.ROW):
        for section, row in _iter_rows(schema):
            if row.id == node_id:
                return NodeLocation(NodeKind.ROW, row, section=section)

    if kind in (None, NodeKind.COLUMN):
        for section, row, column in _iter_columns(schema):
            if column.id == node_id:
                return NodeLocation(NodeKind.COLUMN, column, section=section, row=row)

    if kind in (None, NodeKind.FIELD):
        for section, row, column, form_field in _iter_fields(schema):
            if form_field.id == node_id:
                return NodeLocation(
                    NodeKind.FIELD, form_field, section=section, row=row, column=column
                )

    return None


def iter_nodes(schema: FormSchema) -> Iterator[NodeLocation]:
    """Yield every node in document (depth-first, pre-order) order."""
    yield NodeLocation(NodeKind.FORM, schema)
    for section in schema.sections:
        yield NodeLocation(NodeKind.SECTION, section)
        for row in section.rows:
            yield NodeLocation(NodeKind.ROW, row, section=section)
            for column in row.columns:
                yield NodeLocation(NodeKind.COLUMN, column, section=section, row=row)
                for form_field in column.fields:
                    yield NodeLocation(
                        NodeKind.FIELD,
                        form_field,
                        section=section,
                        row=row,
                        column=column,
                    )


def collect_ids(schema: FormSchema) -> list[str]:
    """All node ids in document order, the form id first."""
    return [location.id for location in iter_nodes(schema)]


def count_nodes(schema: FormSchema, kind: NodeKind | None = None) -> int:
    """Count nodes in the tree, optionally of a single kind."""
    return sum(
        1 for location in iter_nodes(schema) if kind is None or location.kind == kind
    )


def first_column(section: Section) -> Column | None:
    """First column of the first row of a section, if any."""
    if not section.rows or not section.rows[0].columns:
        return None
    return section.rows[0].columns[0]


__all__ = [
    "NodeLocation",
    "find_section",
    "find_row",
    "find_column",
    "find_field",
    "locate",
    "iter_nodes",
    "collect_ids",
    "count_nodes",
    "first_column",
]
