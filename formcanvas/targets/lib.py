"""Default insertion targets inferred from the current selection.

When the palette adds a row or a field without an explicit destination,
the destination comes from here. Resolution never guesses: if a step in
the chain finds an empty list, that target is None and the matching
palette action is unavailable.

| Selection        | Section target          | Column target                     |
|------------------|-------------------------|-----------------------------------|
| field            | section owning it       | column owning it                  |
| column           | section owning it       | the column itself                 |
| row              | section owning it       | the row's first column            |
| section          | the section itself      | first row's first column          |
| form / empty     | first section           | first section's first row/column  |
| stale (any kind) | None                    | None                              |
"""

from dataclasses import dataclass

from formcanvas.schema import FormSchema, NodeKind, first_column
from formcanvas.selection import Selection, resolve_selection


@dataclass(frozen=True)
class InsertionTarget:
    """Where palette actions should insert.

    Attributes:
        section_id: Section receiving a new row, or None.
        column_id: Column receiving a new field, or None.
    """

    section_id: str | None = None
    column_id: str | None = None

    @property
    def can_add_row(self) -> bool:
        return self.section_id is not None

    @property
    def can_add_field(self) -> bool:
        return self.column_id is not None


NO_TARGET = InsertionTarget()


def resolve_targets(
    schema: FormSchema, selection: Selection | None
) -> InsertionTarget:
    """Compute the default section and column for palette insertions.

    Args:
        schema: Current tree.
        selection: Current selection (None when nothing is selected).

    Returns:
        InsertionTarget; either id may be None.
    """
    if selection is None or selection.kind == NodeKind.FORM:
        if not schema.sections:
            return NO_TARGET
        section = schema.sections[0]
        column = first_column(section)
        return InsertionTarget(
            section_id=section.id,
            column_id=column.id if column else None,
        )

    location = resolve_selection(schema, selection)
    if location is None:
        return NO_TARGET

    if location.kind == NodeKind.FIELD:
        return InsertionTarget(location.section.id, location.column.id)

    if location.kind == NodeKind.COLUMN:
        return InsertionTarget(location.section.id, location.node.id)

    if location.kind == NodeKind.ROW:
        columns = location.node.columns
        return InsertionTarget(
            section_id=location.section.id,
            column_id=columns[0].id if columns else None,
        )

    column = first_column(location.node)
    return InsertionTarget(
        section_id=location.node.id,
        column_id=column.id if column else None,
    )


__all__ = ["InsertionTarget", "NO_TARGET", "resolve_targets"]
