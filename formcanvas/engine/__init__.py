"""Tree mutation engine: pure operations over BuilderState snapshots.

Example usage:
    >>> from formcanvas.engine import add_field, add_row, new_state
    >>> from formcanvas.ids import IdGenerator
    >>> ids = IdGenerator(token="t")
    >>> state = new_state(ids=ids)
    >>> section_id = state.schema.sections[0].id
    >>> state = add_row(state, section_id, ids)
"""

from .lib import (
    UNSET,
    BuilderState,
    add_field,
    add_field_at_selection,
    add_row,
    add_row_at_selection,
    add_section,
    apply_drag,
    build_row,
    create_default_schema,
    default_row_layout,
    new_state,
    next_field_name,
    remove_field,
    remove_row,
    remove_section,
    reorder_fields,
    reorder_rows,
    select_element,
    update_column,
    update_field,
    update_form,
    update_section,
)

__all__ = [
    "UNSET",
    "BuilderState",
    # Creation
    "build_row",
    "create_default_schema",
    "default_row_layout",
    "new_state",
    "next_field_name",
    # Operations
    "add_section",
    "remove_section",
    "update_section",
    "add_row",
    "remove_row",
    "reorder_rows",
    "update_column",
    "add_field",
    "remove_field",
    "update_field",
    "reorder_fields",
    "update_form",
    "select_element",
    # Palette and drag
    "add_field_at_selection",
    "add_row_at_selection",
    "apply_drag",
]
