"""Tree mutation engine for the form builder.

Every operation is a pure function: it takes the current ``BuilderState``
(tree + selection) and returns the next one. Nothing is mutated in place.
Changed nodes and their ancestors are rebuilt with ``model_copy``; all other
subtrees are shared with the previous tree, so consumers can detect change
by identity. An operation that changes nothing returns the very same state
object.

Ids that no longer exist are tolerated: the operation is a no-op. Only
``add_*`` operations touch the id generator, and only when they actually
insert something.
"""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from formcanvas.config import get_default_columns
from formcanvas.ids import IdGenerator, get_id_generator
from formcanvas.reorder import DragItem, plan_reorder, reorder
from formcanvas.schema import (
    DEFAULT_FIELD_NAME_PREFIX,
    DEFAULT_FORM_NAME,
    DEFAULT_SECTION_TITLE,
    MAX_ROW_SPAN,
    Column,
    FieldType,
    FormField,
    FormSchema,
    NodeKind,
    Row,
    Section,
    coerce_field_type,
    find_section,
    iter_nodes,
    locate,
)
from formcanvas.selection import Selection, make_selection, selection_within
from formcanvas.targets import resolve_targets

logger = logging.getLogger(__name__)

N = TypeVar("N", Section, Row, Column, FormField)


class _Unset:
    """Marker for keyword arguments that were not passed."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()

_FIELD_NAME_RE = re.compile(rf"^{DEFAULT_FIELD_NAME_PREFIX}(\d+)$")


# =============================================================================
# State
# =============================================================================


@dataclass(frozen=True)
class BuilderState:
    """Snapshot threaded through every engine operation.

    Attributes:
        schema: Current schema tree.
        selection: Currently selected node, or None.
    """

    schema: FormSchema
    selection: Selection | None = None

    def evolve(
        self, schema: FormSchema, selection: Selection | None | Any = UNSET
    ) -> "BuilderState":
        """Return the next state, or ``self`` when nothing changed."""
        if selection is UNSET:
            selection = self.selection
        if schema is self.schema and selection == self.selection:
            return self
        return BuilderState(schema=schema, selection=selection)


# =============================================================================
# Tree Helpers (Internal)
# =============================================================================


def _swap(
    nodes: tuple[N, ...], node_id: str, update: Callable[[N], N]
) -> tuple[N, ...]:
    """Replace one node in a sibling tuple, keeping the tuple if unchanged."""
    for index, node in enumerate(nodes):
        if node.id == node_id:
            replacement = update(node)
            if replacement is node:
                return nodes
            return nodes[:index] + (replacement,) + nodes[index + 1 :]
    return nodes


def _drop(nodes: tuple[N, ...], node_id: str) -> tuple[N, ...]:
    return tuple(node for node in nodes if node.id != node_id)


def _with(node: Any, attr: str, value: Any) -> Any:
    """model_copy that keeps the node when the attribute is unchanged."""
    if getattr(node, attr) is value:
        return node
    return node.model_copy(update={attr: value})


def _update_section(
    schema: FormSchema, section_id: str, update: Callable[[Section], Section]
) -> FormSchema:
    return _with(schema, "sections", _swap(schema.sections, section_id, update))


def _update_row(
    schema: FormSchema, row_id: str, update: Callable[[Row], Row]
) -> FormSchema:
    location = locate(schema, row_id, NodeKind.ROW)
    if location is None:
        return schema
    return _update_section(
        schema,
        location.section.id,
        lambda section: _with(section, "rows", _swap(section.rows, row_id, update)),
    )


def _update_column(
    schema: FormSchema, column_id: str, update: Callable[[Column], Column]
) -> FormSchema:
    location = locate(schema, column_id, NodeKind.COLUMN)
    if location is None:
        return schema
    return _update_row(
        schema,
        location.row.id,
        lambda row: _with(row, "columns", _swap(row.columns, column_id, update)),
    )


def _update_field(
    schema: FormSchema, field_id: str, update: Callable[[FormField], FormField]
) -> FormSchema:
    location = locate(schema, field_id, NodeKind.FIELD)
    if location is None:
        return schema
    return _update_column(
        schema,
        location.column.id,
        lambda column: _with(column, "fields", _swap(column.fields, field_id, update)),
    )


def _clear_if_within(state: BuilderState, node_id: str) -> Selection | None:
    """Selection after removing ``node_id``: empty if it was inside the subtree."""
    if selection_within(state.schema, state.selection, node_id):
        return None
    return state.selection


def _ids(ids: IdGenerator | None) -> IdGenerator:
    return ids if ids is not None else get_id_generator()


def next_field_name(schema: FormSchema) -> str:
    """Generate the next free default field name (``field_<n>``)."""
    highest = 0
    for location in iter_nodes(schema):
        if location.kind != NodeKind.FIELD:
            continue
        match = _FIELD_NAME_RE.match(location.node.name)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{DEFAULT_FIELD_NAME_PREFIX}{highest + 1}"


def default_row_layout(columns: int | None = None) -> tuple[int, ...]:
    """Equal column spans for a new row.

    Args:
        columns: Number of columns (1-4). Defaults to configuration.
    """
    count = get_default_columns(columns)
    return (MAX_ROW_SPAN // count,) * count


def _check_span(span: int) -> int:
    if not 1 <= span <= MAX_ROW_SPAN:
        raise ValueError(f"Column span must be 1-{MAX_ROW_SPAN}, got {span}")
    return span


# =============================================================================
# Creation
# =============================================================================


def build_row(ids: IdGenerator, layout: Sequence[int] | None = None) -> Row:
    """Create a row seeded with columns.

    Consumes one id for the row and one per column.

    Raises:
        ValueError: If the layout is empty or a span is outside 1-4,
            or the spans add up to more than a full row.
    """
    spans = tuple(layout) if layout is not None else default_row_layout()
    if not spans:
        raise ValueError("A row needs at least one column")
    for span in spans:
        _check_span(span)
    if sum(spans) > MAX_ROW_SPAN:
        raise ValueError(f"Row spans add up to {sum(spans)}, max is {MAX_ROW_SPAN}")

    row_id = ids.next_id(NodeKind.ROW.value)
    columns = tuple(
        Column(id=ids.next_id(NodeKind.COLUMN.value), span=span) for span in spans
    )
    return Row(id=row_id, columns=columns)


def create_default_schema(
    ids: IdGenerator | None = None, name: str = DEFAULT_FORM_NAME
) -> FormSchema:
    """Build the tree installed at application start.

    One section holding one default row with no fields.
    """
    ids = _ids(ids)
    form_id = ids.next_id(NodeKind.FORM.value)
    section = Section(
        id=ids.next_id(NodeKind.SECTION.value),
        title="Section 1",
        rows=(build_row(ids),),
    )
    return FormSchema(id=form_id, name=name, sections=(section,))


def new_state(
    schema: FormSchema | None = None, ids: IdGenerator | None = None
) -> BuilderState:
    """Start an editing session on ``schema`` (or a fresh default tree)."""
    if schema is None:
        schema = create_default_schema(ids)
    return BuilderState(schema=schema)


# =============================================================================
# Sections
# =============================================================================


def add_section(
    state: BuilderState, title: str = "", ids: IdGenerator | None = None
) -> BuilderState:
    """Append an empty section to the form. Always succeeds."""
    section = Section(
        id=_ids(ids).next_id(NodeKind.SECTION.value),
        title=title or DEFAULT_SECTION_TITLE,
    )
    logger.debug(f"Adding section '{section.id}'")
    schema = state.schema.model_copy(
        update={"sections": state.schema.sections + (section,)}
    )
    return state.evolve(schema)


def remove_section(state: BuilderState, section_id: str) -> BuilderState:
    """Remove a section and everything in it."""
    if find_section(state.schema, section_id) is None:
        logger.debug(f"remove_section: '{section_id}' not found")
        return state

    schema = _with(state.schema, "sections", _drop(state.schema.sections, section_id))
    return state.evolve(schema, _clear_if_within(state, section_id))


def update_section(state: BuilderState, section_id: str, title: str) -> BuilderState:
    """Retitle a section. Empty titles fall back to the default title."""
    title = title or DEFAULT_SECTION_TITLE
    schema = _update_section(
        state.schema,
        section_id,
        lambda section: section
        if section.title == title
        else section.model_copy(update={"title": title}),
    )
    return state.evolve(schema)


# =============================================================================
# Rows
# =============================================================================


def add_row(
    state: BuilderState,
    section_id: str,
    ids: IdGenerator | None = None,
    layout: Sequence[int] | None = None,
) -> BuilderState:
    """Append a row with a default column layout to a section."""
    if find_section(state.schema, section_id) is None:
        logger.debug(f"add_row: section '{section_id}' not found")
        return state

    row = build_row(_ids(ids), layout)
    schema = _update_section(
        state.schema,
        section_id,
        lambda section: section.model_copy(update={"rows": section.rows + (row,)}),
    )
    return state.evolve(schema)


def remove_row(state: BuilderState, row_id: str) -> BuilderState:
    """Remove a row (searched across all sections) and its columns and fields."""
    location = locate(state.schema, row_id, NodeKind.ROW)
    if location is None:
        logger.debug(f"remove_row: '{row_id}' not found")
        return state

    schema = _update_section(
        state.schema,
        location.section.id,
        lambda section: _with(section, "rows", _drop(section.rows, row_id)),
    )
    return state.evolve(schema, _clear_if_within(state, row_id))


def reorder_rows(
    state: BuilderState, section_id: str, from_index: int, to_index: int
) -> BuilderState:
    """Move a row within one section's row list."""
    schema = _update_section(
        state.schema,
        section_id,
        lambda section: _with(
            section, "rows", reorder(section.rows, from_index, to_index)
        ),
    )
    return state.evolve(schema)


# =============================================================================
# Columns
# =============================================================================


def update_column(state: BuilderState, column_id: str, span: int) -> BuilderState:
    """Change a column's span.

    Raises:
        ValueError: If span is outside 1-4.
    """
    _check_span(span)
    schema = _update_column(
        state.schema,
        column_id,
        lambda column: column
        if column.span == span
        else column.model_copy(update={"span": span}),
    )
    return state.evolve(schema)


# =============================================================================
# Fields
# =============================================================================


def add_field(
    state: BuilderState,
    column_id: str,
    field_type: FieldType | str,
    ids: IdGenerator | None = None,
    label: str | None = None,
) -> BuilderState:
    """Append a field of the given type to a column.

    The field gets a generated default name (``field_<n>``).

    Raises:
        ValueError: If ``field_type`` is not one of the seven field types.
    """
    field_type = coerce_field_type(field_type)
    if locate(state.schema, column_id, NodeKind.COLUMN) is None:
        logger.debug(f"add_field: column '{column_id}' not found")
        return state

    form_field = FormField(
        id=_ids(ids).next_id(NodeKind.FIELD.value),
        type=field_type,
        name=next_field_name(state.schema),
        label=label,
    )
    schema = _update_column(
        state.schema,
        column_id,
        lambda column: column.model_copy(
            update={"fields": column.fields + (form_field,)}
        ),
    )
    return state.evolve(schema)


def remove_field(state: BuilderState, field_id: str) -> BuilderState:
    """Remove a field."""
    location = locate(state.schema, field_id, NodeKind.FIELD)
    if location is None:
        logger.debug(f"remove_field: '{field_id}' not found")
        return state

    schema = _update_column(
        state.schema,
        location.column.id,
        lambda column: _with(column, "fields", _drop(column.fields, field_id)),
    )
    return state.evolve(schema, _clear_if_within(state, field_id))


def update_field(
    state: BuilderState,
    field_id: str,
    *,
    name: str | None = None,
    label: str | None | Any = UNSET,
) -> BuilderState:
    """Edit a field's name and/or label. The type cannot be changed.

    An empty or missing ``name`` leaves the name as is. ``label=None``
    clears the label.
    """
    changes: dict[str, Any] = {}
    if name:
        changes["name"] = name
    if label is not UNSET:
        changes["label"] = label

    def apply(form_field: FormField) -> FormField:
        if all(getattr(form_field, key) == value for key, value in changes.items()):
            return form_field
        return form_field.model_copy(update=changes)

    return state.evolve(_update_field(state.schema, field_id, apply))


def reorder_fields(
    state: BuilderState, column_id: str, from_index: int, to_index: int
) -> BuilderState:
    """Move a field within one column's field list."""
    schema = _update_column(
        state.schema,
        column_id,
        lambda column: _with(
            column, "fields", reorder(column.fields, from_index, to_index)
        ),
    )
    return state.evolve(schema)


# =============================================================================
# Form
# =============================================================================


def update_form(
    state: BuilderState,
    *,
    name: str | Any = UNSET,
    description: str | None | Any = UNSET,
) -> BuilderState:
    """Merge name/description edits into the form. Never fails; the id is kept."""
    changes: dict[str, Any] = {}
    if name is not UNSET:
        changes["name"] = name or ""
    if description is not UNSET:
        changes["description"] = description

    changed = {
        key: value
        for key, value in changes.items()
        if getattr(state.schema, key) != value
    }
    if not changed:
        return state
    return state.evolve(state.schema.model_copy(update=changed))


# =============================================================================
# Selection and Palette
# =============================================================================


def select_element(
    state: BuilderState,
    kind: NodeKind | str | None,
    node_id: str | None = None,
) -> BuilderState:
    """Select a node, or clear the selection with ``kind=None``.

    Selecting an id that is not in the tree keeps the current selection.
    """
    return state.evolve(
        state.schema, make_selection(state.schema, kind, node_id, state.selection)
    )


def add_field_at_selection(
    state: BuilderState,
    field_type: FieldType | str,
    ids: IdGenerator | None = None,
) -> BuilderState:
    """Palette action: add a field to the column implied by the selection."""
    target = resolve_targets(state.schema, state.selection)
    if target.column_id is None:
        logger.debug("add_field_at_selection: no target column")
        coerce_field_type(field_type)
        return state
    return add_field(state, target.column_id, field_type, ids)


def add_row_at_selection(
    state: BuilderState, ids: IdGenerator | None = None
) -> BuilderState:
    """Palette action: add a row to the section implied by the selection."""
    target = resolve_targets(state.schema, state.selection)
    if target.section_id is None:
        logger.debug("add_row_at_selection: no target section")
        return state
    return add_row(state, target.section_id, ids)


def apply_drag(
    state: BuilderState, active: DragItem, over: DragItem | None
) -> BuilderState:
    """Apply a finished drag gesture if it stays within one sibling list."""
    request = plan_reorder(state.schema, active, over)
    if request is None:
        return state
    if request.kind == NodeKind.ROW:
        return reorder_rows(
            state, request.scope_id, request.from_index, request.to_index
        )
    return reorder_fields(
        state, request.scope_id, request.from_index, request.to_index
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
