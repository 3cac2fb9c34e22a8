"""Form builder session for formcanvas.

Owns the single current snapshot (tree + selection) of an editing session
and threads it through the pure engine operations. This is the object a
presentation layer talks to: every method maps to one engine operation,
installs the returned state, and hands it back so the caller can re-render.
"""

import logging
from collections.abc import Sequence
from typing import Any

from formcanvas.config import get_storage_key
from formcanvas.engine import (
    UNSET,
    BuilderState,
    add_field,
    add_field_at_selection,
    add_row,
    add_row_at_selection,
    add_section,
    apply_drag,
    new_state,
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
from formcanvas.ids import IdGenerator, get_id_generator
from formcanvas.output import format_schema_tree
from formcanvas.reorder import DragItem
from formcanvas.schema import (
    FieldType,
    FormSchema,
    NodeKind,
    SchemaIssue,
    collect_ids,
    validate_schema,
)
from formcanvas.selection import Selection
from formcanvas.storage import JsonFileStorage, SchemaLoadError, SchemaStorage
from formcanvas.targets import InsertionTarget, resolve_targets

logger = logging.getLogger(__name__)


class FormBuilder:
    """Editing session over one form schema.

    Provides a high-level interface for:
    - Structural edits (sections, rows, columns, fields)
    - Selection and selection-driven palette insertion
    - Drag-to-reorder within a sibling list
    - Saving to and restoring from storage under a fixed key

    Example:
        >>> builder = FormBuilder(storage=MemoryStorage())
        >>> section_id = builder.schema.sections[0].id
        >>> builder.select_element("section", section_id)
        >>> builder.add_field_at_selection("text")
        >>> builder.save()

    Args:
        storage: Storage backend. If None, uses JsonFileStorage.
        ids: Id generator. If None, uses the process-wide generator.
        schema: Initial schema. If None, starts from the default schema.
        storage_key: Key to save/load under. Defaults to configuration.
    """

    def __init__(
        self,
        storage: SchemaStorage | None = None,
        ids: IdGenerator | None = None,
        schema: FormSchema | None = None,
        storage_key: str | None = None,
    ):
        self._storage = storage if storage is not None else JsonFileStorage()
        self._ids = ids if ids is not None else get_id_generator()
        self._storage_key = get_storage_key(storage_key)
        self._state = new_state(schema, self._ids)
        self._ids.reserve(collect_ids(self._state.schema))

    @classmethod
    def open(
        cls,
        storage: SchemaStorage | None = None,
        ids: IdGenerator | None = None,
        storage_key: str | None = None,
    ) -> "FormBuilder":
        """Start a session from the stored schema, falling back to the default.

        A stored payload that fails to parse is logged and ignored; the
        session starts from the default schema instead.
        """
        builder = cls(storage=storage, ids=ids, storage_key=storage_key)
        try:
            builder.load()
        except SchemaLoadError as e:
            logger.warning(f"Ignoring unreadable stored schema: {e}")
        return builder

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def schema(self) -> FormSchema:
        return self._state.schema

    @property
    def selection(self) -> Selection | None:
        return self._state.selection

    @property
    def targets(self) -> InsertionTarget:
        """Insertion targets implied by the current selection."""
        return resolve_targets(self._state.schema, self._state.selection)

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def ids(self) -> IdGenerator:
        return self._ids

    def validate(self) -> list[SchemaIssue]:
        """Structural issues in the current schema."""
        return validate_schema(self._state.schema)

    def outline(self) -> str:
        """Text outline of the current schema with the selection marked."""
        return format_schema_tree(self._state.schema, self._state.selection)

    def _install(self, operation: str, state: BuilderState) -> BuilderState:
        if state is self._state:
            logger.debug(f"{operation}: no change")
        self._state = state
        return state

    # =========================================================================
    # Sections
    # =========================================================================

    def add_section(self, title: str = "") -> BuilderState:
        return self._install(
            "add_section", add_section(self._state, title, self._ids)
        )

    def remove_section(self, section_id: str) -> BuilderState:
        return self._install("remove_section", remove_section(self._state, section_id))

    def update_section(self, section_id: str, title: str) -> BuilderState:
        return self._install(
            "update_section", update_section(self._state, section_id, title)
        )

    # =========================================================================
    # Rows and Columns
    # =========================================================================

    def add_row(
        self, section_id: str, layout: Sequence[int] | None = None
    ) -> BuilderState:
        return self._install(
            "add_row", add_row(self._state, section_id, self._ids, layout)
        )

    def remove_row(self, row_id: str) -> BuilderState:
        return self._install("remove_row", remove_row(self._state, row_id))

    def reorder_rows(
        self, section_id: str, from_index: int, to_index: int
    ) -> BuilderState:
        return self._install(
            "reorder_rows",
            reorder_rows(self._state, section_id, from_index, to_index),
        )

    def update_column(self, column_id: str, span: int) -> BuilderState:
        return self._install(
            "update_column", update_column(self._state, column_id, span)
        )

    # =========================================================================
    # Fields
    # =========================================================================

    def add_field(
        self,
        column_id: str,
        field_type: FieldType | str,
        label: str | None = None,
    ) -> BuilderState:
        return self._install(
            "add_field",
            add_field(self._state, column_id, field_type, self._ids, label),
        )

    def remove_field(self, field_id: str) -> BuilderState:
        return self._install("remove_field", remove_field(self._state, field_id))

    def update_field(
        self,
        field_id: str,
        *,
        name: str | None = None,
        label: str | None | Any = UNSET,
    ) -> BuilderState:
        return self._install(
            "update_field",
            update_field(self._state, field_id, name=name, label=label),
        )

    def reorder_fields(
        self, column_id: str, from_index: int, to_index: int
    ) -> BuilderState:
        return self._install(
            "reorder_fields",
            reorder_fields(self._state, column_id, from_index, to_index),
        )

    # =========================================================================
    # Form, Selection and Palette
    # =========================================================================

    def update_form(
        self,
        *,
        name: str | Any = UNSET,
        description: str | None | Any = UNSET,
    ) -> BuilderState:
        return self._install(
            "update_form",
            update_form(self._state, name=name, description=description),
        )

    def select_element(
        self, kind: NodeKind | str | None, node_id: str | None = None
    ) -> BuilderState:
        return self._install(
            "select_element", select_element(self._state, kind, node_id)
        )

    def add_field_at_selection(self, field_type: FieldType | str) -> BuilderState:
        return self._install(
            "add_field_at_selection",
            add_field_at_selection(self._state, field_type, self._ids),
        )

    def add_row_at_selection(self) -> BuilderState:
        return self._install(
            "add_row_at_selection", add_row_at_selection(self._state, self._ids)
        )

    def apply_drag(self, active: DragItem, over: DragItem | None) -> BuilderState:
        return self._install("apply_drag", apply_drag(self._state, active, over))

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self) -> None:
        """Persist the current schema under the storage key."""
        self._storage.save(self._storage_key, self._state.schema)

    def load(self) -> bool:
        """Replace the current schema with the stored one.

        The selection is cleared. If the stored payload is malformed the
        current state is kept and the error propagates.

        Returns:
            True if a schema was loaded, False if nothing was stored.

        Raises:
            SchemaLoadError: If the stored payload is not a valid schema.
        """
        schema = self._storage.load(self._storage_key)
        if schema is None:
            return False
        self._ids.reserve(collect_ids(schema))
        self._state = BuilderState(schema=schema)
        return True

    def reset(self) -> BuilderState:
        """Install a fresh default schema."""
        return self._install("reset", new_state(ids=self._ids))


__all__ = [
    "FormBuilder",
]
