"""Tests for the tree mutation engine."""

import random

import pytest

from formcanvas.ids import IdGenerator
from formcanvas.reorder import DragItem
from formcanvas.schema import (
    DEFAULT_SECTION_TITLE,
    FieldType,
    NodeKind,
    collect_ids,
    count_nodes,
    find_column,
    find_field,
    find_row,
    find_section,
    iter_nodes,
    locate,
    validate_schema,
)
from formcanvas.selection import Selection

from .lib import (
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

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def state(sample_schema):
    """Editing state over the sample schema with nothing selected."""
    return BuilderState(schema=sample_schema)


def _selected(state, kind, node_id):
    return BuilderState(state.schema, Selection(kind=kind, id=node_id))


def _row_ids(state, section_id):
    return [row.id for row in find_section(state.schema, section_id).rows]


def _field_ids(state, column_id):
    return [f.id for f in find_column(state.schema, column_id).fields]


def _ids_of(state, kind):
    return [loc.id for loc in iter_nodes(state.schema) if loc.kind == kind]


# =============================================================================
# Creation
# =============================================================================


class TestCreation:
    """Tests for default trees and rows."""

    @pytest.mark.unit
    def test_default_schema(self, ids):
        schema = create_default_schema(ids)
        assert schema.id == "form_t1"
        assert schema.name == "Untitled form"
        assert len(schema.sections) == 1
        assert len(schema.sections[0].rows) == 1
        assert schema.sections[0].rows[0].columns[0].span == 4
        assert validate_schema(schema) == []

    @pytest.mark.unit
    def test_new_state_wraps_given_schema(self, sample_schema):
        state = new_state(sample_schema)
        assert state.schema is sample_schema
        assert state.selection is None

    @pytest.mark.unit
    def test_build_row_consumes_one_id_per_node(self, ids):
        row = build_row(ids, (1, 1, 2))
        assert [c.span for c in row.columns] == [1, 1, 2]
        assert ids.issued == 4

    @pytest.mark.unit
    def test_build_row_rejects_bad_layouts(self, ids):
        with pytest.raises(ValueError):
            build_row(ids, ())
        with pytest.raises(ValueError):
            build_row(ids, (5,))
        with pytest.raises(ValueError):
            build_row(ids, (3, 3))
        assert ids.issued == 0

    @pytest.mark.unit
    def test_default_row_layout(self, monkeypatch):
        monkeypatch.delenv("FORMCANVAS_DEFAULT_COLUMNS", raising=False)
        assert default_row_layout() == (4,)
        assert default_row_layout(2) == (2, 2)
        monkeypatch.setenv("FORMCANVAS_DEFAULT_COLUMNS", "4")
        assert default_row_layout() == (1, 1, 1, 1)

    @pytest.mark.unit
    def test_next_field_name(self, sample_schema, ids):
        assert next_field_name(sample_schema) == "field_1"
        state = add_field(BuilderState(sample_schema), "column_a1", "text", ids)
        state = add_field(state, "column_a1", "text", ids)
        assert next_field_name(state.schema) == "field_3"


# =============================================================================
# Sections
# =============================================================================


class TestSections:
    """Tests for section operations."""

    @pytest.mark.unit
    def test_add_section_appends(self, state, ids):
        result = add_section(state, "Payment", ids)
        assert result.schema.sections[-1].title == "Payment"
        assert result.schema.sections[-1].rows == ()
        assert ids.issued == 1
        # previous snapshot untouched
        assert len(state.schema.sections) == 3

    @pytest.mark.unit
    def test_add_section_default_title(self, state, ids):
        result = add_section(state, "", ids)
        assert result.schema.sections[-1].title == DEFAULT_SECTION_TITLE

    @pytest.mark.unit
    def test_remove_section_cascades(self, state):
        before = count_nodes(state.schema)
        removed = [
            loc.id
            for loc in iter_nodes(state.schema)
            if loc.id == "section_a" or "section_a" in loc.ancestor_ids
        ]
        result = remove_section(state, "section_a")
        # 1 section + 2 rows + 3 columns + 4 fields
        assert count_nodes(result.schema) == before - 10
        assert len(removed) == 10
        for node_id in removed:
            assert locate(result.schema, node_id) is None

    @pytest.mark.unit
    def test_remove_missing_section_is_noop(self, state):
        assert remove_section(state, "nope") is state

    @pytest.mark.unit
    def test_remove_section_clears_nested_selection(self, state):
        selected = _selected(state, NodeKind.FIELD, "field_d")
        assert remove_section(selected, "section_a").selection is None

    @pytest.mark.unit
    def test_remove_section_keeps_unrelated_selection(self, state):
        selected = _selected(state, NodeKind.FIELD, "field_e")
        result = remove_section(selected, "section_a")
        assert result.selection == Selection(kind=NodeKind.FIELD, id="field_e")

    @pytest.mark.unit
    def test_update_section(self, state):
        result = update_section(state, "section_b", "Choices")
        assert find_section(result.schema, "section_b").title == "Choices"
        assert update_section(result, "section_b", "Choices") is result
        empty = update_section(state, "section_b", "")
        assert find_section(empty.schema, "section_b").title == DEFAULT_SECTION_TITLE

    @pytest.mark.unit
    def test_update_missing_section(self, state):
        assert update_section(state, "nope", "X") is state


# =============================================================================
# Rows
# =============================================================================


class TestRows:
    """Tests for row operations."""

    @pytest.mark.unit
    def test_add_row(self, state, ids):
        result = add_row(state, "section_c", ids)
        section = find_section(result.schema, "section_c")
        assert len(section.rows) == 1
        assert [c.span for c in section.rows[0].columns] == [4]
        # row + its single column
        assert ids.issued == 2

    @pytest.mark.unit
    def test_add_row_with_layout(self, state, ids):
        result = add_row(state, "section_c", ids, layout=(2, 2))
        assert len(find_section(result.schema, "section_c").rows[0].columns) == 2
        assert ids.issued == 3

    @pytest.mark.unit
    def test_add_row_missing_section(self, state, ids):
        assert add_row(state, "nope", ids) is state
        assert ids.issued == 0

    @pytest.mark.unit
    def test_remove_row(self, state):
        result = remove_row(state, "row_a1")
        assert _row_ids(result, "section_a") == ["row_a2"]
        for node_id in ("row_a1", "column_a1", "column_a2", "field_a", "field_c"):
            assert locate(result.schema, node_id) is None

    @pytest.mark.unit
    def test_remove_row_clears_descendant_field_selection(self, state):
        """Selecting a field then removing its column's row empties the selection."""
        selected = _selected(state, NodeKind.FIELD, "field_c")
        assert remove_row(selected, "row_a1").selection is None

    @pytest.mark.unit
    def test_remove_row_clears_own_selection(self, state):
        selected = _selected(state, NodeKind.ROW, "row_b1")
        assert remove_row(selected, "row_b1").selection is None

    @pytest.mark.unit
    def test_remove_missing_row(self, state):
        assert remove_row(state, "nope") is state

    @pytest.mark.unit
    def test_reorder_rows(self, state):
        result = reorder_rows(state, "section_a", 0, 1)
        assert _row_ids(result, "section_a") == ["row_a2", "row_a1"]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("section_id", "from_index", "to_index"),
        [
            pytest.param("section_a", 1, 1, id="same-index"),
            pytest.param("section_a", 0, 5, id="out-of-range"),
            pytest.param("nope", 0, 1, id="missing-section"),
        ],
    )
    def test_reorder_rows_noop(self, state, section_id, from_index, to_index):
        assert reorder_rows(state, section_id, from_index, to_index) is state


# =============================================================================
# Columns and Fields
# =============================================================================


class TestFields:
    """Tests for column and field operations."""

    @pytest.mark.unit
    def test_add_field(self, state, ids):
        result = add_field(state, "column_a2", FieldType.SELECT, ids)
        column = find_column(result.schema, "column_a2")
        assert [f.id for f in column.fields] == ["field_c", "field_t1"]
        new_field = column.fields[-1]
        assert new_field.type == "select"
        assert new_field.name == "field_1"
        assert new_field.label is None

    @pytest.mark.unit
    def test_add_field_accepts_string_type(self, state, ids):
        result = add_field(state, "column_b1", "radio", ids, label="Pick one")
        assert find_field(result.schema, "field_t1").label == "Pick one"

    @pytest.mark.unit
    def test_add_field_unknown_type(self, state, ids):
        with pytest.raises(ValueError):
            add_field(state, "column_b1", "slider", ids)

    @pytest.mark.unit
    def test_add_field_missing_column(self, state, ids):
        assert add_field(state, "nope", "text", ids) is state
        assert ids.issued == 0

    @pytest.mark.unit
    def test_add_field_shares_untouched_subtrees(self, state, ids):
        result = add_field(state, "column_a2", "text", ids)
        old_a = state.schema.sections[0]
        new_a = result.schema.sections[0]
        assert result.schema is not state.schema
        assert new_a is not old_a
        assert new_a.rows[1] is old_a.rows[1]
        assert new_a.rows[0].columns[0] is old_a.rows[0].columns[0]
        assert result.schema.sections[1] is state.schema.sections[1]

    @pytest.mark.unit
    def test_remove_field(self, state):
        result = remove_field(state, "field_a")
        assert _field_ids(result, "column_a1") == ["field_b"]

    @pytest.mark.unit
    def test_remove_field_clears_selection(self, state):
        selected = _selected(state, NodeKind.FIELD, "field_a")
        assert remove_field(selected, "field_a").selection is None

    @pytest.mark.unit
    def test_remove_field_keeps_sibling_selection(self, state):
        selected = _selected(state, NodeKind.FIELD, "field_b")
        assert remove_field(selected, "field_a").selection.id == "field_b"

    @pytest.mark.unit
    def test_remove_missing_field(self, state):
        assert remove_field(state, "nope") is state

    @pytest.mark.unit
    def test_reorder_fields(self, state):
        result = reorder_fields(state, "column_a1", 1, 0)
        assert _field_ids(result, "column_a1") == ["field_b", "field_a"]

    @pytest.mark.unit
    def test_reorder_fields_noop(self, state):
        assert reorder_fields(state, "column_a1", 0, 2) is state
        assert reorder_fields(state, "nope", 0, 1) is state

    @pytest.mark.unit
    def test_update_field(self, state):
        result = update_field(state, "field_b", name="surname", label="Surname")
        updated = find_field(result.schema, "field_b")
        assert (updated.name, updated.label, updated.type) == (
            "surname",
            "Surname",
            "text",
        )

    @pytest.mark.unit
    def test_update_field_clears_label(self, state):
        result = update_field(state, "field_a", label=None)
        assert find_field(result.schema, "field_a").label is None
        assert find_field(result.schema, "field_a").name == "first_name"

    @pytest.mark.unit
    def test_update_field_ignores_empty_name(self, state):
        assert update_field(state, "field_a", name="") is state

    @pytest.mark.unit
    def test_update_missing_field(self, state):
        assert update_field(state, "nope", name="x") is state

    @pytest.mark.unit
    def test_update_column(self, state):
        result = update_column(state, "column_a1", 1)
        assert find_column(result.schema, "column_a1").span == 1
        assert update_column(state, "column_a1", 2) is state

    @pytest.mark.unit
    def test_update_column_invalid_span(self, state):
        with pytest.raises(ValueError, match="span"):
            update_column(state, "column_a1", 6)


# =============================================================================
# Form and Selection
# =============================================================================


class TestForm:
    """Tests for form-level edits."""

    @pytest.mark.unit
    def test_update_form_name_keeps_id(self, state):
        result = update_form(state, name="Renamed")
        assert result.schema.name == "Renamed"
        assert result.schema.id == "form_1"
        assert result.schema.description == "Patient intake form"

    @pytest.mark.unit
    def test_update_form_description(self, state):
        result = update_form(state, description=None)
        assert result.schema.description is None

    @pytest.mark.unit
    def test_update_form_empty_name(self, state):
        assert update_form(state, name="").schema.name == ""

    @pytest.mark.unit
    def test_update_form_without_changes(self, state):
        assert update_form(state) is state
        assert update_form(state, name="Intake") is state


class TestSelection:
    """Tests for select_element."""

    @pytest.mark.unit
    def test_select_and_clear(self, state):
        selected = select_element(state, "row", "row_a2")
        assert selected.selection == Selection(kind=NodeKind.ROW, id="row_a2")
        assert selected.schema is state.schema
        assert select_element(selected, None).selection is None

    @pytest.mark.unit
    def test_select_missing_keeps_state(self, state):
        selected = select_element(state, "row", "row_a2")
        assert select_element(selected, "row", "gone") is selected


# =============================================================================
# Palette and Drag
# =============================================================================


class TestPalette:
    """Tests for selection-driven palette actions."""

    @pytest.mark.unit
    def test_add_field_follows_selected_row(self, two_section_schema, ids):
        state = BuilderState(
            two_section_schema, Selection(kind=NodeKind.ROW, id="row_2")
        )
        result = add_field_at_selection(state, "number", ids)
        assert _field_ids(result, "column_2") == ["field_t1"]
        assert _field_ids(result, "column_1") == []

    @pytest.mark.unit
    def test_add_field_without_target(self, state, ids):
        selected = _selected(state, NodeKind.SECTION, "section_c")
        assert add_field_at_selection(selected, "text", ids) is selected
        assert ids.issued == 0

    @pytest.mark.unit
    def test_add_row_follows_selected_field(self, state, ids):
        selected = _selected(state, NodeKind.FIELD, "field_e")
        result = add_row_at_selection(selected, ids)
        assert len(find_section(result.schema, "section_b").rows) == 2

    @pytest.mark.unit
    def test_add_row_with_stale_selection(self, state, ids):
        selected = _selected(state, NodeKind.ROW, "gone")
        assert add_row_at_selection(selected, ids) is selected


class TestApplyDrag:
    """Tests for the drag boundary dispatch."""

    @pytest.mark.unit
    def test_same_section_row_drag(self, state):
        result = apply_drag(
            state,
            DragItem("row_a1", NodeKind.ROW, "section_a"),
            DragItem("row_a2", NodeKind.ROW, "section_a"),
        )
        assert _row_ids(result, "section_a") == ["row_a2", "row_a1"]

    @pytest.mark.unit
    def test_same_column_field_drag(self, state):
        result = apply_drag(
            state,
            DragItem("field_b", NodeKind.FIELD, "column_a1"),
            DragItem("field_a", NodeKind.FIELD, "column_a1"),
        )
        assert _field_ids(result, "column_a1") == ["field_b", "field_a"]

    @pytest.mark.unit
    def test_cross_scope_drag_changes_nothing(self, state):
        result = apply_drag(
            state,
            DragItem("field_a", NodeKind.FIELD, "column_a1"),
            DragItem("field_e", NodeKind.FIELD, "column_b1"),
        )
        assert result is state


# =============================================================================
# Structural Properties
# =============================================================================


class TestStructuralProperties:
    """Randomized checks of uniqueness and containment."""

    @staticmethod
    def _random_session(seed: int, steps: int = 200) -> BuilderState:
        rng = random.Random(seed)
        ids = IdGenerator(token="p")
        state = new_state(ids=ids)
        for _ in range(steps):
            sections = _ids_of(state, NodeKind.SECTION)
            rows = _ids_of(state, NodeKind.ROW)
            columns = _ids_of(state, NodeKind.COLUMN)
            fields = _ids_of(state, NodeKind.FIELD)
            action = rng.randrange(6)
            if action == 0:
                state = add_section(state, "S", ids)
            elif action == 1 and sections:
                state = add_row(state, rng.choice(sections), ids)
            elif action == 2 and columns:
                field_type = rng.choice(list(FieldType))
                state = add_field(state, rng.choice(columns), field_type, ids)
            elif action == 3 and fields and rng.random() < 0.3:
                state = remove_field(state, rng.choice(fields))
            elif action == 4 and rows and rng.random() < 0.2:
                state = remove_row(state, rng.choice(rows))
            elif action == 5 and sections and rng.random() < 0.1:
                state = remove_section(state, rng.choice(sections))
        return state

    @pytest.mark.unit
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_ids_unique(self, seed):
        state = self._random_session(seed)
        all_ids = collect_ids(state.schema)
        assert len(all_ids) == len(set(all_ids))
        assert validate_schema(state.schema) == []

    @pytest.mark.unit
    @pytest.mark.parametrize("seed", [4, 5])
    def test_every_node_has_exactly_one_parent(self, seed):
        schema = self._random_session(seed).schema
        for location in iter_nodes(schema):
            if location.kind == NodeKind.ROW:
                owners = [s for s in schema.sections if location.node in s.rows]
                assert [s.id for s in owners] == [location.section.id]
            elif location.kind == NodeKind.COLUMN:
                assert find_row(schema, location.row.id) is location.row
                assert location.node in location.row.columns
            elif location.kind == NodeKind.FIELD:
                owners = [
                    loc.id
                    for loc in iter_nodes(schema)
                    if loc.kind == NodeKind.COLUMN and location.node in loc.node.fields
                ]
                assert owners == [location.column.id]
