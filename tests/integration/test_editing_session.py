"""End-to-end editing sessions across builder, engine and storage."""

import pytest

from formcanvas.builder import FormBuilder
from formcanvas.ids import IdGenerator
from formcanvas.reorder import DragItem
from formcanvas.schema import NodeKind, count_nodes, find_column
from formcanvas.storage import JsonFileStorage
from formcanvas.targets import NO_TARGET


@pytest.fixture
def builder(tmp_path):
    """Session on a fresh default form, persisted under tmp_path."""
    return FormBuilder(storage=JsonFileStorage(tmp_path), ids=IdGenerator(token="t"))


@pytest.mark.integration
class TestEditingSession:
    """Select, insert from the palette, drag, save and reload."""

    def test_default_tree_ids(self, builder):
        assert builder.schema.id == "form_t1"
        assert builder.targets.section_id == "section_t2"
        assert builder.targets.column_id == "column_t4"

    def test_palette_drag_and_round_trip(self, builder, tmp_path):
        builder.select_element("section", "section_t2")
        builder.add_field_at_selection("text")
        builder.add_field_at_selection("number")
        assert builder.selection.id == "section_t2"

        column = find_column(builder.schema, "column_t4")
        assert [f.name for f in column.fields] == ["field_1", "field_2"]

        builder.apply_drag(
            DragItem("field_t6", NodeKind.FIELD, "column_t4"),
            DragItem("field_t5", NodeKind.FIELD, "column_t4"),
        )
        column = find_column(builder.schema, "column_t4")
        assert [f.id for f in column.fields] == ["field_t6", "field_t5"]

        builder.save()
        restored = FormBuilder.open(
            storage=JsonFileStorage(tmp_path), ids=IdGenerator(token="u")
        )
        assert restored.schema == builder.schema
        assert restored.selection is None
        assert restored.validate() == []

    def test_add_row_then_field_in_new_row(self, builder):
        builder.add_row("section_t2", layout=(2, 2))
        row = builder.schema.sections[0].rows[1]
        builder.select_element("row", row.id)
        assert builder.targets.column_id == row.columns[0].id

        builder.add_field_at_selection("checkbox")
        assert count_nodes(builder.schema, NodeKind.FIELD) == 1
        new_row = builder.schema.sections[0].rows[1]
        assert [f.type for f in new_row.columns[0].fields] == ["checkbox"]

    def test_removing_last_section_leaves_no_targets(self, builder):
        builder.select_element("section", "section_t2")
        builder.add_field_at_selection("radio")
        builder.select_element("field", "field_t5")

        builder.remove_section("section_t2")
        assert builder.selection is None
        assert builder.targets is NO_TARGET

        before = builder.state
        builder.add_row_at_selection()
        builder.add_field_at_selection("text")
        assert builder.state is before

    def test_removing_other_section_keeps_selection(self, builder):
        builder.add_section("Second")
        second = builder.schema.sections[1]
        builder.add_row(second.id)
        builder.select_element("section", second.id)

        builder.remove_section("section_t2")
        assert builder.selection.id == second.id
        assert builder.targets.section_id == second.id

    def test_ids_stay_unique_across_sessions(self, builder, tmp_path):
        builder.add_section("A")
        builder.save()

        restored = FormBuilder.open(storage=JsonFileStorage(tmp_path))
        restored.add_section("B")
        ids = [s.id for s in restored.schema.sections]
        assert len(ids) == len(set(ids))
