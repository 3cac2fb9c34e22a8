"""Tests for the form builder session."""

import pytest

from formcanvas.config import get_storage_key
from formcanvas.reorder import DragItem
from formcanvas.ids import IdGenerator
from formcanvas.schema import (
    FormSchema,
    NodeKind,
    Section,
    collect_ids,
    find_column,
    find_section,
)
from formcanvas.storage import (
    JsonFileStorage,
    MemoryStorage,
    SchemaLoadError,
)

from .lib import FormBuilder

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def builder(storage, ids, sample_schema):
    """Builder over the sample schema backed by memory storage."""
    return FormBuilder(storage=storage, ids=ids, schema=sample_schema)


# =============================================================================
# Session Tests
# =============================================================================


class TestFormBuilderSession:
    """Tests for state threading."""

    @pytest.mark.unit
    def test_starts_from_default_schema(self, storage, ids):
        builder = FormBuilder(storage=storage, ids=ids)
        assert builder.schema.id == "form_t1"
        assert builder.selection is None
        assert builder.storage_key == "form-builder-schema"

    @pytest.mark.unit
    def test_operations_install_new_state(self, builder):
        before = builder.state
        after = builder.add_section("Payment")
        assert builder.state is after
        assert after is not before
        assert builder.schema.sections[-1].title == "Payment"

    @pytest.mark.unit
    def test_noop_keeps_state(self, builder):
        before = builder.state
        assert builder.remove_row("gone") is before

    @pytest.mark.unit
    def test_select_then_palette_insert(self, builder):
        builder.select_element("field", "field_e")
        assert builder.targets.column_id == "column_b1"
        builder.add_field_at_selection("checkbox")
        fields = find_column(builder.schema, "column_b1").fields
        assert [f.id for f in fields] == ["field_e", "field_t1"]

    @pytest.mark.unit
    def test_add_row_at_selection(self, builder):
        builder.select_element(NodeKind.SECTION, "section_c")
        builder.add_row_at_selection()
        assert len(find_section(builder.schema, "section_c").rows) == 1
        assert builder.targets.column_id is not None

    @pytest.mark.unit
    def test_remove_clears_selection(self, builder):
        builder.select_element("field", "field_c")
        builder.remove_row("row_a1")
        assert builder.selection is None

    @pytest.mark.unit
    def test_edit_operations(self, builder):
        builder.update_form(name="Renamed", description=None)
        builder.update_section("section_a", "People")
        builder.update_field("field_a", label="Given name")
        builder.update_column("column_a1", 1)
        builder.reorder_rows("section_a", 1, 0)
        builder.reorder_fields("column_a1", 0, 1)
        builder.add_row("section_b", layout=(1, 3))
        builder.add_field("column_a3", "number")
        builder.remove_field("field_b")
        builder.remove_section("section_c")
        assert builder.validate() == []
        schema = builder.schema
        assert schema.name == "Renamed"
        assert schema.description is None
        assert [s.id for s in schema.sections] == ["section_a", "section_b"]
        assert [r.id for r in schema.sections[0].rows] == ["row_a2", "row_a1"]
        assert [f.id for f in find_column(schema, "column_a1").fields] == ["field_a"]

    @pytest.mark.unit
    def test_apply_drag(self, builder):
        builder.apply_drag(
            DragItem("row_a1", NodeKind.ROW, "section_a"),
            DragItem("row_a2", NodeKind.ROW, "section_a"),
        )
        assert [r.id for r in builder.schema.sections[0].rows] == ["row_a2", "row_a1"]

    @pytest.mark.unit
    def test_outline_marks_selection(self, builder):
        builder.select_element("section", "section_b")
        assert "Preferences [section, section_b] *" in builder.outline()

    @pytest.mark.unit
    def test_reset(self, builder):
        builder.select_element("field", "field_a")
        builder.reset()
        assert builder.selection is None
        assert len(builder.schema.sections) == 1


# =============================================================================
# Persistence Tests
# =============================================================================


class TestFormBuilderPersistence:
    """Tests for save/load."""

    @pytest.mark.unit
    def test_save_and_load(self, builder, storage, ids):
        builder.save()
        restored = FormBuilder(storage=storage, ids=ids)
        assert restored.load()
        assert restored.schema == builder.schema

    @pytest.mark.unit
    def test_load_clears_selection(self, builder):
        builder.save()
        builder.select_element("row", "row_a1")
        builder.load()
        assert builder.selection is None

    @pytest.mark.unit
    def test_load_with_nothing_stored(self, builder):
        before = builder.state
        assert builder.load() is False
        assert builder.state is before

    @pytest.mark.unit
    def test_malformed_load_keeps_current_tree(self, builder, storage):
        storage.save_raw(get_storage_key(), '{"id": "f", "sections": [{"id": 1}]}')
        before = builder.state
        with pytest.raises(SchemaLoadError):
            builder.load()
        assert builder.state is before

    @pytest.mark.unit
    def test_open_restores_stored_schema(self, storage, ids, sample_schema):
        storage.save(get_storage_key(), sample_schema)
        assert FormBuilder.open(storage=storage, ids=ids).schema == sample_schema

    @pytest.mark.unit
    def test_open_falls_back_on_malformed(self, storage, ids):
        storage.save_raw(get_storage_key(), "not json")
        builder = FormBuilder.open(storage=storage, ids=ids)
        assert builder.schema.name == "Untitled form"

    @pytest.mark.unit
    def test_custom_storage_key(self, storage, ids, sample_schema):
        builder = FormBuilder(
            storage=storage, ids=ids, schema=sample_schema, storage_key="draft"
        )
        builder.save()
        assert storage.exists("draft")
        assert not storage.exists(get_storage_key())



class TestIdReservation:
    """Ids already in a loaded tree are never issued again."""

    @pytest.mark.unit
    def test_sessions_with_fixed_token(self, tmp_path):
        for title in ("A", "B"):
            builder = FormBuilder.open(
                storage=JsonFileStorage(tmp_path), ids=IdGenerator(token="p")
            )
            builder.add_section(title)
            builder.save()

        schema = FormBuilder.open(
            storage=JsonFileStorage(tmp_path), ids=IdGenerator(token="p")
        ).schema
        node_ids = collect_ids(schema)
        assert len(node_ids) == len(set(node_ids))
        assert [s.title for s in schema.sections] == ["Section 1", "A", "B"]

    @pytest.mark.unit
    def test_initial_schema_is_reserved(self, storage):
        schema = FormSchema(
            id="form_p3", sections=(Section(id="section_p7", title="S"),)
        )
        builder = FormBuilder(
            storage=storage, ids=IdGenerator(token="p"), schema=schema
        )
        builder.add_section("Next")
        assert builder.schema.sections[-1].id == "section_p8"

    @pytest.mark.unit
    def test_remove_after_reload_only_drops_one_node(self, storage):
        first = FormBuilder(storage=storage, ids=IdGenerator(token="p"))
        first.add_section("Keep")
        first.save()

        second = FormBuilder.open(storage=storage, ids=IdGenerator(token="p"))
        second.add_section("Drop")
        dropped = second.schema.sections[-1].id
        second.remove_section(dropped)
        assert [s.title for s in second.schema.sections] == ["Section 1", "Keep"]
