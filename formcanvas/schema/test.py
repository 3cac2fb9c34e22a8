"""Unit tests for the schema tree."""

import pytest
from pydantic import ValidationError

from .lib import (
    Column,
    FieldType,
    FormField,
    FormSchema,
    NodeKind,
    Row,
    Section,
    coerce_field_type,
    coerce_node_kind,
    export_json_schema,
    is_valid,
    validate_schema,
)
from .lookup import (
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


class TestVocabularies:
    """Tests for the closed enums."""

    @pytest.mark.unit
    def test_field_types(self):
        """Exactly the seven palette types exist."""
        assert {ft.value for ft in FieldType} == {
            "text",
            "textarea",
            "number",
            "date",
            "select",
            "checkbox",
            "radio",
        }

    @pytest.mark.unit
    def test_node_kinds(self):
        assert [k.value for k in NodeKind] == [
            "form",
            "section",
            "row",
            "column",
            "field",
        ]

    @pytest.mark.unit
    def test_kind_is_class_level(self):
        assert FormSchema.kind == NodeKind.FORM
        assert Column(id="c").kind == NodeKind.COLUMN
        assert "kind" not in Column(id="c").model_dump()

    @pytest.mark.unit
    def test_coerce_field_type(self):
        assert coerce_field_type("radio") is FieldType.RADIO
        with pytest.raises(ValueError, match="Unknown field type"):
            coerce_field_type("slider")

    @pytest.mark.unit
    def test_coerce_node_kind(self):
        assert coerce_node_kind("row") is NodeKind.ROW
        with pytest.raises(ValueError, match="Unknown node kind"):
            coerce_node_kind("page")


class TestModels:
    """Tests for node models."""

    @pytest.mark.unit
    def test_minimal_form(self):
        form = FormSchema(id="f")
        assert form.name == ""
        assert form.description is None
        assert form.sections == ()

    @pytest.mark.unit
    def test_nodes_are_frozen(self):
        section = Section(id="s", title="A")
        with pytest.raises(ValidationError):
            section.title = "B"

    @pytest.mark.unit
    def test_column_span_range(self):
        for span in range(1, 5):
            assert Column(id="c", span=span).span == span
        with pytest.raises(ValidationError):
            Column(id="c", span=0)
        with pytest.raises(ValidationError):
            Column(id="c", span=5)

    @pytest.mark.unit
    def test_unknown_field_type_rejected(self):
        with pytest.raises(ValidationError):
            FormField(id="x", type="slider", name="x")

    @pytest.mark.unit
    def test_extra_keys_rejected(self):
        with pytest.raises(ValidationError):
            Section(id="s", title="A", colour="red")

    @pytest.mark.unit
    def test_lists_coerced_to_tuples(self):
        row = Row(id="r", columns=[{"id": "c", "span": 2}])
        assert isinstance(row.columns, tuple)
        assert row.total_span == 2

    @pytest.mark.unit
    def test_dump_matches_record_format(self, sample_schema):
        data = sample_schema.model_dump(mode="json")
        assert list(data) == ["id", "name", "description", "sections"]
        section = data["sections"][0]
        assert list(section) == ["id", "title", "rows"]
        column = section["rows"][0]["columns"][0]
        assert list(column) == ["id", "span", "fields"]
        assert column["fields"][0] == {
            "id": "field_a",
            "type": "text",
            "name": "first_name",
            "label": "First name",
        }


class TestLookup:
    """Tests for id-keyed lookups."""

    @pytest.mark.unit
    def test_find_each_level(self, sample_schema):
        assert find_section(sample_schema, "section_b").title == "Preferences"
        assert find_row(sample_schema, "row_a2").id == "row_a2"
        assert find_column(sample_schema, "column_a2").span == 2
        assert find_field(sample_schema, "field_e").name == "subscribe"

    @pytest.mark.unit
    def test_find_missing_returns_none(self, sample_schema):
        assert find_section(sample_schema, "nope") is None
        assert find_row(sample_schema, "nope") is None
        assert find_column(sample_schema, "nope") is None
        assert find_field(sample_schema, "nope") is None

    @pytest.mark.unit
    def test_find_respects_kind(self, sample_schema):
        """A row id is not found when looking for a section."""
        assert find_section(sample_schema, "row_a1") is None
        assert locate(sample_schema, "row_a1", NodeKind.SECTION) is None

    @pytest.mark.unit
    def test_locate_field_ancestors(self, sample_schema):
        location = locate(sample_schema, "field_c")
        assert location.kind == NodeKind.FIELD
        assert location.section.id == "section_a"
        assert location.row.id == "row_a1"
        assert location.column.id == "column_a2"
        assert location.ancestor_ids == ("section_a", "row_a1", "column_a2")

    @pytest.mark.unit
    def test_locate_form(self, sample_schema):
        location = locate(sample_schema, "form_1")
        assert location.kind == NodeKind.FORM
        assert location.ancestor_ids == ()

    @pytest.mark.unit
    def test_every_child_has_one_parent(self, sample_schema):
        """Each row, column and field resolves to exactly one owner."""
        for location in iter_nodes(sample_schema):
            if location.kind == NodeKind.ROW:
                owners = [
                    s for s in sample_schema.sections if location.node in s.rows
                ]
                assert owners == [location.section]
            elif location.kind == NodeKind.FIELD:
                assert location.node in location.column.fields

    @pytest.mark.unit
    def test_iter_nodes_document_order(self, sample_schema):
        assert collect_ids(sample_schema)[:6] == [
            "form_1",
            "section_a",
            "row_a1",
            "column_a1",
            "field_a",
            "field_b",
        ]

    @pytest.mark.unit
    def test_count_nodes(self, sample_schema):
        assert count_nodes(sample_schema) == 1 + 3 + 3 + 4 + 5
        assert count_nodes(sample_schema, NodeKind.FIELD) == 5
        assert count_nodes(sample_schema, NodeKind.SECTION) == 3

    @pytest.mark.unit
    def test_first_column(self, sample_schema):
        assert first_column(sample_schema.sections[0]).id == "column_a1"
        assert first_column(sample_schema.sections[2]) is None
        assert first_column(Section(id="s", title="", rows=(Row(id="r"),))) is None


class TestValidateSchema:
    """Tests for validate_schema."""

    @pytest.mark.unit
    def test_valid_tree(self, sample_schema):
        assert validate_schema(sample_schema) == []
        assert is_valid(sample_schema)

    @pytest.mark.unit
    def test_duplicate_ids(self):
        schema = FormSchema(
            id="f",
            sections=(Section(id="dup", title="A"), Section(id="dup", title="B")),
        )
        issues = validate_schema(schema)
        assert [i.issue_type for i in issues] == ["duplicate_id"]
        assert issues[0].node_id == "dup"

    @pytest.mark.unit
    def test_section_sharing_form_id(self):
        schema = FormSchema(id="x", sections=(Section(id="x", title="A"),))
        assert not is_valid(schema)

    @pytest.mark.unit
    def test_span_overflow(self):
        row = Row(id="r", columns=(Column(id="c1", span=3), Column(id="c2", span=2)))
        schema = FormSchema(id="f", sections=(Section(id="s", title="", rows=(row,)),))
        issues = validate_schema(schema)
        assert [i.issue_type for i in issues] == ["span_overflow"]

    @pytest.mark.unit
    def test_duplicate_field_names(self):
        column = Column(
            id="c",
            fields=(
                FormField(id="a", type=FieldType.TEXT, name="email"),
                FormField(id="b", type=FieldType.TEXT, name="email"),
            ),
        )
        schema = FormSchema(
            id="f",
            sections=(
                Section(id="s", title="", rows=(Row(id="r", columns=(column,)),)),
            ),
        )
        issues = validate_schema(schema)
        assert [i.issue_type for i in issues] == ["duplicate_field_name"]
        assert issues[0].node_id == "b"


class TestExportJsonSchema:
    """Tests for JSON schema export."""

    @pytest.mark.unit
    def test_export(self):
        schema = export_json_schema()
        assert schema["title"] == "FormSchema"
        assert "sections" in schema["properties"]
