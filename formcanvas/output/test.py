"""Tests for output module."""

import pytest

from formcanvas.schema import FormSchema, NodeKind
from formcanvas.selection import Selection

from .lib import _describe, format_schema_tree


class TestFormatSchemaTree:
    """Tests for format_schema_tree function."""

    @pytest.mark.unit
    def test_empty_form(self):
        assert format_schema_tree(FormSchema(id="f")) == "(untitled) [form, f]"

    @pytest.mark.unit
    def test_nested_tree(self, sample_schema):
        lines = format_schema_tree(sample_schema).splitlines()
        assert lines[0] == "Intake [form, form_1]"
        assert lines[1] == "├── Contact [section, section_a]"
        assert lines[2] == "│   ├── Row [row_a1]"
        assert lines[3] == "│   │   ├── Column [50%, column_a1]"
        assert lines[4] == "│   │   │   ├── First name [text, first_name, field_a]"
        assert lines[-1] == "└── Empty [section, section_c]"

    @pytest.mark.unit
    def test_field_without_label_uses_name(self, sample_schema):
        assert "last_name [text, last_name, field_b]" in format_schema_tree(
            sample_schema
        )

    @pytest.mark.unit
    def test_selection_marker(self, sample_schema):
        selection = Selection(kind=NodeKind.ROW, id="row_b1")
        marked = [
            line
            for line in format_schema_tree(sample_schema, selection).splitlines()
            if line.endswith(" *")
        ]
        assert len(marked) == 1
        assert "row_b1" in marked[0]

    @pytest.mark.unit
    def test_every_node_listed(self, sample_schema):
        assert len(format_schema_tree(sample_schema).splitlines()) == 16


class TestDescribe:
    """Tests for single-node captions."""

    @pytest.mark.unit
    def test_field_caption(self, sample_schema):
        field = sample_schema.sections[0].rows[0].columns[0].fields[0]
        assert _describe(field) == "First name [text, first_name, field_a]"

    @pytest.mark.unit
    def test_rejects_non_nodes(self):
        with pytest.raises(TypeError):
            _describe(Selection(kind=NodeKind.FORM, id="form_1"))
