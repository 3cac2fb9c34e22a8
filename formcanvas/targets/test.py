"""Tests for the target resolver."""

import pytest

from formcanvas.schema import Column, FormSchema, NodeKind, Row, Section
from formcanvas.selection import Selection

from .lib import NO_TARGET, InsertionTarget, resolve_targets


def _select(kind, node_id):
    return Selection(kind=kind, id=node_id)


class TestResolveTargets:
    """Tests for resolve_targets on a populated tree."""

    @pytest.mark.unit
    def test_empty_selection_uses_first_section(self, sample_schema):
        assert resolve_targets(sample_schema, None) == InsertionTarget(
            "section_a", "column_a1"
        )

    @pytest.mark.unit
    def test_form_selection_uses_first_section(self, sample_schema):
        target = resolve_targets(sample_schema, _select(NodeKind.FORM, "form_1"))
        assert target == InsertionTarget("section_a", "column_a1")

    @pytest.mark.unit
    def test_field_selection(self, sample_schema):
        target = resolve_targets(sample_schema, _select(NodeKind.FIELD, "field_e"))
        assert target == InsertionTarget("section_b", "column_b1")

    @pytest.mark.unit
    def test_field_in_second_column(self, sample_schema):
        target = resolve_targets(sample_schema, _select(NodeKind.FIELD, "field_c"))
        assert target == InsertionTarget("section_a", "column_a2")

    @pytest.mark.unit
    def test_column_selection(self, sample_schema):
        target = resolve_targets(sample_schema, _select(NodeKind.COLUMN, "column_a2"))
        assert target == InsertionTarget("section_a", "column_a2")

    @pytest.mark.unit
    def test_row_selection(self, sample_schema):
        target = resolve_targets(sample_schema, _select(NodeKind.ROW, "row_a2"))
        assert target == InsertionTarget("section_a", "column_a3")

    @pytest.mark.unit
    def test_section_selection(self, sample_schema):
        target = resolve_targets(sample_schema, _select(NodeKind.SECTION, "section_b"))
        assert target == InsertionTarget("section_b", "column_b1")

    @pytest.mark.unit
    def test_section_without_rows(self, sample_schema):
        """A bare section can take rows but not fields."""
        target = resolve_targets(sample_schema, _select(NodeKind.SECTION, "section_c"))
        assert target == InsertionTarget("section_c", None)
        assert target.can_add_row
        assert not target.can_add_field

    @pytest.mark.unit
    def test_stale_selection_has_no_target(self, sample_schema):
        target = resolve_targets(sample_schema, _select(NodeKind.ROW, "deleted"))
        assert target is NO_TARGET
        assert not target.can_add_row

    @pytest.mark.unit
    def test_second_section_row_resolves_locally(self, two_section_schema):
        """Selecting the second section's row never falls back to the first."""
        target = resolve_targets(two_section_schema, _select(NodeKind.ROW, "row_2"))
        assert target == InsertionTarget("section_2", "column_2")


class TestResolveTargetsSparseTrees:
    """Tests for trees with empty intermediate lists."""

    @pytest.mark.unit
    def test_no_sections(self):
        schema = FormSchema(id="f")
        assert resolve_targets(schema, None) is NO_TARGET

    @pytest.mark.unit
    def test_first_section_without_rows(self):
        schema = FormSchema(
            id="f",
            sections=(
                Section(id="s1", title="Empty"),
                Section(
                    id="s2",
                    title="Full",
                    rows=(Row(id="r", columns=(Column(id="c"),)),),
                ),
            ),
        )
        assert resolve_targets(schema, None) == InsertionTarget("s1", None)

    @pytest.mark.unit
    def test_row_without_columns(self):
        schema = FormSchema(
            id="f", sections=(Section(id="s", title="", rows=(Row(id="r"),)),)
        )
        target = resolve_targets(schema, _select(NodeKind.ROW, "r"))
        assert target == InsertionTarget("s", None)
