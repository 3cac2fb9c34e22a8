"""Tests for selection state."""

import pytest

from formcanvas.schema import NodeKind

from .lib import (
    Selection,
    is_stale,
    make_selection,
    resolve_selection,
    selection_within,
)


class TestResolveSelection:
    """Tests for resolving a selection against a tree."""

    @pytest.mark.unit
    def test_empty(self, sample_schema):
        assert resolve_selection(sample_schema, None) is None
        assert not is_stale(sample_schema, None)

    @pytest.mark.unit
    def test_live_reference(self, sample_schema):
        location = resolve_selection(
            sample_schema, Selection(kind=NodeKind.ROW, id="row_b1")
        )
        assert location.section.id == "section_b"

    @pytest.mark.unit
    def test_kind_mismatch_does_not_resolve(self, sample_schema):
        selection = Selection(kind=NodeKind.SECTION, id="row_b1")
        assert resolve_selection(sample_schema, selection) is None
        assert is_stale(sample_schema, selection)

    @pytest.mark.unit
    def test_string_kind_accepted(self):
        assert Selection(kind="field", id="x").kind == "field"


class TestSelectionWithin:
    """Tests for subtree membership."""

    @pytest.mark.unit
    def test_self(self, sample_schema):
        selection = Selection(kind=NodeKind.ROW, id="row_a1")
        assert selection_within(sample_schema, selection, "row_a1")

    @pytest.mark.unit
    def test_descendant(self, sample_schema):
        selection = Selection(kind=NodeKind.FIELD, id="field_c")
        assert selection_within(sample_schema, selection, "section_a")
        assert selection_within(sample_schema, selection, "row_a1")
        assert selection_within(sample_schema, selection, "column_a2")

    @pytest.mark.unit
    def test_unrelated(self, sample_schema):
        selection = Selection(kind=NodeKind.FIELD, id="field_c")
        assert not selection_within(sample_schema, selection, "section_b")
        assert not selection_within(sample_schema, selection, "column_a1")

    @pytest.mark.unit
    def test_empty_and_stale(self, sample_schema):
        assert not selection_within(sample_schema, None, "section_a")
        stale = Selection(kind=NodeKind.FIELD, id="gone")
        assert not selection_within(sample_schema, stale, "section_a")


class TestMakeSelection:
    """Tests for click-to-select."""

    @pytest.mark.unit
    def test_select_existing(self, sample_schema):
        selection = make_selection(sample_schema, "section", "section_b")
        assert selection == Selection(kind=NodeKind.SECTION, id="section_b")

    @pytest.mark.unit
    def test_select_form(self, sample_schema):
        selection = make_selection(sample_schema, NodeKind.FORM, "form_1")
        assert selection.kind == "form"

    @pytest.mark.unit
    def test_clear(self, sample_schema):
        current = Selection(kind=NodeKind.FORM, id="form_1")
        assert make_selection(sample_schema, None, None, current) is None

    @pytest.mark.unit
    def test_missing_id_keeps_current(self, sample_schema):
        current = Selection(kind=NodeKind.FORM, id="form_1")
        assert make_selection(sample_schema, "field", "gone", current) is current

    @pytest.mark.unit
    def test_wrong_kind_keeps_current(self, sample_schema):
        assert make_selection(sample_schema, "column", "field_a") is None

    @pytest.mark.unit
    def test_unknown_kind_raises(self, sample_schema):
        with pytest.raises(ValueError):
            make_selection(sample_schema, "page", "form_1")
