"""Tests for the reorder resolver."""

import pytest

from formcanvas.schema import NodeKind

from .lib import DragItem, ReorderRequest, plan_reorder, reorder

ABC = ("A", "B", "C")


class TestReorder:
    """Tests for index-based reorder."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("from_index", "to_index", "expected"),
        [
            pytest.param(0, 2, ("B", "C", "A"), id="first-to-last"),
            pytest.param(2, 0, ("C", "A", "B"), id="last-to-first"),
            pytest.param(0, 1, ("B", "A", "C"), id="adjacent-down"),
            pytest.param(2, 1, ("A", "C", "B"), id="adjacent-up"),
            pytest.param(1, 1, ABC, id="same-index"),
            pytest.param(0, 5, ABC, id="to-out-of-range"),
            pytest.param(3, 0, ABC, id="from-out-of-range"),
            pytest.param(-1, 0, ABC, id="negative-index"),
        ],
    )
    def test_reorder(self, from_index, to_index, expected):
        assert reorder(ABC, from_index, to_index) == expected

    @pytest.mark.unit
    def test_noop_returns_same_tuple(self):
        assert reorder(ABC, 1, 1) is ABC

    @pytest.mark.unit
    def test_accepts_lists(self):
        items = ["A", "B", "C"]
        assert reorder(items, 0, 2) == ("B", "C", "A")
        assert items == ["A", "B", "C"]

    @pytest.mark.unit
    def test_empty_list(self):
        assert reorder((), 0, 0) == ()


def _row(row_id, section_id):
    return DragItem(id=row_id, kind=NodeKind.ROW, scope_id=section_id)


def _field(field_id, column_id):
    return DragItem(id=field_id, kind=NodeKind.FIELD, scope_id=column_id)


class TestPlanReorder:
    """Tests for the drag boundary."""

    @pytest.mark.unit
    def test_rows_in_same_section(self, sample_schema):
        request = plan_reorder(
            sample_schema, _row("row_a2", "section_a"), _row("row_a1", "section_a")
        )
        assert request == ReorderRequest(NodeKind.ROW, "section_a", 1, 0)

    @pytest.mark.unit
    def test_fields_in_same_column(self, sample_schema):
        request = plan_reorder(
            sample_schema,
            _field("field_a", "column_a1"),
            _field("field_b", "column_a1"),
        )
        assert request == ReorderRequest(NodeKind.FIELD, "column_a1", 0, 1)

    @pytest.mark.unit
    def test_cross_section_row_drag_rejected(self, sample_schema):
        assert (
            plan_reorder(
                sample_schema,
                _row("row_a1", "section_a"),
                _row("row_b1", "section_b"),
            )
            is None
        )

    @pytest.mark.unit
    def test_cross_column_field_drag_rejected(self, sample_schema):
        assert (
            plan_reorder(
                sample_schema,
                _field("field_a", "column_a1"),
                _field("field_c", "column_a2"),
            )
            is None
        )

    @pytest.mark.unit
    def test_mislabelled_scope_rejected(self, sample_schema):
        """Items claiming a shared scope they are not actually in are ignored."""
        assert (
            plan_reorder(
                sample_schema,
                _field("field_a", "column_a2"),
                _field("field_c", "column_a2"),
            )
            is None
        )

    @pytest.mark.unit
    def test_mixed_kinds_rejected(self, sample_schema):
        assert (
            plan_reorder(
                sample_schema,
                _row("row_a1", "section_a"),
                _field("field_a", "section_a"),
            )
            is None
        )

    @pytest.mark.unit
    def test_non_reorderable_kind_rejected(self, sample_schema):
        active = DragItem("section_a", NodeKind.SECTION, "form_1")
        over = DragItem("section_b", NodeKind.SECTION, "form_1")
        assert plan_reorder(sample_schema, active, over) is None

    @pytest.mark.unit
    def test_drop_on_self_or_nothing(self, sample_schema):
        item = _row("row_a1", "section_a")
        assert plan_reorder(sample_schema, item, item) is None
        assert plan_reorder(sample_schema, item, None) is None

    @pytest.mark.unit
    def test_missing_scope(self, sample_schema):
        assert (
            plan_reorder(sample_schema, _row("row_a1", "gone"), _row("row_a2", "gone"))
            is None
        )

    @pytest.mark.unit
    def test_missing_scope_id(self, sample_schema):
        assert (
            plan_reorder(sample_schema, _row("row_a1", None), _row("row_a2", None))
            is None
        )
