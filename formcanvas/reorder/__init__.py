"""Reorder resolver: moves within one sibling list, never across lists."""

from .lib import REORDERABLE_KINDS, DragItem, ReorderRequest, plan_reorder, reorder

__all__ = [
    "REORDERABLE_KINDS",
    "reorder",
    "DragItem",
    "ReorderRequest",
    "plan_reorder",
]
