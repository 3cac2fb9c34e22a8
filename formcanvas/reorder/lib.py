"""Index-based reordering within a single sibling list.

``reorder`` moves one element inside one list and knows nothing about the
tree. Cross-list moves (a row into another section, a field into another
column) are not representable here: ``plan_reorder`` is the drag-boundary
check that turns a drag gesture into a same-scope request or nothing.

Index convention: the element at ``from_index`` is removed first, then
inserted at ``to_index`` of the shortened list. Both indices must address
the original list.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from formcanvas.schema import FormSchema, NodeKind, find_column, find_section

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Node kinds that live in a reorderable sibling list, keyed to the kind
# of the parent that owns the list.
REORDERABLE_KINDS: dict[NodeKind, NodeKind] = {
    NodeKind.ROW: NodeKind.SECTION,
    NodeKind.FIELD: NodeKind.COLUMN,
}


def reorder(items: Sequence[T], from_index: int, to_index: int) -> tuple[T, ...]:
    """Move one element of a sibling list.

    Example:
        >>> reorder(["A", "B", "C"], 0, 2)
        ('B', 'C', 'A')
        >>> reorder(["A", "B", "C"], 2, 0)
        ('C', 'A', 'B')

    Args:
        items: The sibling list.
        from_index: Position of the element to move.
        to_index: Destination position after the element is removed.

    Returns:
        The reordered items. When the indices are equal or either one is
        outside ``[0, len(items) - 1]`` the items come back unchanged.
    """
    items = tuple(items)
    last = len(items) - 1
    in_range = 0 <= from_index <= last and 0 <= to_index <= last
    if from_index == to_index or not in_range:
        return items

    moved = list(items)
    element = moved.pop(from_index)
    moved.insert(to_index, element)
    return tuple(moved)


@dataclass(frozen=True)
class DragItem:
    """One end of a drag gesture as reported by the presentation layer.

    Attributes:
        id: Id of the dragged (or hovered) node.
        kind: Kind of that node.
        scope_id: Id of the parent owning its sibling list (section for
            rows, column for fields).
    """

    id: str
    kind: NodeKind
    scope_id: str | None


@dataclass(frozen=True)
class ReorderRequest:
    """A validated same-scope move."""

    kind: NodeKind
    scope_id: str
    from_index: int
    to_index: int


def plan_reorder(
    schema: FormSchema, active: DragItem, over: DragItem | None
) -> ReorderRequest | None:
    """Turn a finished drag into a reorder request.

    Returns None, meaning "do not call the resolver", when:
    - the drag ended over nothing or over the dragged item itself
    - the two items are of different kinds, or not rows/fields
    - the items belong to different sibling lists
    - the scope or either item is no longer in the tree

    Args:
        schema: Current tree.
        active: The dragged item.
        over: The item under the pointer at drag end.

    Returns:
        ReorderRequest for the shared scope, or None.
    """
    if over is None or active.id == over.id:
        return None

    kind = NodeKind(active.kind)
    if kind != NodeKind(over.kind) or kind not in REORDERABLE_KINDS:
        return None

    if not active.scope_id or active.scope_id != over.scope_id:
        logger.debug(
            f"Rejecting cross-scope {kind.value} drag: "
            f"{active.scope_id!r} -> {over.scope_id!r}"
        )
        return None

    if kind == NodeKind.ROW:
        section = find_section(schema, active.scope_id)
        siblings = [row.id for row in section.rows] if section else None
    else:
        column = find_column(schema, active.scope_id)
        siblings = [f.id for f in column.fields] if column else None

    if siblings is None or active.id not in siblings or over.id not in siblings:
        return None

    return ReorderRequest(
        kind=kind,
        scope_id=active.scope_id,
        from_index=siblings.index(active.id),
        to_index=siblings.index(over.id),
    )


__all__ = [
    "REORDERABLE_KINDS",
    "reorder",
    "DragItem",
    "ReorderRequest",
    "plan_reorder",
]
