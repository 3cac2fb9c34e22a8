"""Selection state for the form builder.

A selection is a weak reference to one node: its kind and id only. It is
resolved against the live tree on every access and is never assumed to be
valid. Empty selection is represented by ``None``.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field

from formcanvas.schema import FormSchema, NodeKind, NodeLocation, locate

logger = logging.getLogger(__name__)


class Selection(BaseModel):
    """Currently active node for editing and insertion.

    Attributes:
        kind: Kind of the selected node.
        id: Id of the selected node.
    """

    kind: NodeKind = Field(..., description="Kind of the selected node")
    id: str = Field(..., description="Id of the selected node")

    model_config = ConfigDict(frozen=True, use_enum_values=True)


def resolve_selection(
    schema: FormSchema, selection: Selection | None
) -> NodeLocation | None:
    """Resolve a selection against the tree.

    Returns:
        Location of the selected node, or None when the selection is empty,
        stale, or names the wrong kind for the id.
    """
    if selection is None:
        return None
    return locate(schema, selection.id, NodeKind(selection.kind))


def is_stale(schema: FormSchema, selection: Selection | None) -> bool:
    """True when a non-empty selection no longer resolves."""
    return selection is not None and resolve_selection(schema, selection) is None


def selection_within(
    schema: FormSchema, selection: Selection | None, node_id: str
) -> bool:
    """Check whether the selection is the given node or one of its descendants.

    A stale selection never counts as within anything.
    """
    location = resolve_selection(schema, selection)
    if location is None:
        return False
    return location.id == node_id or node_id in location.ancestor_ids


def make_selection(
    schema: FormSchema,
    kind: NodeKind | str | None,
    node_id: str | None,
    current: Selection | None = None,
) -> Selection | None:
    """Build the selection that results from clicking a node.

    Passing ``kind=None`` clears the selection. An id that does not exist,
    or exists under a different kind, leaves ``current`` unchanged.
    """
    if kind is None or node_id is None:
        return None

    candidate = Selection(kind=NodeKind(kind), id=node_id)
    if resolve_selection(schema, candidate) is None:
        logger.debug(f"Ignoring selection of missing {candidate.kind} '{node_id}'")
        return current
    return candidate


__all__ = [
    "Selection",
    "resolve_selection",
    "is_stale",
    "selection_within",
    "make_selection",
]
