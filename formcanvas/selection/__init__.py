"""Selection state: a weak (kind, id) reference into the schema tree."""

from .lib import (
    Selection,
    is_stale,
    make_selection,
    resolve_selection,
    selection_within,
)

__all__ = [
    "Selection",
    "resolve_selection",
    "is_stale",
    "selection_within",
    "make_selection",
]
