"""Target resolver for palette insertions."""

from .lib import NO_TARGET, InsertionTarget, resolve_targets

__all__ = ["InsertionTarget", "NO_TARGET", "resolve_targets"]
