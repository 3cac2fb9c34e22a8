"""Human-readable schema outlines."""

from .lib import format_schema_tree

__all__ = ["format_schema_tree"]
