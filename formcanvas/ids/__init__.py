"""Identifier generator for schema tree nodes."""

from .lib import IdGenerator, get_id_generator, reset_id_generator

__all__ = ["IdGenerator", "get_id_generator", "reset_id_generator"]
