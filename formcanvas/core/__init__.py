"""Core utilities shared across formcanvas."""

from .log import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
