"""Centralized configuration management for formcanvas.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from formcanvas.config import EnvVar, get_environment
    >>>
    >>> storage_key = get_environment(EnvVar.FORMCANVAS_STORAGE_KEY)
    >>> storage_dir = get_storage_dir()

Environment Variable Categories:
    storage: Storage directory and fixed storage key
    editor: Id token and default row layout
    logging: CLI log level
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    get_default_columns,
    # Main interface
    get_environment,
    get_environment_info,
    get_log_level,
    get_storage_dir,
    get_storage_key,
    # Introspection
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_storage_dir",
    "get_storage_key",
    "get_default_columns",
    "get_log_level",
    # Introspection
    "list_environment_variables",
]
