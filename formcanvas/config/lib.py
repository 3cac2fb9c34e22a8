"""Environment-driven settings for formcanvas.

Every setting is a member of `EnvVar` carrying its variable name, type and
fallback. `get_environment()` looks a member up, in order: an explicit
override argument, the process environment, then the member's default.

Example:
    >>> from formcanvas.config import EnvVar, get_environment
    >>>
    >>> get_environment(EnvVar.FORMCANVAS_STORAGE_KEY)
    'form-builder-schema'
    >>> get_environment(EnvVar.FORMCANVAS_DEFAULT_COLUMNS, override=2)
    2
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

STORAGE_DIR_NAME = ".formcanvas"
REPO_MARKER = "pyproject.toml"

# =============================================================================
# Settings Registry
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """One configurable setting.

    Attributes:
        name: Variable name read from the environment.
        default: Value used when the variable is unset or unparsable.
        var_type: One of str, int, bool or Path.
        description: Shown by `list_environment_variables` consumers.
        category: storage, editor or logging.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"

    def parse(self, raw: str | None) -> Any:
        """Turn the raw environment string into ``var_type``."""
        if raw is None or raw == "":
            return self.default
        if self.var_type is int:
            try:
                return int(raw)
            except ValueError:
                logger.warning(
                    f"{self.name}={raw!r} is not an integer, using {self.default}"
                )
                return self.default
        if self.var_type is bool:
            flag = raw.strip().lower()
            if flag in ("1", "true", "yes", "on"):
                return True
            if flag in ("0", "false", "no", "off"):
                return False
            logger.warning(
                f"{self.name}={raw!r} is not a boolean, using {self.default}"
            )
            return self.default
        return self.var_type(raw)


class EnvVar(Enum):
    """Settings recognised by formcanvas, grouped by category."""

    # Storage
    FORMCANVAS_STORAGE_DIR = EnvConfig(
        name="FORMCANVAS_STORAGE_DIR",
        default=None,
        var_type=Path,
        description="Directory holding persisted form schemas "
        f"(unset: <repo root>/{STORAGE_DIR_NAME})",
        category="storage",
    )
    FORMCANVAS_STORAGE_KEY = EnvConfig(
        name="FORMCANVAS_STORAGE_KEY",
        default="form-builder-schema",
        var_type=str,
        description="Fixed storage key the current schema is saved under",
        category="storage",
    )

    # Editor
    FORMCANVAS_ID_PREFIX = EnvConfig(
        name="FORMCANVAS_ID_PREFIX",
        default=None,
        var_type=str,
        description="Token embedded in generated node ids "
        "(unset: random per session)",
        category="editor",
    )
    FORMCANVAS_DEFAULT_COLUMNS = EnvConfig(
        name="FORMCANVAS_DEFAULT_COLUMNS",
        default=1,
        var_type=int,
        description="Number of equal-span columns seeded into a new row (1-4)",
        category="editor",
    )

    # Logging
    FORMCANVAS_LOG_LEVEL = EnvConfig(
        name="FORMCANVAS_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level for the CLI (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )


# =============================================================================
# Lookup
# =============================================================================


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Resolve a setting: override, then environment, then default."""
    if override is not None:
        return override
    config: EnvConfig = env_var.value
    return config.parse(os.environ.get(config.name))


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    return env_var.value


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """Settings in ``category``, or all of them when None."""
    return [var for var in EnvVar if category in (None, var.value.category)]


def _find_repo_root(start_path: Path | None = None) -> Path:
    """Nearest directory at or above ``start_path`` holding pyproject.toml.

    Falls back to ``start_path`` itself (cwd by default), so an installed
    copy still gets a usable storage location.
    """
    start = (start_path or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if (candidate / REPO_MARKER).exists():
            return candidate
    return start


# =============================================================================
# Typed Accessors
# =============================================================================


def get_storage_dir(override: Path | str | None = None) -> Path:
    """Directory for persisted schemas.

    Resolution: override > FORMCANVAS_STORAGE_DIR > <repo root>/.formcanvas
    """
    configured = get_environment(
        EnvVar.FORMCANVAS_STORAGE_DIR,
        override=Path(override) if override is not None else None,
    )
    if configured is None:
        return _find_repo_root() / STORAGE_DIR_NAME
    return configured


def get_storage_key(override: str | None = None) -> str:
    return get_environment(EnvVar.FORMCANVAS_STORAGE_KEY, override=override)


def get_default_columns(override: int | None = None) -> int:
    """Column count for a row created without a layout, clamped to 1-4."""
    count = get_environment(EnvVar.FORMCANVAS_DEFAULT_COLUMNS, override=override)
    return max(1, min(4, count))


def get_log_level(override: str | None = None) -> str:
    return str(get_environment(EnvVar.FORMCANVAS_LOG_LEVEL, override=override)).upper()


__all__ = [
    "EnvConfig",
    "EnvVar",
    "get_environment",
    "get_environment_info",
    "list_environment_variables",
    "get_storage_dir",
    "get_storage_key",
    "get_default_columns",
    "get_log_level",
]
