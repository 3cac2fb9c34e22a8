"""Identifier generation for schema tree nodes.

Ids have the shape ``{kind}_{token}{n}`` where ``token`` is fixed for the
lifetime of a generator and ``n`` is a monotonically increasing counter.
The counter is guarded by a lock, so concurrent callers can never observe
the same value. A random token keeps ids from a new session distinct from
ids already present in a loaded schema; with a fixed token the generator
has to `reserve()` the loaded ids so its counter starts past them.
"""

import re
import threading
from collections.abc import Iterable
from uuid import uuid4

from formcanvas.config import EnvVar, get_environment


def _random_token() -> str:
    return uuid4().hex[:8]


class IdGenerator:
    """Produces collision-free identifiers for new tree nodes.

    Example:
        >>> ids = IdGenerator(token="t")
        >>> ids.next_id("section")
        'section_t1'
        >>> ids.next_id("row")
        'row_t2'

    Args:
        token: Fixed token embedded in every id. Random when None.
    """

    def __init__(self, token: str | None = None):
        self._token = token if token is not None else _random_token()
        self._next = 1
        self._lock = threading.Lock()
        self._issued = 0

    @property
    def token(self) -> str:
        return self._token

    @property
    def issued(self) -> int:
        """Number of ids handed out so far."""
        return self._issued

    def next_id(self, kind: str) -> str:
        """Allocate a fresh id for a node of the given kind."""
        with self._lock:
            n = self._next
            self._next += 1
            self._issued += 1
        return f"{kind}_{self._token}{n}"

    def reserve(self, existing: Iterable[str]) -> None:
        """Move the counter past every ``existing`` id minted with this token.

        Ids with other tokens are ignored. Reserving never moves the
        counter backwards.
        """
        pattern = re.compile(rf"[a-z]+_{re.escape(self._token)}(\d+)")
        highest = 0
        for node_id in existing:
            match = pattern.fullmatch(node_id)
            if match:
                highest = max(highest, int(match.group(1)))
        with self._lock:
            self._next = max(self._next, highest + 1)


_global_generator: IdGenerator | None = None
_global_lock = threading.Lock()


def get_id_generator() -> IdGenerator:
    """Get or create the process-wide id generator.

    The token comes from FORMCANVAS_ID_PREFIX when set.
    """
    global _global_generator
    with _global_lock:
        if _global_generator is None:
            _global_generator = IdGenerator(
                token=get_environment(EnvVar.FORMCANVAS_ID_PREFIX)
            )
        return _global_generator


def reset_id_generator() -> None:
    """Drop the process-wide generator so the next call builds a new one."""
    global _global_generator
    with _global_lock:
        _global_generator = None


__all__ = ["IdGenerator", "get_id_generator", "reset_id_generator"]
