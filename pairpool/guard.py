"""Per-pair mutual exclusion.

ReentrancyGuard serializes mutating operations on one pair. A call from
another thread waits for the current operation to finish; a call from the
thread that is already running an operation on the pair (a flash borrower
or a malicious token calling back into it) fails immediately with Locked.

Inside a transaction the guard stays held until the outermost transaction
ends, so no other thread can observe or change a pair whose changes might
still be rolled back. Further operations on the same pair from the same
transaction, made after the first one finished, reuse the held guard.

Reentry is only detected on the owning thread. A callback that hands work
to another thread and waits for it to call back into the pair blocks for
good: that thread waits on the guard like any other caller.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from pairpool import journal
from pairpool.errors import Locked

logger = structlog.get_logger()


class ReentrancyGuard:
    """Scoped exclusive lock with same-thread reentry rejection."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._owner: int | None = None
        self._busy = False

    @property
    def locked(self) -> bool:
        """True while some thread holds the guard."""
        return self._mutex.locked()

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        """Hold the guard for the duration of the block.

        Outside a transaction the guard is released on every exit path of
        the block; inside one, when the outermost transaction ends.

        Raises:
            Locked: If the current thread is inside an operation holding the guard
        """
        me = threading.get_ident()
        if self._owner == me and self._busy:
            logger.warning("pair_reentry_rejected", operation=operation)
            raise Locked(f"{operation}: pair is locked")

        txn = journal.active()
        if self._owner != me:
            self._mutex.acquire()
            self._owner = me
            if txn is not None:
                txn.on_close(self._release)

        self._busy = True
        try:
            yield
        finally:
            self._busy = False
            if txn is None:
                self._release()

    def _release(self) -> None:
        self._owner = None
        self._mutex.release()
