"""Thread-local transactions.

A transaction spans every pair and ledger touched by one top-level call on
one thread, including nested pair operations made from a flash-loan
callback or a token hook. Changes are logged as undo actions; a failing
operation rolls back to its own savepoint, and a failing outermost
operation rolls back everything. Work scheduled with after_commit (event
publication) runs only once the outermost transaction commits, after all
pair guards have been released.

Outside a transaction record() is a no-op, so ledgers can be used directly
(for example to fund accounts) without any bookkeeping.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog

logger = structlog.get_logger()

Action = Callable[[], object]

_local = threading.local()


class Journal:
    """Undo log, deferred releases and deferred publications of one transaction."""

    def __init__(self) -> None:
        self._undo: list[Action] = []
        self._on_close: list[Action] = []
        self._on_commit: list[Action] = []

    @property
    def depth(self) -> int:
        """Number of undo actions currently logged."""
        return len(self._undo)

    def record(self, undo: Action) -> None:
        self._undo.append(undo)

    def on_close(self, action: Action) -> None:
        """Run `action` when the outermost transaction ends, committed or not."""
        self._on_close.append(action)

    def after_commit(self, action: Action) -> None:
        """Run `action` after the outermost transaction commits."""
        self._on_commit.append(action)

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        """Undo everything logged inside the block if it raises."""
        undo_mark = len(self._undo)
        commit_mark = len(self._on_commit)
        try:
            yield
        except Exception:
            self._rollback(undo_mark)
            del self._on_commit[commit_mark:]
            raise

    def _rollback(self, mark: int) -> None:
        while len(self._undo) > mark:
            self._undo.pop()()

    def _close(self) -> None:
        while self._on_close:
            self._on_close.pop()()

    def _publish(self) -> None:
        actions, self._on_commit = self._on_commit, []
        for action in actions:
            action()


def active() -> Journal | None:
    """The current thread's open transaction, if any."""
    return getattr(_local, "journal", None)


def record(undo: Action) -> None:
    """Log `undo` in the current thread's transaction, if one is open."""
    journal = active()
    if journal is not None:
        journal.record(undo)


@contextmanager
def transaction() -> Iterator[Journal]:
    """Open a transaction, or a savepoint inside the one already open.

    Yields:
        The thread's Journal
    """
    current = active()
    if current is not None:
        with current.savepoint():
            yield current
        return

    journal = Journal()
    _local.journal = journal
    try:
        with journal.savepoint():
            yield journal
    finally:
        _local.journal = None
        journal._close()
    logger.debug("transaction_committed", publications=len(journal._on_commit))
    journal._publish()
