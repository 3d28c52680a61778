"""Tests for thread-local transactions."""

import threading

import pytest

from pairpool import journal


class TestTransaction:
    def test_no_transaction_outside(self):
        assert journal.active() is None
        journal.record(lambda: pytest.fail("recorded outside a transaction"))

    def test_commit_keeps_changes_and_publishes(self):
        log: list[str] = []
        with journal.transaction() as txn:
            assert journal.active() is txn
            txn.record(lambda: log.append("undo"))
            txn.after_commit(lambda: log.append("published"))
            assert log == []
        assert log == ["published"]
        assert journal.active() is None

    def test_failure_undoes_in_reverse_order(self):
        log: list[str] = []
        with pytest.raises(RuntimeError):
            with journal.transaction() as txn:
                txn.record(lambda: log.append("first"))
                txn.record(lambda: log.append("second"))
                txn.after_commit(lambda: log.append("published"))
                raise RuntimeError("revert")
        assert log == ["second", "first"]
        assert journal.active() is None

    def test_close_actions_run_on_both_paths(self):
        log: list[str] = []
        with journal.transaction() as txn:
            txn.on_close(lambda: log.append("closed"))
        with pytest.raises(RuntimeError):
            with journal.transaction() as txn:
                txn.on_close(lambda: log.append("closed again"))
                raise RuntimeError("revert")
        assert log == ["closed", "closed again"]

    def test_publication_runs_after_close(self):
        log: list[str] = []
        with journal.transaction() as txn:
            txn.after_commit(lambda: log.append("published"))
            txn.on_close(lambda: log.append("closed"))
        assert log == ["closed", "published"]


class TestNesting:
    def test_nested_joins_outer(self):
        with journal.transaction() as outer:
            with journal.transaction() as inner:
                assert inner is outer

    def test_nested_failure_rolls_back_only_itself(self):
        log: list[str] = []
        with journal.transaction() as txn:
            txn.record(lambda: log.append("outer undo"))
            with pytest.raises(RuntimeError):
                with journal.transaction():
                    txn.record(lambda: log.append("inner undo"))
                    txn.after_commit(lambda: log.append("inner published"))
                    raise RuntimeError("revert")
            assert log == ["inner undo"]
            assert txn.depth == 1
            txn.after_commit(lambda: log.append("outer published"))
        assert log == ["inner undo", "outer published"]

    def test_outer_failure_undoes_committed_inner(self):
        log: list[str] = []
        with pytest.raises(RuntimeError):
            with journal.transaction() as txn:
                with journal.transaction():
                    txn.record(lambda: log.append("inner undo"))
                    txn.after_commit(lambda: log.append("inner published"))
                raise RuntimeError("revert")
        assert log == ["inner undo"]

    def test_inner_publication_waits_for_outer(self):
        log: list[str] = []
        with journal.transaction() as txn:
            with journal.transaction():
                txn.after_commit(lambda: log.append("inner published"))
            assert log == []
        assert log == ["inner published"]


class TestThreads:
    def test_each_thread_has_its_own_transaction(self):
        seen: list[object] = []
        with journal.transaction():
            other = threading.Thread(target=lambda: seen.append(journal.active()))
            other.start()
            other.join(timeout=5)
        assert seen == [None]
