"""Tests for per-product row locks."""

import threading
import time

from storefront.stock.locks import RowLocks


def _try_hold(locks, product_id, started, results):
    """Thread body: report whether ``product_id`` could be locked right away."""
    lock = locks._checkout(product_id)
    started.set()
    try:
        acquired = lock.acquire(timeout=0.05)
        results.append(acquired)
        if acquired:
            lock.release()
    finally:
        locks._checkin(product_id)


class TestRowLocks:
    def test_hold_yields_sorted_unique_ids(self):
        locks = RowLocks()
        with locks.hold(["p2", "p1", "p2"]) as keys:
            assert keys == ["p1", "p2"]

    def test_hold_is_reentrant(self):
        locks = RowLocks()
        with locks.hold(["p1"]):
            with locks.hold(["p1", "p3"]) as keys:
                assert keys == ["p1", "p3"]

    def test_held_lock_blocks_other_threads(self):
        locks = RowLocks()
        results = []

        with locks.hold(["p1"]):
            thread = threading.Thread(target=_try_hold, args=(locks, "p1", threading.Event(), results))
            thread.start()
            thread.join()

        assert results == [False]

    def test_other_products_are_not_blocked(self):
        locks = RowLocks()
        results = []

        with locks.hold(["p1"]):
            thread = threading.Thread(target=_try_hold, args=(locks, "p2", threading.Event(), results))
            thread.start()
            thread.join()

        assert results == [True]


class TestRegistrySize:
    def test_entries_exist_only_while_held(self):
        locks = RowLocks()

        with locks.hold(["p1", "p2"]):
            assert len(locks) == 2
            assert "p1" in locks

        assert len(locks) == 0
        assert "p1" not in locks

    def test_nested_hold_keeps_entry_until_outermost_exit(self):
        locks = RowLocks()

        with locks.hold(["p1"]):
            with locks.hold(["p1"]):
                pass
            assert "p1" in locks

        assert len(locks) == 0

    def test_entry_is_released_when_body_raises(self):
        locks = RowLocks()

        try:
            with locks.hold(["p1"]):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert len(locks) == 0

    def test_waiting_thread_keeps_the_entry_alive(self):
        locks = RowLocks()
        waiter_ready = threading.Event()
        waiter_done = threading.Event()
        seen = []

        def waiter():
            waiter_ready.set()
            with locks.hold(["p1"]):
                seen.append("p1" in locks)
            waiter_done.set()

        with locks.hold(["p1"]):
            thread = threading.Thread(target=waiter)
            thread.start()
            waiter_ready.wait(timeout=1)
            deadline = time.monotonic() + 1
            while locks._entries["p1"].users < 2 and time.monotonic() < deadline:
                time.sleep(0.001)
            assert locks._entries["p1"].users == 2

        thread.join(timeout=1)
        assert waiter_done.is_set()
        assert seen == [True]
        assert len(locks) == 0

    def test_many_distinct_ids_do_not_accumulate(self):
        locks = RowLocks()

        for n in range(500):
            with locks.hold([f"missing-{n}"]):
                pass

        assert len(locks) == 0
