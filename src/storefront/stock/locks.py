"""Per-product row locks.

Stock counters live inside the product row, so every writer of a product
(ledger decrements, order placement, catalog edits and removals) takes that
product's lock for the whole load → change → commit cycle. Locks for several
products are always taken in sorted id order, which keeps two placements that
share products from deadlocking. Products that share nothing never wait on
each other.

An entry lives only while some thread holds or waits on it, so ids that are
never seen again (unknown products included) do not accumulate.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import ExitStack, contextmanager

import structlog

logger = structlog.get_logger(__name__)


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.RLock()
        self.users = 0


class RowLocks:
    """A registry of re-entrant locks keyed by product id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def __contains__(self, product_id) -> bool:
        with self._guard:
            return str(product_id) in self._entries

    def _checkout(self, key: str) -> threading.RLock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            return entry.lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._entries[key]
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        lock = self._checkout(key)
        try:
            with lock:
                yield
        finally:
            self._checkin(key)

    @contextmanager
    def hold(self, product_ids: Iterable) -> Iterator[list[str]]:
        """Hold the locks of every product in ``product_ids`` until exit.

        Yields the sorted, de-duplicated ids that were locked.
        """
        keys = sorted({str(pid) for pid in product_ids})
        with ExitStack() as stack:
            for key in keys:
                stack.enter_context(self._locked(key))
            logger.debug("row_locks_acquired", product_ids=keys)
            yield keys


row_locks = RowLocks()
