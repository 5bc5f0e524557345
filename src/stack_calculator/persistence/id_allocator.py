"""Surrogate key allocation for history records."""
import threading
from typing import Optional, Protocol

from stack_calculator.persistence.relational import RelationalStore


class IdAllocator(Protocol):
    """Hands out the id used for both the relational and the document write."""

    def next_id(self) -> int:
        ...


class MaxIdAllocator:
    """
    Read the relational maximum and add one, on every write.

    The read and the following insert are not atomic: two concurrent writers
    can obtain the same id, and the second relational insert then fails with a
    primary key violation.
    """

    def __init__(self, store: RelationalStore) -> None:
        self.store = store

    def next_id(self) -> int:
        return self.store.max_id() + 1


class CounterIdAllocator:
    """
    Lock-guarded in-process counter, seeded once from the relational maximum.

    Closes the concurrent-writer race inside one process. Ids consumed by a
    failed write are not reused, so gaps can appear.
    """

    def __init__(self, store: RelationalStore) -> None:
        self.store = store
        self._last: Optional[int] = None
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            if self._last is None:
                self._last = self.store.max_id()
            self._last += 1
            return self._last


def build_allocator(strategy: str, store: RelationalStore) -> IdAllocator:
    """
    Create the allocator named by the ``id_strategy`` setting.

    :param str strategy: ``"max"`` or ``"counter"``
    :param RelationalStore store: Store the maximum is read from

    :return: Allocator instance
    :rtype: IdAllocator
    :raises ValueError: For an unknown strategy
    """
    if strategy == "max":
        return MaxIdAllocator(store)
    if strategy == "counter":
        return CounterIdAllocator(store)
    raise ValueError(f"Unknown id strategy: {strategy}")
