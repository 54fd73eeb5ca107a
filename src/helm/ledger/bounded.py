"""
Bounded Log — Capacity-bounded FIFO history.

One structure for every capped history in the system: the decision
ledger and terminal task retention both sit on it. Appending beyond
capacity drops the oldest entry in O(1).

Not thread-safe on its own; owners serialize access.
"""

from collections import deque
from typing import Callable, Generic, Iterator, TypeVar


T = TypeVar("T")


class BoundedLog(Generic[T]):
    """
    Append-only ring of at most `capacity` entries, oldest first.

    Usage:
        log = BoundedLog(capacity=3, on_evict=print)
        for i in range(4):
            log.append(i)   # prints 0 on the fourth append
        log.snapshot()      # (1, 2, 3)
    """

    def __init__(
        self,
        capacity: int,
        on_evict: Callable[[T], None] | None = None,
    ):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._entries: deque[T] = deque(maxlen=capacity)
        self._on_evict = on_evict
        self._evicted = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def evicted_count(self) -> int:
        """Entries dropped since creation."""
        return self._evicted

    def append(self, entry: T) -> T | None:
        """Append an entry. Returns the evicted entry, if any."""
        evicted = None
        if len(self._entries) == self._capacity:
            evicted = self._entries[0]
            self._evicted += 1
        self._entries.append(entry)
        if evicted is not None and self._on_evict:
            self._on_evict(evicted)
        return evicted

    def snapshot(self) -> tuple[T, ...]:
        """All retained entries, oldest first."""
        return tuple(self._entries)

    def newest(self, n: int) -> list[T]:
        """Up to n most recent entries, newest first."""
        n = max(0, min(n, len(self._entries)))
        result = []
        for i in range(1, n + 1):
            result.append(self._entries[-i])
        return result

    def oldest(self) -> T | None:
        return self._entries[0] if self._entries else None

    def __getitem__(self, index: int) -> T:
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._entries))

    def __repr__(self) -> str:
        return f"BoundedLog(size={len(self._entries)}, capacity={self._capacity})"
