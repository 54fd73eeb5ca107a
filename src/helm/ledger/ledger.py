"""
Decision Ledger — Bounded, append-only record of every evaluation.

Sequence numbers are session-scoped, start at 1 and never repeat.
Beyond capacity the oldest decision is evicted silently; recent() and
all() only ever show retained entries.
"""

from threading import RLock

from helm.ledger.bounded import BoundedLog
from helm.ledger.decision import Decision
from helm.observability import get_logger, get_metrics


logger = get_logger("ledger")

DEFAULT_LEDGER_CAPACITY = 500


class DecisionLedger:
    """
    Thread-safe bounded decision history.

    Usage:
        ledger = DecisionLedger(capacity=500)
        seq = ledger.record(decision)
        ledger.get(seq).sequence_number == seq
        ledger.recent(10)  # newest first
    """

    def __init__(self, capacity: int = DEFAULT_LEDGER_CAPACITY):
        self._log: BoundedLog[Decision] = BoundedLog(capacity, on_evict=self._evicted)
        self._next_sequence = 1
        self._lock = RLock()

    @property
    def capacity(self) -> int:
        return self._log.capacity

    @property
    def total_recorded(self) -> int:
        """Decisions recorded this session, including evicted ones."""
        with self._lock:
            return self._next_sequence - 1

    @property
    def evicted_count(self) -> int:
        with self._lock:
            return self._log.evicted_count

    def record(self, decision: Decision) -> int:
        """
        Append a decision, stamping the next sequence number.

        Returns:
            The assigned sequence number.
        """
        with self._lock:
            sequence = self._next_sequence
            stamped = decision.model_copy(update={"sequence_number": sequence})
            self._log.append(stamped)
            self._next_sequence += 1
            return sequence

    def get(self, sequence_number: int) -> Decision | None:
        """Retained decision with this sequence number, or None."""
        with self._lock:
            oldest = self._log.oldest()
            if oldest is None:
                return None
            index = sequence_number - oldest.sequence_number
            if 0 <= index < len(self._log):
                return self._log[index]
            return None

    def latest(self) -> Decision | None:
        with self._lock:
            newest = self._log.newest(1)
            return newest[0] if newest else None

    def recent(self, n: int) -> list[Decision]:
        """Up to n most recent decisions, newest first."""
        with self._lock:
            return self._log.newest(n)

    def all(self) -> tuple[Decision, ...]:
        """Every retained decision, oldest first."""
        with self._lock:
            return self._log.snapshot()

    def __len__(self) -> int:
        with self._lock:
            return len(self._log)

    def _evicted(self, decision: Decision) -> None:
        get_metrics().ledger_evictions.inc()
        logger.debug(f"Evicted decision #{decision.sequence_number} ({decision.id})")
