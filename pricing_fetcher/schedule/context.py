"""
Pricing Fetcher - Evaluation Context

Occurrence counters for Times nodes. Thread-safe via a single Lock.

An occurrence is a distinct time point at which a Times node's inner
schedule matches. Times(inner, n) fires on the first n occurrences this
context has seen. Re-evaluating an already seen time point gives the same
answer and does not count again.
"""
import threading
from dataclasses import dataclass, field
from typing import Dict, List

from .algebra import Schedule, Times, evaluate
from .models import Time


@dataclass
class _Counter:
    """Occurrences seen by one Times node, with the answer given for each."""
    # Bounded: a Time has finitely many distinct values.
    seen: Dict[Time, bool] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.seen)


class EvaluationContext:
    """
    Evaluates schedules while counting Times occurrences across calls.

    Counters are keyed by node value: two structurally equal Times nodes
    always see the same inputs, so they share one counter.

    Usage:
        ctx = EvaluationContext()
        ctx.matches(hours_of_the_day(9).times(3), now)
    """

    def __init__(self):
        self._counters: Dict[Times, _Counter] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def matches(self, schedule: Schedule, time: Time) -> bool:
        """Evaluate `schedule` at `time`, advancing Times counters."""
        with self._lock:
            return evaluate(schedule, time, self._on_times)

    def count(self, node: Times) -> int:
        """Occurrences counted so far for `node` (0 if never seen)."""
        with self._lock:
            counter = self._counters.get(node)
            return counter.count if counter else 0

    def reset(self) -> None:
        """Forget all counters."""
        with self._lock:
            self._counters.clear()

    def copy(self) -> "EvaluationContext":
        """Independent context with the same counters, for look-ahead."""
        clone = EvaluationContext()
        with self._lock:
            clone._counters = {
                node: _Counter(dict(c.seen))
                for node, c in self._counters.items()
            }
        return clone

    def tracked(self) -> List[Times]:
        """Times nodes this context holds a counter for."""
        with self._lock:
            return list(self._counters)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_times(self, node: Times, time: Time, inner: bool) -> bool:
        """Called under self._lock by evaluate()."""
        counter = self._counters.setdefault(node, _Counter())
        if not inner:
            return False

        result = counter.seen.get(time)
        if result is None:
            result = counter.count < node.n
            counter.seen[time] = result
        return result
