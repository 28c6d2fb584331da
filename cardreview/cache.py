"""Short-lived read cache for views derived from the card store."""

import time
from dataclasses import dataclass
from typing import Any, Callable

DEFAULT_TTL_MS = 5000


def monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass
class CacheCell:
    value: Any = None
    computed_at: float = 0.0
    populated: bool = False


class QueryCache:
    """Named cache cells sharing one TTL.

    A cell is fresh while it is populated and at most ``ttl_ms`` old.
    ``invalidate()`` clears the populated flag, so the next ``get()`` always
    recomputes. Empty results are cached like any other value.
    """

    def __init__(self, ttl_ms: float = DEFAULT_TTL_MS, clock: Callable[[], float] = monotonic_ms):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._cells: dict[str, CacheCell] = {}

    def get(self, name: str, compute: Callable[[], Any]) -> Any:
        cell = self._cells.setdefault(name, CacheCell())
        now = self._clock()
        if cell.populated and now - cell.computed_at <= self.ttl_ms:
            return cell.value
        cell.value = compute()
        cell.computed_at = now
        cell.populated = True
        return cell.value

    def invalidate(self, *names: str):
        """Mark the named cells stale; with no names, every cell."""
        targets = names or tuple(self._cells)
        for name in targets:
            cell = self._cells.get(name)
            if cell:
                cell.populated = False
                cell.value = None

    def is_fresh(self, name: str) -> bool:
        cell = self._cells.get(name)
        if not cell or not cell.populated:
            return False
        return self._clock() - cell.computed_at <= self.ttl_ms
