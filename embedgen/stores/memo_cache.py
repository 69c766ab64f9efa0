"""In-memory memoization for the incremental graph."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Set, Tuple, TypeVar

from ..logging import get_logger

T = TypeVar("T")

_Slot = Tuple[str, str]


@dataclass(frozen=True)
class CacheEntry:
    """Last input key seen for a slot and the value computed from it."""

    key: Hashable
    value: Any


class MemoCache:
    """Remembers one (key, value) pair per node slot.

    A slot is a node name plus an item identifier (a file path, or ``""`` for
    single-valued nodes). Looking up a slot with a key equal to the remembered
    one returns the remembered value; any other key recomputes and replaces
    the entry. Reads may happen from many threads; each slot has its own lock
    so at most one computation per slot is in flight.
    """

    def __init__(self) -> None:
        self._entries: Dict[_Slot, CacheEntry] = {}
        self._slot_locks: Dict[_Slot, threading.Lock] = {}
        self._touched: Set[_Slot] = set()
        self._lock = threading.Lock()
        self._stats: Dict[str, Counter[str]] = {}
        self.logger = get_logger("cache")

    def get_or_compute(
        self,
        node: str,
        slot: str,
        key: Hashable,
        compute: Callable[[], T],
        *,
        is_valid: Optional[Callable[[T], bool]] = None,
    ) -> T:
        slot_id = (node, slot)
        with self._lock:
            self._touched.add(slot_id)
            slot_lock = self._slot_locks.setdefault(slot_id, threading.Lock())

        with slot_lock:
            with self._lock:
                entry = self._entries.get(slot_id)
            if entry is not None and entry.key == key:
                if is_valid is None or is_valid(entry.value):
                    self.record(node, "reused")
                    self.logger.debug("Reusing %s for %s", node, slot or "<build>")
                    return entry.value
                self.logger.debug("Dependencies of %s for %s changed", node, slot or "<build>")
            value = compute()
            self.record(node, "computed")
            with self._lock:
                self._entries[slot_id] = CacheEntry(key=key, value=value)
            return value

    def peek(self, node: str, slot: str = "") -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get((node, slot))

    def begin_build(self) -> None:
        """Start tracking which slots the next build touches."""
        with self._lock:
            self._touched.clear()
            self._stats.clear()

    def prune_untouched(self) -> int:
        """Drop slots that the current build did not ask for."""
        with self._lock:
            stale = [slot for slot in self._entries if slot not in self._touched]
            for slot in stale:
                self._entries.pop(slot, None)
                self._slot_locks.pop(slot, None)
            return len(stale)

    def record(self, node: str, event: str) -> None:
        with self._lock:
            self._stats.setdefault(node, Counter())[event] += 1

    def stats(self) -> Dict[str, Dict[str, int]]:
        with self._lock:
            return {node: dict(counter) for node, counter in self._stats.items()}

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._slot_locks.clear()
            self._touched.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CacheEntry", "MemoCache"]
