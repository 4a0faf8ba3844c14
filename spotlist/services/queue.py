from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Hashable, Iterable, Iterator, List, Optional

from spotlist.services.sorting import Comparator, stable_sort

logger = logging.getLogger(__name__)


class Queue:
    """Ordered collection of playlist entries.

    Elements keep insertion order until an explicit reordering operation
    (``sort``, ``group``, ``dedup``) is applied. Before ``flatten`` an
    element may itself be a ``Queue``.
    """

    def __init__(self, items: Optional[Iterable[Any]] = None) -> None:
        self.items: List[Any] = list(items) if items is not None else []

    def add(self, entry: Any) -> None:
        self.items.append(entry)

    def get(self, index: int) -> Optional[Any]:
        if 0 <= index < len(self.items):
            return self.items[index]
        return None

    def size(self) -> int:
        return len(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __repr__(self) -> str:
        return f"Queue({self.items!r})"

    def map(self, fn: Callable[[Any], Any]) -> "Queue":
        return Queue(fn(entry) for entry in self.items)

    def concat(self, other: "Queue") -> "Queue":
        return Queue(self.items + other.items)

    def sort(self, cmp: Optional[Comparator] = None) -> "Queue":
        self.items = stable_sort(self.items, cmp)
        return self

    def contains(self, obj: Any) -> bool:
        for entry in self.items:
            if entry is obj:
                return True
            equals = getattr(entry, "equals", None)
            if equals is not None and equals(obj):
                return True
        return False

    def dedup(self) -> "Queue":
        result = Queue()
        for entry in self.items:
            if not result.contains(entry):
                result.add(entry)
        removed = len(self.items) - len(result.items)
        if removed:
            logger.debug("Removed %s duplicate entries", removed)
        self.items = result.items
        return self

    def group(self, key_fn: Callable[[Any], Hashable]) -> "Queue":
        buckets: Dict[Hashable, List[Any]] = {}
        for entry in self.items:
            buckets.setdefault(key_fn(entry), []).append(entry)
        self.items = [entry for bucket in buckets.values() for entry in bucket]
        return self

    def flatten(self) -> "Queue":
        result: List[Any] = []
        for entry in self.items:
            if isinstance(entry, Queue):
                result.extend(entry.flatten().items)
            else:
                result.append(entry)
        self.items = result
        return self

    async def resolve_all(
        self,
        fn: Callable[[Any], Awaitable[Any]],
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> "Queue":
        # One call at a time, in order, to stay within the remote rate limits.
        # An exception from ``fn`` propagates and the partial result is dropped.
        result = Queue()
        for index, entry in enumerate(list(self.items), start=1):
            result.add(await fn(entry))
            if progress_callback:
                try:
                    progress_callback(index)
                except Exception:  # pragma: no cover - progress is best-effort
                    logger.debug("Progress callback failed", exc_info=True)
        return result

    async def dispatch(self, progress_callback: Optional[Callable[[int], None]] = None) -> "Queue":
        return await self.resolve_all(lambda entry: entry.dispatch(), progress_callback)


__all__ = ["Queue"]
