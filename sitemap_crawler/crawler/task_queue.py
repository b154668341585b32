# sitemap_crawler/crawler/task_queue.py
"""
Blocking FIFO queue shared by the coordinator (producer) and the workers (consumers).

:meth:`TaskQueue.pop` suspends the caller while the queue is empty.
:meth:`TaskQueue.close` releases every waiter for good: pending and future
``pop()`` calls raise :class:`QueueClosed` right away, ``push()`` becomes a no-op.
"""
from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, Generic, List, TypeVar

T = TypeVar("T")

__all__ = ("QueueClosed", "TaskQueue")


class QueueClosed(Exception):
    """Raised by :meth:`TaskQueue.pop` once the queue has been closed."""


class TaskQueue(Generic[T]):
    """Monitor-style queue: a deque guarded by an :class:`asyncio.Condition`."""

    def __init__(self) -> None:
        self._items: Deque[T] = deque()
        self._cond = asyncio.Condition()
        self._closed = False

    def __len__(self) -> int:
        return len(self._items)

    @property
    def closed(self) -> bool:
        return self._closed

    async def push(self, item: T) -> None:
        """Append *item* to the tail and wake one waiter. Ignored after close."""
        if self._closed:
            return
        async with self._cond:
            if self._closed:
                return
            self._items.append(item)
            self._cond.notify()

    async def pop(self) -> T:
        """Remove and return the head, waiting while the queue is empty."""
        if self._closed:
            raise QueueClosed
        async with self._cond:
            while not self._items and not self._closed:
                await self._cond.wait()
            if self._closed:
                raise QueueClosed
            return self._items.popleft()

    async def close(self) -> None:
        """Mark the queue closed and wake all waiters. Safe to call repeatedly."""
        if self._closed:
            return
        async with self._cond:
            self._closed = True
            self._cond.notify_all()

    def drain(self) -> List[T]:
        """Take whatever is still queued without waiting (works after close too)."""
        items = list(self._items)
        self._items.clear()
        return items
