"""Bounded single-producer single-consumer FIFO queue."""

import threading
from collections import deque

from matchbook.errors import ensure, fatal


class LFQueue:
    """Bounded FIFO safe for one producer thread and one consumer thread."""

    def __init__(self, capacity):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items = deque()

    @property
    def capacity(self):
        return self._capacity

    def push(self, item):
        """Append an item at the back of the queue."""
        ensure(len(self._items) < self._capacity, f"LFQueue full at capacity:{self._capacity}")
        self._items.append(item)

    def peek(self):
        """The item at the front, or None if the queue is empty."""
        return self._items[0] if self._items else None

    def pop(self):
        """Remove and return the item at the front."""
        try:
            return self._items.popleft()
        except IndexError:
            fatal(f"Read an invalid element in:{threading.get_ident()}")

    def __len__(self):
        return len(self._items)