"""Fixed-capacity object pool with slot reuse."""

from matchbook.errors import ensure


class MemPool:
    """Pool of at most ``capacity`` live objects built by ``factory``.

    As with the slot search it models, the pool must keep one slot free:
    filling the last slot raises FatalError.
    """

    def __init__(self, capacity, factory):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._factory = factory
        self._free = bytearray(b"\x01" * capacity)
        self._objects = {}
        self._index_of = {}
        self._next_free = 0
        self._in_use = 0

    def allocate(self, *args):
        """Build an object from ``args`` in the next free slot and return it."""
        index = self._next_free
        ensure(self._free[index], f"Expected free ObjectBlock at index:{index}")
        obj = self._factory(*args)
        previous = self._objects.get(index)
        if previous is not None:
            self._index_of.pop(id(previous), None)
        self._objects[index] = obj
        self._index_of[id(obj)] = index
        self._free[index] = 0
        self._in_use += 1
        self._update_next_free_index()
        return obj

    def deallocate(self, obj):
        """Return the slot holding ``obj`` to the pool."""
        index = self._index_of.get(id(obj))
        ensure(
            index is not None and self._objects.get(index) is obj,
            "Element being deallocated does not belong to this Memory pool.",
        )
        ensure(not self._free[index], f"Expected in-use ObjectBlock at index:{index}")
        self._free[index] = 1
        self._in_use -= 1

    def _update_next_free_index(self):
        start = self._next_free
        found = self._free.find(1, start)
        if found < 0:
            found = self._free.find(1, 0, start)
        ensure(found >= 0, "Memory Pool out of space.")
        self._next_free = found

    def __len__(self):
        return self._in_use