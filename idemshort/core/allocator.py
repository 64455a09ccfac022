"""Identifier allocators for shortcode generation

An allocator hands out strictly increasing integer identifiers. It is injected
into the ShortcodeGenerator rather than kept as a module-level counter.

Classes:
    IdentifierAllocator:
        Interface: next() -> int.
    LocalIdentifierAllocator:
        In-process counter guarded by a lock. Unique per allocator instance only.
    RedisIdentifierAllocator:
        Counter shared by every process through the store's atomic INCR.

The first `offset` identifiers are reserved: the first allocation returns
offset + 1 (1001 with the default offset).

NOTE: Python integers do not overflow. The Redis counter is a signed 64-bit
      integer; exhausting it is out of scope and not handled.
"""

import threading
from abc import ABC, abstractmethod

from idemshort.constants import Defaults
from idemshort.dao.base import ShortURLBaseDAO


class IdentifierAllocator(ABC):
    def __init__(self, offset: int = Defaults.RESERVED_IDENTIFIERS):
        if not isinstance(offset, int) or offset < 0:
            raise ValueError(f'Offset must be a non-negative integer (given value: {offset}).')
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    @abstractmethod
    def next(self) -> int:
        """Return an identifier greater than every identifier returned before."""
        pass


class LocalIdentifierAllocator(IdentifierAllocator):
    """Thread-safe in-process allocator.

    Example:
        >>> allocator = LocalIdentifierAllocator()
        >>> allocator.next(), allocator.next()
        (1001, 1002)
    """

    def __init__(self, offset: int = Defaults.RESERVED_IDENTIFIERS):
        super().__init__(offset)
        self._current = offset
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    @property
    def current(self) -> int:
        """Last identifier handed out (the offset if none yet)."""
        return self._current


class RedisIdentifierAllocator(IdentifierAllocator):
    """Allocator backed by the short link store's shared counter.

    The counter is seeded with SET NX on construction, so restarting a process
    never rewinds it and concurrent cold starts agree on the same origin.
    """

    def __init__(self, dao: ShortURLBaseDAO, offset: int = Defaults.RESERVED_IDENTIFIERS):
        super().__init__(offset)
        self.dao = dao
        self.dao.seed_counter(offset)

    def next(self) -> int:
        return self.dao.count(increment=True)
