"""Unit tests for identifier allocators

Test coverage includes:
    1. LocalIdentifierAllocator
       - First identifier is offset + 1, then strictly increasing by one.
       - Concurrent callers never receive the same identifier.
       - Invalid offsets are rejected.
    2. RedisIdentifierAllocator
       - Seeds the shared counter with the offset on construction.
       - Delegates next() to the store's atomic increment.
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from idemshort.core import LocalIdentifierAllocator, RedisIdentifierAllocator
from idemshort.dao.base import ShortURLBaseDAO
from idemshort.dao.memory import ShortURLMemoryDAO


# -------------------------------
# 1. LocalIdentifierAllocator
# -------------------------------


def test_first_identifier_follows_reserved_range():
    allocator = LocalIdentifierAllocator()

    assert allocator.offset == 1000
    assert allocator.next() == 1001
    assert allocator.next() == 1002
    assert allocator.current == 1002


def test_custom_offset():
    allocator = LocalIdentifierAllocator(offset=0)

    assert [allocator.next() for _ in range(3)] == [1, 2, 3]


@pytest.mark.parametrize('offset', [-1, 1.5, '1000'])
def test_invalid_offset(offset):
    with pytest.raises(ValueError):
        LocalIdentifierAllocator(offset=offset)


def test_concurrent_allocation_is_unique():
    """N threads x M calls yield N*M distinct identifiers."""
    allocator = LocalIdentifierAllocator()
    threads, calls = 16, 250

    def allocate(_):
        return [allocator.next() for _ in range(calls)]

    with ThreadPoolExecutor(max_workers=threads) as executor:
        batches = list(executor.map(allocate, range(threads)))

    identifiers = [identifier for batch in batches for identifier in batch]
    assert len(set(identifiers)) == threads * calls
    assert min(identifiers) == 1001
    assert max(identifiers) == 1000 + threads * calls

    # Each caller observes its own identifiers in increasing order
    for batch in batches:
        assert batch == sorted(batch)


# -------------------------------
# 2. RedisIdentifierAllocator
# -------------------------------


def test_redis_allocator_seeds_and_increments():
    dao = MagicMock(spec=ShortURLBaseDAO)
    dao.count.return_value = 1001

    allocator = RedisIdentifierAllocator(dao)

    dao.seed_counter.assert_called_once_with(1000)
    assert allocator.next() == 1001
    dao.count.assert_called_once_with(increment=True)


def test_redis_allocator_does_not_rewind_existing_counter():
    dao = ShortURLMemoryDAO()
    first = RedisIdentifierAllocator(dao)
    assert first.next() == 1001

    second = RedisIdentifierAllocator(dao)  # e.g. a fresh Lambda container
    assert second.next() == 1002
