"""Unit tests for IdempotencyCacheMemoryDAO

Test coverage includes:
    1. Expiry is evaluated against the injected clock
    2. set(nx=True) only writes over missing or expired entries
    3. delete / delete_if_equals semantics
    4. Expired entries are swept periodically
"""

import pytest

from idemshort.dao.memory import IdempotencyCacheMemoryDAO


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def dao(clock) -> IdempotencyCacheMemoryDAO:
    return IdempotencyCacheMemoryDAO(clock=clock, sweep_every=3)


def test_entry_expires(dao, clock):
    dao.set('k', 'v', 10)
    clock.now = 9.99
    assert dao.get('k') == 'v'
    assert dao.has('k')

    clock.now = 10
    assert dao.get('k') is None
    assert not dao.has('k')


def test_set_if_absent(dao, clock):
    assert dao.set('k', 'first', 5, nx=True) is True
    assert dao.set('k', 'second', 5, nx=True) is False
    assert dao.get('k') == 'first'

    clock.now = 5
    assert dao.set('k', 'third', 5, nx=True) is True
    assert dao.get('k') == 'third'


def test_set_overwrites_without_nx(dao):
    dao.set('k', 'first', 5)
    assert dao.set('k', 'second', 5) is True
    assert dao.get('k') == 'second'


@pytest.mark.parametrize('ttl', [0, -1])
def test_set_with_non_positive_ttl(dao, ttl):
    with pytest.raises(ValueError):
        dao.set('k', 'v', ttl)


def test_delete(dao):
    dao.set('k', 'v', 5)

    assert dao.delete('k') is True
    assert dao.delete('k') is False


def test_delete_if_equals(dao, clock):
    dao.set('lock', 'mine', 5)

    assert dao.delete_if_equals('lock', 'theirs') is False
    assert dao.get('lock') == 'mine'
    assert dao.delete_if_equals('lock', 'mine') is True
    assert dao.get('lock') is None


def test_delete_if_equals_on_expired_entry(dao, clock):
    dao.set('lock', 'mine', 5)
    clock.now = 6

    assert dao.delete_if_equals('lock', 'mine') is False


def test_expired_entries_are_swept(dao, clock):
    dao.set('a', 'v', 1)
    dao.set('b', 'v', 1)
    clock.now = 2

    dao.set('c', 'v', 1)  # third write triggers a sweep

    assert len(dao) == 1
    assert dao.get('c') == 'v'
