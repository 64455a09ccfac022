"""Unit tests for ShortURLMemoryDAO

Test coverage includes:
    1. Insert / get / exists round trip
    2. Duplicate shortcodes raise ShortURLAlreadyExistsError
    3. Unknown shortcodes raise ShortURLNotFoundError
    4. Counter seeding and atomic increments under concurrency
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from idemshort.models import ShortURLModel
from idemshort.dao.memory import ShortURLMemoryDAO
from idemshort.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


@pytest.fixture
def dao() -> ShortURLMemoryDAO:
    return ShortURLMemoryDAO()


def test_insert_and_get(dao):
    short_url = ShortURLModel(shortcode='abc1234', target='https://example.com/a')

    assert dao.insert(short_url) is dao
    assert dao.exists('abc1234')
    assert dao.get('abc1234') is short_url
    assert len(dao) == 1


def test_insert_duplicate(dao):
    dao.insert(ShortURLModel(shortcode='abc1234', target='https://example.com/a'))

    with pytest.raises(ShortURLAlreadyExistsError):
        dao.insert(ShortURLModel(shortcode='abc1234', target='https://example.com/b'))
    assert dao.get('abc1234').target == 'https://example.com/a'


def test_get_missing(dao):
    assert not dao.exists('missing')
    with pytest.raises(ShortURLNotFoundError):
        dao.get('missing')


def test_seed_counter_only_once(dao):
    assert dao.count() == 0
    assert dao.seed_counter(1000) is True
    assert dao.seed_counter(5) is False
    assert dao.count() == 1000
    assert dao.count(increment=True) == 1001


def test_concurrent_increments_are_distinct(dao):
    dao.seed_counter(1000)

    with ThreadPoolExecutor(max_workers=8) as executor:
        values = list(executor.map(lambda _: dao.count(increment=True), range(400)))

    assert sorted(values) == list(range(1001, 1401))
