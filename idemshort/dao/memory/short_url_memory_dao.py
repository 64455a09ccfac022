"""In-memory ShortURL DAO for single-process deployments, local runs and tests.

All state lives in one dictionary guarded by a lock, so insert() claims a
shortcode atomically exactly like the Redis SET NX path.
"""

import threading

from idemshort.models import ShortURLModel
from idemshort.dao.base import ShortURLBaseDAO
from idemshort.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


class ShortURLMemoryDAO(ShortURLBaseDAO):
    def __init__(self):
        self._records: dict[str, ShortURLModel] = {}
        self._counter: int | None = None
        self._lock = threading.Lock()

    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLMemoryDAO':
        with self._lock:
            if short_url.shortcode in self._records:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
            self._records[short_url.shortcode] = short_url
        return self

    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        try:
            return self._records[shortcode]
        except KeyError:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.") from None

    def exists(self, shortcode: str, **kwargs) -> bool:
        return shortcode in self._records

    def count(self, increment: bool = False, **kwargs) -> int:
        with self._lock:
            if increment:
                self._counter = (self._counter or 0) + 1
            return self._counter or 0

    def seed_counter(self, value: int, **kwargs) -> bool:
        with self._lock:
            if self._counter is not None:
                return False
            self._counter = value
            return True

    def __len__(self) -> int:
        return len(self._records)
