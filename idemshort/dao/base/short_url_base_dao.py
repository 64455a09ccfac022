"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-memory, PostgreSQL).

Responsibilities:
    - Claim shortcodes by inserting ShortURLModel records, atomically per shortcode.
    - Retrieve records for resolution and probe for existence.
    - Own the shared identifier counter used by the shortcode generator.
    - Standardize error handling across data store implementations.

Example:
    >>> from idemshort.models import ShortURLModel
    >>> from idemshort.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(...)
    >>> dao.insert(ShortURLModel(shortcode='a1b2c3d', target='https://example.com/blog/article-123'))
    >>> dao.get('a1b2c3d').target
    'https://example.com/blog/article-123'
"""

from abc import ABC, abstractmethod

from idemshort.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLBaseDAO:
            Claim a shortcode. Raises ShortURLAlreadyExistsError if it is taken,
            DataStoreError on any other storage failure.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Raises ShortURLNotFoundError if the shortcode is unknown.

        exists(shortcode: str, **kwargs) -> bool:
            Non-mutating existence probe.

        count(increment: bool, **kwargs) -> int:
            Return (optionally increment first) the shared identifier counter.

        seed_counter(value: int, **kwargs) -> bool:
            Initialize the counter to `value` unless it already exists.

    NOTE:
        - Records are never mutated or deleted through this interface.
        - insert() must distinguish a duplicate shortcode from other faults;
          the generator treats the former as a collision and retries.
    """

    @abstractmethod
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLBaseDAO':
        """Insert a new ShortURLModel into the data store.

        Raises:
            ShortURLAlreadyExistsError:
                If a ShortURLModel with the same shortcode already exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a ShortURLModel from the data store by its shortcode.

        Raises:
            ShortURLNotFoundError:
                If no ShortURLModel with the given shortcode exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        pass

    @abstractmethod
    def count(self, increment: bool = False, **kwargs) -> int:
        """Retrieve the current counter value from the data store.

        Args:
            increment (bool):
                If True, atomically increment the counter by 1 and return the new value.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def seed_counter(self, value: int, **kwargs) -> bool:
        """Set the counter to `value` only if it was never initialized.

        Returns:
            bool: True if the counter was seeded by this call.
        """
        pass
