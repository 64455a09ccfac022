"""Shorten and resolve operations

ShortenerService is the single entry point the HTTP layer talks to:

    shorten(url, caller_identity)
        validate -> fingerprint -> IdempotentCache.get_or_compute(
            compute = ShortcodeGenerator.generate(dao.exists, insert, url)
        )

    resolve(shortcode)
        direct lookup through the short URL DAO; no fingerprinting, no cache.
        A service built without generator and cache can only resolve.

Example:
    >>> service = ShortenerService(
    ...     short_url_dao=ShortURLMemoryDAO(),
    ...     generator=ShortcodeGenerator(LocalIdentifierAllocator(), ShortcodeEncoder(salt='s3cret')),
    ...     cache=IdempotentCache(IdempotencyCacheMemoryDAO()),
    ... )
    >>> result = service.shorten('https://example.com/a', 'caller-1')
    >>> service.resolve(result.shortcode)
    'https://example.com/a'
"""

import logging

from idemshort.core.cache import IdempotentCache
from idemshort.core.generator import ShortcodeGenerator
from idemshort.dao.base import ShortURLBaseDAO
from idemshort.exceptions import BadConfigurationError
from idemshort.models import ShortenResult, ShortURLModel
from idemshort.utils.fingerprint import fingerprint
from idemshort.utils.helpers import validate_url


logger = logging.getLogger(__name__)

SHORTENED_MESSAGE = 'Url shortened successfully'


class ShortenerService:
    """Idempotent short link creation and resolution.

    Args:
        short_url_dao (ShortURLBaseDAO):
            Durable short link store; also answers the generator's existence check.
        generator (ShortcodeGenerator | None):
            Allocates and claims new shortcodes. Required by shorten().
        cache (IdempotentCache | None):
            Replays results of duplicate shorten requests. Required by shorten().
        idempotency_ttl (float | None):
            Replay window in seconds. None uses the cache's default; <= 0
            disables replay entirely.
    """

    def __init__(
        self,
        short_url_dao: ShortURLBaseDAO,
        generator: ShortcodeGenerator | None = None,
        cache: IdempotentCache | None = None,
        idempotency_ttl: float | None = None,
    ):
        self.short_url_dao = short_url_dao
        self.generator = generator
        self.cache = cache
        self.idempotency_ttl = idempotency_ttl

    def shorten(self, url: str, caller_identity: str) -> ShortenResult:
        """Create a short link for url, or replay the one created moments ago.

        Raises:
            InvalidURLError: If url is empty or not an HTTP(S) URL.
            ExhaustedRetriesError: If no free shortcode could be claimed.
            BadConfigurationError: If the service was built for resolution only.
            DataStoreError: If the short link store is unavailable.
        """
        if self.generator is None or self.cache is None:
            raise BadConfigurationError('ShortenerService needs a generator and a cache to shorten URLs.')
        url = validate_url(url)
        key = fingerprint(url, caller_identity)
        computed = False

        def create() -> ShortenResult:
            nonlocal computed
            computed = True
            shortcode = self.generator.generate(self.short_url_dao.exists, self._persist, url)
            logger.info('Created short link.', extra={'shortcode': shortcode, 'cacheKey': key[:8]})
            return ShortenResult(shortcode=shortcode, target_url=url, message=SHORTENED_MESSAGE)

        result = self.cache.get_or_compute(key, create, ttl=self.idempotency_ttl, value_type=ShortenResult)
        if not computed:
            logger.info('Replaying short link for duplicate request.', extra={'shortcode': result.shortcode, 'cacheKey': key[:8]})
        return result

    def resolve(self, shortcode: str) -> str:
        """Return the original URL stored for shortcode.

        Raises:
            ShortURLNotFoundError: If the shortcode is unknown.
            DataStoreError: If the short link store is unavailable.
        """
        return self.short_url_dao.get(shortcode).target

    def _persist(self, shortcode: str, original_url: str) -> None:
        self.short_url_dao.insert(ShortURLModel(shortcode=shortcode, target=original_url))
