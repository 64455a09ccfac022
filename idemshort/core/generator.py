"""Collision-avoiding shortcode generation

Encoding an identifier is pure, but claiming the resulting shortcode happens
against a shared store that may already hold it (another process, an older
allocator, a previous encoder configuration). The generator therefore loops:

    ALLOCATE -> ENCODE -> CHECK_EXISTS --(taken)--> RETRY -> ALLOCATE ...
                                       +--(free)--> PERSIST --(ok)-------> DONE
                                                            +--(taken)---> RETRY
    RETRY with the budget spent -> FATAL (ExhaustedRetriesError)

A duplicate reported by `persist` (a writer claimed the shortcode between the
check and the write) is a collision like any other. Every other persistence
error propagates unchanged.
"""

import logging
from enum import StrEnum

from idemshort.constants import Defaults
from idemshort.core.allocator import IdentifierAllocator
from idemshort.dao.exceptions import ShortURLAlreadyExistsError
from idemshort.exceptions import ExhaustedRetriesError
from idemshort.types import ExistsCheck, Persist
from idemshort.utils.shortener import ShortcodeEncoder


logger = logging.getLogger(__name__)


class GenerationState(StrEnum):
    ALLOCATE = 'allocate'
    ENCODE = 'encode'
    CHECK_EXISTS = 'check_exists'
    RETRY = 'retry'
    PERSIST = 'persist'
    DONE = 'done'
    FATAL = 'fatal'


class ShortcodeGenerator:
    """Compose an allocator and an encoder into unclaimed shortcodes.

    Args:
        allocator (IdentifierAllocator):
            Source of strictly increasing identifiers.
        encoder (ShortcodeEncoder):
            Pure identifier -> shortcode mapping.
        max_retries (int):
            Collisions tolerated within one generate() call. Exceeding it means
            the shortcode space is too small for the allocation volume.

    Example:
        >>> generator = ShortcodeGenerator(LocalIdentifierAllocator(), ShortcodeEncoder(salt='s3cret'))
        >>> generator.generate(dao.exists, persist, 'https://example.com/a')
        'hR0dnQx'
    """

    def __init__(self, allocator: IdentifierAllocator, encoder: ShortcodeEncoder, max_retries: int = Defaults.MAX_RETRIES):
        if max_retries < 0:
            raise ValueError(f'max_retries must be non-negative (given value: {max_retries}).')
        self.allocator = allocator
        self.encoder = encoder
        self.max_retries = max_retries
        # Attempts used by the most recent generate() call; per-call counts are logged on DONE and FATAL
        self.attempts = 0

    def generate(self, exists_check: ExistsCheck, persist: Persist, original_url: str) -> str:
        """Allocate, encode and claim a shortcode for original_url.

        Args:
            exists_check (Callable[[str], bool]):
                True if the shortcode is already claimed.
            persist (Callable[[str, str], None]):
                Durably associate (shortcode, original_url). Must raise
                ShortURLAlreadyExistsError when the shortcode is taken.
            original_url (str):
                URL to associate with the claimed shortcode.

        Returns:
            str: The claimed shortcode.

        Raises:
            ExhaustedRetriesError:
                If max_retries collisions happened in a row.
            DataStoreError:
                If the store fails for any reason other than a duplicate shortcode.
        """
        state = GenerationState.ALLOCATE
        attempts = 0
        identifier = None
        shortcode = None

        while True:
            match state:
                case GenerationState.ALLOCATE:
                    attempts += 1
                    self.attempts = attempts
                    identifier = self.allocator.next()
                    state = GenerationState.ENCODE

                case GenerationState.ENCODE:
                    shortcode = self.encoder.encode(identifier)
                    state = GenerationState.CHECK_EXISTS

                case GenerationState.CHECK_EXISTS:
                    state = GenerationState.RETRY if exists_check(shortcode) else GenerationState.PERSIST

                case GenerationState.PERSIST:
                    try:
                        persist(shortcode, original_url)
                    except ShortURLAlreadyExistsError:
                        logger.info('Shortcode claimed concurrently; retrying.', extra={'shortcode': shortcode, 'attempts': attempts})
                        state = GenerationState.RETRY
                    else:
                        state = GenerationState.DONE

                case GenerationState.RETRY:
                    logger.debug('Shortcode collision.', extra={'shortcode': shortcode, 'identifier': identifier, 'attempts': attempts})
                    state = GenerationState.ALLOCATE if attempts <= self.max_retries else GenerationState.FATAL

                case GenerationState.DONE:
                    logger.info('Claimed shortcode.', extra={'shortcode': shortcode, 'identifier': identifier, 'attempts': attempts})
                    return shortcode

                case GenerationState.FATAL:
                    logger.error(
                        'Exhausted shortcode retry budget. The shortcode length is too small for the allocation volume.',
                        extra={'attempts': attempts, 'maxRetries': self.max_retries, 'shortcodeLength': self.encoder.length},
                    )
                    raise ExhaustedRetriesError(f'No unclaimed shortcode found after {attempts} attempts.')
