from idemshort.core.allocator import IdentifierAllocator, LocalIdentifierAllocator, RedisIdentifierAllocator
from idemshort.core.generator import GenerationState, ShortcodeGenerator
from idemshort.core.cache import IdempotentCache
from idemshort.core.service import ShortenerService


__all__ = [
    'IdentifierAllocator',
    'LocalIdentifierAllocator',
    'RedisIdentifierAllocator',
    'GenerationState',
    'ShortcodeGenerator',
    'IdempotentCache',
    'ShortenerService',
]
