from idemshort.dao.memory.short_url_memory_dao import ShortURLMemoryDAO
from idemshort.dao.memory.idempotency_cache_memory_dao import IdempotencyCacheMemoryDAO


__all__ = [
    'ShortURLMemoryDAO',
    'IdempotencyCacheMemoryDAO',
]
