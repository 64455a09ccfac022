from idemshort.dao.base.short_url_base_dao import ShortURLBaseDAO
from idemshort.dao.base.idempotency_cache_base_dao import IdempotencyCacheBaseDAO


__all__ = [
    'ShortURLBaseDAO',
    'IdempotencyCacheBaseDAO',
]
