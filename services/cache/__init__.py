from config.settings import Settings
from services.cache.base import CacheBackendError, CacheStore
from services.cache.cache_service import CacheService, invalidate_read_caches
from services.cache.memory_store import MemoryCacheStore
from services.cache.redis_store import CacheState, RedisCacheStore


def build_cache(settings: Settings) -> CacheService:
    """CACHE_BACKEND 설정에 맞는 CacheService 생성 (연결 시작은 호출 측에서)."""
    if settings.CACHE_BACKEND == "memory":
        store: CacheStore = MemoryCacheStore()
    else:
        store = RedisCacheStore.from_settings(settings)
    return CacheService(store, delete_batch_size=settings.CACHE_DELETE_BATCH_SIZE)


__all__ = [
    "CacheBackendError",
    "CacheService",
    "CacheState",
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "build_cache",
    "invalidate_read_caches",
]
