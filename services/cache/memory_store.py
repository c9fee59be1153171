import copy
import fnmatch
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from services.cache.base import CacheStore


class MemoryCacheStore(CacheStore):
    """
    프로세스 내부 dict 캐시 (CACHE_BACKEND=memory, 테스트용)
    - 만료 시각은 clock() 기준 초 단위
    - 저장/조회 시 deepcopy 해서 호출 측이 캐시 내용을 바꾸지 못하게 한다
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}

    def _expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    async def get(self, key: str) -> Optional[Any]:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._expired(expires_at):
            del self._data[key]
            return None
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._data[key] = (copy.deepcopy(value), expires_at)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def keys(self, pattern: str) -> List[str]:
        return [
            key
            for key, (_, expires_at) in list(self._data.items())
            if fnmatch.fnmatchcase(key, pattern) and not self._expired(expires_at)
        ]

    async def reset(self) -> None:
        self._data.clear()
