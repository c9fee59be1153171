from abc import ABC, abstractmethod
from typing import Any, List, Optional


class CacheBackendError(Exception):
    """캐시 백엔드(네트워크/타임아웃/직렬화) 실패. CacheService 밖으로는 나가지 않는다."""


class CacheStore(ABC):
    """캐시 기술별 구현이 제공해야 하는 다섯 가지 연산."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]: ...
    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None: ...
    @abstractmethod
    async def delete(self, *keys: str) -> None: ...
    @abstractmethod
    async def keys(self, pattern: str) -> List[str]: ...
    @abstractmethod
    async def reset(self) -> None: ...

    def is_live(self) -> bool:
        return True

    async def check_health(self) -> bool:
        return self.is_live()

    async def close(self) -> None:
        return None
