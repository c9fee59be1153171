"""
services/cache/cache_service.py

- 조회 서비스들이 주입받아 쓰는 캐시 창구 (cache-aside 패턴의 캐시 쪽)
- 어떤 캐시 오류도 호출 측으로 올리지 않는다
  - get 실패 → None(미스와 동일), set/delete/reset 실패 → 로그만 남기고 무시
  - 캐시가 죽어도 응답은 DB 조회 결과 그대로
"""

import logging
from typing import Any, Optional

from config.exam import CACHE_KEYS, GROUP_SUBJECTS
from database.store import chunked
from services.cache.base import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600


class CacheService:
    def __init__(self, store: CacheStore, delete_batch_size: int = 500):
        self.store = store
        self.delete_batch_size = delete_batch_size

    def is_live(self) -> bool:
        return self.store.is_live()

    async def check_health(self) -> bool:
        try:
            return await self.store.check_health()
        except Exception as exc:
            logger.warning(f"캐시 헬스체크 실패: {exc}")
            return False

    async def get(self, key: str) -> Optional[Any]:
        try:
            return await self.store.get(key)
        except Exception as exc:
            logger.warning(f"캐시 조회 실패 key={key}: {exc}")
            return None

    async def set(self, key: str, value: Any, ttl: int = DEFAULT_TTL) -> None:
        try:
            await self.store.set(key, value, ttl)
        except Exception as exc:
            logger.warning(f"캐시 저장 실패 key={key}: {exc}")

    async def delete(self, key: str) -> None:
        try:
            await self.store.delete(key)
        except Exception as exc:
            logger.warning(f"캐시 삭제 실패 key={key}: {exc}")

    async def delete_pattern(self, pattern: str) -> int:
        """pattern(글롭)에 맞는 키를 delete_batch_size 단위로 나눠 삭제. 삭제 요청한 키 수를 반환."""
        deleted = 0
        try:
            keys = await self.store.keys(pattern)
            for batch in chunked(keys, self.delete_batch_size):
                await self.store.delete(*batch)
                deleted += len(batch)
        except Exception as exc:
            logger.warning(f"캐시 패턴 삭제 실패 pattern={pattern} (삭제 {deleted}건 후 중단): {exc}")
        return deleted

    async def reset(self) -> None:
        try:
            await self.store.reset()
        except Exception as exc:
            logger.warning(f"캐시 초기화 실패: {exc}")

    async def close(self) -> None:
        try:
            await self.store.close()
        except Exception as exc:
            logger.warning(f"캐시 연결 종료 실패: {exc}")


async def invalidate_read_caches(cache: CacheService) -> Optional[int]:
    """
    재수집 후 모든 조회용 캐시 네임스페이스를 비운다.
    캐시에 연결되어 있지 않으면 아무것도 지우지 못하므로 None을 반환한다.
    """
    if not cache.is_live():
        logger.warning("캐시가 연결되어 있지 않아 조회 캐시를 무효화하지 못했습니다 (TTL 만료까지 이전 값이 남음)")
        return None
    patterns = [CACHE_KEYS["STUDENT_SCORES"].format(sbd="*")]
    patterns += [CACHE_KEYS["TOP_GROUP"].format(group=g, limit="*") for g in GROUP_SUBJECTS]
    total = 0
    for pattern in patterns:
        total += await cache.delete_pattern(pattern)
    for key in ("ALL_SUBJECTS", "SCORE_LEVELS", "SCORE_DISTRIBUTION"):
        await cache.delete(CACHE_KEYS[key])
    logger.info(f"조회 캐시 무효화 완료 (패턴 삭제 {total}건 + 고정 키 3개)")
    return total
