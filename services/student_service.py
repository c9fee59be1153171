"""
services/student_service.py

- 수험생 관련 조회 비즈니스 로직 (cache-aside)
  캐시 조회 → 있으면 반환 / 없으면 DB 조회 → 캐시에 TTL과 함께 저장 → 반환
- 존재하지 않는 수험번호는 캐시하지 않는다 (404는 매번 DB 확인)
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from config.exam import CACHE_KEYS, CACHE_TTL, GROUP_SUBJECTS, TOP_LIMIT_MAX, TOP_LIMIT_MIN
from database import queries
from services.cache import CacheService

logger = logging.getLogger(__name__)


class StudentService:
    def __init__(self, db: AsyncSession, cache: CacheService):
        self.db = db
        self.cache = cache

    async def find_scores_by_sbd(self, sbd: str) -> Optional[Dict[str, Any]]:
        key = CACHE_KEYS["STUDENT_SCORES"].format(sbd=sbd)

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        student = await queries.find_student_scores(self.db, sbd)
        if student is None:
            return None

        await self.cache.set(key, student, CACHE_TTL["STUDENT_SCORES"])
        return student

    async def get_top_group(self, group: str, limit: int) -> List[Dict[str, Any]]:
        if group not in GROUP_SUBJECTS:
            raise ValueError(f"지원하지 않는 조합입니다: {group}")
        if not TOP_LIMIT_MIN <= limit <= TOP_LIMIT_MAX:
            raise ValueError(f"limit은 {TOP_LIMIT_MIN}~{TOP_LIMIT_MAX} 사이여야 합니다")

        key = CACHE_KEYS["TOP_GROUP"].format(group=group, limit=limit)

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        ranking = await queries.find_top_group(self.db, group, limit)
        await self.cache.set(key, ranking, CACHE_TTL["TOP_GROUP"])
        return ranking

    # =========================
    # 캐시 무효화
    # =========================
    async def invalidate_student(self, sbd: str) -> None:
        await self.cache.delete(CACHE_KEYS["STUDENT_SCORES"].format(sbd=sbd))

    async def invalidate_top_group(self, group: str, limit: Optional[int] = None) -> int:
        """limit을 알면 해당 키만, 모르면 그 조합의 모든 limit 키를 삭제."""
        if limit is not None:
            await self.cache.delete(CACHE_KEYS["TOP_GROUP"].format(group=group, limit=limit))
            return 1
        return await self.cache.delete_pattern(CACHE_KEYS["TOP_GROUP"].format(group=group, limit="*"))
