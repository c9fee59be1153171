from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from config.exam import CACHE_KEYS, CACHE_TTL
from database import queries
from database.store import find_many
from models.subjects import Subject as SubjectModel
from services.cache import CacheService


class SubjectService:
    """과목 목록/통계 조회. 자주 바뀌지 않는 데이터라 모두 캐시를 거친다."""

    def __init__(self, db: AsyncSession, cache: CacheService):
        self.db = db
        self.cache = cache

    async def get_all_subjects(self) -> List[Dict[str, Any]]:
        key = CACHE_KEYS["ALL_SUBJECTS"]

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        records = await find_many(self.db, SubjectModel, order_by=SubjectModel.code.asc())
        subjects = [{"code": r.code, "name": r.name} for r in records]
        await self.cache.set(key, subjects, CACHE_TTL["ALL_SUBJECTS"])
        return subjects

    async def get_score_level_statistics(self) -> List[Dict[str, Any]]:
        key = CACHE_KEYS["SCORE_LEVELS"]

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        statistics = await queries.score_level_statistics(self.db)
        await self.cache.set(key, statistics, CACHE_TTL["SCORE_LEVELS"])
        return statistics

    async def get_score_distribution(self) -> List[Dict[str, Any]]:
        key = CACHE_KEYS["SCORE_DISTRIBUTION"]

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        distribution = await queries.score_distribution(self.db)
        await self.cache.set(key, distribution, CACHE_TTL["SCORE_DISTRIBUTION"])
        return distribution

    async def invalidate_score_statistics(self) -> None:
        await self.cache.delete(CACHE_KEYS["SCORE_LEVELS"])
        await self.cache.delete(CACHE_KEYS["SCORE_DISTRIBUTION"])

    async def invalidate_subjects(self) -> None:
        await self.cache.delete(CACHE_KEYS["ALL_SUBJECTS"])
