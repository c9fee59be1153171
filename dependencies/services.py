from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from database.db import get_db
from services.cache import CacheService
from services.student_service import StudentService
from services.subject_service import SubjectService


def get_cache(request: Request) -> CacheService:
    # main.py 기동 시 app.state.cache 에 한 번 만들어 둔 인스턴스를 공유
    return request.app.state.cache


def get_student_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> StudentService:
    return StudentService(db, cache)


def get_subject_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> SubjectService:
    return SubjectService(db, cache)
