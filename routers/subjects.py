from typing import List

from fastapi import APIRouter, Depends

from dependencies.services import get_subject_service
from schemas.subjects import ScoreDistribution, ScoreLevelStatistics, Subject
from services.subject_service import SubjectService

router = APIRouter(prefix="/subjects", tags=["과목 정보"])


# ✅ [READ] 전체 과목 조회
@router.get("", response_model=List[Subject])
async def read_subjects(service: SubjectService = Depends(get_subject_service)):
    return await service.get_all_subjects()


# ✅ [통계] 과목별 4구간 인원 (>=8, [6,8), [4,6), <4)
@router.get("/statistics/score-levels", response_model=List[ScoreLevelStatistics])
async def read_score_level_statistics(service: SubjectService = Depends(get_subject_service)):
    return await service.get_score_level_statistics()


# ✅ [통계] 과목별 0.5점 단위 점수 분포
@router.get("/statistics/score-distribution", response_model=List[ScoreDistribution])
async def read_score_distribution(service: SubjectService = Depends(get_subject_service)):
    return await service.get_score_distribution()
