from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from config.exam import TOP_LIMIT_DEFAULT, TOP_LIMIT_MAX, TOP_LIMIT_MIN
from dependencies.services import get_student_service
from schemas.common import ErrorResponse
from schemas.students import StudentScores, TopGroupStudent
from services.student_service import StudentService
from utils.validators import sbd_error

router = APIRouter(prefix="/students", tags=["수험생 성적"])


def clamp_limit(limit: Optional[int]) -> int:
    """limit 미지정 → 기본값 10, 범위 밖 숫자 → [1, 100]으로 보정."""
    if limit is None:
        return TOP_LIMIT_DEFAULT
    return max(TOP_LIMIT_MIN, min(limit, TOP_LIMIT_MAX))


# ==========================================================
# [조회] 수험번호로 성적 조회
# ==========================================================
@router.get(
    "/{sbd}/scores",
    response_model=StudentScores,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_scores_by_sbd(sbd: str, service: StudentService = Depends(get_student_service)):
    trimmed = sbd.strip()
    reason = sbd_error(trimmed)
    if reason:
        raise HTTPException(status_code=400, detail=reason)

    student = await service.find_scores_by_sbd(trimmed)
    if student is None:
        raise HTTPException(status_code=404, detail=f"수험번호 {trimmed}에 해당하는 수험생이 없습니다")
    return student


# ==========================================================
# [순위] 조합별 3과목 합계 상위 N명
# ==========================================================
async def _top_group(group: str, limit: Optional[int], service: StudentService):
    return await service.get_top_group(group, clamp_limit(limit))


# ✅ 조합 A (Toán, Vật lí, Hoá học)
@router.get("/top/group-a", response_model=List[TopGroupStudent])
async def get_top_group_a(limit: Optional[int] = Query(None), service: StudentService = Depends(get_student_service)):
    return await _top_group("a", limit, service)


# ✅ 조합 B (Toán, Hoá học, Sinh học)
@router.get("/top/group-b", response_model=List[TopGroupStudent])
async def get_top_group_b(limit: Optional[int] = Query(None), service: StudentService = Depends(get_student_service)):
    return await _top_group("b", limit, service)


# ✅ 조합 C (Ngữ văn, Lịch sử, Địa lí)
@router.get("/top/group-c", response_model=List[TopGroupStudent])
async def get_top_group_c(limit: Optional[int] = Query(None), service: StudentService = Depends(get_student_service)):
    return await _top_group("c", limit, service)


# ✅ 조합 D (Toán, Ngữ văn, Ngoại ngữ)
@router.get("/top/group-d", response_model=List[TopGroupStudent])
async def get_top_group_d(limit: Optional[int] = Query(None), service: StudentService = Depends(get_student_service)):
    return await _top_group("d", limit, service)
