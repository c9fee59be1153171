from pydantic import BaseModel, ConfigDict
from typing import List, Optional

from schemas.subjects import Subject

# ✅ 과목 하나의 점수
class SubjectScore(BaseModel):
    subject: Subject
    score: Optional[float] = None            # 점수 (없으면 null)

# ✅ 수험번호 조회 응답 (GET /students/{sbd}/scores)
class StudentScores(BaseModel):
    sbd: str                                 # 수험번호
    ma_ngoai_ngu: Optional[str] = None       # 외국어 코드
    scores: List[SubjectScore]

# ✅ 조합별 상위 수험생 (GET /students/top/group-{x})
#    과목 컬럼(toan, vat_li, ...)은 조합마다 달라서 extra 필드로 내려준다
class TopGroupStudent(BaseModel):
    sbd: str
    ma_ngoai_ngu: Optional[str] = None
    totalScore: float                        # 3과목 합계

    model_config = ConfigDict(extra="allow")
