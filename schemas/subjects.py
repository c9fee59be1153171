from pydantic import BaseModel
from typing import List

# ✅ 과목 기본 정보 (GET /subjects, 점수 응답 안의 subject)
class Subject(BaseModel):
    code: str                                # 과목 코드 (예: TOAN)
    name: str                                # 과목 이름 (예: Toán)

# ✅ 4구간 통계 (GET /subjects/statistics/score-levels)
class ScoreLevelStatistics(BaseModel):
    subjectCode: str
    subjectName: str
    levelExcellent: int                      # >= 8점
    levelGood: int                           # >= 6, < 8점
    levelAverage: int                        # >= 4, < 6점
    levelPoor: int                           # < 4점
    total: int                               # 점수가 있는 수험생 수

# ✅ 점수 분포 (GET /subjects/statistics/score-distribution)
class DistributionBucket(BaseModel):
    range: str                               # "[0, 0.5]" ~ "[9.5, 10]"
    count: int

class ScoreDistribution(BaseModel):
    subjectCode: str
    subjectName: str
    distribution: List[DistributionBucket]   # 항상 20구간
