"""
database/queries.py

- 조회 API가 사용하는 집계/조인 쿼리 모음 (캐시 계층은 이 결과를 그대로 저장)
  1) find_student_scores(): 수험번호로 수험생 + 과목별 점수
  2) find_top_group(): 조합별 3과목 합계 상위 N명 (3과목 모두 점수가 있어야 순위 대상)
  3) score_level_statistics(): 과목별 4구간(>=8, [6,8), [4,6), <4) 인원
  4) score_distribution(): 과목별 0.5점 단위 20구간 분포
- 반환값은 모두 JSON 직렬화 가능한 dict/list 이다.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import case, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.exam import GROUP_SUBJECTS, SUBJECT_MAP
from models.scores import Score
from models.students import Student
from models.subjects import Subject

DISTRIBUTION_BUCKETS = 20
BUCKET_WIDTH = 0.5


async def find_student_scores(db: AsyncSession, sbd: str) -> Optional[Dict[str, Any]]:
    """수험생이 없으면 None."""
    student = (
        await db.execute(select(Student.id, Student.sbd, Student.ma_ngoai_ngu).where(Student.sbd == sbd))
    ).first()
    if student is None:
        return None

    rows = (
        await db.execute(
            select(Subject.code, Subject.name, Score.score)
            .join(Subject, Subject.id == Score.subject_id)
            .where(Score.student_id == student.id)
            .order_by(Subject.code.asc())
        )
    ).all()

    return {
        "sbd": student.sbd,
        "ma_ngoai_ngu": student.ma_ngoai_ngu,
        "scores": [
            {
                "subject": {"code": r.code, "name": r.name},
                "score": float(r.score) if r.score is not None else None,
            }
            for r in rows
        ],
    }


async def find_top_group(db: AsyncSession, group: str, limit: int) -> List[Dict[str, Any]]:
    columns = GROUP_SUBJECTS[group]
    codes = [SUBJECT_MAP[c] for c in columns]

    per_subject = [
        func.max(case((Subject.code == SUBJECT_MAP[column], Score.score))).label(column)
        for column in columns
    ]
    total_score = func.sum(Score.score).label("total_score")

    stmt = (
        select(Student.sbd, Student.ma_ngoai_ngu, *per_subject, total_score)
        .join(Score, Score.student_id == Student.id)
        .join(Subject, Subject.id == Score.subject_id)
        .where(Subject.code.in_(codes), Score.score.is_not(None))
        .group_by(Student.id, Student.sbd, Student.ma_ngoai_ngu)
        # ✅ 3과목이 모두 있는 수험생만 순위 대상
        .having(func.count(distinct(Subject.code)) == len(codes))
        .order_by(total_score.desc(), Student.sbd.asc())
        .limit(limit)
    )
    rows = (await db.execute(stmt)).mappings().all()

    result = []
    for row in rows:
        item = {"sbd": row["sbd"], "ma_ngoai_ngu": row["ma_ngoai_ngu"]}
        for column in columns:
            item[column] = float(row[column]) if row[column] is not None else None
        item["totalScore"] = round(float(row["total_score"]), 2)
        result.append(item)
    return result


async def score_level_statistics(db: AsyncSession) -> List[Dict[str, Any]]:
    score = Score.score
    stmt = (
        select(
            Subject.code,
            Subject.name,
            func.count(case((score >= 8, 1))).label("level_excellent"),
            func.count(case(((score >= 6) & (score < 8), 1))).label("level_good"),
            func.count(case(((score >= 4) & (score < 6), 1))).label("level_average"),
            func.count(case((score < 4, 1))).label("level_poor"),
            func.count(score).label("total"),
        )
        .select_from(Subject)
        # LEFT JOIN: 점수가 하나도 없는 과목도 0으로 표시
        .outerjoin(Score, Score.subject_id == Subject.id)
        .group_by(Subject.id, Subject.code, Subject.name)
        .order_by(Subject.code.asc())
    )
    rows = (await db.execute(stmt)).all()
    return [
        {
            "subjectCode": r.code,
            "subjectName": r.name,
            "levelExcellent": int(r.level_excellent),
            "levelGood": int(r.level_good),
            "levelAverage": int(r.level_average),
            "levelPoor": int(r.level_poor),
            "total": int(r.total),
        }
        for r in rows
    ]


def bucket_index(value: float) -> Optional[int]:
    """0.5점 단위 구간 번호(0~19). 10점은 마지막 구간, 범위 밖은 None."""
    if value < 0 or value > 10:
        return None
    return min(int(value / BUCKET_WIDTH), DISTRIBUTION_BUCKETS - 1)


def _fmt(v: float) -> str:
    return f"{v:g}"


RANGE_LABELS = [
    f"[{_fmt(i * BUCKET_WIDTH)}, {_fmt((i + 1) * BUCKET_WIDTH)}]" for i in range(DISTRIBUTION_BUCKETS)
]


async def score_distribution(db: AsyncSession) -> List[Dict[str, Any]]:
    # 점수값은 0.25/0.2 단위라 과목당 고유값이 적다 → 값별 COUNT만 DB에서 하고 구간 계산은 여기서
    stmt = (
        select(Subject.code, Subject.name, Score.score, func.count().label("cnt"))
        .join(Score, Score.subject_id == Subject.id)
        .where(Score.score.is_not(None))
        .group_by(Subject.id, Subject.code, Subject.name, Score.score)
        .order_by(Subject.code.asc())
    )
    rows = (await db.execute(stmt)).all()

    by_subject: Dict[str, Dict[str, Any]] = {}
    for r in rows:
        idx = bucket_index(float(r.score))
        if idx is None:
            continue
        entry = by_subject.setdefault(
            r.code, {"subjectCode": r.code, "subjectName": r.name, "counts": [0] * DISTRIBUTION_BUCKETS}
        )
        entry["counts"][idx] += int(r.cnt)

    return [
        {
            "subjectCode": entry["subjectCode"],
            "subjectName": entry["subjectName"],
            "distribution": [
                {"range": label, "count": count} for label, count in zip(RANGE_LABELS, entry["counts"])
            ],
        }
        for entry in by_subject.values()
    ]
