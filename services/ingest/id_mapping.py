"""
services/ingest/id_mapping.py

- 차원 테이블(과목/수험생)을 멱등 INSERT 한 뒤 다시 읽어서 자연키 → 대리키(id) 맵을 만든다
- 점수(Score)는 이 맵으로 student_id / subject_id를 채운다
"""

from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.exam import SUBJECTS
from database.store import IN_CLAUSE_CHUNK, chunked, insert_ignore
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel


async def seed_subjects(db: AsyncSession) -> Dict[str, int]:
    """고정 과목 목록을 넣고(이미 있으면 건너뜀) {code → id} 반환."""
    await insert_ignore(db, SubjectModel, SUBJECTS, conflict_keys=["code"])
    await db.commit()
    return await load_subject_id_map(db)


async def load_subject_id_map(db: AsyncSession) -> Dict[str, int]:
    rows = (await db.execute(select(SubjectModel.code, SubjectModel.id))).all()
    return {code: subject_id for code, subject_id in rows}


async def load_student_id_map(db: AsyncSession, sbds: Iterable[str]) -> Dict[str, int]:
    """배치의 수험번호 집합에 대한 {sbd → id}. IN 절은 IN_CLAUSE_CHUNK 단위로 나눠 조회."""
    id_map: Dict[str, int] = {}
    for chunk in chunked(sorted(set(sbds)), IN_CLAUSE_CHUNK):
        rows = (
            await db.execute(select(StudentModel.sbd, StudentModel.id).where(StudentModel.sbd.in_(chunk)))
        ).all()
        id_map.update({sbd: student_id for sbd, student_id in rows})
    return id_map
