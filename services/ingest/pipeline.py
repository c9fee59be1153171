"""
services/ingest/pipeline.py

- 성적 CSV → DB 배치 수집
  1) 과목 시드 후 {code → id} 맵을 실행 전체에서 한 번만 계산
  2) CSV를 스트리밍으로 읽어 batch_size 행씩 묶음
     (현재 배치의 쓰기가 끝나야 다음 배치를 읽는다 → 메모리 상한, 배치 간 순차 처리)
  3) 배치마다: 수험생 멱등 INSERT → {sbd → id} 재조회 → 점수 멱등 INSERT
- 각 단계는 따로 커밋한다. 중간에 실패하면 전체를 다시 실행하면 된다(모든 INSERT가 멱등).
"""

import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.exam import SUBJECT_MAP
from database.store import chunked, insert_ignore
from models.scores import Score as ScoreModel
from models.students import Student as StudentModel
from services.ingest.csv_reader import ExamRow, IngestError, ReadStats, check_exam_file, read_exam_rows
from services.ingest.id_mapping import load_student_id_map, seed_subjects

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10000


@dataclass
class IngestReport:
    rows_read: int = 0
    rows_rejected: int = 0
    batches: int = 0
    students_submitted: int = 0
    scores_submitted: int = 0
    elapsed_seconds: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def dedupe_by_sbd(rows: Sequence[ExamRow]) -> List[ExamRow]:
    """수험생 INSERT용: 배치 안에서 같은 수험번호가 반복되면 첫 행만 남긴다."""
    seen = set()
    unique = []
    for row in rows:
        if row.sbd in seen:
            continue
        seen.add(row.sbd)
        unique.append(row)
    return unique


def build_score_records(
    rows: Sequence[ExamRow],
    student_ids: Dict[str, int],
    subject_ids: Dict[str, int],
) -> List[Dict[str, object]]:
    records = []
    for row in rows:
        student_id = student_ids.get(row.sbd)
        if student_id is None:
            raise IngestError(f"수험생 id를 찾을 수 없습니다: sbd={row.sbd} (line {row.line_number})")
        for column, score in row.scores.items():
            records.append(
                {
                    "student_id": student_id,
                    "subject_id": subject_ids[SUBJECT_MAP[column]],  # CSV 컬럼명 → 과목 코드 → id
                    "score": score,
                }
            )
    return records


class ExamScoreImporter:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size는 1 이상이어야 합니다")
        self._session_factory = session_factory
        self.batch_size = batch_size

    async def run(self, csv_path: Union[str, Path]) -> IngestReport:
        started = time.perf_counter()
        report = IngestReport()
        stats = ReadStats()
        # 헤더까지 확인한 뒤에야 과목 시드(첫 DB 쓰기)를 시작한다
        check_exam_file(csv_path)
        logger.info(f"수집 시작: {csv_path} (batch_size={self.batch_size})")

        subject_ids = await self.import_subjects()

        for batch in chunked(read_exam_rows(csv_path, stats), self.batch_size):
            students, scores = await self.process_batch(batch, subject_ids)
            report.batches += 1
            report.students_submitted += students
            report.scores_submitted += scores

        report.rows_read = stats.rows_read
        report.rows_rejected = stats.rows_rejected
        report.elapsed_seconds = round(time.perf_counter() - started, 3)
        logger.info(f"수집 완료: {report.to_dict()}")
        return report

    async def import_subjects(self) -> Dict[str, int]:
        async with self._session_factory() as db:
            subject_ids = await seed_subjects(db)
        missing = sorted(set(SUBJECT_MAP.values()) - subject_ids.keys())
        if missing:
            raise IngestError(f"과목 시드 후에도 없는 과목 코드: {missing}")
        logger.info(f"과목 {len(subject_ids)}개 준비 완료")
        return subject_ids

    async def process_batch(self, batch: Sequence[ExamRow], subject_ids: Dict[str, int]) -> tuple:
        """수험생 → id 맵 → 점수 순서로 처리. (제출한 수험생 수, 제출한 점수 수)를 반환."""
        rows = dedupe_by_sbd(batch)
        logger.info(f"배치 처리: {len(batch)}행 (고유 수험번호 {len(rows)}개)")

        async with self._session_factory() as db:
            # ✅ [1] 수험생: sbd 충돌은 건너뜀
            students = await insert_ignore(
                db,
                StudentModel,
                [{"sbd": r.sbd, "ma_ngoai_ngu": r.ma_ngoai_ngu} for r in rows],
                conflict_keys=["sbd"],
            )
            await db.commit()

            # ✅ [2] 방금 넣었거나 이미 있던 수험생의 id
            student_ids = await load_student_id_map(db, (r.sbd for r in rows))

            # ✅ [3] 점수: (student_id, subject_id) 충돌은 건너뜀
            # 중복 수험번호 행도 모두 넘긴다: 과목별로 먼저 나온 점수가 남는다
            score_records = build_score_records(batch, student_ids, subject_ids)
            scores = await insert_ignore(
                db, ScoreModel, score_records, conflict_keys=["student_id", "subject_id"]
            )
            await db.commit()

        logger.debug(f"배치 저장: 수험생 {students}명, 점수 {scores}건")
        return students, scores


async def ingest_exam_scores(
    csv_path: Union[str, Path],
    session_factory: async_sessionmaker[AsyncSession],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> IngestReport:
    """
    CSV 한 파일을 수집해 DB에 반영.

    Raises:
        ExamFileError: 파일이 없거나 헤더가 잘못된 경우
        IngestError: 과목 시드/수험생 id 매핑 실패
        SQLAlchemyError: DB 쓰기 실패 (현재 배치에서 중단)
    """
    importer = ExamScoreImporter(session_factory, batch_size=batch_size)
    return await importer.run(csv_path)
