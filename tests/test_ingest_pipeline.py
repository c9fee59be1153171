"""CSV → DB 배치 수집 테스트 (임시 SQLite)."""

import pytest
from sqlalchemy import func, select

from conftest import SAMPLE_ROWS, fetch_scores, fetch_students, run, write_exam_csv
from config.exam import SUBJECT_MAP, SUBJECTS
from models.subjects import Subject
from services.ingest import ExamFileError, ExamScoreImporter, ingest_exam_scores
from services.ingest.csv_reader import ExamRow
from services.ingest.pipeline import build_score_records, dedupe_by_sbd


def test_ingest_creates_students_and_sparse_scores(session_factory, sample_csv):
    report = run(ingest_exam_scores(sample_csv, session_factory, batch_size=2))

    assert report.rows_read == 5
    assert report.rows_rejected == 0
    assert report.batches == 3
    assert report.students_submitted == 5

    students = run(fetch_students(session_factory))
    assert students[0] == ("01000001", None)
    assert ("01000002", "N1") in students

    scores = run(fetch_scores(session_factory))
    first = [(code, score) for sbd, code, score in scores if sbd == "01000001"]
    assert first == [("HOA_HOC", 6.25), ("TOAN", 8.5), ("VAT_LI", 7.0)]
    assert report.scores_submitted == len(scores)


def test_ingest_never_creates_rows_for_empty_subject_values(session_factory, sample_csv):
    run(ingest_exam_scores(sample_csv, session_factory))

    stored = {(sbd, code) for sbd, code, _ in run(fetch_scores(session_factory))}
    for row in SAMPLE_ROWS:
        for column, code in SUBJECT_MAP.items():
            if not row.get(column):
                assert (row["sbd"], code) not in stored


def test_ingest_seeds_all_subjects_once(session_factory, sample_csv):
    run(ingest_exam_scores(sample_csv, session_factory))
    run(ingest_exam_scores(sample_csv, session_factory))

    async def count_subjects():
        async with session_factory() as db:
            return (await db.execute(select(func.count()).select_from(Subject))).scalar_one()

    assert run(count_subjects()) == len(SUBJECTS)


def test_reingest_is_idempotent(session_factory, sample_csv):
    run(ingest_exam_scores(sample_csv, session_factory, batch_size=3))
    students_once = run(fetch_students(session_factory))
    scores_once = run(fetch_scores(session_factory))

    run(ingest_exam_scores(sample_csv, session_factory, batch_size=3))

    assert run(fetch_students(session_factory)) == students_once
    assert run(fetch_scores(session_factory)) == scores_once


def test_batch_size_does_not_change_result(make_session_factory_for, tmp_path):
    rows = SAMPLE_ROWS + [
        # 같은 수험번호가 다시 나오면 먼저 나온 값이 남는다
        {"sbd": "01000001", "toan": "1.0", "ngu_van": "4.0", "ma_ngoai_ngu": "N3"},
        {"sbd": "01000006", "gdcd": "8.75"},
    ]
    path = write_exam_csv(tmp_path / "dup.csv", rows)
    small = make_session_factory_for("small.db")
    large = make_session_factory_for("large.db")

    run(ingest_exam_scores(path, small, batch_size=1))
    run(ingest_exam_scores(path, large, batch_size=10000))

    assert run(fetch_students(small)) == run(fetch_students(large))
    assert run(fetch_scores(small)) == run(fetch_scores(large))
    assert ("01000001", "TOAN", 8.5) in run(fetch_scores(large))
    assert ("01000001", "NGU_VAN", 4.0) in run(fetch_scores(large))


def test_malformed_rows_are_skipped_and_counted(session_factory, tmp_path):
    path = write_exam_csv(
        tmp_path / "bad.csv",
        [
            {"sbd": "01000001", "toan": "8.5"},
            {"sbd": "01000002", "toan": "tám"},
            {"sbd": "99", "toan": "5"},
            {"sbd": "01000003", "toan": "4"},
        ],
    )

    report = run(ingest_exam_scores(path, session_factory, batch_size=10))

    assert report.rows_read == 4
    assert report.rows_rejected == 2
    assert [sbd for sbd, _ in run(fetch_students(session_factory))] == ["01000001", "01000003"]


def test_missing_file_fails_before_touching_the_store(session_factory, tmp_path):
    with pytest.raises(ExamFileError):
        run(ingest_exam_scores(tmp_path / "missing.csv", session_factory))

    assert run(fetch_students(session_factory)) == []


def test_importer_rejects_non_positive_batch_size(session_factory):
    with pytest.raises(ValueError):
        ExamScoreImporter(session_factory, batch_size=0)


def test_batches_are_written_strictly_in_order(session_factory, sample_csv):
    importer = ExamScoreImporter(session_factory, batch_size=2)
    seen = []
    original = importer.process_batch

    async def recording(batch, subject_ids):
        # 이전 배치의 쓰기가 끝나기 전에는 다음 배치가 들어오지 않는다
        seen.append(("start", [r.sbd for r in batch]))
        result = await original(batch, subject_ids)
        seen.append(("end", [r.sbd for r in batch]))
        return result

    importer.process_batch = recording
    run(importer.run(sample_csv))

    assert [kind for kind, _ in seen] == ["start", "end"] * 3
    assert seen[0][1] == ["01000001", "01000002"]
    assert seen[-1][1] == ["01000005"]


def test_dedupe_by_sbd_keeps_first_occurrence():
    rows = [
        ExamRow(2, "01000001", "N1", {"toan": 1.0}),
        ExamRow(3, "01000001", None, {"toan": 2.0}),
        ExamRow(4, "01000002", None, {}),
    ]

    unique = dedupe_by_sbd(rows)

    assert [(r.line_number, r.sbd) for r in unique] == [(2, "01000001"), (4, "01000002")]


def test_build_score_records_maps_columns_to_ids():
    rows = [ExamRow(2, "01000001", None, {"toan": 8.5, "hoa_hoc": 6.25})]

    records = build_score_records(rows, {"01000001": 11}, {"TOAN": 1, "HOA_HOC": 5})

    assert records == [
        {"student_id": 11, "subject_id": 1, "score": 8.5},
        {"student_id": 11, "subject_id": 5, "score": 6.25},
    ]


def test_missing_sbd_column_fails_before_seeding_subjects(session_factory, tmp_path):
    path = tmp_path / "no_sbd.csv"
    path.write_text("toan,ngu_van\n8,7\n", encoding="utf-8")

    with pytest.raises(ExamFileError):
        run(ingest_exam_scores(path, session_factory))

    async def count_subjects():
        async with session_factory() as db:
            return (await db.execute(select(func.count()).select_from(Subject))).scalar_one()

    assert run(count_subjects()) == 0
