"""
tests/conftest.py

- 테스트는 MySQL/Redis 없이 돈다: 임시 SQLite(aiosqlite) + 메모리 캐시
- 환경변수는 config.settings import 전에 잡아야 하므로 맨 위에서 설정
"""

import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CACHE_BACKEND", "memory")

import asyncio
import csv

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from database.db import get_db, init_models, make_session_factory
from dependencies.services import get_cache
from models.scores import Score
from models.students import Student
from models.subjects import Subject
from services.cache import CacheService, MemoryCacheStore
from services.ingest import ingest_exam_scores

CSV_COLUMNS = [
    "sbd", "toan", "ngu_van", "ngoai_ngu", "vat_li", "hoa_hoc",
    "sinh_hoc", "lich_su", "dia_li", "gdcd", "ma_ngoai_ngu",
]

# 01000001: 8.5 + 7.0 + 6.25 = 21.75 (A), 국어 없음
# 01000002: A 27.5 / D 24.5
# 01000003: C 25.5 / D 19.2
# 01000004: 수학+물리만 있음 → A/B 순위에서 제외
# 01000005: A 17.0 / B 22.5
SAMPLE_ROWS = [
    {"sbd": "01000001", "toan": "8.5", "ngu_van": "", "vat_li": "7.0", "hoa_hoc": "6.25", "ma_ngoai_ngu": ""},
    {"sbd": "01000002", "toan": "9.0", "ngu_van": "7.5", "ngoai_ngu": "8.0", "vat_li": "9.5", "hoa_hoc": "9.0",
     "ma_ngoai_ngu": "N1"},
    {"sbd": "01000003", "toan": "6.0", "ngu_van": "8.0", "ngoai_ngu": "5.2", "lich_su": "9.0", "dia_li": "8.5",
     "gdcd": "10", "ma_ngoai_ngu": "N1"},
    {"sbd": "01000004", "toan": "10", "vat_li": "9.75", "sinh_hoc": "3.5"},
    {"sbd": "01000005", "toan": "7.0", "vat_li": "2.0", "hoa_hoc": "8.0", "sinh_hoc": "7.5"},
]


def run(coro):
    return asyncio.run(coro)


def write_exam_csv(path, rows, columns=CSV_COLUMNS):
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({c: row.get(c, "") for c in columns})
    return path


async def fetch_students(session_factory):
    async with session_factory() as db:
        rows = (await db.execute(select(Student.sbd, Student.ma_ngoai_ngu).order_by(Student.sbd))).all()
    return [tuple(r) for r in rows]


async def fetch_scores(session_factory):
    """(sbd, 과목 코드, 점수) 정렬 목록: id와 무관하게 내용만 비교하기 위함."""
    async with session_factory() as db:
        rows = (
            await db.execute(
                select(Student.sbd, Subject.code, Score.score)
                .join(Score, Score.student_id == Student.id)
                .join(Subject, Subject.id == Score.subject_id)
                .order_by(Student.sbd, Subject.code)
            )
        ).all()
    return [tuple(r) for r in rows]


@pytest.fixture
def make_session_factory_for(tmp_path):
    engines = []

    def _make(name="exam.db"):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / name}", poolclass=NullPool)
        run(init_models(engine))
        engines.append(engine)
        return make_session_factory(engine)

    yield _make
    for engine in engines:
        run(engine.dispose())


@pytest.fixture
def session_factory(make_session_factory_for):
    return make_session_factory_for()


@pytest.fixture
def sample_csv(tmp_path):
    return write_exam_csv(tmp_path / "diem_thi.csv", SAMPLE_ROWS)


@pytest.fixture
def seeded_session_factory(session_factory, sample_csv):
    run(ingest_exam_scores(sample_csv, session_factory, batch_size=2))
    return session_factory


@pytest.fixture
def cache():
    return CacheService(MemoryCacheStore(), delete_batch_size=3)


def _client_for(session_factory, cache_service):
    from main import app

    async def _get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_cache] = lambda: cache_service
    return TestClient(app)


@pytest.fixture
def client(seeded_session_factory, cache):
    from main import app

    yield _client_for(seeded_session_factory, cache)
    app.dependency_overrides.clear()


@pytest.fixture
def client_factory(seeded_session_factory):
    from main import app

    def _make(cache_service):
        return _client_for(seeded_session_factory, cache_service)

    yield _make
    app.dependency_overrides.clear()
