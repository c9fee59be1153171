"""
database/store.py

- 수집 파이프라인과 조회 서비스가 공유하는 최소한의 저장소 연산
  1) insert_ignore(): 유니크 키 충돌 행은 건너뛰는 배치 INSERT (재실행해도 중복이 생기지 않음)
  2) find_many(): 조건에 맞는 행 조회
  3) chunked(): IN 절/대량 작업을 일정 크기로 나누는 도우미
- DB 방언(MySQL / PostgreSQL / SQLite)에 따라 "충돌 시 무시" 구문이 다르므로 여기서 분기한다.
"""

from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List, Sequence, TypeVar

from sqlalchemy import insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")

IN_CLAUSE_CHUNK = 1000  # 드라이버별 바인드 파라미터 한도를 넘지 않도록


def chunked(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """items를 size 개씩 잘라 리스트로 돌려준다 (마지막 묶음은 더 작을 수 있음)."""
    if size < 1:
        raise ValueError("size는 1 이상이어야 합니다")
    iterator = iter(items)
    while True:
        chunk = list(islice(iterator, size))
        if not chunk:
            return
        yield chunk


def _insert_ignore_stmt(dialect_name: str, model, conflict_keys: Sequence[str]):
    if dialect_name == "sqlite":
        return sqlite.insert(model).on_conflict_do_nothing(index_elements=list(conflict_keys))
    if dialect_name == "postgresql":
        return postgresql.insert(model).on_conflict_do_nothing(index_elements=list(conflict_keys))
    if dialect_name in ("mysql", "mariadb"):
        # MySQL은 어떤 유니크 키든 충돌하면 무시 → conflict_keys는 스키마의 유니크 제약과 일치해야 함
        return insert(model).prefix_with("IGNORE")
    raise NotImplementedError(f"insert_ignore를 지원하지 않는 DB 방언입니다: {dialect_name}")


async def insert_ignore(
    session: AsyncSession,
    model,
    rows: Sequence[Dict[str, Any]],
    conflict_keys: Sequence[str],
) -> int:
    """
    rows를 한 번의 executemany로 INSERT 하되, conflict_keys 유니크 충돌은 건너뛴다.
    커밋은 호출 측 책임. 제출한 행 수를 돌려준다(실제 삽입 수는 드라이버마다 달라 신뢰하지 않음).
    """
    if not rows:
        return 0
    stmt = _insert_ignore_stmt(session.get_bind().dialect.name, model, conflict_keys)
    await session.execute(stmt, list(rows))
    return len(rows)


async def find_many(session: AsyncSession, model, *criteria, order_by=None) -> List[Any]:
    """조건(criteria)에 맞는 ORM 객체 목록."""
    stmt = select(model).where(*criteria)
    if order_by is not None:
        stmt = stmt.order_by(order_by)
    result = await session.execute(stmt)
    return list(result.scalars().all())
