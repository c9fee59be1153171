"""
scripts/import_exam_scores.py

THPT 성적 CSV → DB 마이그레이션.

    python -m scripts.import_exam_scores ../dataset/diem_thi_thpt_2024.csv --batch-size 10000 --init-db

- 같은 파일로 다시 실행해도 중복 행이 생기지 않는다 (실패 시 복구 방법도 "다시 실행")
- --invalidate-cache: 수집이 끝난 뒤 조회 캐시 네임스페이스를 모두 비운다 (캐시 연결 실패 시 종료 코드 2)
"""

import argparse
import asyncio
import logging
import sys

from config.settings import settings
from database.db import SessionLocal, engine, init_models
from services.cache import RedisCacheStore, build_cache, invalidate_read_caches
from services.ingest import IngestError, ingest_exam_scores

logger = logging.getLogger("scripts.import_exam_scores")

EXIT_CACHE_NOT_INVALIDATED = 2  # 수집은 성공, 캐시 무효화만 실패


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="THPT 성적 CSV를 DB로 가져옵니다.")
    parser.add_argument("csv_path", nargs="?", default=settings.IMPORT_CSV_PATH, help="성적 CSV 경로")
    parser.add_argument("--batch-size", type=int, default=settings.IMPORT_BATCH_SIZE, help="배치당 행 수")
    parser.add_argument("--init-db", action="store_true", help="테이블이 없으면 먼저 생성")
    parser.add_argument("--invalidate-cache", action="store_true", help="완료 후 조회 캐시 무효화")
    args = parser.parse_args(argv)
    if args.batch_size < 1:
        parser.error("--batch-size는 1 이상이어야 합니다")
    return args


async def _invalidate_cache() -> bool:
    """조회 캐시 무효화. 캐시에 연결하지 못해 실행하지 못했으면 False."""
    cache = build_cache(settings)
    try:
        if isinstance(cache.store, RedisCacheStore) and not await cache.store.connect():
            logger.warning(f"Redis 연결 실패로 캐시 무효화를 건너뜁니다: {cache.store.health.last_error}")
            return False
        return await invalidate_read_caches(cache) is not None
    finally:
        await cache.close()


async def migrate_exam_scores(args: argparse.Namespace) -> int:
    try:
        if args.init_db:
            await init_models()
        report = await ingest_exam_scores(args.csv_path, SessionLocal, batch_size=args.batch_size)
    except IngestError as exc:
        logger.error(f"수집 실패: {exc}")
        return 1
    finally:
        await engine.dispose()

    print(
        f"✅ 성적 CSV → DB 마이그레이션 완료 "
        f"(행 {report.rows_read}, 거부 {report.rows_rejected}, 배치 {report.batches}, {report.elapsed_seconds}s)"
    )

    if args.invalidate_cache:
        if not await _invalidate_cache():
            print("⚠️ 캐시 무효화 실패: 이전 조회 결과가 TTL 만료까지 남을 수 있습니다")
            return EXIT_CACHE_NOT_INVALIDATED
        print("✅ 조회 캐시 무효화 완료")
    return 0


def main(argv=None) -> int:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    return asyncio.run(migrate_exam_scores(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
