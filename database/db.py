from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # 비동기 엔진/세션 도구
from sqlalchemy.orm import declarative_base        # 모델의 Base 클래스

from config.settings import settings               # ✅ 환경변수 설정 파일 불러오기

# ✅ 환경변수에서 DB 연결 URL을 불러와 엔진 생성 (커넥션 풀은 모든 요청이 공유)
engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)

# ✅ 세션 팩토리: DB 연결에 사용할 세션 생성기 정의
SessionLocal = async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

# ✅ 모델 정의 시 상속할 Base 클래스 (Declarative 방식 사용)
Base = declarative_base()


async def get_db():
    """FastAPI 의존성: 요청마다 세션을 열고 끝나면 닫는다."""
    async with SessionLocal() as db:
        yield db


async def init_models(bind: AsyncEngine = engine) -> None:
    """테이블이 없으면 생성 (마이그레이션 도구 없이 운용)."""
    # 모델 모듈을 import 해야 metadata에 테이블이 등록된다
    import models.subjects  # noqa: F401
    import models.students  # noqa: F401
    import models.scores  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """임의의 엔진(테스트용 SQLite 등)에 대한 세션 팩토리."""
    return async_sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)
