from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

# 라이브러리 디버그 로그 비활성화
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("redis").setLevel(logging.WARNING)


# ✅ 미들웨어 임포트
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ 라우터 임포트
from routers import meta, students, subjects

from services.cache import RedisCacheStore, build_cache

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

# ✅ CORS 설정 (프론트엔드 대시보드 연동)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ 요청 지연 측정 미들웨어 (응답 헤더 X-Latency-Ms 추가)
app.add_middleware(TimingMiddleware)

# ✅ 전역 에러 핸들러 등록 (일관된 JSON 에러 포맷)
add_error_handlers(app)

# ✅ 라우터 등록
app.include_router(students.router)
app.include_router(subjects.router)
app.include_router(meta.router)

@app.on_event("startup")
async def _start_cache():
    app.state.cache = build_cache(settings)
    if isinstance(app.state.cache.store, RedisCacheStore):
        app.state.cache.store.start()  # Redis 연결 실패해도 서버 시작

@app.on_event("shutdown")
async def _close_cache():
    cache = getattr(app.state, "cache", None)
    if cache is not None:
        await cache.close()

# ✅ 루트 엔드포인트
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - THPT 수능 성적 조회"}
