from fastapi import APIRouter, Depends

from dependencies.services import get_cache
from schemas.common import HealthResponse, ServiceHealth
from services.cache import CacheService

router = APIRouter(tags=["Meta"])


# ✅ 헬스체크: 캐시 연결 상태 (끊겨 있으면 재연결 사이클을 다시 시작)
@router.get("/health", response_model=HealthResponse)
async def health(cache: CacheService = Depends(get_cache)):
    healthy = await cache.check_health()
    return HealthResponse(
        services={
            "redis": ServiceHealth(status="connected" if healthy else "disconnected", healthy=healthy),
        }
    )
