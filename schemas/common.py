"""
schemas/common.py

- 프로젝트 전반에서 재사용할 공용 스키마 모음
- Pydantic v2 기준
- 포함 내용:
  1) 에러 응답 표준: ErrorDetail, ErrorResponse
  2) 헬스체크 응답: ServiceHealth, HealthResponse
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, ConfigDict


# =========================================================
# 1) 에러 응답 표준
# =========================================================

class ErrorDetail(BaseModel):
    """에러 코드/메시지를 담는 최소 단위"""
    code: str = Field(..., description="에러 식별 코드 (예: VALIDATION_ERROR, NOT_FOUND, INTERNAL_ERROR)")
    message: str = Field(..., description="사람이 읽을 수 있는 에러 메시지")

class ErrorResponse(BaseModel):
    """
    전역 에러 핸들러에서 내려주는 표준 에러 응답
    - middlewares/error_handler.py에서 이 스키마로 리턴
    """
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="응답 생성 시각 (UTC)"
    )
    latency_ms: Optional[int] = Field(
        default=None, ge=0, description="요청 처리에 걸린 시간(ms)"
    )

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) 헬스체크
# =========================================================

class ServiceHealth(BaseModel):
    status: Literal["connected", "disconnected"]
    healthy: bool

class HealthResponse(BaseModel):
    """GET /health: 캐시(Redis) 연결 상태. 캐시가 끊겨도 status는 ok (조회는 DB로 계속 동작)"""
    status: Literal["ok"] = "ok"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    services: Dict[str, ServiceHealth]
