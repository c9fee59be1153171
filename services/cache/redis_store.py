"""
services/cache/redis_store.py

- redis-py(asyncio) 기반 CacheStore 구현
- Redis가 죽어 있어도 애플리케이션은 계속 동작해야 한다
  - 연결 상태(CacheHealth)를 이 인스턴스가 직접 소유하고, is_live()가 False면 네트워크 호출 없이 바로 미스/무시
  - 명령 실패 시 degraded 로 전환 후 백그라운드에서 재연결
  - 재연결 지연 = min(시도횟수 × retry_delay_ms, max_retry_delay_ms), 최대 max_retry_attempts 회
  - 한 사이클을 모두 실패하면 자동 재연결을 멈추고, 다음 헬스체크가 새 사이클을 시작한다
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, List, Optional

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import RedisError

from services.cache.base import CacheBackendError, CacheStore

logger = logging.getLogger(__name__)

_REDIS_ERRORS = (RedisError, OSError, asyncio.TimeoutError)

SCAN_COUNT = 500


class CacheState(str, Enum):
    CONNECTING = "connecting"
    READY = "ready"
    DEGRADED = "degraded"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


class CacheHealth:
    """연결 상태. RedisCacheStore 내부 이벤트 처리에서만 갱신한다."""

    def __init__(self):
        self.state = CacheState.CONNECTING
        self.last_error: Optional[str] = None
        self.gave_up = False

    def is_live(self) -> bool:
        return self.state is CacheState.READY


def describe_error(exc: BaseException) -> str:
    """로그/헬스 상태용 오류 문자열: 예외 클래스명 + 원래 메시지."""
    return f"{type(exc).__name__}: {exc}"


def retry_delay(attempt: int, base_delay_ms: int, max_delay_ms: int) -> float:
    """attempt번째 재시도 전 대기 시간(초)."""
    return min(attempt * base_delay_ms, max_delay_ms) / 1000


class RedisCacheStore(CacheStore):
    def __init__(
        self,
        client: Redis,
        max_retry_attempts: int = 20,
        retry_delay_ms: int = 50,
        max_retry_delay_ms: int = 2000,
    ):
        self._client = client
        self._max_retry_attempts = max_retry_attempts
        self._retry_delay_ms = retry_delay_ms
        self._max_retry_delay_ms = max_retry_delay_ms
        self.health = CacheHealth()
        self._reconnect_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings) -> "RedisCacheStore":
        client = Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT_MS / 1000,
            socket_timeout=settings.REDIS_COMMAND_TIMEOUT_MS / 1000,
            socket_keepalive=True,
            decode_responses=True,
            # 명령 단위 재시도는 끄고, 재연결은 이 클래스가 관리
            retry=Retry(NoBackoff(), 0),
        )
        return cls(
            client,
            max_retry_attempts=settings.REDIS_MAX_RETRY_ATTEMPTS,
            retry_delay_ms=settings.REDIS_RETRY_DELAY_MS,
            max_retry_delay_ms=settings.REDIS_MAX_RETRY_DELAY_MS,
        )

    # =========================
    # 연결 상태 관리
    # =========================
    def is_live(self) -> bool:
        return self.health.is_live()

    async def connect(self) -> bool:
        """한 사이클의 연결 시도. 성공하면 True."""
        for attempt in range(1, self._max_retry_attempts + 1):
            if self.health.state is CacheState.CLOSED:
                return False
            try:
                await self._client.ping()
            except _REDIS_ERRORS as exc:
                self.health.last_error = describe_error(exc)
                delay = retry_delay(attempt, self._retry_delay_ms, self._max_retry_delay_ms)
                logger.debug(f"Redis 연결 실패 ({attempt}/{self._max_retry_attempts}), {delay:.2f}s 후 재시도: {exc}")
                if attempt < self._max_retry_attempts:
                    await asyncio.sleep(delay)
                continue
            self.health.state = CacheState.READY
            self.health.last_error = None
            self.health.gave_up = False
            logger.info("Redis 연결 완료 (ready)")
            return True

        self.health.state = CacheState.DEGRADED
        self.health.gave_up = True
        logger.warning(
            f"Redis 재연결 {self._max_retry_attempts}회 실패, 자동 재연결 중단 (last_error={self.health.last_error})"
        )
        return False

    def start(self) -> None:
        """서버 기동을 막지 않도록 연결 사이클을 백그라운드로 시작."""
        self._spawn_reconnect(initial=True)

    def _spawn_reconnect(self, initial: bool = False) -> None:
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        if self.health.state is CacheState.CLOSED:
            return
        if not initial:
            self.health.state = CacheState.RECONNECTING
        self._reconnect_task = asyncio.create_task(self.connect())

    def _handle_failure(self, exc: BaseException) -> None:
        if self.health.state is CacheState.CLOSED:
            return
        was_live = self.health.is_live()
        self.health.state = CacheState.DEGRADED
        self.health.last_error = describe_error(exc)
        if was_live:
            logger.warning(f"Redis 명령 실패, degraded 상태로 전환: {exc}")
            self._spawn_reconnect()

    async def check_health(self) -> bool:
        if self.is_live():
            try:
                await self._client.ping()
                return True
            except _REDIS_ERRORS as exc:
                self._handle_failure(exc)
                return False
        # 자동 재연결을 포기한 뒤라면 헬스체크가 새 사이클의 계기
        self._spawn_reconnect()
        return False

    async def close(self) -> None:
        self.health.state = CacheState.CLOSED
        if self._reconnect_task is not None and not self._reconnect_task.done():
            self._reconnect_task.cancel()
        await self._client.aclose()

    # =========================
    # CacheStore 연산
    # =========================
    async def get(self, key: str) -> Optional[Any]:
        if not self.is_live():
            return None
        try:
            raw = await self._client.get(key)
        except _REDIS_ERRORS as exc:
            self._handle_failure(exc)
            raise CacheBackendError(f"GET {key} 실패") from exc
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if not self.is_live():
            return
        payload = json.dumps(value, ensure_ascii=False)
        try:
            if ttl:
                await self._client.set(key, payload, ex=ttl)
            else:
                await self._client.set(key, payload)
        except _REDIS_ERRORS as exc:
            self._handle_failure(exc)
            raise CacheBackendError(f"SET {key} 실패") from exc

    async def delete(self, *keys: str) -> None:
        if not keys or not self.is_live():
            return
        try:
            await self._client.delete(*keys)
        except _REDIS_ERRORS as exc:
            self._handle_failure(exc)
            raise CacheBackendError(f"DEL ({len(keys)} keys) 실패") from exc

    async def keys(self, pattern: str) -> List[str]:
        if not self.is_live():
            return []
        try:
            # KEYS 사용 금지 (SCAN 커서 순회)
            return [key async for key in self._client.scan_iter(match=pattern, count=SCAN_COUNT)]
        except _REDIS_ERRORS as exc:
            self._handle_failure(exc)
            raise CacheBackendError(f"SCAN {pattern} 실패") from exc

    async def reset(self) -> None:
        if not self.is_live():
            return
        try:
            await self._client.flushdb()
        except _REDIS_ERRORS as exc:
            self._handle_failure(exc)
            raise CacheBackendError("FLUSHDB 실패") from exc
