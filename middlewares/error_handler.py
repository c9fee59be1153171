import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schemas.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

_STATUS_CODES = {400: "VALIDATION_ERROR", 404: "NOT_FOUND"}

def _error_body(code: str, message: str) -> dict:
    return ErrorResponse(error=ErrorDetail(code=code, message=message), latency_ms=0).model_dump(mode="json")

def add_error_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = _STATUS_CODES.get(exc.status_code, f"HTTP_{exc.status_code}")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # 쿼리/경로 파라미터 형식 오류는 422 대신 400으로 통일
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("query", "path"))
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "invalid value")
        return JSONResponse(status_code=400, content=_error_body("VALIDATION_ERROR", message))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"처리되지 않은 예외: {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", str(exc)),
        )
