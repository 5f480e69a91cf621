import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from .exceptions import BaseAPIException, InternalServerError

logger = logging.getLogger("citizenapi.errors")


def _request_line(request: Request) -> str:
    client = request.client.host if request.client else "-"
    return f"{request.method} {request.url.path} from {client}"


def _error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "error": {"code": code, "message": message, "details": details or {}},
    }


async def handle_base_api_exception(request, exc: BaseAPIException):
    line = f"[{exc.error_code}] {_request_line(request)} -> {exc.status_code}: {exc.message}"
    if exc.status_code >= 500:
        # 저장소 오류는 원인 예외(SQLAlchemyError)를 함께 기록
        cause = exc.__cause__
        if cause is not None:
            line = f"{line} (cause: {type(cause).__name__}: {cause})"
        logger.error(line)
    else:
        logger.warning(line)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)  # type: ignore[arg-type]


async def handle_http_exception(request, exc):
    line = f"[HTTP_ERROR] {_request_line(request)} -> {exc.status_code}: {exc.detail}"

    if exc.status_code >= 500:
        tb_str = "".join(traceback.format_tb(exc.__traceback__))
        logger.error(f"{line}\n\nStack Trace:\n{tb_str}")
    else:
        logger.warning(line)

    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = _error_body("HTTP_ERROR", str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request, exc):
    # ctx 에 직렬화할 수 없는 값이 들어올 수 있어 위치와 메시지만 노출
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": str(err.get("msg", ""))}
        for err in exc.errors()
    ]
    logger.warning(f"[VALIDATION_001] {_request_line(request)} -> 422: {errors}")
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_001", "Validation failed", {"errors": errors}),
    )


async def handle_unexpected_error(request, exc):
    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        f"[INTERNAL_001] {_request_line(request)}\n"
        f"Exception Type: {type(exc).__name__}\n"
        f"Exception Message: {str(exc)}\n\n"
        f"Full Stack Trace:\n{tb_str}"
    )

    internal = InternalServerError()
    return JSONResponse(status_code=internal.status_code, content=internal.detail)  # type: ignore[arg-type]
