# 공통 에러 응답: 모든 실패는 {"error": "..."} 형태
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.db.init import StoreNotReady

log = logging.getLogger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


def first_validation_message(errors: list[dict[str, Any]]) -> str:
    """pydantic 에러 목록에서 첫 메시지만 꺼낸다 (prefix 제거)"""
    if not errors:
        return "Invalid request"
    err = errors[0]

    # 필드 누락은 "title is required" 처럼 필드명을 붙여준다
    if err.get("type") == "missing":
        loc = [str(x) for x in (err.get("loc") or ()) if x not in ("body", "query", "path")]
        return f"{loc[-1]} is required" if loc else "Missing required fields"

    msg = str(err.get("msg") or "Invalid request")
    if msg.startswith(_VALUE_ERROR_PREFIX):
        msg = msg[len(_VALUE_ERROR_PREFIX):]
    return msg


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    msg = first_validation_message(list(exc.errors()))
    log.info("validation failed %s %s: %s", request.method, request.url.path, msg)
    return JSONResponse(status_code=400, content={"error": msg})


async def store_not_ready_handler(request: Request, exc: StoreNotReady) -> JSONResponse:
    log.warning("store not ready %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"error": "Database is not available"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreNotReady, store_not_ready_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
