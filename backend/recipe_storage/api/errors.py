# recipe_storage/api/errors.py
# 도메인 예외 → HTTP 상태 변환 (라우터는 예외를 그대로 올린다)

from __future__ import annotations
import logging
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from recipe_storage.core.errors import RecipeStorageError, ValidationFailed
from recipe_storage.models.schemas import field_errors

log = logging.getLogger(__name__)


def error_body(status: int, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "status": status,
        "error": HTTPStatus(status).phrase,
        "message": message,
    }
    if errors:
        body["errors"] = errors
    return body


async def _domain_error(request: Request, exc: RecipeStorageError) -> JSONResponse:
    errors = exc.errors if isinstance(exc, ValidationFailed) else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.status_code, exc.message, errors))


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # 본문 파싱/타입/규칙 위반 전부 400
    return JSONResponse(status_code=400, content=error_body(400, "Validation failed", field_errors(exc.errors())))


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content=error_body(500, "Internal server error"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecipeStorageError, _domain_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Exception, _unexpected_error)
