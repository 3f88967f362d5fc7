# recipe_storage/core/errors.py
# 서비스/저장소 공용 예외 — HTTP 변환은 api 레이어에서만 한다

from __future__ import annotations
from typing import Any, Dict, List, Optional


class RecipeStorageError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationFailed(RecipeStorageError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class Unauthenticated(RecipeStorageError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(RecipeStorageError):
    status_code = 403
    default_message = "Access denied"


class NotFound(RecipeStorageError):
    status_code = 404
    default_message = "Recipe not found"


class Conflict(RecipeStorageError):
    status_code = 409
    default_message = "Recipe already exists"


class Internal(RecipeStorageError):
    status_code = 500
    default_message = "Internal server error"


class Unavailable(RecipeStorageError):
    status_code = 503
    default_message = "Recipe store unavailable"
