# 공용 의존성/헬퍼 (시계, id 발급, 요청별 principal/서비스 주입)
from __future__ import annotations
import threading
import uuid
from datetime import datetime, timezone
from fastapi import Request

from recipe_storage.core.errors import Unauthenticated
from recipe_storage.services.firebase import Principal


def new_recipe_id() -> str:
    # 128비트 랜덤, 소문자 UUID 문자열
    return str(uuid.uuid4())


class SystemClock:
    """UTC 벽시계. 저장소 정밀도(ms)로 자르고, 이전 값보다 작아지지 않는다."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last: datetime | None = None

    def __call__(self) -> datetime:
        now = datetime.now(timezone.utc)
        now = now.replace(microsecond=(now.microsecond // 1000) * 1000)
        with self._lock:
            if self._last is not None and now < self._last:
                now = self._last
            self._last = now
        return now


def get_recipe_service(request: Request):
    # 앱 기동 시 app.state 에 올려둔 싱글톤
    return request.app.state.recipe_service


def get_principal(request: Request) -> Principal:
    # 인증 게이트가 붙여준 principal. 없으면 게이트를 우회한 것 → 401
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise Unauthenticated("Missing or invalid Authorization header")
    return principal
