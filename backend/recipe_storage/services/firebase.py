# recipe_storage/services/firebase.py
# Firebase 앱 초기화 + ID 토큰 검증 (외부 IdP 래퍼)

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol

import firebase_admin
from firebase_admin import auth, credentials
from starlette.concurrency import run_in_threadpool

from recipe_storage.core.config import Settings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    # 요청 1건 동안만 사는 검증된 호출자
    uid: str
    email: Optional[str] = None


class InvalidToken(Exception):
    """만료/위조/형식 오류 토큰"""


class IdentityVerifier(Protocol):
    async def verify(self, id_token: str) -> Principal: ...


def credentials_path(settings: Settings) -> str:
    # 서비스 계정 키 경로. 없으면 기동 불가
    path = settings.GOOGLE_APPLICATION_CREDENTIALS or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    if not path:
        raise RuntimeError("GOOGLE_APPLICATION_CREDENTIALS environment variable not set")
    if not os.path.isfile(path):
        raise RuntimeError(f"GOOGLE_APPLICATION_CREDENTIALS file not found: {path}")
    return path


def init_firebase(settings: Settings) -> firebase_admin.App:
    # 기본 앱은 프로세스당 1회만 초기화
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    path = credentials_path(settings)
    cred = credentials.Certificate(path)
    app = firebase_admin.initialize_app(cred, {"projectId": settings.FIREBASE_PROJECT_ID})
    log.info("firebase app initialized", extra={"projectId": settings.FIREBASE_PROJECT_ID})
    return app


class FirebaseIdentityVerifier:
    def __init__(self, app: Optional[firebase_admin.App] = None):
        self._app = app

    async def verify(self, id_token: str) -> Principal:
        # verify_id_token 은 동기 + 공개키 fetch I/O → 스레드풀에서
        try:
            decoded = await run_in_threadpool(auth.verify_id_token, id_token, self._app)
        except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError,
                auth.RevokedIdTokenError, auth.CertificateFetchError) as e:
            raise InvalidToken(str(e)) from e

        uid = decoded.get("uid") or decoded.get("sub")
        if not uid:
            raise InvalidToken("token has no uid")
        return Principal(uid=uid, email=decoded.get("email"))
