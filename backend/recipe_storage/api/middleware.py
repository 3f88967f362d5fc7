# recipe_storage/api/middleware.py
# 인증 게이트 — 요청을 분류해서 (프리플라이트 / 공개 경로 / 인증 필요) 통과 또는 401
# 분류는 순수 함수(classify), 토큰 검증만 await (authenticate)

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from recipe_storage.services.firebase import IdentityVerifier, InvalidToken, Principal

log = logging.getLogger(__name__)

# 인증 없이 통과시키는 경로 (부분 일치)
OPEN_PATHS = ("/actuator/health", "/v3/api-docs", "/swagger-ui")
PUBLIC_RECIPES_PATH = "/api/recipes/public"

BEARER = "Bearer "
TEST_PRINCIPAL = Principal(uid="test-user")

MSG_MISSING_HEADER = "Missing or invalid Authorization header"
MSG_INVALID_TOKEN = "Invalid Firebase ID token"


# 분류 결과 (태그드 유니온)
@dataclass(frozen=True)
class Preflight:
    origin: Optional[str]


@dataclass(frozen=True)
class PublicRoute:
    pass


@dataclass(frozen=True)
class NeedsToken:
    token: str


@dataclass(frozen=True)
class Authenticated:
    principal: Principal


@dataclass(frozen=True)
class Reject:
    status: int
    message: str


GateResult = Union[Preflight, PublicRoute, NeedsToken, Authenticated, Reject]


def cors_headers(origin: Optional[str], allowed: Iterable[str]) -> List[Tuple[str, str]]:
    # 허용 목록에 있는 오리진에만 CORS 헤더
    if not origin or origin not in allowed:
        return []
    return [
        ("Access-Control-Allow-Origin", origin),
        ("Access-Control-Allow-Methods", "GET,POST,PUT,DELETE,OPTIONS"),
        ("Access-Control-Allow-Headers", "*"),
        ("Access-Control-Allow-Credentials", "true"),
        ("Access-Control-Max-Age", "3600"),
    ]


def classify(method: str, path: str, headers: Mapping[str, str], auth_enabled: bool) -> GateResult:
    if method.upper() == "OPTIONS":
        return Preflight(origin=headers.get("origin"))

    if any(p in path for p in OPEN_PATHS):
        return PublicRoute()

    # 공개 목록은 principal 을 읽지 않는다
    if PUBLIC_RECIPES_PATH in path:
        return PublicRoute()

    if not auth_enabled:
        return Authenticated(TEST_PRINCIPAL)

    header = headers.get("authorization")
    if not header or not header.startswith(BEARER):
        return Reject(401, MSG_MISSING_HEADER)

    return NeedsToken(header[len(BEARER):])


async def authenticate(result: GateResult, verifier: Optional[IdentityVerifier]) -> GateResult:
    # NeedsToken 만 검증기로 넘기고 나머지는 그대로
    if not isinstance(result, NeedsToken):
        return result
    if verifier is None:
        log.error("identity verifier not configured")
        return Reject(401, MSG_INVALID_TOKEN)
    try:
        principal = await verifier.verify(result.token)
    except InvalidToken as e:
        log.debug("token verification failed", extra={"reason": str(e)})
        return Reject(401, MSG_INVALID_TOKEN)
    return Authenticated(principal)


class AuthGateMiddleware:
    """가장 바깥에 둔다. 프리플라이트는 여기서 끝나고 하위 앱은 호출되지 않는다."""

    def __init__(
        self,
        app: ASGIApp,
        verifier: Optional[IdentityVerifier] = None,
        auth_enabled: bool = True,
        allowed_origins: Sequence[str] = (),
    ):
        self.app = app
        self.verifier = verifier
        self.auth_enabled = auth_enabled
        self.allowed_origins = tuple(allowed_origins)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        result = classify(scope["method"], scope["path"], headers, self.auth_enabled)
        result = await authenticate(result, self._verifier(scope))

        if isinstance(result, Preflight):
            await self._respond(send, 200, b"", cors_headers(result.origin, self.allowed_origins))
            return

        if isinstance(result, Reject):
            log.warning(
                "request rejected",
                extra={"status": result.status, "path": scope["path"], "reason": result.message},
            )
            body = json.dumps({
                "status": result.status,
                "error": "Unauthorized",
                "message": result.message,
            }).encode("utf-8")
            extra_headers = cors_headers(headers.get("origin"), self.allowed_origins)
            await self._respond(send, result.status, body, extra_headers, content_type="application/json")
            return

        if isinstance(result, Authenticated):
            scope.setdefault("state", {})["principal"] = result.principal

        await self.app(scope, receive, send)

    def _verifier(self, scope: Scope) -> Optional[IdentityVerifier]:
        # 생성 시 주입이 없으면 기동 때 app.state 에 올라간 검증기
        if self.verifier is not None:
            return self.verifier
        app = scope.get("app")
        return getattr(app.state, "verifier", None) if app is not None else None

    @staticmethod
    async def _respond(send: Send, status: int, body: bytes, extra_headers, content_type: str = "text/plain") -> None:
        raw = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in extra_headers]
        raw.append((b"content-length", str(len(body)).encode("latin-1")))
        if body:
            raw.append((b"content-type", content_type.encode("latin-1")))
        await send({"type": "http.response.start", "status": status, "headers": raw})
        await send({"type": "http.response.body", "body": body})
