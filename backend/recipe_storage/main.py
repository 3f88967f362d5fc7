# recipe_storage/main.py
# FastAPI 앱 초기화 및 라우터/미들웨어 설정
# 요청 흐름: 인증 게이트 → CORS → 라우터 → RecipeService → 저장소 어댑터

from __future__ import annotations

import logging
from asyncio import sleep
from typing import Callable, Optional
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from recipe_storage.api.errors import register_error_handlers
from recipe_storage.api.middleware import AuthGateMiddleware
from recipe_storage.api.routes_recipes import router as recipes_router
from recipe_storage.core.config import Settings, get_settings
from recipe_storage.core.deps import new_recipe_id
from recipe_storage.core.logging import configure_logging
from recipe_storage.db.indexes import ensure_indexes
from recipe_storage.db.init import close_db, init_db
from recipe_storage.db.memory import InMemoryRecipeStore
from recipe_storage.db.store import MongoRecipeStore, RecipeStore
from recipe_storage.services.firebase import (
    FirebaseIdentityVerifier,
    IdentityVerifier,
    credentials_path,
    init_firebase,
)
from recipe_storage.services.recipes import RecipeService

log = logging.getLogger(__name__)

DB_INIT_RETRIES = 20

SECURITY_SCHEME = {
    "Firebase Auth": {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
        "description": "Firebase ID Token (JWT). Obtain from Firebase Authentication "
                       "and include in Authorization header.",
    }
}


def _build_store(settings: Settings) -> RecipeStore:
    if settings.RECIPE_STORE == "memory":
        log.warning("using in-memory recipe store; data is not persisted")
        return InMemoryRecipeStore()
    return MongoRecipeStore(settings.RECIPES_COLLECTION)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecipeStore] = None,
    verifier: Optional[IdentityVerifier] = None,
    clock: Optional[Callable[[], datetime]] = None,
    id_factory: Callable[[], str] = new_recipe_id,
) -> FastAPI:
    settings = settings or get_settings()
    owns_mongo = store is None and settings.RECIPE_STORE == "mongo"
    if store is None:
        store = _build_store(settings)

    app = FastAPI(
        title="Recipe Storage Service API",
        description="API for storing and managing user recipes with Firebase authentication",
        version="1.0.0",
        openapi_url="/v3/api-docs",
        docs_url="/swagger-ui",
        swagger_ui_oauth2_redirect_url="/swagger-ui/oauth2-redirect",
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.verifier = verifier
    app.state.recipe_service = RecipeService(store, clock=clock, id_factory=id_factory)

    # 미들웨어는 나중에 추가한 것이 바깥 — 게이트가 프리플라이트를 먼저 받는다
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["*"],
        max_age=3600,
    )
    app.add_middleware(
        AuthGateMiddleware,
        auth_enabled=settings.AUTH_ENABLED,
        allowed_origins=settings.CORS_ORIGINS,
    )

    register_error_handlers(app)
    app.include_router(recipes_router)

    # 앱 시작/종료 이벤트 핸들러
    @app.on_event("startup")
    async def on_startup() -> None:
        configure_logging(settings.LOG_LEVEL)

        # 1) 자격증명은 인증 여부와 상관없이 필수
        credentials_path(settings)
        if app.state.verifier is None and settings.AUTH_ENABLED:
            app.state.verifier = FirebaseIdentityVerifier(init_firebase(settings))
        if not settings.AUTH_ENABLED:
            log.warning("authentication disabled; all requests run as test-user")

        # 2) DB 붙기 (최대 20회, 1초 간격). 실패해도 기동은 하고 요청은 503
        if not owns_mongo:
            return
        db = None
        for i in range(DB_INIT_RETRIES):
            try:
                db = await init_db(settings.MONGODB_URI, settings.MONGODB_DB)
                log.info("db ready")
                break
            except Exception as e:
                log.warning("db init retry %d: %s", i + 1, e)
                await sleep(1.0)
        if db is None:
            log.error("db init failed after retries")
            return

        # 3) 인덱스 보장
        try:
            await ensure_indexes(settings.RECIPES_COLLECTION)
            log.info("indexes ensured")
        except Exception as e:
            log.error("ensure_indexes failed: %s", e)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if owns_mongo:
            await close_db()

    @app.get("/actuator/health", tags=["health"])
    async def health():
        # 저장소가 죽어도 200 (프로세스 생존 여부만)
        ok = await app.state.store.ping()
        return {"status": "UP", "store": "UP" if ok else "DOWN"}

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
            license_info={"name": "Apache 2.0", "url": "https://www.apache.org/licenses/LICENSE-2.0"},
        )
        schema.setdefault("components", {})["securitySchemes"] = SECURITY_SCHEME
        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi
    return app


app = create_app()
