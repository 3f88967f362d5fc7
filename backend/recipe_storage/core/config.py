# recipe_storage/core/config.py
# 환경변수 로딩 (.env) — 기동 후에는 읽기 전용

from __future__ import annotations
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# 프론트 허용 오리진 (로컬 개발 + Firebase Hosting)
DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",                      # 로컬 개발
    "http://localhost:5174",                      # 로컬 개발 (보조 포트)
    "https://recipe-mgmt-dev.web.app",            # Firebase Hosting (dev)
    "https://recipe-mgmt-dev.firebaseapp.com",    # Firebase Hosting (dev 보조)
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # auth.enabled — false면 test-user 로 통과 (개발 전용, 명시적으로 꺼야 함)
    AUTH_ENABLED: bool = True

    # firestore.collection.recipes / firebase.project.id — 필수
    RECIPES_COLLECTION: str = Field(min_length=1)
    FIREBASE_PROJECT_ID: str = Field(min_length=1)
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None

    # 문서 저장소
    RECIPE_STORE: Literal["mongo", "memory"] = "mongo"
    MONGODB_URI: str = "mongodb://localhost:27017"  # 필요 시 prod/staging로 분리
    MONGODB_DB: str = "recipes"

    CORS_ORIGINS: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    # 최초 1회만 읽는다
    return Settings()
