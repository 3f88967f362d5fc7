# recipe_storage/db/init.py
# Mongo 연결 유틸 — motor (on_event용)

from __future__ import annotations
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from recipe_storage.core.errors import Unavailable

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None

async def init_db(uri: str, name: str) -> AsyncIOMotorDatabase:
    # 앱 시작 시 1회 호출해서 전역 커넥션 구성
    global _client, _db
    if _db is not None:
        return _db

    # tz_aware: createdAt/updatedAt 을 UTC aware datetime 으로 돌려받기 위함
    client = AsyncIOMotorClient(uri, tz_aware=True)
    db = client[name]

    # 연결 확인 (준비 안 됐으면 예외)
    await db.command("ping")
    _client, _db = client, db
    return _db

def get_db() -> AsyncIOMotorDatabase:
    # 저장소 어댑터에서 쓰는 핸들. 미초기화면 Unavailable
    if _db is None:
        raise Unavailable("MongoDB is not initialized yet.")
    return _db

async def close_db() -> None:
    # 앱 종료 시 커넥션 정리
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
