# recipe_storage/db/store.py
# 문서 저장소 어댑터 — id 키 set/get/delete + 동등 필터 조회 + 부분 업데이트
# 필드 의미는 해석하지 않는다 (검증/권한은 서비스 레이어)

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional, Protocol

from pymongo import ReturnDocument
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    NetworkTimeout,
    PyMongoError,
    ServerSelectionTimeoutError,
)

from recipe_storage.core.errors import Conflict, Internal, NotFound, Unavailable
from recipe_storage.db.init import get_db

log = logging.getLogger(__name__)

# 일시적 전송 장애 → 503
_TRANSIENT = (AutoReconnect, ConnectionFailure, ServerSelectionTimeoutError, NetworkTimeout, ExecutionTimeout)

# _id 는 밖으로 노출하지 않는다 (문서에 id 필드가 따로 있음)
_PROJECTION = {"_id": 0}


class RecipeStore(Protocol):
    async def put(self, doc_id: str, doc: Dict[str, Any], *, overwrite: bool = True) -> datetime: ...

    async def get(self, doc_id: str) -> Optional[Dict[str, Any]]: ...

    async def delete(self, doc_id: str) -> None: ...

    def query_by_field(self, field: str, value: Any) -> AsyncIterator[Dict[str, Any]]: ...

    async def patch(self, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]: ...

    async def ping(self) -> bool: ...


def _translate(op: str, doc_id: Optional[str], e: PyMongoError) -> Exception:
    # 드라이버 예외 → 도메인 예외
    if isinstance(e, DuplicateKeyError):
        return Conflict()
    log.error("mongo %s failed", op, extra={"op": op, "recipeId": doc_id}, exc_info=e)
    if isinstance(e, _TRANSIENT):
        return Unavailable()
    return Internal("Recipe store error")


class MongoRecipeStore:
    """Motor 컬렉션 위의 얇은 파사드. 문서는 _id = id 로 저장."""

    def __init__(self, collection: str):
        self.collection = collection

    @property
    def _col(self):
        # get_db() 가 미초기화면 Unavailable
        return get_db()[self.collection]

    async def put(self, doc_id: str, doc: Dict[str, Any], *, overwrite: bool = True) -> datetime:
        body = {**doc, "_id": doc_id}
        try:
            if overwrite:
                await self._col.replace_one({"_id": doc_id}, body, upsert=True)
            else:
                await self._col.insert_one(body)
        except PyMongoError as e:
            raise _translate("put", doc_id, e) from e
        return datetime.now(timezone.utc)

    async def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            return await self._col.find_one({"_id": doc_id}, _PROJECTION)
        except PyMongoError as e:
            raise _translate("get", doc_id, e) from e

    async def delete(self, doc_id: str) -> None:
        # 없어도 성공 (멱등성은 상위에서 판단)
        try:
            await self._col.delete_one({"_id": doc_id})
        except PyMongoError as e:
            raise _translate("delete", doc_id, e) from e

    async def query_by_field(self, field: str, value: Any) -> AsyncIterator[Dict[str, Any]]:
        # 순서 보장 없음
        try:
            async for doc in self._col.find({field: value}, _PROJECTION):
                yield doc
        except PyMongoError as e:
            raise _translate("query", None, e) from e

    async def patch(self, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            doc = await self._col.find_one_and_update(
                {"_id": doc_id},
                {"$set": fields},
                projection=_PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise _translate("patch", doc_id, e) from e
        if doc is None:
            raise NotFound()
        return doc

    async def ping(self) -> bool:
        try:
            await get_db().command("ping")
            return True
        except (Unavailable, PyMongoError):
            return False
