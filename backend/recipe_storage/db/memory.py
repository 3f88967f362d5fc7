# recipe_storage/db/memory.py
# 프로세스 내 저장소 — 테스트 / RECIPE_STORE=memory 로컬 개발용
# MongoRecipeStore 와 같은 계약 (복사본만 주고받는다)

from __future__ import annotations
import asyncio
import copy
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional

from recipe_storage.core.errors import Conflict, NotFound


class InMemoryRecipeStore:
    def __init__(self) -> None:
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def put(self, doc_id: str, doc: Dict[str, Any], *, overwrite: bool = True) -> datetime:
        async with self._lock:
            if not overwrite and doc_id in self._docs:
                raise Conflict()
            self._docs[doc_id] = copy.deepcopy(doc)
        return datetime.now(timezone.utc)

    async def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._docs.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def delete(self, doc_id: str) -> None:
        async with self._lock:
            self._docs.pop(doc_id, None)

    async def query_by_field(self, field: str, value: Any) -> AsyncIterator[Dict[str, Any]]:
        # 스냅샷을 떠서 순회 (순회 중 쓰기와 무관)
        matches = [copy.deepcopy(d) for d in self._docs.values() if d.get(field) == value]
        for doc in matches:
            yield doc

    async def patch(self, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            doc = self._docs.get(doc_id)
            if doc is None:
                raise NotFound()
            doc.update(copy.deepcopy(fields))
            return copy.deepcopy(doc)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._docs)
