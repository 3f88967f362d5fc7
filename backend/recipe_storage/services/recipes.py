# recipe_storage/services/recipes.py
# 레시피 비즈니스 규칙 — id/시각 부여, 소유권 검사, 공개 규칙, 목록 정렬
# 모든 연산은 호출자 uid 를 명시적으로 받는다 (요청 전역 상태 안 읽음)

from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Union

from pydantic import ValidationError

from recipe_storage.core.deps import SystemClock, new_recipe_id
from recipe_storage.core.errors import Conflict, Forbidden, Internal, NotFound
from recipe_storage.db.models.recipe import Recipe
from recipe_storage.db.store import RecipeStore
from recipe_storage.models.schemas import RecipeIn, RecipeView, parse_recipe_input, to_view

log = logging.getLogger(__name__)

RecipeInput = Union[RecipeIn, Mapping[str, Any]]


def _user_fields(data: RecipeIn) -> Dict[str, Any]:
    # 요청에서 덮어쓸 수 있는 필드만 (id/owner/시각/공개여부 제외)
    return {
        "name": data.title,
        "description": data.description,
        "ingredients": list(data.ingredients),
        "instructions": list(data.instructions),
        "prepMinutes": data.prepMinutes,
        "cookMinutes": data.cookMinutes,
        "servings": data.servings,
        "nutrition": data.nutrition,
        "tips": data.tips,
        "imageUrl": data.imageUrl,
        "source": data.source,
        "tags": data.tags,
        "dietaryRestrictions": data.dietaryRestrictions,
    }


def _sorted_views(recipes: List[Recipe]) -> List[RecipeView]:
    # 최신순, 동률은 id 오름차순 (복합 인덱스 없이 메모리 정렬)
    recipes.sort(key=lambda r: r.id)
    recipes.sort(key=lambda r: r.createdAt, reverse=True)
    return [to_view(r) for r in recipes]


class RecipeService:
    def __init__(
        self,
        store: RecipeStore,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] = new_recipe_id,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.id_factory = id_factory

    # 저장된 문서 → 모델. 깨진 문서는 역직렬화 실패(500)
    def _load(self, doc: Dict[str, Any]) -> Recipe:
        try:
            return Recipe.model_validate(doc)
        except ValidationError as e:
            log.error("failed to deserialize recipe", extra={"recipeId": doc.get("id"), "errors": e.errors()})
            raise Internal("Failed to load recipe") from e

    async def _get_existing(self, recipe_id: str) -> Recipe:
        doc = await self.store.get(recipe_id)
        if doc is None:
            log.info("recipe not found", extra={"recipeId": recipe_id})
            raise NotFound()
        return self._load(doc)

    def _require_owner(self, recipe: Recipe, uid: str, op: str) -> None:
        if recipe.ownerUid != uid:
            log.warning(
                "access denied",
                extra={"op": op, "callerUid": uid, "recipeId": recipe.id, "ownerUid": recipe.ownerUid},
            )
            raise Forbidden()

    async def save_recipe(self, payload: RecipeInput, uid: str) -> RecipeView:
        data = parse_recipe_input(payload)
        now = self.clock()
        recipe = Recipe(
            id=self.id_factory(),
            ownerUid=uid,
            isPublic=bool(data.isPublic),
            createdAt=now,
            updatedAt=now,
            **_user_fields(data),
        )
        try:
            await self.store.put(recipe.id, recipe.to_document(), overwrite=False)
        except Conflict:
            log.error("recipe id collision", extra={"recipeId": recipe.id, "uid": uid})
            raise
        log.info("recipe saved", extra={"op": "save", "recipeId": recipe.id, "uid": uid})
        return to_view(recipe)

    async def get_recipe(self, recipe_id: str, uid: str) -> RecipeView:
        recipe = await self._get_existing(recipe_id)
        # 소유자 또는 공개 레시피만
        if recipe.ownerUid != uid and not recipe.isPublic:
            self._require_owner(recipe, uid, "get")
        return to_view(recipe)

    async def list_my_recipes(self, uid: str) -> List[RecipeView]:
        recipes = [self._load(d) async for d in self.store.query_by_field("ownerUid", uid)]
        log.debug("listed user recipes", extra={"uid": uid, "count": len(recipes)})
        return _sorted_views(recipes)

    async def list_public_recipes(self) -> List[RecipeView]:
        recipes = [self._load(d) async for d in self.store.query_by_field("isPublic", True)]
        log.debug("listed public recipes", extra={"count": len(recipes)})
        return _sorted_views(recipes)

    async def update_recipe(self, recipe_id: str, payload: RecipeInput, uid: str) -> RecipeView:
        existing = await self._get_existing(recipe_id)
        # 공개 여부와 무관하게 쓰기는 소유자만
        self._require_owner(existing, uid, "update")
        data = parse_recipe_input(payload)

        updated = Recipe(
            id=existing.id,
            ownerUid=existing.ownerUid,
            isPublic=existing.isPublic,
            createdAt=existing.createdAt,
            updatedAt=max(self.clock(), existing.createdAt),
            **_user_fields(data),
        )
        await self.store.put(recipe_id, updated.to_document())
        log.info("recipe updated", extra={"op": "update", "recipeId": recipe_id, "uid": uid})
        return to_view(updated)

    async def update_sharing(self, recipe_id: str, is_public: bool, uid: str) -> RecipeView:
        existing = await self._get_existing(recipe_id)
        self._require_owner(existing, uid, "share")

        doc = await self.store.patch(
            recipe_id,
            {"isPublic": bool(is_public), "updatedAt": max(self.clock(), existing.createdAt)},
        )
        log.info(
            "recipe sharing updated",
            extra={"op": "share", "recipeId": recipe_id, "uid": uid, "isPublic": bool(is_public)},
        )
        return to_view(self._load(doc))

    async def delete_recipe(self, recipe_id: str, uid: str) -> None:
        existing = await self._get_existing(recipe_id)
        self._require_owner(existing, uid, "delete")
        await self.store.delete(recipe_id)
        log.info("recipe deleted", extra={"op": "delete", "recipeId": recipe_id, "uid": uid})
