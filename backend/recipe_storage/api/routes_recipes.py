# recipe_storage/api/routes_recipes.py
# 레시피 CRUD + 공유 토글 — 얇은 핸들러: 본문 검증 → principal.uid → 서비스 호출

from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, Response, status

from recipe_storage.core.deps import get_principal, get_recipe_service
from recipe_storage.models.schemas import RecipeIn, RecipeView, SharingIn
from recipe_storage.services.firebase import Principal
from recipe_storage.services.recipes import RecipeService

# 메인 라우터
router = APIRouter(prefix="/api/recipes", tags=["recipes"])

_AUTH = {"security": [{"Firebase Auth": []}]}


@router.post("", response_model=RecipeView, status_code=status.HTTP_201_CREATED, openapi_extra=_AUTH)
async def create_recipe(
    payload: RecipeIn,
    principal: Principal = Depends(get_principal),
    service: RecipeService = Depends(get_recipe_service),
):
    """새 레시피 저장"""
    return await service.save_recipe(payload, principal.uid)


@router.get("", response_model=List[RecipeView], openapi_extra=_AUTH)
async def list_my_recipes(
    principal: Principal = Depends(get_principal),
    service: RecipeService = Depends(get_recipe_service),
):
    """내 레시피 (최신순)"""
    return await service.list_my_recipes(principal.uid)


# /{recipe_id} 보다 먼저 등록해야 "public" 이 id 로 잡히지 않는다
@router.get("/public", response_model=List[RecipeView])
async def list_public_recipes(service: RecipeService = Depends(get_recipe_service)):
    """공개 레시피 (인증 불필요)"""
    return await service.list_public_recipes()


@router.get("/{recipe_id}", response_model=RecipeView, openapi_extra=_AUTH)
async def get_recipe(
    recipe_id: str,
    principal: Principal = Depends(get_principal),
    service: RecipeService = Depends(get_recipe_service),
):
    return await service.get_recipe(recipe_id, principal.uid)


@router.put("/{recipe_id}", response_model=RecipeView, openapi_extra=_AUTH)
async def update_recipe(
    recipe_id: str,
    payload: RecipeIn,
    principal: Principal = Depends(get_principal),
    service: RecipeService = Depends(get_recipe_service),
):
    return await service.update_recipe(recipe_id, payload, principal.uid)


@router.patch("/{recipe_id}/sharing", response_model=RecipeView, openapi_extra=_AUTH)
async def update_sharing(
    recipe_id: str,
    payload: SharingIn,
    principal: Principal = Depends(get_principal),
    service: RecipeService = Depends(get_recipe_service),
):
    """공개/비공개 전환 (소유자만)"""
    return await service.update_sharing(recipe_id, payload.isPublic, principal.uid)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT, openapi_extra=_AUTH)
async def delete_recipe(
    recipe_id: str,
    principal: Principal = Depends(get_principal),
    service: RecipeService = Depends(get_recipe_service),
):
    await service.delete_recipe(recipe_id, principal.uid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
