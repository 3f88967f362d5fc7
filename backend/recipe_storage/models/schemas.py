# recipe_storage/models/schemas.py
# API 입출력 스키마 (프론트 계약)
# - 레시피 이름은 요청/응답 모두 "title" 로 주고받는다 (저장 필드는 name)
# - 구버전 필드(recipeName, prepTime, prepTimeMinutes, nutritionalInfo, userId ...)는 거부
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

from recipe_storage.core.errors import ValidationFailed
from recipe_storage.db.models.recipe import Recipe, RecipeSource, dedupe


def _non_blank_items(v: List[str]) -> List[str]:
    if any(not (s or "").strip() for s in v):
        raise ValueError("must not contain blank entries")
    return v


# 생성/수정 요청 본문
class RecipeIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str
    description: Optional[str] = None
    ingredients: List[str] = Field(min_length=1)
    instructions: List[str] = Field(min_length=1)
    prepMinutes: Optional[int] = Field(default=None, gt=0, strict=True)
    cookMinutes: Optional[int] = Field(default=None, gt=0, strict=True)
    servings: int = Field(gt=0, strict=True)
    nutrition: Optional[Dict[str, float]] = None
    tips: Optional[Dict[str, List[str]]] = None
    imageUrl: Optional[str] = None
    source: RecipeSource
    tags: Optional[List[str]] = None
    dietaryRestrictions: Optional[List[str]] = None
    isPublic: Optional[StrictBool] = None   # 생성 시에만 반영, 없으면 false

    @field_validator("title")
    @classmethod
    def _v_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required")
        return v

    @field_validator("ingredients", "instructions")
    @classmethod
    def _v_items(cls, v: List[str]) -> List[str]:
        return _non_blank_items(v)

    @field_validator("tags", "dietaryRestrictions")
    @classmethod
    def _v_set(cls, v):
        return dedupe(v)


# 공유 토글 요청 본문
class SharingIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    isPublic: StrictBool


# 응답 — 저장 필드 전부 + totalMinutes
class RecipeView(BaseModel):
    id: str
    ownerUid: str
    title: str
    description: Optional[str] = None
    ingredients: List[str]
    instructions: List[str]
    prepMinutes: Optional[int] = None
    cookMinutes: Optional[int] = None
    totalMinutes: Optional[int] = None
    servings: int
    nutrition: Optional[Dict[str, float]] = None
    tips: Optional[Dict[str, List[str]]] = None
    imageUrl: Optional[str] = None
    source: RecipeSource
    tags: Optional[List[str]] = None
    dietaryRestrictions: Optional[List[str]] = None
    isPublic: bool
    createdAt: datetime
    updatedAt: datetime


def to_view(recipe: Recipe) -> RecipeView:
    d = recipe.model_dump()
    d["title"] = d.pop("name")
    d["totalMinutes"] = recipe.totalMinutes
    return RecipeView(**d)


def field_errors(errors: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    out = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        out.append({"field": loc, "message": err.get("msg", "")})
    return out


def parse_recipe_input(payload: Union[RecipeIn, Mapping[str, Any]]) -> RecipeIn:
    # 라우터 밖(스크립트/테스트)에서 들어온 dict 도 같은 규칙으로 검증
    if isinstance(payload, RecipeIn):
        return payload
    try:
        return RecipeIn.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailed("Invalid recipe", errors=field_errors(e.errors())) from e
