# 레시피 저장 스키마 — 컬렉션에 1 id = 1 문서, 평평한 구조 (nutrition/tips 만 중첩)
from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RecipeSource = Literal["ai-generated", "manual"]


def dedupe(values: Optional[List[str]]) -> Optional[List[str]]:
    # 집합 의미 — 첫 등장 순서 유지
    if values is None:
        return None
    return list(dict.fromkeys(values))


class Recipe(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    ownerUid: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    ingredients: List[str] = Field(min_length=1)
    instructions: List[str] = Field(min_length=1)
    prepMinutes: Optional[int] = Field(default=None, gt=0)
    cookMinutes: Optional[int] = Field(default=None, gt=0)
    servings: int = Field(ge=1)
    nutrition: Optional[Dict[str, float]] = None      # 1인분 기준
    tips: Optional[Dict[str, List[str]]] = None       # 자유 카테고리
    imageUrl: Optional[str] = None
    source: RecipeSource
    tags: Optional[List[str]] = None
    dietaryRestrictions: Optional[List[str]] = None
    isPublic: bool = False
    createdAt: datetime
    updatedAt: datetime

    @field_validator("ingredients", "instructions")
    @classmethod
    def _v_non_empty_items(cls, v: List[str]) -> List[str]:
        if any(not (s or "").strip() for s in v):
            raise ValueError("items must be non-empty strings")
        return v

    @field_validator("tags", "dietaryRestrictions")
    @classmethod
    def _v_set(cls, v):
        return dedupe(v)

    @model_validator(mode="after")
    def _v_timestamps(self):
        if self.updatedAt < self.createdAt:
            raise ValueError("updatedAt must not precede createdAt")
        return self

    @property
    def totalMinutes(self) -> Optional[int]:
        # 둘 다 있을 때만 합산
        if self.prepMinutes is None or self.cookMinutes is None:
            return None
        return self.prepMinutes + self.cookMinutes

    def to_document(self) -> dict:
        # 저장용 dict (datetime 은 그대로 — 드라이버가 BSON date 로 저장)
        return self.model_dump(mode="python")
