# 레시피 문서 스키마: 필드 제약/검증 메시지
# 요청 바디 검증(RecipeIn/RecipeUpdateIn)과 문서 생성(new_recipe_doc)이 같은 규칙을 쓴다

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

CATEGORIES = ["Breakfast", "Lunch", "Dinner", "Dessert", "Snacks", "Beverages", "Appetizers"]
DIFFICULTIES = ["Easy", "Medium", "Hard"]

# "30 min", "1 hour", "2 hrs"
TIME_RE = re.compile(r"^\d+\s*(min|hour|hrs?)$", re.I)


class Nutrition(BaseModel):
    calories: float = Field(..., ge=0)
    protein: str
    carbs: str
    fat: str


def _trim(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


def _trim_list(v: Any) -> Any:
    if isinstance(v, list):
        return [_trim(x) for x in v]
    return v


def check_title(v: str) -> str:
    if len(v) < 3:
        raise ValueError("Title must be at least 3 characters long")
    if len(v) > 100:
        raise ValueError("Title cannot exceed 100 characters")
    return v


def check_description(v: str) -> str:
    if len(v) < 10:
        raise ValueError("Description must be at least 10 characters long")
    if len(v) > 500:
        raise ValueError("Description cannot exceed 500 characters")
    return v


def check_time(v: str, label: str, example: str) -> str:
    if not TIME_RE.match(v or ""):
        raise ValueError(f'{label} time format is invalid (e.g., "{example}", "1 hour")')
    return v


def check_servings(v: int) -> int:
    if v < 1:
        raise ValueError("Servings must be at least 1")
    if v > 50:
        raise ValueError("Servings cannot exceed 50")
    return v


def check_category(v: str) -> str:
    if v not in CATEGORIES:
        raise ValueError(f"`{v}` is not a valid category")
    return v


def check_difficulty(v: str) -> str:
    if v not in DIFFICULTIES:
        raise ValueError(f"`{v}` is not a valid difficulty")
    return v


def check_tags(v: List[str]) -> List[str]:
    for t in v:
        if len(t) > 30:
            raise ValueError("Tag cannot exceed 30 characters")
    return [t for t in v if t]


def check_ingredients(v: List[str]) -> List[str]:
    if not v:
        raise ValueError("At least one ingredient is required")
    for s in v:
        if not s:
            raise ValueError("Ingredient cannot be empty")
        if len(s) > 200:
            raise ValueError("Ingredient cannot exceed 200 characters")
    return v


def check_instructions(v: List[str]) -> List[str]:
    if not v:
        raise ValueError("At least one instruction is required")
    for s in v:
        if len(s) < 5:
            raise ValueError("Instruction must be at least 5 characters long")
        if len(s) > 1000:
            raise ValueError("Instruction cannot exceed 1000 characters")
    return v


def check_tips(v: List[str]) -> List[str]:
    for s in v:
        if len(s) > 300:
            raise ValueError("Tip cannot exceed 300 characters")
    return [s for s in v if s]


class _RecipeRules(BaseModel):
    # 생성/수정 모델이 공유하는 필드 검증: 값이 None이면 건너뛴다

    @field_validator("title", "description", "image", "cookTime", "prepTime",
                     mode="before", check_fields=False)
    @classmethod
    def _v_trim(cls, v):
        return _trim(v)

    @field_validator("ingredients", "instructions", mode="before", check_fields=False)
    @classmethod
    def _v_trim_list(cls, v):
        return _trim_list(v)

    @field_validator("tags", "tips", mode="before", check_fields=False)
    @classmethod
    def _v_optional_list(cls, v):
        # null은 빈 목록으로 취급
        return [] if v is None else _trim_list(v)

    @field_validator("title", check_fields=False)
    @classmethod
    def _v_title(cls, v):
        return v if v is None else check_title(v)

    @field_validator("description", check_fields=False)
    @classmethod
    def _v_description(cls, v):
        return v if v is None else check_description(v)

    @field_validator("image", check_fields=False)
    @classmethod
    def _v_image(cls, v):
        if v is not None and not v:
            raise ValueError("Recipe image is required")
        return v

    @field_validator("cookTime", check_fields=False)
    @classmethod
    def _v_cook(cls, v):
        return v if v is None else check_time(v, "Cook", "30 min")

    @field_validator("prepTime", check_fields=False)
    @classmethod
    def _v_prep(cls, v):
        return v if v is None else check_time(v, "Prep", "15 min")

    @field_validator("servings", check_fields=False)
    @classmethod
    def _v_servings(cls, v):
        return v if v is None else check_servings(v)

    @field_validator("category", check_fields=False)
    @classmethod
    def _v_category(cls, v):
        return v if v is None else check_category(v)

    @field_validator("difficulty", check_fields=False)
    @classmethod
    def _v_difficulty(cls, v):
        return v if v is None else check_difficulty(v)

    @field_validator("tags", check_fields=False)
    @classmethod
    def _v_tags(cls, v):
        return v if v is None else check_tags(v)

    @field_validator("ingredients", check_fields=False)
    @classmethod
    def _v_ingredients(cls, v):
        return v if v is None else check_ingredients(v)

    @field_validator("instructions", check_fields=False)
    @classmethod
    def _v_instructions(cls, v):
        return v if v is None else check_instructions(v)

    @field_validator("tips", check_fields=False)
    @classmethod
    def _v_tips(cls, v):
        return v if v is None else check_tips(v)


class RecipeIn(_RecipeRules):
    title: str
    description: str
    image: str
    imagePublicId: Optional[str] = None
    cookTime: str
    prepTime: str
    servings: int
    category: str = "Dinner"
    difficulty: str = "Medium"
    tags: List[str] = Field(default_factory=list)
    ingredients: List[str]
    instructions: List[str]
    nutrition: Optional[Nutrition] = None
    tips: List[str] = Field(default_factory=list)
    isPublished: bool = True


class RecipeUpdateIn(_RecipeRules):
    # PUT은 부분 수정: 보낸 필드만 $set (rating/reviewCount/author는 받지 않음)
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    imagePublicId: Optional[str] = None
    cookTime: Optional[str] = None
    prepTime: Optional[str] = None
    servings: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    tags: Optional[List[str]] = None
    ingredients: Optional[List[str]] = None
    instructions: Optional[List[str]] = None
    nutrition: Optional[Nutrition] = None
    tips: Optional[List[str]] = None
    isPublished: Optional[bool] = None


def new_recipe_doc(payload: RecipeIn, author: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    """작성자 정보/파생 필드를 붙여 저장용 문서 생성"""
    doc = payload.model_dump()
    doc.update({
        "author": author["_id"],
        "authorName": author.get("name", ""),
        "rating": 0,
        "reviewCount": 0,
        "createdAt": now,
        "updatedAt": now,
    })
    return doc
