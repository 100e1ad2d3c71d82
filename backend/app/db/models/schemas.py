# app/db/models/schemas.py
# Pydantic 모델 정의
# SignupIn/LoginIn: 인증 입력
# CommentIn: 리뷰(댓글) 입력: 평점은 1~5 정수로 정규화
# ImageUrlIn/ImageDeleteIn: 이미지 호스트 요청 바디
from __future__ import annotations

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# jpg/jpeg/png/webp/gif 로 끝나는 http(s) URL만
IMAGE_URL_RE = re.compile(r"^https?://.+\.(jpg|jpeg|png|webp|gif)(\?.*)?$", re.I)


# # 회원가입: 이메일은 소문자로 저장해서 대소문자 무시 유일성 보장
class SignupIn(BaseModel):
    email: str
    password: str
    name: str

    @field_validator("email", mode="before")
    @classmethod
    def _v_email(cls, v):
        v = (v or "").strip().lower() if isinstance(v, str) else v
        if isinstance(v, str) and not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email")
        return v

    @field_validator("password")
    @classmethod
    def _v_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("name")
    @classmethod
    def _v_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v


class LoginIn(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _v_email(cls, v):
        return v.strip().lower()


def round_half_up(x: float) -> int:
    # 4.5 → 5 (파이썬 round()는 은행가 반올림이라 쓰지 않음)
    return int(Decimal(str(x)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# # 리뷰 입력: 범위 밖 평점은 잘라내지 않고 거절한다
class CommentIn(BaseModel):
    content: str
    rating: float

    @field_validator("content")
    @classmethod
    def _v_content(cls, v):
        v = v.strip()
        if len(v) < 5:
            raise ValueError("Comment must be at least 5 characters long")
        if len(v) > 1000:
            raise ValueError("Comment cannot exceed 1000 characters")
        return v

    @field_validator("rating", mode="before")
    @classmethod
    def _v_rating_type(cls, v):
        # JSON true/false가 1/0점으로 바뀌지 않게
        if isinstance(v, bool):
            raise ValueError("Rating must be a number")
        return v

    @field_validator("rating")
    @classmethod
    def _v_rating(cls, v):
        if not math.isfinite(v) or v < 1 or v > 5:
            raise ValueError("Rating must be between 1 and 5")
        return round_half_up(v)


class ImageUrlIn(BaseModel):
    imageUrl: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("imageUrl")
    @classmethod
    def _v_url(cls, v):
        if not v:
            raise ValueError("Image URL is required")
        if not IMAGE_URL_RE.match(v):
            raise ValueError("Invalid image URL format")
        return v


class ImageDeleteIn(BaseModel):
    publicId: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("publicId")
    @classmethod
    def _v_public_id(cls, v):
        if not v:
            raise ValueError("Image public ID is required")
        return v
