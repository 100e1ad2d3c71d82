# 공용 의존성: Bearer 토큰 → 현재 사용자
# 필수 인증(get_current_user)과 선택 인증(get_optional_user) 두 가지

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import Depends, HTTPException, Request

from app.core.security import verify_token
from app.db.init import get_db

log = logging.getLogger(__name__)

BEARER = "Bearer "


def bearer_token(request: Request) -> Optional[str]:
    # "Authorization: Bearer <token>" 에서 토큰만 꺼낸다. 없거나 형식이 다르면 None
    header = request.headers.get("Authorization") or ""
    if not header.startswith(BEARER):
        return None
    token = header[len(BEARER):].strip()
    return token or None


async def _load_user(db, user_id: str) -> Optional[Dict[str, Any]]:
    if not ObjectId.is_valid(user_id):
        return None
    return await db["users"].find_one({"_id": ObjectId(user_id)})


async def get_current_user(request: Request, db=Depends(get_db)) -> Dict[str, Any]:
    """인증 필수 라우트용. 토큰 없음/위조/만료는 401"""
    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="No token provided")

    user_id = verify_token(token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = await _load_user(db, user_id)
    if not user:
        # 토큰은 맞는데 계정이 사라진 경우
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def get_optional_user(request: Request, db=Depends(get_db)) -> Optional[Dict[str, Any]]:
    # 익명 허용 라우트(댓글 작성)용. 잘못된 토큰은 익명으로 취급
    token = bearer_token(request)
    if not token:
        return None
    user_id = verify_token(token)
    if not user_id:
        log.info("optional auth: bad token, continuing as anonymous")
        return None
    return await _load_user(db, user_id)
