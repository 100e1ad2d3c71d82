# app/api/routes_auth.py
# 회원가입/로그인/내 정보: 응답은 {user, token}

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.concurrency import run_in_threadpool

from app.core.deps import get_current_user
from app.core.security import create_token, hash_password, verify_password
from app.db.init import get_db
from app.db.models.schemas import LoginIn, SignupIn
from app.services.utils import to_public

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

DUPLICATE_EMAIL = "User with this email already exists"
BAD_CREDENTIALS = "Invalid email or password"


def _auth_response(user: Dict[str, Any]) -> Dict[str, Any]:
    return {"user": to_public(user), "token": create_token(str(user["_id"]))}


@router.post("/signup", status_code=201)
async def signup(payload: SignupIn, db=Depends(get_db)):
    """회원가입: 이메일 중복(대소문자 무시)이면 400"""
    try:
        if await db["users"].find_one({"email": payload.email}):
            raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)

        # bcrypt는 CPU 작업이라 스레드풀로
        pw_hash = await run_in_threadpool(hash_password, payload.password)
        now = datetime.now(timezone.utc)
        user = {
            "email": payload.email,
            "name": payload.name,
            "password": pw_hash,
            "createdAt": now,
            "updatedAt": now,
        }
        res = await db["users"].insert_one(user)
        user["_id"] = res.inserted_id
    except DuplicateKeyError:
        # 사전 확인과 insert 사이에 같은 이메일이 들어온 경우 (unique 인덱스)
        raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)
    except PyMongoError:
        log.exception("signup failed email=%s", payload.email)
        raise HTTPException(status_code=500, detail="Internal server error")

    log.info("user signed up id=%s", user["_id"])
    return _auth_response(user)


@router.post("/login")
async def login(payload: LoginIn, db=Depends(get_db)):
    """로그인: 이메일 없음/비밀번호 불일치 모두 같은 401 메시지"""
    try:
        user = await db["users"].find_one({"email": payload.email})
    except PyMongoError:
        log.exception("login lookup failed")
        raise HTTPException(status_code=500, detail="Internal server error")

    if not user:
        raise HTTPException(status_code=401, detail=BAD_CREDENTIALS)

    ok = await run_in_threadpool(verify_password, payload.password, user.get("password") or "")
    if not ok:
        log.info("login rejected id=%s", user["_id"])
        raise HTTPException(status_code=401, detail=BAD_CREDENTIALS)

    return _auth_response(user)


@router.get("/me")
async def me(user=Depends(get_current_user)):
    return to_public(user)
