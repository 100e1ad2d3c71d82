# 비밀번호 해시(bcrypt) + 토큰 서명/검증(JWT)
# 암호 로직 자체는 라이브러리에 맡긴다

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from app.core.config import settings

log = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """bcrypt 해시 생성"""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """저장된 해시와 비교. 해시가 깨져 있으면 False"""
    try:
        return bool(bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8")))
    except (ValueError, AttributeError):
        return False


def create_token(user_id: str, expires_days: Optional[int] = None) -> str:
    days = settings.JWT_EXPIRES_DAYS if expires_days is None else expires_days
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "iat": now,
        "exp": now + timedelta(days=days),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """
    유효하면 userId 반환, 서명 불일치/만료/형식 오류면 None.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        log.info("token expired")
        return None
    except jwt.InvalidTokenError as e:
        log.info("invalid token: %s", e)
        return None

    user_id = payload.get("userId")
    return user_id if isinstance(user_id, str) and user_id else None
