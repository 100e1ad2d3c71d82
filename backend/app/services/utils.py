# app/services/utils.py
# 라우터 공용 유틸
# - Mongo 문서 → API 응답(dict): _id → id, ObjectId → str, 비밀 필드 제거
# - 쿼리스트링 페이지네이션 파싱 (숫자가 아니면 기본값)
# - 검색어 → $text 필터

from __future__ import annotations

import math
from typing import Any, Dict, Optional, Tuple

from bson import ObjectId

HIDDEN_FIELDS = ("password", "__v")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 50


def to_object_id(value: Any) -> Optional[ObjectId]:
    # 형식이 틀린 id는 None (라우터에서 404로 처리)
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _plain(v: Any) -> Any:
    if isinstance(v, ObjectId):
        return str(v)
    if isinstance(v, dict):
        return {k: _plain(x) for k, x in v.items()}
    if isinstance(v, list):
        return [_plain(x) for x in v]
    return v


def to_public(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """_id를 문자열 id로 바꾸고 password/버전 필드를 뺀다"""
    if doc is None:
        return None
    out: Dict[str, Any] = {}
    if "_id" in doc:
        out["id"] = str(doc["_id"])
    for k, v in doc.items():
        if k == "_id" or k in HIDDEN_FIELDS:
            continue
        out[k] = _plain(v)
    return out


def _to_int(raw: Any, default: int) -> int:
    try:
        n = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return n if n > 0 else default


def parse_pagination(page: Any, limit: Any) -> Tuple[int, int, int]:
    # (page, limit, skip): limit 상한 50
    page_num = _to_int(page, DEFAULT_PAGE)
    limit_num = min(_to_int(limit, DEFAULT_LIMIT), MAX_LIMIT)
    return page_num, limit_num, (page_num - 1) * limit_num


def page_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def text_search(search: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    검색어를 그대로 Mongo $text 검색에 넘긴다 (recipes 텍스트 인덱스: title/description/tags).
    형태소(stemming)/불용어 처리는 DB가 한다. 빈 검색어면 None
    """
    s = (search or "").strip()
    if not s:
        return None
    return {"$text": {"$search": s}}
