# app/services/ratings.py
# 레시피 평점 집계: 댓글 저장 직후 호출
# 승인된 댓글 전체를 다시 읽어 평균/개수를 재계산한 뒤 레시피에 한 번 기록한다.
# 트랜잭션 없음: 동시 작성 시 마지막 쓰기가 이김(값은 원본에서 다시 계산하므로 범위는 항상 정상)

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from bson import ObjectId

log = logging.getLogger(__name__)


def round_rating(mean: float) -> float:
    # 소수 첫째 자리 반올림(half-up): 4.666.. → 4.7, 4.25 → 4.3
    return float(Decimal(str(mean)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def summarize(ratings: Iterable[int]) -> Tuple[float, int]:
    """(평균 평점, 개수). 댓글이 없으면 (0, 0)"""
    values = list(ratings)
    if not values:
        return 0, 0
    return round_rating(sum(values) / len(values)), len(values)


async def recompute_recipe_rating(db, recipe_id: ObjectId) -> Optional[Tuple[float, int]]:
    """
    승인된 댓글 기준으로 rating/reviewCount 재계산 후 저장.
    - 범위 보정(clamp)은 하지 않음: 입력 검증은 CommentIn에서 끝난다
    - 레시피가 이미 삭제됐으면 아무것도 안 하고 None
    """
    cursor = db["comments"].find({"recipe": recipe_id, "isApproved": True}, {"rating": 1})
    docs = await cursor.to_list(length=None)
    rating, count = summarize(int(d["rating"]) for d in docs)

    res = await db["recipes"].update_one(
        {"_id": recipe_id},
        {"$set": {"rating": rating, "reviewCount": count}},
    )
    if res.matched_count == 0:
        log.warning("rating recompute skipped: recipe %s is gone", recipe_id)
        return None

    log.debug("recipe %s rating=%s reviewCount=%d", recipe_id, rating, count)
    return rating, count
