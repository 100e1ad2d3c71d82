# app/api/routes_recipes.py
# 레시피 목록/상세/작성/수정/삭제 + 리뷰(댓글) 조회/작성
# 댓글 작성 후 평점 집계(recompute_recipe_rating)를 한 번 돌린다

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.errors import PyMongoError

from app.core.deps import get_current_user, get_optional_user
from app.db.init import get_db
from app.db.models.recipe import RecipeIn, RecipeUpdateIn, new_recipe_doc
from app.db.models.schemas import CommentIn
from app.services.images import ImageHostError, ImageHostNotReady, get_image_host
from app.services.ratings import recompute_recipe_rating
from app.services.utils import (
    page_meta,
    parse_pagination,
    text_search,
    to_object_id,
    to_public,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["recipes"])

NOT_FOUND = "Recipe not found"
NEWEST = [("createdAt", -1), ("_id", -1)]
# 검색 시 관련도(textScore) 우선, 동점은 최신순
BY_RELEVANCE = [("score", {"$meta": "textScore"})] + NEWEST

# ------------------------------
# 헬퍼
# ------------------------------

async def _author_map(db, author_ids, fields: Dict[str, int]) -> Dict[Any, Dict[str, Any]]:
    # 작성자 일괄 조회 (populate 대용): 목록 1회 쿼리
    ids = list({a for a in author_ids if a is not None})
    if not ids:
        return {}
    docs = await db["users"].find({"_id": {"$in": ids}}, fields).to_list(length=None)
    return {d["_id"]: d for d in docs}


def _with_author(doc: Dict[str, Any], authors: Dict[Any, Dict[str, Any]]) -> Dict[str, Any]:
    out = to_public(doc)
    author = authors.get(doc.get("author"))
    if author is not None:
        out["author"] = to_public(author)
    return out


async def _shape_many(db, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    authors = await _author_map(db, (d.get("author") for d in docs), {"name": 1})
    return [_with_author(d, authors) for d in docs]


async def _shape_one(db, doc: Dict[str, Any]) -> Dict[str, Any]:
    authors = await _author_map(db, [doc.get("author")], {"name": 1, "email": 1})
    return _with_author(doc, authors)


async def _load_recipe(db, rid: str) -> Dict[str, Any]:
    oid = to_object_id(rid)
    if oid is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    doc = await db["recipes"].find_one({"_id": oid})
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return doc


def _require_owner(doc: Dict[str, Any], user: Dict[str, Any], action: str) -> None:
    if str(doc.get("author")) != str(user["_id"]):
        raise HTTPException(status_code=403, detail=f"Not authorized to {action} this recipe")


# ------------------------------
# 목록/검색
# ------------------------------

@router.get("")
async def list_recipes(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db=Depends(get_db),
):
    """공개 레시피 목록: category/difficulty("All"은 무시)/search + 페이지네이션, 최신순 (검색 시 관련도순)"""
    query: Dict[str, Any] = {"isPublished": True}
    if category and category != "All":
        query["category"] = category
    if difficulty and difficulty != "All":
        query["difficulty"] = difficulty
    sort = NEWEST
    text = text_search(search)
    if text:
        query.update(text)
        sort = BY_RELEVANCE

    page_num, limit_num, skip = parse_pagination(page, limit)
    try:
        docs = await db["recipes"].find(query).sort(sort).skip(skip).limit(limit_num).to_list(length=limit_num)
        total = await db["recipes"].count_documents(query)
        recipes = await _shape_many(db, docs)
    except PyMongoError:
        log.exception("list recipes failed query=%s", query)
        raise HTTPException(status_code=500, detail="Failed to fetch recipes")

    return {
        "recipes": recipes,
        **page_meta(total, page_num, limit_num),
        "hasMore": total > page_num * limit_num,
    }


@router.get("/user/{user_id}")
async def list_user_recipes(
    user_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db=Depends(get_db),
):
    """특정 사용자의 공개 레시피"""
    oid = to_object_id(user_id)
    page_num, limit_num, skip = parse_pagination(page, limit)
    if oid is None:
        return {"recipes": [], **page_meta(0, page_num, limit_num)}

    query = {"author": oid, "isPublished": True}
    try:
        docs = await db["recipes"].find(query).sort(NEWEST).skip(skip).limit(limit_num).to_list(length=limit_num)
        total = await db["recipes"].count_documents(query)
        recipes = await _shape_many(db, docs)
    except PyMongoError:
        log.exception("list user recipes failed user=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch user recipes")

    return {"recipes": recipes, **page_meta(total, page_num, limit_num)}


# ------------------------------
# 단건 CRUD
# ------------------------------

@router.get("/{rid}")
async def get_recipe(rid: str, db=Depends(get_db)):
    try:
        doc = await _load_recipe(db, rid)
        return await _shape_one(db, doc)
    except PyMongoError:
        log.exception("get recipe failed id=%s", rid)
        raise HTTPException(status_code=500, detail="Failed to fetch recipe")


@router.post("", status_code=201)
async def create_recipe(payload: RecipeIn, user=Depends(get_current_user), db=Depends(get_db)):
    """레시피 작성 (로그인 필요)"""
    doc = new_recipe_doc(payload, user, datetime.now(timezone.utc))
    try:
        res = await db["recipes"].insert_one(doc)
        doc["_id"] = res.inserted_id
        out = await _shape_one(db, doc)
    except PyMongoError:
        log.exception("create recipe failed user=%s", user["_id"])
        raise HTTPException(status_code=500, detail="Failed to create recipe")

    log.info("recipe created id=%s author=%s", doc["_id"], user["_id"])
    return out


@router.put("/{rid}")
async def update_recipe(
    rid: str,
    payload: RecipeUpdateIn,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    """작성자만 수정. 보낸 필드만 반영"""
    try:
        doc = await _load_recipe(db, rid)
        _require_owner(doc, user, "update")

        changes = payload.model_dump(exclude_unset=True)
        # 필수 필드를 null로 지우는 건 막는다 (imagePublicId/nutrition은 비울 수 있음)
        for k in [k for k, v in changes.items() if v is None and k not in ("imagePublicId", "nutrition")]:
            changes.pop(k)
        changes["updatedAt"] = datetime.now(timezone.utc)

        await db["recipes"].update_one({"_id": doc["_id"]}, {"$set": changes})
        updated = await db["recipes"].find_one({"_id": doc["_id"]})
        if not updated:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        return await _shape_one(db, updated)
    except PyMongoError:
        log.exception("update recipe failed id=%s", rid)
        raise HTTPException(status_code=500, detail="Failed to update recipe")


@router.delete("/{rid}")
async def delete_recipe(
    rid: str,
    user=Depends(get_current_user),
    db=Depends(get_db),
    images=Depends(get_image_host),
):
    """
    작성자만 삭제. 레시피 → 댓글 → 호스팅 이미지 순서로 지운다.
    트랜잭션 없음: 댓글 삭제가 실패하면 고아 댓글이 남지만
    레시피가 없으므로 댓글 조회는 404가 된다.
    """
    try:
        doc = await _load_recipe(db, rid)
        _require_owner(doc, user, "delete")

        await db["recipes"].delete_one({"_id": doc["_id"]})
        res = await db["comments"].delete_many({"recipe": doc["_id"]})
    except PyMongoError:
        log.exception("delete recipe failed id=%s", rid)
        raise HTTPException(status_code=500, detail="Failed to delete recipe")

    log.info("recipe deleted id=%s comments=%d", doc["_id"], res.deleted_count)

    # 이미지 정리는 best effort: 실패해도 요청은 성공
    public_id = doc.get("imagePublicId")
    if public_id:
        try:
            await images.destroy(public_id)
        except (ImageHostNotReady, ImageHostError) as e:
            log.warning("image cleanup failed public_id=%s: %s", public_id, e)

    return {"message": "Recipe deleted successfully"}


# ------------------------------
# 리뷰(댓글)
# ------------------------------

@router.get("/{rid}/comments")
async def list_comments(
    rid: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db=Depends(get_db),
):
    """승인된 댓글만, 최신순"""
    page_num, limit_num, skip = parse_pagination(page, limit)
    try:
        doc = await _load_recipe(db, rid)
        query = {"recipe": doc["_id"], "isApproved": True}
        docs = await db["comments"].find(query).sort(NEWEST).skip(skip).limit(limit_num).to_list(length=limit_num)
        total = await db["comments"].count_documents(query)
        comments = await _shape_many(db, docs)
    except PyMongoError:
        log.exception("list comments failed recipe=%s", rid)
        raise HTTPException(status_code=500, detail="Failed to fetch comments")

    return {"comments": comments, **page_meta(total, page_num, limit_num)}


@router.post("/{rid}/comments", status_code=201)
async def add_comment(
    rid: str,
    payload: CommentIn,
    user=Depends(get_optional_user),
    db=Depends(get_db),
):
    """
    댓글 작성 (익명 허용). 저장 후 레시피 평점/리뷰 수를 다시 계산한다.
    """
    try:
        recipe = await _load_recipe(db, rid)
        now = datetime.now(timezone.utc)
        comment = {
            "recipe": recipe["_id"],
            "author": user["_id"] if user else None,
            "authorName": user.get("name", "Anonymous") if user else "Anonymous",
            "content": payload.content,
            "rating": payload.rating,
            "isApproved": True,
            "createdAt": now,
            "updatedAt": now,
        }
        res = await db["comments"].insert_one(comment)
        comment["_id"] = res.inserted_id

        await recompute_recipe_rating(db, recipe["_id"])
    except PyMongoError:
        log.exception("add comment failed recipe=%s", rid)
        raise HTTPException(status_code=500, detail="Failed to add comment")

    # 작성자는 레시피와 같은 모양 {id, name} (익명은 null)
    authors = {user["_id"]: {"_id": user["_id"], "name": user.get("name")}} if user else {}
    return _with_author(comment, authors)
