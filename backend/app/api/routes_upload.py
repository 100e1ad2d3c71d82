# app/api/routes_upload.py
# 이미지 업로드/URL 가져오기/삭제/변환 URL 조회
# 실제 저장/리사이즈는 이미지 호스트가 한다

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.core.config import settings
from app.core.deps import get_current_user
from app.db.models.schemas import ImageDeleteIn, ImageUrlIn
from app.services.images import ImageHostError, ImageHostNotReady, get_image_host

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])

NOT_CONFIGURED = "Image upload service not configured. Please contact administrator."


def _ensure_configured(images) -> None:
    if not images.configured:
        raise HTTPException(status_code=500, detail=NOT_CONFIGURED)


@router.post("")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    user=Depends(get_current_user),
    images=Depends(get_image_host),
):
    """
    멀티파트 'image' 필드 1장 업로드 (이미지 MIME만, 최대 5MB)
    """
    _ensure_configured(images)

    if image is None:
        raise HTTPException(status_code=400, detail="No image file provided")

    # 파일 타입 검증
    if not image.content_type or not image.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files (JPG, PNG, WebP) are allowed.")

    # 제한보다 1바이트 더 읽어서 초과 여부만 판단
    data = await image.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise HTTPException(status_code=400, detail=f"File too large. Maximum size is {mb}MB.")
    if not data:
        raise HTTPException(status_code=400, detail="No image file provided")

    try:
        result = await images.upload(data, filename=image.filename or "upload", content_type=image.content_type)
    except ImageHostNotReady:
        raise HTTPException(status_code=500, detail=NOT_CONFIGURED)
    except ImageHostError as e:
        log.error("image upload failed user=%s: %s", user["_id"], e)
        raise HTTPException(status_code=500, detail="Failed to upload image. Please try again.")

    return {"message": "Image uploaded successfully", "image": images.image_info(result)}


@router.post("/url")
async def upload_image_from_url(
    payload: ImageUrlIn,
    user=Depends(get_current_user),
    images=Depends(get_image_host),
):
    """외부 이미지 URL을 호스트로 가져오기"""
    _ensure_configured(images)
    try:
        result = await images.upload(payload.imageUrl)
    except ImageHostError as e:
        log.error("image import failed url=%s: %s", payload.imageUrl, e)
        raise HTTPException(
            status_code=500,
            detail="Failed to upload image from URL. Please check the URL and try again.",
        )

    return {"message": "Image uploaded successfully from URL", "image": images.image_info(result)}


@router.delete("")
async def delete_image(
    payload: ImageDeleteIn,
    user=Depends(get_current_user),
    images=Depends(get_image_host),
):
    if not images.configured:
        raise HTTPException(status_code=500, detail="Image service not configured. Please contact administrator.")
    try:
        result = await images.destroy(payload.publicId)
    except ImageHostError as e:
        log.error("image delete failed public_id=%s: %s", payload.publicId, e)
        raise HTTPException(status_code=500, detail="Failed to delete image. Please try again.")

    if result.get("result") != "ok":
        raise HTTPException(status_code=404, detail="Image not found or already deleted")
    return {"message": "Image deleted successfully"}


@router.get("/{public_id:path}")
async def image_info(public_id: str, images=Depends(get_image_host)):
    """크기별 변환 URL (원본/썸네일/중간/큰 사이즈)"""
    return {
        "publicId": public_id,
        "original": images.url(public_id),
        "thumbnail": images.thumbnail_url(public_id),
        "medium": images.url(public_id, width=500, height=375),
        "large": images.url(public_id, width=1200, height=900),
    }
