# app/services/images.py
# 이미지 호스트(Cloudinary) 연동: REST API를 httpx로 직접 호출
# - 업로드(파일 바이트 / 외부 URL), 삭제(destroy), 변환 URL 생성, ping
# - 서명: 파라미터를 키 순으로 "k=v&k=v" + api_secret → sha1
# 변환(리사이즈)은 호스트가 처리하고 여기서는 URL만 만든다

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Dict, Optional, Union

import httpx
from fastapi import Request

from app.core.config import settings

log = logging.getLogger(__name__)


class ImageHostNotReady(Exception):
    # 클라우드 이름/키/시크릿 미설정
    pass


class ImageHostError(Exception):
    # 호스트 응답 오류(4xx/5xx, 네트워크)
    pass


# 업로드 시 원본에 적용하는 변환 (800x600 fill)
UPLOAD_TRANSFORMATION = "c_fill,h_600,q_auto,w_800"

# 파라미터명 → URL 변환 약어
_TX_KEYS = {"width": "w", "height": "h", "crop": "c", "quality": "q", "fetch_format": "f"}


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """Cloudinary 요청 서명 (빈 값은 제외)"""
    parts = [f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, "")]
    return hashlib.sha1(("&".join(parts) + api_secret).encode("utf-8")).hexdigest()


class CloudinaryHost:
    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "recipeshare",
        api_base: str = "https://api.cloudinary.com/v1_1",
        delivery_base: str = "https://res.cloudinary.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.api_base = api_base.rstrip("/")
        self.delivery_base = delivery_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "CloudinaryHost":
        return cls(
            settings.CLOUDINARY_CLOUD_NAME,
            settings.CLOUDINARY_API_KEY,
            settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
            api_base=settings.CLOUDINARY_API_BASE,
            delivery_base=settings.CLOUDINARY_DELIVERY_BASE,
            timeout=settings.IMAGE_HOST_TIMEOUT,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _require(self) -> None:
        if not self.configured:
            raise ImageHostNotReady("CLOUDINARY_CLOUD_NAME / API_KEY / API_SECRET not set")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = dict(params, timestamp=int(time.time()))
        params["signature"] = sign_params(params, self.api_secret or "")
        params["api_key"] = self.api_key
        return params

    async def _post(self, action: str, data: Dict[str, Any], files: Any = None) -> Dict[str, Any]:
        url = f"{self.api_base}/{self.cloud_name}/image/{action}"
        try:
            async with self._client() as cli:
                r = await cli.post(url, data=data, files=files)
        except httpx.HTTPError as e:
            raise ImageHostError(f"{action} request failed: {e}") from e

        if r.status_code >= 400:
            try:
                msg = r.json().get("error", {}).get("message") or r.text
            except ValueError:
                msg = r.text
            raise ImageHostError(f"{action} failed ({r.status_code}): {msg}")
        return r.json()

    async def upload(
        self,
        file: Union[bytes, str],
        filename: str = "upload",
        content_type: str = "application/octet-stream",
    ) -> Dict[str, Any]:
        """
        bytes면 멀티파트 파일 업로드, str이면 외부 URL을 호스트가 직접 가져간다.
        반환: 호스트 응답 (secure_url, public_id, width, height, format, bytes ...)
        """
        self._require()
        data = self._signed({"folder": self.folder, "transformation": UPLOAD_TRANSFORMATION})
        if isinstance(file, str):
            data["file"] = file
            files = None
        else:
            files = {"file": (filename, file, content_type)}
        result = await self._post("upload", data, files)
        log.info("image uploaded public_id=%s bytes=%s", result.get("public_id"), result.get("bytes"))
        return result

    async def destroy(self, public_id: str) -> Dict[str, Any]:
        # {"result": "ok"} 또는 {"result": "not found"}
        self._require()
        result = await self._post("destroy", self._signed({"public_id": public_id}))
        log.info("image destroy public_id=%s result=%s", public_id, result.get("result"))
        return result

    async def ping(self) -> bool:
        if not self.configured:
            return False
        url = f"{self.api_base}/{self.cloud_name}/ping"
        try:
            async with self._client() as cli:
                r = await cli.get(url, auth=(self.api_key, self.api_secret))
            return r.status_code == 200
        except httpx.HTTPError as e:
            log.warning("image host ping failed: %s", e)
            return False

    def url(self, public_id: str, **options: Any) -> str:
        """변환 URL (기본 800x600 fill, q_auto, f_auto)"""
        opts = {"width": 800, "height": 600, "crop": "fill", "quality": "auto", "fetch_format": "auto"}
        opts.update(options)
        tx = ",".join(sorted(f"{_TX_KEYS[k]}_{v}" for k, v in opts.items() if k in _TX_KEYS and v is not None))
        return f"{self.delivery_base}/{self.cloud_name}/image/upload/{tx}/{public_id}"

    def thumbnail_url(self, public_id: str) -> str:
        return self.url(public_id, width=300, height=200)

    def image_info(self, result: Dict[str, Any]) -> Dict[str, Any]:
        # 업로드 응답 → API 응답 모양
        public_id = result.get("public_id", "")
        return {
            "url": result.get("secure_url") or result.get("url"),
            "publicId": public_id,
            "width": result.get("width"),
            "height": result.get("height"),
            "format": result.get("format"),
            "bytes": result.get("bytes"),
            "thumbnail": self.thumbnail_url(public_id),
            "optimized": self.url(public_id),
        }


def get_image_host(request: Request) -> CloudinaryHost:
    # startup에서 app.state.images에 붙여둔 인스턴스 (테스트는 dependency_overrides로 교체)
    host = getattr(request.app.state, "images", None)
    if host is None:
        host = CloudinaryHost.from_settings()
        request.app.state.images = host
    return host
