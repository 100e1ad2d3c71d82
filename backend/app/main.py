# app/main.py
# FastAPI 앱 초기화 및 라우터 설정
# 라우터는 각 기능별로 분리하여 관리

from __future__ import annotations

import logging
from asyncio import sleep

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from app.api.routes_auth import router as auth_router         # 회원가입/로그인
from app.api.routes_recipes import router as recipes_router   # 레시피/리뷰
from app.api.routes_upload import router as upload_router     # 이미지 호스트
from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.logging_setup import setup_logging
from app.db.indexes import ensure_indexes
from app.db.init import MongoStore
from app.services.images import CloudinaryHost

setup_logging()
log = logging.getLogger(__name__)

DB_RETRIES = 20
DB_RETRY_DELAY = 1.0

app = FastAPI(title="RecipeShare - API", version="0.1.0")

# CORS: 프론트 개발 서버 허용
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


# 앱 시작/종료 이벤트 핸들러
@app.on_event("startup")
async def on_startup() -> None:
    # 테스트는 app.state.store/images를 미리 주입한다
    if getattr(app.state, "store", None) is None:
        app.state.store = MongoStore(settings.MONGO_URI, settings.MONGO_DB)
    if getattr(app.state, "images", None) is None:
        app.state.images = CloudinaryHost.from_settings()

    store: MongoStore = app.state.store

    # 1) DB 먼저 붙는다 (최대 20회, 1초 간격)
    db = None
    for i in range(DB_RETRIES):
        try:
            db = await store.connect()
            log.info("[startup] db ready")
            break
        except PyMongoError as e:
            log.warning("[startup] db init retry %d: %s", i + 1, e)
            await sleep(DB_RETRY_DELAY)
    if db is None:
        log.error("[startup] db init failed after retries")
        return

    # 2) 인덱스 보장
    try:
        await ensure_indexes(db)
        log.info("[startup] indexes ensured")
    except PyMongoError as e:
        log.error("[startup] ensure_indexes failed: %s", e)

    # 3) 이미지 호스트는 설정 여부만 알린다
    if not app.state.images.configured:
        log.warning("[startup] image host not configured; set CLOUDINARY_CLOUD_NAME/API_KEY/API_SECRET")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    # 몽고db 커넥션 정리
    store = getattr(app.state, "store", None)
    if store is not None:
        await store.close()


@app.get("/")
async def root():
    return {"status": "ok"}


@app.get("/health")
async def health():
    ok = {"status": "ok", "db": "skip"}
    store = getattr(app.state, "store", None)
    if store is not None:
        try:
            await store.db.command("ping")
            ok["db"] = "ok"
        except Exception as e:
            ok["db"] = f"error: {e}"
    return ok


# 라우터 prefix는 각 파일 내에서 정의함 , 중복 prefix 금지
app.include_router(auth_router)
app.include_router(recipes_router)
app.include_router(upload_router)
