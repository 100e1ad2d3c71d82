# app/db/init.py
# Mongo 연결 유틸: motor
# 전역 싱글톤 대신 MongoStore를 startup에서 만들어 app.state에 붙이고,
# 라우터는 get_db 의존성으로 핸들을 받는다.

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

log = logging.getLogger(__name__)


class StoreNotReady(RuntimeError):
    pass


class MongoStore:
    """motor 클라이언트 + DB 핸들의 수명 관리"""

    def __init__(self, uri: str, db_name: str, client: Optional[AsyncIOMotorClient] = None):
        self.uri = uri
        self.db_name = db_name
        self._client = client
        self._db: Optional[AsyncIOMotorDatabase] = client[db_name] if client is not None else None

    async def connect(self) -> AsyncIOMotorDatabase:
        # 이미 붙어 있으면 그대로
        if self._client is None:
            self._client = AsyncIOMotorClient(self.uri, serverSelectionTimeoutMS=5000)
            self._db = self._client[self.db_name]

        # 연결 확인 (준비 안 됐으면 예외)
        await self._db.command("ping")
        log.info("mongo connected db=%s", self.db_name)
        return self._db

    @property
    def db(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise StoreNotReady("MongoDB is not initialized yet.")
        return self._db

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            log.info("mongo connection closed")
        self._client = None
        self._db = None


def get_db(request: Request) -> AsyncIOMotorDatabase:
    # 라우터에서 쓰는 핸들. 미초기화면 StoreNotReady
    store: Optional[MongoStore] = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreNotReady("MongoDB is not initialized yet.")
    return store.db
