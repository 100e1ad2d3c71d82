# 로깅 설정: 앱 시작 시 한 번 호출
from __future__ import annotations

import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    lvl = (level or settings.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    # pymongo 디버그 로그는 너무 시끄러움
    logging.getLogger("pymongo").setLevel(logging.INFO if lvl == "DEBUG" else lvl)
