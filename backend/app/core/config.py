# 환경변수 로딩 (.env)
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"  # 필요 시 prod/staging로 분리
    MONGO_DB: str = "recipeshare"

    # 토큰 서명 키: 운영에서는 반드시 교체 (HS256은 32바이트 이상)
    JWT_SECRET: str = "recipeshare-dev-secret-change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # 이미지 호스트(Cloudinary)
    CLOUDINARY_CLOUD_NAME: str | None = None
    CLOUDINARY_API_KEY: str | None = None
    CLOUDINARY_API_SECRET: str | None = None
    CLOUDINARY_FOLDER: str = "recipeshare"
    CLOUDINARY_API_BASE: str = "https://api.cloudinary.com/v1_1"
    CLOUDINARY_DELIVERY_BASE: str = "https://res.cloudinary.com"
    IMAGE_HOST_TIMEOUT: float = 30.0
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024  # 5MB

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8080",
    ]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
