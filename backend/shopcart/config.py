from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    SECRET_KEY: str = "change-this-secret"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    # soft-deleted cart items are purged this long after removal (2 days)
    CART_RETENTION_SECONDS: int = 2 * 24 * 60 * 60
    CART_PURGE_INTERVAL_SECONDS: int = 300

    OTP_TTL_SECONDS: int = 10 * 60
    TOKEN_TTL_SECONDS: int = 2 * 24 * 60 * 60
    BCRYPT_ROUNDS: int = 10

    MAIL_FROM: str = "no-reply@shopcart.local"
    MAIL_MOCK_DELAY_MS: int = 0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
