from typing import List

from pydantic_settings import BaseSettings
from pydantic import field_validator
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/easystay"
    DB_SSL: bool = False
    REDIS_URL: str = ""
    STORE_BACKEND: str = "database"  # 'database' or 'api'
    PROPERTY_API_URL: str = "http://easystay-web:5000"
    PROPERTY_API_TOKEN: str = "admin-authenticated"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # 'json' or 'console'
    RECOMMENDATION_DEFAULT_LIMIT: int = 5
    RECOMMENDATION_MAX_LIMIT: int = 50
    RATE_LIMIT_TIMES: int = 10
    RATE_LIMIT_SECONDS: int = 60
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:5000"]

    @field_validator("DATABASE_URL")
    def encode_database_url(cls, v):
        """
        Parses and re-renders the database URL to handle special characters in the password.
        """
        if v:
            try:
                url = make_url(v)
                return url.render_as_string(hide_password=False)
            except Exception:
                # If parsing fails, return the original value.
                return v
        return v

    @field_validator("STORE_BACKEND")
    def check_store_backend(cls, v):
        if v not in ("database", "api"):
            raise ValueError("STORE_BACKEND must be 'database' or 'api'")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
