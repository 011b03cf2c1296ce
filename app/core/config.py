import os
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Process configuration, read from the environment once.

    Any attribute can be overridden by keyword, which is how tests and the
    CLI build isolated configurations without touching ``os.environ``.
    """

    ENV: str = os.getenv("ENV", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", 20))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", 10))

    # JWT / Security
    JWT_SECRET: Optional[str] = os.getenv("JWT_SECRET")
    JWT_REFRESH_SECRET: Optional[str] = os.getenv("JWT_REFRESH_SECRET")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_IN: str = os.getenv("JWT_EXPIRES_IN", "15m")
    JWT_REFRESH_EXPIRES_IN: str = os.getenv("JWT_REFRESH_EXPIRES_IN", "7d")
    REFRESH_COOKIE_NAME: str = os.getenv("REFRESH_COOKIE_NAME", "refreshToken")

    # Image storage
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "local")
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    IMAGE_FOLDER: str = os.getenv("IMAGE_FOLDER", "pizza/profiles")

    # AWS S3
    AWS_S3_BUCKET: Optional[str] = os.getenv("AWS_S3_BUCKET")
    AWS_REGION: str = os.getenv("AWS_REGION", "eu-central-1")
    AWS_ACCESS_KEY_ID: Optional[str] = os.getenv("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY: Optional[str] = os.getenv("AWS_SECRET_ACCESS_KEY")
    AWS_PUBLIC_BASE_URL: Optional[str] = os.getenv("AWS_PUBLIC_BASE_URL")

    # CORS
    BACKEND_CORS_ORIGINS: str = os.getenv("BACKEND_CORS_ORIGINS", "*")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "True").lower() == "true"
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", 100))
    RATE_LIMIT_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_PERIOD_SECONDS", 60))
    # Only enable behind a proxy that sets X-Forwarded-For itself
    TRUST_FORWARDED_FOR: bool = os.getenv("TRUST_FORWARDED_FOR", "False").lower() == "true"

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def access_secret(self) -> str:
        if self.JWT_SECRET:
            return self.JWT_SECRET
        if self.ENV in ("local", "test"):
            return "dev-secret-change-me"
        raise RuntimeError(
            "JWT_SECRET is not configured. Set the JWT_SECRET environment variable or add it to your .env file."
        )

    @property
    def refresh_secret(self) -> str:
        # Falls back to the access secret when no dedicated refresh secret is set
        return self.JWT_REFRESH_SECRET or self.access_secret

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.BACKEND_CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
