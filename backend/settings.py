import os
from pathlib import Path

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    return int(val)


def _as_list(val: str | None, default: list[str]) -> list[str]:
    if val is None or not val.strip():
        return default
    return [item.strip() for item in val.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        self.DATABASE_URL: str = os.getenv("DATABASE_URL") or f"sqlite:///{BACKEND_ROOT / 'app.db'}"
        self.SQL_ECHO: bool = _as_bool(os.getenv("SQL_ECHO"), False)

        # "local" serves covers from MEDIA_ROOT; "cloudinary" proxies to the media host
        self.ASSET_BACKEND: str = (os.getenv("ASSET_BACKEND") or "local").strip().lower()
        self.MEDIA_ROOT: str = os.getenv("MEDIA_ROOT") or "media"
        self.MEDIA_BASE_URL: str = (os.getenv("MEDIA_BASE_URL") or "/media").rstrip("/")

        self.CLOUDINARY_CLOUD_NAME: str | None = os.getenv("CLOUDINARY_CLOUD_NAME")
        self.CLOUDINARY_API_KEY: str | None = os.getenv("CLOUDINARY_API_KEY")
        self.CLOUDINARY_API_SECRET: str | None = os.getenv("CLOUDINARY_API_SECRET")
        self.CLOUDINARY_FOLDER: str = os.getenv("CLOUDINARY_FOLDER") or "book-covers"
        self.ASSET_TIMEOUT_SECONDS: int = _as_int(os.getenv("ASSET_TIMEOUT_SECONDS"), 15)

        self.MAX_COVER_BYTES: int = _as_int(os.getenv("MAX_COVER_BYTES"), 5 * 1024 * 1024)

        self.CORS_ORIGINS: list[str] = _as_list(os.getenv("CORS_ORIGINS"), ["*"])
        self.LOG_LEVEL: str = (os.getenv("LOG_LEVEL") or "INFO").upper()


settings = Settings()
