# backend/skoropad/core/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

# backend/skoropad/core/config.py -> project root .env
env_path = Path(__file__).resolve().parent.parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- Database ---
POSTGRES_USER = os.getenv("POSTGRES_USER", "skoropad")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "skoropad")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "db")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "skoropad")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)
SQL_ECHO = _get_bool("SQL_ECHO")
SEED_DEMO_DATA = _get_bool("SEED_DEMO_DATA")

# --- Auth ---
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-skoropad-secret")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
ADMIN_SESSION_SECRET = os.getenv("ADMIN_SESSION_SECRET", SECRET_KEY)

# --- HTTP ---
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")]

# --- Redis (optional, new-message notifications) ---
REDIS_URL = os.getenv("REDIS_URL") or None

# --- Image storage ---
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
UPLOAD_URL_PREFIX = "/uploads"
MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
