
import os
from pathlib import Path

from dotenv import dotenv_values

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_env = dotenv_values(str(_ENV_PATH)) if _ENV_PATH.exists() else {}


def _setting(name: str, default: str) -> str:
    """Environment first, then the project .env file, then the default."""
    value = os.getenv(name)
    if value is not None and value.strip():
        return value.strip()
    value = _env.get(name)
    if value is not None and value.strip():
        return value.strip()
    return default


class Config:
    SECRET_KEY = _setting("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = _setting("DATABASE_URL", "sqlite:///local.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DISPLAY_SLOT_MINUTES = int(_setting("DISPLAY_SLOT_MINUTES", "15"))
    MIN_GUESTS = 1
    MAX_GUESTS = int(_setting("MAX_GUESTS", "20"))
    LOG_LEVEL = _setting("LOG_LEVEL", "INFO")
    DEMO_API_KEY = _setting("DEMO_API_KEY", "dev-restaurant-key")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "DEBUG"
