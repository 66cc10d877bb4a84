import os

from dotenv import load_dotenv
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy

load_dotenv()

db = SQLAlchemy()
login = LoginManager()

_DEV_SECRET = "dev_secret"


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class Config:
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    DATABASE_URL = os.getenv("DATABASE_URL")

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or "sqlite:///" + os.path.join(
        BASE_DIR, "requisitions.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # REQ-000123
    REQUISITION_CODE_PREFIX = os.getenv("REQUISITION_CODE_PREFIX", "REQ")
    REQUISITION_CODE_WIDTH = _int_env("REQUISITION_CODE_WIDTH", 6)

    # sellable materials normally move only through the point-of-sale flow
    ALLOW_SELLABLE_FULFILLMENT = _bool_env("ALLOW_SELLABLE_FULFILLMENT", False)

    def __init__(self):
        env = os.getenv("FLASK_ENV", "development").lower()
        if env == "production" and not self.DATABASE_URL:
            raise RuntimeError("DATABASE_URL is not set for production.")
        if env == "production" and self.SECRET_KEY == _DEV_SECRET:
            raise RuntimeError("SECRET_KEY must be changed for production.")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"
    ALLOW_SELLABLE_FULFILLMENT = False
