import os
from pathlib import Path
BASE_DIR = Path(__file__).resolve().parent


def _flag(name, default):
    return os.environ.get(name, default).strip().lower() not in ("0", "false", "no", "")


def _list(name, default=""):
    raw = os.environ.get(name, default)
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{(BASE_DIR / 'aims.db').as_posix()}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # outgoing mail; leaving MAIL_SERVER empty disables delivery
    MAIL_SERVER = os.environ.get("MAIL_SERVER", "")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", "587"))
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD", "")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER", "AIMS Portal <noreply@aims.local>")
    MAIL_TIMEOUT = 10
    ENFORCE_MAIL_ALLOWLIST = _flag("ENFORCE_MAIL_ALLOWLIST", "false")
    MAIL_ALLOWLIST = _list("MAIL_ALLOWLIST")

    DEFAULT_PASSWORD = os.environ.get("DEFAULT_PASSWORD", "123456")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"
    MAIL_SERVER = ""
    ENFORCE_MAIL_ALLOWLIST = False
