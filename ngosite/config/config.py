# ngosite/config/config.py
# Canonical site configuration (env-first, production-safe)

from __future__ import annotations

import os
from datetime import timedelta
from typing import Optional


# ----------------------------
# Env helpers
# ----------------------------
_TRUTHY = {"1", "true", "yes", "on", "y"}
_FALSY = {"0", "false", "no", "off", "n"}


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return default
    s = str(v).strip()
    return s if s else default


def _bool(name: str, default: bool = False) -> bool:
    v = _env(name)
    if v is None:
        return default
    s = v.strip().lower()
    if s in _TRUTHY:
        return True
    if s in _FALSY:
        return False
    return default


def _int(name: str, default: int) -> int:
    v = _env(name)
    if v is None:
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default


def _clean_base_url(v: Optional[str]) -> str:
    return (v or "").strip().rstrip("/")


# ----------------------------
# Config classes
# ----------------------------
class BaseConfig:
    """
    Env-first config:
    - all important settings can be overridden via environment variables
    - safe defaults for local dev
    """

    ENV = (_env("APP_ENV") or _env("ENV") or _env("FLASK_ENV") or "base").strip().lower()

    DEBUG = _bool("FLASK_DEBUG", False)
    TESTING = _bool("TESTING", False)

    # Security
    SECRET_KEY = _env("SECRET_KEY", "dev-change-me")

    # URLs / scheme
    PUBLIC_BASE_URL = _clean_base_url(_env("PUBLIC_BASE_URL", ""))
    PREFERRED_URL_SCHEME = _env("PREFERRED_URL_SCHEME", "https")
    TRUST_PROXY = _bool("TRUST_PROXY", False)

    # Cookies
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = _env("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE = True
    PERMANENT_SESSION_LIFETIME = timedelta(days=_int("SESSION_DAYS", 7))

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = _env("SQLALCHEMY_DATABASE_URI", "sqlite:///ngosite-dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    AUTO_CREATE_SQLITE = _bool("AUTO_CREATE_SQLITE", True)

    # Tenant: every content read and lead write is scoped to this key
    SITE_KEY = _env("SITE_KEY", "ngo")
    SITE_NAME = _env("SITE_NAME", "DUAF")

    # Public storage (inline media paths → public URLs)
    STORAGE_PUBLIC_BASE_URL = _clean_base_url(_env("STORAGE_PUBLIC_BASE_URL", "/static/uploads"))
    STORAGE_BUCKET = _env("STORAGE_BUCKET", "")

    # Pledge payment instructions (UPI). Website.payment_handle overrides.
    PAYMENT_HANDLE = _env("PAYMENT_HANDLE", "")
    PAYMENT_PAYEE_NAME = _env("PAYMENT_PAYEE_NAME", "")
    PAYMENT_CURRENCY = _env("PAYMENT_CURRENCY", "INR")

    # Page loads: independent reads are fetched concurrently and joined
    FETCH_CONCURRENCY = _bool("FETCH_CONCURRENCY", True)

    # Home page preview sizes
    HOME_PREVIEW_LIMITS = {
        "programs": _int("HOME_PROGRAMS_LIMIT", 6),
        "posts": _int("HOME_POSTS_LIMIT", 3),
        "partners": _int("HOME_PARTNERS_LIMIT", 12),
        "stats": _int("HOME_STATS_LIMIT", 6),
        "campaigns": _int("HOME_CAMPAIGNS_LIMIT", 3),
        "events": _int("HOME_EVENTS_LIMIT", 3),
        "testimonials": _int("HOME_TESTIMONIALS_LIMIT", 6),
    }

    # Logging / observability
    LOG_LEVEL = _env("LOG_LEVEL", "INFO")
    WERKZEUG_LOG_LEVEL = _env("WERKZEUG_LOG_LEVEL", "WARNING")
    SENTRY_DSN = _env("SENTRY_DSN", "")

    @classmethod
    def init_app(cls, app) -> None:
        """
        Boot hardening hook, called from create_app() after
        app.config.from_object(...).
        """
        uri = str(app.config.get("SQLALCHEMY_DATABASE_URI") or "")

        if uri.startswith("sqlite:"):
            opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
            connect_args = dict(opts.get("connect_args") or {})
            connect_args.setdefault("check_same_thread", False)
            opts["connect_args"] = connect_args
            opts.setdefault("pool_pre_ping", True)
            app.config["SQLALCHEMY_ENGINE_OPTIONS"] = opts


class DevelopmentConfig(BaseConfig):
    ENV = "development"
    DEBUG = True

    SQLALCHEMY_DATABASE_URI = _env("SQLALCHEMY_DATABASE_URI", "sqlite:///ngosite-dev.db")

    SESSION_COOKIE_SECURE = False
    PREFERRED_URL_SCHEME = _env("PREFERRED_URL_SCHEME", "http")
    TRUST_PROXY = _bool("TRUST_PROXY", False)


class TestingConfig(BaseConfig):
    ENV = "testing"
    TESTING = True
    DEBUG = False

    SECRET_KEY = "testing-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SESSION_COOKIE_SECURE = False
    PREFERRED_URL_SCHEME = "http"
    WTF_CSRF_ENABLED = False

    SITE_KEY = "ngo"
    SITE_NAME = "DUAF"
    STORAGE_PUBLIC_BASE_URL = "https://cdn.example.org/storage/v1/object/public"
    STORAGE_BUCKET = "media"
    PAYMENT_HANDLE = "duaf@upi"
    PAYMENT_PAYEE_NAME = "DUAF"
    PAYMENT_CURRENCY = "INR"

    FETCH_CONCURRENCY = False
    LOG_LEVEL = "WARNING"
    SENTRY_DSN = ""


class ProductionConfig(BaseConfig):
    ENV = "production"
    DEBUG = False

    SESSION_COOKIE_SECURE = True
    PREFERRED_URL_SCHEME = _env("PREFERRED_URL_SCHEME", "https")
    TRUST_PROXY = _bool("TRUST_PROXY", True)

    @classmethod
    def init_app(cls, app) -> None:
        super().init_app(app)

        # ---- Production guardrails (fail fast)
        sk = app.config.get("SECRET_KEY")
        if not sk or sk == "dev-change-me":
            raise RuntimeError("SECRET_KEY must be set to a strong random value in production.")

        base = (app.config.get("PUBLIC_BASE_URL") or "").strip()
        if base and base.startswith("http://"):
            raise RuntimeError("PUBLIC_BASE_URL must be https:// in production.")

        if _bool("FLASK_DEBUG", False):
            raise RuntimeError("FLASK_DEBUG must be 0 in production.")
