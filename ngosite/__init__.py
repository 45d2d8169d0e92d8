# ngosite/__init__.py
# NGO site — Flask app factory
# - env-first config, request-id logging, JSON errors for API/health callers
# - one tenant per deployment, resolved per request into g.site
# - public pages + lead forms, no admin surface

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union
from uuid import uuid4

import sentry_sdk
from dotenv import load_dotenv
from flask import Flask, g, jsonify, render_template, request
from flask_compress import Compress
from flask_talisman import Talisman
from sentry_sdk.integrations.flask import FlaskIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

# never override real env vars
load_dotenv(override=False)

from ngosite.config import CONFIG_BY_NAME, BaseConfig  # noqa: E402
from ngosite.extensions import csrf, db, migrate  # noqa: E402
from ngosite.filters import commafy, date_range, format_date, format_datetime, money  # noqa: E402

BASE_DIR = Path(__file__).resolve().parent
ConfigLike = Union[str, Type[BaseConfig]]

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _env_mode() -> str:
    for key in ("APP_ENV", "ENV", "FLASK_ENV"):
        val = (os.getenv(key) or "").strip().lower()
        if val:
            if val == "prod":
                return "production"
            if val == "dev":
                return "development"
            return val
    return "development"


def _resolve_config(target: Optional[ConfigLike]) -> Type[BaseConfig]:
    """
    Explicit class or name wins; otherwise FLASK_CONFIG, otherwise the env mode.
    """
    if target is None:
        target = (os.getenv("FLASK_CONFIG") or "").strip() or _env_mode()
    if isinstance(target, str):
        cfg = CONFIG_BY_NAME.get(target.strip().lower())
        if cfg is None:
            raise RuntimeError(f"Unknown config {target!r}; expected one of {', '.join(CONFIG_BY_NAME)}")
        return cfg
    return target


def _json_error(message: str, status: int, **extra: Any):
    payload: Dict[str, Any] = {"ok": False, "error": {"code": int(status), "message": str(message)}}
    rid = extra.pop("request_id", None)
    if rid:
        payload["error"]["request_id"] = rid
    if extra:
        payload["error"].update(extra)

    resp = jsonify(payload)
    resp.status_code = int(status)
    return resp


def _wants_json_response() -> bool:
    path = request.path or ""
    if path.startswith(("/api/", "/health")) or path in {"/healthz", "/version"}:
        return True
    accept = (request.headers.get("Accept") or "").lower()
    return ("application/json" in accept and "text/html" not in accept) or bool(request.is_json)


# -----------------------------------------------------------------------------
# Logging with request_id
# -----------------------------------------------------------------------------
class _RequestIDFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        try:
            record.request_id = getattr(g, "request_id", "-")
        except RuntimeError:
            # outside an app context (CLI, worker threads at startup)
            record.request_id = "-"
        return True


def _configure_logging(app: Flask) -> None:
    fmt = "%(asctime)s [%(levelname)s] %(name)s [rid=%(request_id)s]: %(message)s"
    root = logging.getLogger()

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        handler.addFilter(_RequestIDFilter())
        root.addHandler(handler)
    else:
        for h in root.handlers:
            if not any(isinstance(f, _RequestIDFilter) for f in h.filters):
                h.addFilter(_RequestIDFilter())
            if not getattr(h, "formatter", None) or "%(request_id)s" not in getattr(h.formatter, "_fmt", ""):
                h.setFormatter(logging.Formatter(fmt))

    root.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    logging.getLogger("werkzeug").setLevel(str(app.config.get("WERKZEUG_LOG_LEVEL", "WARNING")).upper())
    app.logger.info("Loaded config: ENV=%s DEBUG=%s SITE=%s", app.config.get("ENV", "?"), app.debug, app.config.get("SITE_KEY"))


# -----------------------------------------------------------------------------
# Jinja helpers
# -----------------------------------------------------------------------------
def _register_jinja_helpers(app: Flask) -> None:
    from ngosite.services.site import load_site_context

    def site_money(v: Any, currency: Optional[str] = None) -> str:
        return money(v, currency or load_site_context().currency)

    app.jinja_env.filters["money"] = site_money
    app.jinja_env.filters["commafy"] = commafy
    app.jinja_env.filters["date"] = format_date
    app.jinja_env.filters["datetime"] = format_datetime
    app.jinja_env.globals.setdefault("date_range", date_range)

    @app.context_processor
    def _site_context():
        return {"site": load_site_context()}


# -----------------------------------------------------------------------------
# ProxyFix (reverse proxy)
# -----------------------------------------------------------------------------
def _apply_proxyfix(app: Flask) -> None:
    if not app.config.get("TRUST_PROXY"):
        return
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)
    app.logger.info("ProxyFix enabled (trusting X-Forwarded-* headers).")


# -----------------------------------------------------------------------------
# Integrations
# -----------------------------------------------------------------------------
def _init_sentry(app: Flask) -> None:
    dsn = (app.config.get("SENTRY_DSN") or "").strip()
    if not dsn:
        return
    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FlaskIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        send_default_pii=False,
        environment=app.config.get("ENV", "development"),
        release=os.getenv("GIT_COMMIT"),
    )
    app.logger.info("Sentry initialized")


def _init_talisman(app: Flask) -> None:
    if app.config.get("ENV") != "production":
        return
    # CSP left off: templates carry inline styles (progress bar widths)
    Talisman(app, content_security_policy=None, force_https=bool(app.config.get("TRUST_PROXY")))


def _maybe_create_sqlite_tables(app: Flask) -> None:
    uri = (app.config.get("SQLALCHEMY_DATABASE_URI") or "").strip()
    if not uri.startswith("sqlite"):
        return
    if app.config.get("AUTO_CREATE_SQLITE", True) is not True:
        return
    with app.app_context():
        db.create_all()


# -----------------------------------------------------------------------------
# Request lifecycle + errors
# -----------------------------------------------------------------------------
def _register_request_lifecycle(app: Flask) -> None:
    from ngosite.services.site import load_site_context

    @app.before_request
    def _bootstrap_request():
        g.request_id = request.headers.get("X-Request-ID") or uuid4().hex
        g._start_ts = time.perf_counter()
        if not request.path.startswith(("/static/", "/health")):
            load_site_context()

    @app.after_request
    def _attach_request_headers(resp):
        resp.headers["X-Request-ID"] = getattr(g, "request_id", "-")
        start = getattr(g, "_start_ts", None)
        if start:
            resp.headers["X-Response-Time-ms"] = str(int((time.perf_counter() - start) * 1000))
        return resp


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http_err(err: HTTPException):
        rid = getattr(g, "request_id", "-")
        if _wants_json_response():
            return _json_error(err.description or err.name, err.code or 500, request_id=rid)
        if err.code == 404:
            return render_template("errors/404.html", error=err, request_id=rid), 404
        return err

    @app.errorhandler(Exception)
    def _uncaught(err: Exception):
        app.logger.exception("Unhandled error")
        rid = getattr(g, "request_id", "-")
        if _wants_json_response():
            return _json_error("Internal Server Error", 500, request_id=rid)
        return render_template("errors/500.html", request_id=rid), 500


# -----------------------------------------------------------------------------
# Operational endpoints
# -----------------------------------------------------------------------------
def _register_health_endpoints(app: Flask) -> None:
    @app.get("/healthz")
    def _healthz():
        return {
            "status": "ok",
            "site": app.config.get("SITE_KEY"),
            "env": app.config.get("ENV", "unknown"),
            "request_id": getattr(g, "request_id", "-"),
        }

    @app.get("/version")
    def _version():
        return {
            "version": os.getenv("GIT_COMMIT", "dev"),
            "env": app.config.get("ENV"),
            "site": app.config.get("SITE_KEY"),
            "public_base_url": app.config.get("PUBLIC_BASE_URL") or "",
        }


def _register_blueprints(app: Flask) -> None:
    from ngosite.blueprints.health import bp as health_bp
    from ngosite.routes.content import bp as content_bp
    from ngosite.routes.forms import bp as forms_bp
    from ngosite.routes.main import bp as main_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(content_bp)
    app.register_blueprint(forms_bp)
    app.register_blueprint(health_bp, url_prefix="/health")


def _register_cli(app: Flask) -> None:
    from ngosite.cli import demo_cli, seed_site

    app.cli.add_command(seed_site)
    app.cli.add_command(demo_cli)


# -----------------------------------------------------------------------------
# App Factory
# -----------------------------------------------------------------------------
def create_app(config_class: Optional[ConfigLike] = None, **overrides: Any) -> Flask:
    app = Flask(
        __name__,
        template_folder=str(BASE_DIR / "templates"),
        static_folder=str(BASE_DIR / "static"),
    )

    cfg = _resolve_config(config_class)
    app.config.from_object(cfg)
    app.config.update(overrides)
    cfg.init_app(app)

    app.url_map.strict_slashes = False
    app.config.setdefault("JSON_SORT_KEYS", False)
    app.config.setdefault("AUTO_CREATE_SQLITE", True)

    _apply_proxyfix(app)
    _configure_logging(app)
    _register_jinja_helpers(app)

    _init_sentry(app)
    _init_talisman(app)

    csrf.init_app(app)
    db.init_app(app)
    migrate.init_app(app, db, compare_type=True, render_as_batch=True)
    Compress(app)

    # models must be imported before create_all sees the metadata
    from ngosite import models  # noqa: F401

    _maybe_create_sqlite_tables(app)

    _register_request_lifecycle(app)
    _register_error_handlers(app)
    _register_blueprints(app)
    _register_health_endpoints(app)
    _register_cli(app)

    # scanner mitigation
    @app.get("/.git/<path:_any>")
    def _block_git(_any: str):
        return ("Not Found", 404)

    return app
