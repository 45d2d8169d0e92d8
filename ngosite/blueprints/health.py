"""
Operational probes for the NGO site, mounted at /health.

- /health/        full report: database, site settings, storage, payments
- /health/status  short form for uptime monitors
- /health/ready   503 when a required part fails
- /health/live    process is up; touches nothing
"""

from __future__ import annotations

import os
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ngosite.extensions import db
from ngosite.services.record_store import RecordStore

bp = Blueprint("health", __name__)

STARTED_AT = time.time()
VERSION = os.getenv("GIT_COMMIT") or os.getenv("BUILD_VERSION") or "dev"

# Missing storage or payment settings degrade the site; only the database is fatal
# unless STRICT_HEALTH is set.
STRICT = os.getenv("STRICT_HEALTH", "0").lower() in {"1", "true", "yes", "on"}


def _utc_iso(ts: Optional[float] = None) -> str:
    moment = datetime.fromtimestamp(ts, tz=timezone.utc) if ts else datetime.now(timezone.utc)
    return moment.isoformat(timespec="seconds")


def _soft_fail(reason: str) -> Dict[str, Any]:
    return {"status": "fail" if STRICT else "degraded", "reason": reason}


def check_database() -> Dict[str, Any]:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        return {"status": "fail", "error": exc.__class__.__name__}
    return {"status": "ok", "dialect": db.engine.dialect.name}


def check_site_settings() -> Dict[str, Any]:
    site = current_app.config.get("SITE_KEY") or "ngo"
    try:
        website = RecordStore(site).fetch_website()
    except SQLAlchemyError as exc:
        db.session.rollback()
        return {"status": "fail", "site": site, "error": exc.__class__.__name__}
    if website is None:
        # pages still render from config defaults
        return {"status": "degraded", "site": site, "reason": "no-website-row"}
    return {"status": "ok", "site": site, "name": website.name}


def check_storage() -> Dict[str, Any]:
    base = (current_app.config.get("STORAGE_PUBLIC_BASE_URL") or "").strip()
    if not base:
        return _soft_fail("no-storage-base-url")
    return {"status": "ok", "bucket": current_app.config.get("STORAGE_BUCKET") or None}


def check_payments() -> Dict[str, Any]:
    # the websites row may still carry a handle; config only sets the default
    if not (current_app.config.get("PAYMENT_HANDLE") or "").strip():
        return _soft_fail("no-default-payment-handle")
    return {"status": "ok", "currency": current_app.config.get("PAYMENT_CURRENCY")}


CHECKS: Dict[str, Callable[[], Dict[str, Any]]] = {
    "database": check_database,
    "site": check_site_settings,
    "storage": check_storage,
    "payments": check_payments,
}


def run_checks() -> Dict[str, Any]:
    parts = {name: check() for name, check in CHECKS.items()}
    for part in parts.values():
        part["ok"] = part["status"] == "ok"
    statuses = {p["status"] for p in parts.values()}
    overall = "fail" if "fail" in statuses else "degraded" if "degraded" in statuses else "ok"
    return {
        "status": overall,
        "site": current_app.config.get("SITE_KEY"),
        "version": VERSION,
        "started_at": _utc_iso(STARTED_AT),
        "uptime_s": int(time.time() - STARTED_AT),
        "now": _utc_iso(),
        "strict": STRICT,
        "parts": parts,
    }


@bp.get("/")
def report():
    return jsonify(run_checks())


@bp.get("/status")
def status():
    r = run_checks()
    return jsonify({"status": r["status"], "version": r["version"], "now": r["now"]})


@bp.get("/ready")
def ready():
    r = run_checks()
    return jsonify(r), (503 if r["status"] == "fail" else 200)


@bp.get("/live")
def live():
    return jsonify({"status": "ok", "now": _utc_iso(), "uptime_s": int(time.time() - STARTED_AT)})
