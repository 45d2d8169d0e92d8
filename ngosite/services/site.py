"""Per-request site context: which tenant is served, and its branding/payment settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from flask import current_app, g
from sqlalchemy.exc import SQLAlchemyError

from ngosite.extensions import db
from ngosite.services.content import ImageResolver, social_link_pairs
from ngosite.services.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteContext:
    key: str
    name: str
    storage_base: str
    storage_bucket: str = ""
    tagline: str = ""
    logo_path: Optional[str] = None
    primary_color: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    social_links: Tuple[Tuple[str, str], ...] = ()
    payment_handle: Optional[str] = None
    payee_name: Optional[str] = None
    currency: str = "INR"
    home_limits: Mapping[str, int] = field(default_factory=dict)
    fetch_concurrency: bool = True

    def images(self, media: Optional[Mapping[int, Any]] = None) -> ImageResolver:
        return ImageResolver(self.storage_base, self.storage_bucket, dict(media or {}))

    @property
    def logo_url(self) -> Optional[str]:
        return self.images()(self.logo_path)

    def limit(self, section: str, default: int = 6) -> int:
        return int(self.home_limits.get(section, default))


def build_site_context(config: Mapping[str, Any], website: Any = None) -> SiteContext:
    """Config supplies defaults; a ``websites`` row for the site overrides them."""
    key = config.get("SITE_KEY") or "ngo"
    w = website

    def pick(attr: str, cfg_key: str, default: Any = None) -> Any:
        val = getattr(w, attr, None) if w is not None else None
        if isinstance(val, str):
            val = val.strip()
        return val or config.get(cfg_key) or default

    return SiteContext(
        key=key,
        name=pick("name", "SITE_NAME", key.upper()),
        storage_base=config.get("STORAGE_PUBLIC_BASE_URL") or "/static/uploads",
        storage_bucket=config.get("STORAGE_BUCKET") or "",
        tagline=(getattr(w, "tagline", None) or "") if w is not None else "",
        logo_path=getattr(w, "logo_path", None) if w is not None else None,
        primary_color=getattr(w, "primary_color", None) if w is not None else None,
        contact_email=getattr(w, "contact_email", None) if w is not None else None,
        contact_phone=getattr(w, "contact_phone", None) if w is not None else None,
        address=getattr(w, "address", None) if w is not None else None,
        social_links=social_link_pairs(getattr(w, "social_links", None)) if w is not None else (),
        payment_handle=pick("payment_handle", "PAYMENT_HANDLE"),
        payee_name=pick("payment_payee_name", "PAYMENT_PAYEE_NAME") or pick("name", "SITE_NAME"),
        currency=str(pick("currency", "PAYMENT_CURRENCY", "INR")).upper(),
        home_limits=dict(config.get("HOME_PREVIEW_LIMITS") or {}),
        fetch_concurrency=bool(config.get("FETCH_CONCURRENCY", True)),
    )


def load_site_context() -> SiteContext:
    """
    Resolve the site once per request and memoize on ``g``.

    The settings row is optional; a database hiccup falls back to config
    rather than failing every page.
    """
    cached = getattr(g, "site", None)
    if isinstance(cached, SiteContext):
        return cached
    cfg = current_app.config
    website = None
    try:
        website = RecordStore(cfg.get("SITE_KEY") or "ngo").fetch_website()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not load website settings; using config defaults")
    g.site = build_site_context(cfg, website)
    return g.site


def current_store() -> RecordStore:
    store = getattr(g, "record_store", None)
    if store is None:
        store = g.record_store = RecordStore(load_site_context().key)
    return store
