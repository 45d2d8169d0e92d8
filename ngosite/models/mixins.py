# ngosite/models/mixins.py
"""Shared SQLAlchemy mixins for timestamps, tenant scope and curated display."""

from datetime import datetime

from sqlalchemy import event

from ngosite.extensions import db


class TimestampMixin:
    """Adds created_at and updated_at columns with auto-refresh behavior."""

    created_at = db.Column(
        db.DateTime, default=datetime.utcnow, nullable=False, index=True
    )
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    @staticmethod
    def _set_updated_at(mapper, connection, target):
        target.updated_at = datetime.utcnow()

    @classmethod
    def __declare_last__(cls):
        event.listen(cls, "before_update", cls._set_updated_at)


class SiteScopedMixin:
    """Tenant discriminator: one shared schema, many independently branded sites."""

    site = db.Column(db.String(40), nullable=False, index=True, default="ngo")


VISIBILITY_STATUSES = ("published", "draft", "archived")
PUBLISHED = "published"


class PublishableMixin:
    """Editorial status; only ``published`` rows ever reach a public page."""

    status = db.Column(db.String(20), nullable=False, default="draft", index=True)


class CuratedMixin:
    """Manual ordering plus an inclusion flag for simple display records."""

    order_index = db.Column(db.Integer, nullable=False, default=0, index=True)
    is_visible = db.Column(db.Boolean, nullable=False, default=True, index=True)
