from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ngosite.extensions import db
from ngosite.models.mixins import CuratedMixin, SiteScopedMixin, TimestampMixin

MEDIA_KINDS = ("image", "video", "document", "other")


class Website(db.Model, TimestampMixin):
    """Per-site settings row: branding, contact defaults and the payment handle."""

    __tablename__ = "websites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site: Mapped[str] = mapped_column(String(40), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    tagline: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    logo_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    primary_color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    contact_email: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    social_links: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    payment_handle: Mapped[Optional[str]] = mapped_column(
        String(120), nullable=True, doc="UPI id shown on the pledge payment step"
    )
    payment_payee_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")

    def __repr__(self) -> str:
        return f"<Website site={self.site!r} name={self.name!r}>"


class Media(db.Model, TimestampMixin, SiteScopedMixin):
    __tablename__ = "media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_url: Mapped[str] = mapped_column(String(1000), nullable=False, doc="Stored absolute URL")
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mime_type: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    kind: Mapped[str] = mapped_column(
        String(20), nullable=False, default="image", doc=f"One of: {', '.join(MEDIA_KINDS)}"
    )
    alt_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    caption: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Media id={self.id} {self.file_name!r}>"


class HeroSection(db.Model, TimestampMixin, SiteScopedMixin, CuratedMixin):
    __tablename__ = "hero_sections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    background_image_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cta_label: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    cta_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


class AboutSection(db.Model, TimestampMixin, SiteScopedMixin):
    __tablename__ = "about_sections"
    __table_args__ = (UniqueConstraint("site", name="uq_about_sections_site"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    mission: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vision: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    story: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


class ContactInfo(db.Model, TimestampMixin, SiteScopedMixin):
    __tablename__ = "contact_info"
    __table_args__ = (UniqueConstraint("site", name="uq_contact_info_site"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    map_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    office_hours: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    social_links: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)


def media_fk(doc: str):
    """Nullable FK into the shared media table."""
    return mapped_column(
        ForeignKey("media.id", ondelete="SET NULL"), nullable=True, index=True, doc=doc
    )
