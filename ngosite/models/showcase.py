"""Simple display records: people, partners, stats, photos, milestones, case studies."""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ngosite.extensions import db
from ngosite.models.mixins import CuratedMixin, PublishableMixin, SiteScopedMixin, TimestampMixin
from ngosite.models.site import media_fk


class TeamMember(db.Model, TimestampMixin, SiteScopedMixin, CuratedMixin):
    __tablename__ = "team_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    role: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    photo_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    social_links: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)


class Partner(db.Model, TimestampMixin, SiteScopedMixin, CuratedMixin):
    __tablename__ = "partners"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo_id: Mapped[Optional[int]] = media_fk("Partner logo (media table)")
    website_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(80), nullable=True, index=True)


class Testimonial(db.Model, TimestampMixin, SiteScopedMixin, CuratedMixin):
    __tablename__ = "testimonials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    quote: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str] = mapped_column(String(120), nullable=False)
    author_role: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    photo_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


class ImpactStat(db.Model, TimestampMixin, SiteScopedMixin, CuratedMixin):
    __tablename__ = "impact_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    label: Mapped[str] = mapped_column(String(120), nullable=False)
    value: Mapped[str] = mapped_column(String(40), nullable=False, doc="Display string, e.g. '10K+'")
    icon: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)


class GalleryImage(db.Model, TimestampMixin, SiteScopedMixin, CuratedMixin):
    __tablename__ = "gallery_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    caption: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_path: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(80), nullable=True, index=True)


class TimelineItem(db.Model, TimestampMixin, SiteScopedMixin, CuratedMixin):
    __tablename__ = "timeline_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    year: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class CaseStudy(db.Model, TimestampMixin, SiteScopedMixin, PublishableMixin):
    __tablename__ = "case_studies"
    __table_args__ = (UniqueConstraint("site", "slug", name="uq_case_studies_site_slug"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(160), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    featured_image_id: Mapped[Optional[int]] = media_fk("Case study image (media table)")
    location: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)


class Report(db.Model, TimestampMixin, SiteScopedMixin, PublishableMixin):
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_id: Mapped[Optional[int]] = media_fk("Downloadable report file (media table)")
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
