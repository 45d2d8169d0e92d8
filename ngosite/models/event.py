from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ngosite.extensions import db
from ngosite.models.mixins import SiteScopedMixin, TimestampMixin


class Event(db.Model, TimestampMixin, SiteScopedMixin):
    __tablename__ = "events"
    __table_args__ = (UniqueConstraint("site", "slug", name="uq_events_site_slug"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    long_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    map_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    registration_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Event {self.slug!r} site={self.site} start={self.start_date:%Y-%m-%d %H:%M}>"
