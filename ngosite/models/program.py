from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ngosite.extensions import db
from ngosite.models.mixins import PublishableMixin, SiteScopedMixin, TimestampMixin
from ngosite.models.site import media_fk


class Program(db.Model, TimestampMixin, SiteScopedMixin, PublishableMixin):
    __tablename__ = "programs"
    __table_args__ = (UniqueConstraint("site", "slug", name="uq_programs_site_slug"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(80), nullable=True, index=True)

    featured_image_id: Mapped[Optional[int]] = media_fk("Cover image (media table)")

    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_ongoing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Program {self.slug!r} site={self.site} status={self.status}>"
