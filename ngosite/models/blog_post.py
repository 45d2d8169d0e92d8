from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ngosite.extensions import db
from ngosite.models.mixins import PublishableMixin, SiteScopedMixin, TimestampMixin
from ngosite.models.site import media_fk


class BlogPost(db.Model, TimestampMixin, SiteScopedMixin, PublishableMixin):
    __tablename__ = "blog_posts"
    __table_args__ = (UniqueConstraint("site", "slug", name="uq_blog_posts_site_slug"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    excerpt: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    featured_image_id: Mapped[Optional[int]] = media_fk("Featured image (media table)")

    tags: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(80), nullable=True, index=True)
    author_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True, index=True, doc="NULL means never publicly visible"
    )

    def __repr__(self) -> str:
        return f"<BlogPost {self.slug!r} site={self.site} status={self.status}>"
