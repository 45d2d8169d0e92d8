from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import Boolean, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ngosite.extensions import db
from ngosite.models.mixins import SiteScopedMixin, TimestampMixin


class Campaign(db.Model, TimestampMixin, SiteScopedMixin):
    __tablename__ = "campaigns"
    __table_args__ = (
        UniqueConstraint("site", "slug", name="uq_campaigns_site_slug"),
        # Guardrails
        sa.CheckConstraint("goal_amount IS NULL OR goal_amount > 0", name="ck_campaigns_goal_positive"),
        sa.CheckConstraint("raised_amount IS NULL OR raised_amount >= 0", name="ck_campaigns_raised_nonneg"),
    )

    # ── Keys ────────────────────────────────────────────────────
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(160), nullable=False, index=True)

    # ── Copy ────────────────────────────────────────────────────
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    long_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    banner_image_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ── Money (whole currency units, nullable) ──────────────────
    goal_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True, doc="Fundraising goal; NULL means no goal shown"
    )
    raised_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True, doc="Amount raised so far, edited out-of-band"
    )

    # ── Status ──────────────────────────────────────────────────
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    def __repr__(self) -> str:
        return (
            f"<Campaign {self.slug!r} site={self.site} goal={self.goal_amount} "
            f"raised={self.raised_amount} {'ACTIVE' if self.is_active else 'INACTIVE'}>"
        )
