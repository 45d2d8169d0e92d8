# ──────────────────────────────────────────────────────────────────────────────
# Lead records: volunteer applications, contact submissions, donation pledges.
# Write-only from the site's perspective; created in a pending state and never
# mutated here afterwards (a back-office process owns status changes).
# ──────────────────────────────────────────────────────────────────────────────
from decimal import Decimal
from typing import Final, List, Optional

from sqlalchemy import JSON, CheckConstraint, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ngosite.extensions import db

from .mixins import SiteScopedMixin, TimestampMixin

SUBMISSION_TYPES: Final[tuple[str, ...]] = ("general", "volunteer", "partner", "donate")
PAYMENT_STATUSES: Final[tuple[str, ...]] = ("pending", "paid", "failed", "refunded")


class VolunteerApplication(db.Model, TimestampMixin, SiteScopedMixin):
    __tablename__ = "volunteer_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    email: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    skills: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    availability: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)

    def __repr__(self) -> str:
        return f"<VolunteerApplication id={self.id} {self.email!r} {self.status}>"


class ContactSubmission(db.Model, TimestampMixin, SiteScopedMixin):
    __tablename__ = "contact_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    email: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="general", doc=f"One of: {', '.join(SUBMISSION_TYPES)}"
    )
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new", index=True)

    def __repr__(self) -> str:
        return f"<ContactSubmission id={self.id} type={self.type} {self.email!r}>"


class DonationPledge(db.Model, TimestampMixin, SiteScopedMixin):
    __tablename__ = "donation_pledges"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_donation_pledges_amount_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    donor_name: Mapped[str] = mapped_column(String(160), nullable=False)
    donor_email: Mapped[str] = mapped_column(String(160), nullable=False, index=True)
    donor_phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
    payment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
        doc=f"Payment status: {', '.join(PAYMENT_STATUSES)}",
    )
    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        return f"<DonationPledge id={self.id} {self.amount} {self.currency} {self.payment_status}>"
