"""Map validated form data onto lead rows. One write path for every form on the site."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ngosite.models import ContactSubmission, DonationPledge, VolunteerApplication
from ngosite.services.record_store import RecordStore

CONTACT_FORM_SUBJECT = "Contact Form Submission"


def involvement_subject(kind: str) -> str:
    return f"Get Involved - {kind}"


def _opt(value: Any) -> Optional[str]:
    s = (value or "").strip() if isinstance(value, str) else value
    return s or None


def split_skills(raw: Any) -> List[str]:
    if isinstance(raw, (list, tuple)):
        items = raw
    else:
        items = str(raw or "").split(",")
    return [s.strip() for s in items if str(s).strip()]


def contact_payload(cleaned: Mapping[str, Any], *, kind: str, subject: str) -> Dict[str, Any]:
    return {
        "name": cleaned["name"],
        "email": cleaned["email"],
        "phone": _opt(cleaned.get("phone")),
        "message": cleaned["message"],
        "type": kind,
        "subject": subject,
        "status": "new",
    }


def pledge_payload(cleaned: Mapping[str, Any], *, currency: str) -> Dict[str, Any]:
    return {
        "donor_name": cleaned["donor_name"],
        "donor_email": cleaned["donor_email"],
        "donor_phone": _opt(cleaned.get("donor_phone")),
        "amount": cleaned["amount"],
        "currency": (currency or "INR").upper()[:3],
        "payment_status": "pending",
        "notes": _opt(cleaned.get("notes")),
    }


def volunteer_payload(cleaned: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "name": cleaned["name"],
        "email": cleaned["email"],
        "phone": _opt(cleaned.get("phone")),
        "skills": split_skills(cleaned.get("skills")),
        "availability": _opt(cleaned.get("availability")),
        "message": _opt(cleaned.get("message")),
        "status": "pending",
    }


def save_contact(store: RecordStore, cleaned: Mapping[str, Any], *, kind: str = "general", subject: str = CONTACT_FORM_SUBJECT) -> int:
    return store.create(ContactSubmission, **contact_payload(cleaned, kind=kind, subject=subject))


def save_pledge(store: RecordStore, cleaned: Mapping[str, Any], *, currency: str) -> int:
    return store.create(DonationPledge, **pledge_payload(cleaned, currency=currency))


def save_volunteer(store: RecordStore, cleaned: Mapping[str, Any]) -> int:
    return store.create(VolunteerApplication, **volunteer_payload(cleaned))
