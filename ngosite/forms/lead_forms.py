# ngosite/forms/lead_forms.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Tuple, Type

from werkzeug.datastructures import MultiDict
from wtforms import DecimalField, Form, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, InputRequired, Length, Optional, ValidationError

# CSRF is enforced app-wide by CSRFProtect.

# Largest value a Numeric(12, 2) amount column holds.
MAX_AMOUNT = Decimal("9999999999.99")


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def positive_finite_amount(form, field) -> None:
    """Accept finite amounts that stay above zero once rounded to paise; store them rounded."""
    value = field.data
    if value is None:
        if not field.errors:
            raise ValidationError("Please enter an amount.")
        return
    if not isinstance(value, Decimal) or not value.is_finite():
        raise ValidationError("Please enter a valid amount.")
    if value <= 0:
        raise ValidationError("Amount must be greater than zero.")
    if value > MAX_AMOUNT:
        raise ValidationError("Amount is too large.")
    rounded = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded <= 0:
        raise ValidationError("Amount must be at least 0.01.")
    field.data = rounded


class ContactSubmissionForm(Form):
    """Shared by /contact and the volunteer/partner/general wizard steps."""

    name = StringField(
        "Full name",
        filters=[_strip],
        validators=[
            DataRequired(message="Name is required."),
            Length(max=160, message="Name must be under 160 characters."),
        ],
        render_kw={"placeholder": "Your name", "autocomplete": "name"},
    )
    email = StringField(
        "Email",
        filters=[_strip],
        validators=[
            DataRequired(message="Email is required."),
            Email(message="Please enter a valid email."),
            Length(max=160, message="Email must be under 160 characters."),
        ],
        render_kw={"placeholder": "you@example.com", "autocomplete": "email", "type": "email"},
    )
    phone = StringField(
        "Phone (optional)",
        filters=[_strip],
        validators=[Optional(), Length(max=40, message="Phone must be under 40 characters.")],
        render_kw={"placeholder": "+91 98765 43210", "autocomplete": "tel"},
    )
    message = TextAreaField(
        "Message",
        filters=[_strip],
        validators=[
            DataRequired(message="Please write a short message."),
            Length(max=5000, message="Message must be under 5000 characters."),
        ],
        render_kw={"rows": 5, "placeholder": "How would you like to help?"},
    )


class DonationPledgeForm(Form):
    donor_name = StringField(
        "Full name",
        filters=[_strip],
        validators=[
            DataRequired(message="Name is required."),
            Length(max=160, message="Name must be under 160 characters."),
        ],
        render_kw={"placeholder": "Your name", "autocomplete": "name"},
    )
    donor_email = StringField(
        "Email",
        filters=[_strip],
        validators=[
            DataRequired(message="Email is required."),
            Email(message="Please enter a valid email."),
            Length(max=160, message="Email must be under 160 characters."),
        ],
        render_kw={"placeholder": "you@example.com", "autocomplete": "email", "type": "email"},
    )
    donor_phone = StringField(
        "Phone (optional)",
        filters=[_strip],
        validators=[Optional(), Length(max=40, message="Phone must be under 40 characters.")],
        render_kw={"autocomplete": "tel"},
    )
    amount = DecimalField(
        "Amount",
        places=2,
        validators=[InputRequired(message="Please enter an amount."), positive_finite_amount],
        render_kw={"placeholder": "500", "inputmode": "decimal"},
    )
    notes = TextAreaField(
        "Notes (optional)",
        filters=[_strip],
        validators=[Optional(), Length(max=1000, message="Notes must be under 1000 characters.")],
        render_kw={"rows": 3},
    )


class VolunteerApplicationForm(Form):
    name = StringField(
        "Full name",
        filters=[_strip],
        validators=[DataRequired(message="Name is required."), Length(max=160)],
        render_kw={"autocomplete": "name"},
    )
    email = StringField(
        "Email",
        filters=[_strip],
        validators=[
            DataRequired(message="Email is required."),
            Email(message="Please enter a valid email."),
            Length(max=160),
        ],
        render_kw={"autocomplete": "email", "type": "email"},
    )
    phone = StringField("Phone (optional)", filters=[_strip], validators=[Optional(), Length(max=40)])
    skills = StringField(
        "Skills (comma separated)",
        filters=[_strip],
        validators=[Optional(), Length(max=500)],
        render_kw={"placeholder": "Teaching, first aid, photography"},
    )
    availability = StringField(
        "Availability",
        filters=[_strip],
        validators=[Optional(), Length(max=255)],
        render_kw={"placeholder": "Weekends, evenings…"},
    )
    message = TextAreaField(
        "Why do you want to volunteer?",
        filters=[_strip],
        validators=[Optional(), Length(max=5000)],
        render_kw={"rows": 4},
    )


def validate_values(form_cls: Type[Form], values: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, List[str]]]:
    """
    Run ``form_cls`` over plain field values. Returns ``(cleaned, errors)``;
    ``cleaned`` is only meaningful when ``errors`` is empty.
    """
    formdata = MultiDict(
        [(k, "" if v is None else str(v)) for k, v in (values or {}).items()]
    )
    form = form_cls(formdata=formdata)
    if form.validate():
        return dict(form.data), {}
    return {}, {name: list(errs) for name, errs in form.errors.items()}


def field_names(form_cls: Type[Form]) -> List[str]:
    return [f.name for f in form_cls()]
