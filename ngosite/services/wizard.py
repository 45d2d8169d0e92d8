"""
ngosite.services.wizard — the Get-Involved wizard as an explicit state machine.

``transition`` is pure: it never touches the database, so every path can be
tested without an app. ``WizardDispatcher`` wraps it and performs the single
lead write a valid submission requires, then feeds the outcome back in as
``SubmitSucceeded`` / ``SubmitFailed``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ngosite.forms.lead_forms import ContactSubmissionForm, DonationPledgeForm, validate_values
from ngosite.services.leads import involvement_subject, save_contact, save_pledge
from ngosite.services.payments import PaymentService
from ngosite.services.record_store import LeadWriteError

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "We couldn't save your details just now. Please try again in a moment."
CHOOSE_MESSAGE = "Please choose a way to get involved."


class Step(str, Enum):
    CHOOSING = "choosing"
    VOLUNTEER_FORM = "volunteer_form"
    DONATE_FORM = "donate_form"
    PARTNER_FORM = "partner_form"
    GENERAL_FORM = "general_form"
    SUBMISSION_ACKNOWLEDGED = "submission_acknowledged"
    PAYMENT_INSTRUCTIONS = "payment_instructions"


FORM_STEPS: Dict[str, Step] = {
    "volunteer": Step.VOLUNTEER_FORM,
    "donate": Step.DONATE_FORM,
    "partner": Step.PARTNER_FORM,
    "general": Step.GENERAL_FORM,
}
INVOLVEMENT_KINDS: Tuple[str, ...] = tuple(FORM_STEPS)

STEP_FORMS = {
    Step.VOLUNTEER_FORM: ContactSubmissionForm,
    Step.PARTNER_FORM: ContactSubmissionForm,
    Step.GENERAL_FORM: ContactSubmissionForm,
    Step.DONATE_FORM: DonationPledgeForm,
}

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def _frozen(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class WizardState:
    step: Step = Step.CHOOSING
    kind: Optional[str] = None
    values: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    errors: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: _EMPTY)
    submitting: bool = False
    message: Optional[str] = None
    lead_id: Optional[int] = None
    payment_uri: Optional[str] = None

    @property
    def is_form(self) -> bool:
        return self.step in STEP_FORMS

    @property
    def form_class(self):
        return STEP_FORMS.get(self.step)

    def to_session(self) -> Dict[str, Any]:
        """
        The slice kept in the session cookie between requests: entered contact
        details, errors and messages never leave the request that produced them.
        """
        data: Dict[str, Any] = {
            "step": self.step.value,
            "kind": self.kind,
            "lead_id": self.lead_id,
            "payment_uri": self.payment_uri,
        }
        if self.step is Step.PAYMENT_INSTRUCTIONS and "amount" in self.values:
            data["values"] = {"amount": self.values["amount"]}
        return data

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "WizardState":
        """Rebuild from session data; anything malformed starts over."""
        if not isinstance(data, Mapping):
            return cls()
        try:
            step = Step(data.get("step", Step.CHOOSING.value))
        except ValueError:
            return cls()
        kind = data.get("kind")
        if step in STEP_FORMS and FORM_STEPS.get(kind) is not step:
            return cls()
        values = data.get("values") if isinstance(data.get("values"), Mapping) else {}
        errors = data.get("errors") if isinstance(data.get("errors"), Mapping) else {}
        lead_id = data.get("lead_id")
        return cls(
            step=step,
            kind=kind if kind in FORM_STEPS else None,
            values=_frozen({str(k): "" if v is None else str(v) for k, v in values.items()}),
            errors=_frozen({str(k): tuple(v) for k, v in errors.items()}),
            # an in-flight flag never survives a request boundary
            submitting=False,
            message=data.get("message"),
            lead_id=lead_id if isinstance(lead_id, int) else None,
            payment_uri=data.get("payment_uri"),
        )


# ─────────────────────────────────────────────────────────────
# Actions
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Choose:
    kind: str


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class Edit:
    values: Mapping[str, Any]


@dataclass(frozen=True)
class Submit:
    values: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class SubmitSucceeded:
    lead_id: int
    payment_uri: Optional[str] = None


@dataclass(frozen=True)
class SubmitFailed:
    message: str = RETRY_MESSAGE


@dataclass(frozen=True)
class Reset:
    pass


Action = Union[Choose, Back, Edit, Submit, SubmitSucceeded, SubmitFailed, Reset]


def _merge(values: Mapping[str, str], incoming: Optional[Mapping[str, Any]]) -> Mapping[str, str]:
    merged = dict(values)
    for k, v in (incoming or {}).items():
        merged[str(k)] = "" if v is None else str(v)
    return _frozen(merged)


def clean_submission(state: WizardState) -> Tuple[Dict[str, Any], Dict[str, list]]:
    form_cls = state.form_class
    if form_cls is None:
        return {}, {}
    return validate_values(form_cls, state.values)


def transition(state: WizardState, action: Action) -> WizardState:
    """Next state for ``action``. Actions that do not apply leave ``state`` as is."""
    if isinstance(action, Reset):
        return WizardState()

    if isinstance(action, Choose):
        if state.step is not Step.CHOOSING:
            return state
        step = FORM_STEPS.get(action.kind)
        if step is None:
            return replace(state, message=CHOOSE_MESSAGE)
        return replace(state, step=step, kind=action.kind, errors=_EMPTY, message=None)

    if isinstance(action, Back):
        if not state.is_form or state.submitting:
            return state
        return replace(state, step=Step.CHOOSING, kind=None, errors=_EMPTY, message=None)

    if isinstance(action, Edit):
        if not state.is_form or state.submitting:
            return state
        errors = {k: v for k, v in state.errors.items() if k not in (action.values or {})}
        return replace(state, values=_merge(state.values, action.values), errors=_frozen(errors))

    if isinstance(action, Submit):
        if not state.is_form or state.submitting:
            return state
        pending = replace(state, values=_merge(state.values, action.values), message=None)
        _, errors = clean_submission(pending)
        if errors:
            return replace(pending, errors=_frozen({k: tuple(v) for k, v in errors.items()}))
        return replace(pending, errors=_EMPTY, submitting=True)

    if isinstance(action, SubmitSucceeded):
        if not state.submitting:
            return state
        if state.step is Step.DONATE_FORM:
            # only the amount outlives the form, for the payment step
            kept = {"amount": state.values["amount"]} if "amount" in state.values else {}
            return replace(
                state,
                step=Step.PAYMENT_INSTRUCTIONS,
                values=_frozen(kept),
                submitting=False,
                lead_id=action.lead_id,
                payment_uri=action.payment_uri,
            )
        return WizardState(step=Step.SUBMISSION_ACKNOWLEDGED, kind=state.kind, lead_id=action.lead_id)

    if isinstance(action, SubmitFailed):
        if not state.submitting:
            return state
        return replace(state, submitting=False, message=action.message)

    raise TypeError(f"unknown wizard action: {action!r}")


class WizardDispatcher:
    """Drives ``transition`` and performs the lead write for a valid submission."""

    def __init__(self, store, site):
        self.store = store
        self.site = site

    def dispatch(self, state: WizardState, action: Action) -> WizardState:
        nxt = transition(state, action)
        if not (isinstance(action, Submit) and nxt.submitting and not state.submitting):
            return nxt
        cleaned, _ = clean_submission(nxt)
        try:
            lead_id = self._write(nxt, cleaned)
        except LeadWriteError:
            logger.warning("Get-involved submission failed (kind=%s site=%s)", nxt.kind, self.store.site)
            return transition(nxt, SubmitFailed())
        payment_uri = None
        if nxt.step is Step.DONATE_FORM:
            payment_uri = PaymentService.build_payment_uri(
                self.site.payment_handle,
                self.site.payee_name,
                self.site.currency,
                cleaned.get("amount"),
            )
        return transition(nxt, SubmitSucceeded(lead_id, payment_uri))

    def _write(self, state: WizardState, cleaned: Mapping[str, Any]) -> int:
        if state.step is Step.DONATE_FORM:
            return save_pledge(self.store, cleaned, currency=self.site.currency)
        return save_contact(self.store, cleaned, kind=state.kind, subject=involvement_subject(state.kind))
