from __future__ import annotations

import logging
from typing import Mapping

from flask import Blueprint, abort, flash, redirect, render_template, request, session, url_for
from markupsafe import Markup
from werkzeug.datastructures import MultiDict

from ngosite.forms.lead_forms import ContactSubmissionForm, VolunteerApplicationForm, field_names
from ngosite.routes import page_assembler, render_page
from ngosite.services.leads import save_contact, save_volunteer
from ngosite.services.payments import PaymentService
from ngosite.services.record_store import LeadWriteError
from ngosite.services.site import current_store, load_site_context
from ngosite.services.wizard import (
    INVOLVEMENT_KINDS,
    RETRY_MESSAGE,
    Back,
    Choose,
    Reset,
    Step,
    Submit,
    WizardDispatcher,
    WizardState,
    transition,
)

logger = logging.getLogger(__name__)

bp = Blueprint("forms", __name__)

WIZARD_SESSION_KEY = "get_involved"


# ─────────────────────────────────────────────────────────────
# /contact
# ─────────────────────────────────────────────────────────────
@bp.route("/contact", methods=["GET", "POST"])
def contact():
    page = page_assembler().contact()
    if request.method == "GET":
        return render_page("forms/contact.html", page, form=ContactSubmissionForm())

    form = ContactSubmissionForm(request.form)
    if not form.validate():
        return render_page("forms/contact.html", page, form=form), 400

    try:
        save_contact(current_store(), form.data)
    except LeadWriteError:
        flash(RETRY_MESSAGE, "error")
        return render_page("forms/contact.html", page, form=form), 503

    return render_template(
        "forms/thanks.html",
        heading="Thank you for reaching out",
        message="We've received your message and will get back to you soon.",
        name=form.name.data,
    )


# ─────────────────────────────────────────────────────────────
# /volunteer
# ─────────────────────────────────────────────────────────────
@bp.route("/volunteer", methods=["GET", "POST"])
def volunteer():
    if request.method == "GET":
        return render_template("forms/volunteer.html", form=VolunteerApplicationForm())

    form = VolunteerApplicationForm(request.form)
    if not form.validate():
        return render_template("forms/volunteer.html", form=form), 400

    try:
        save_volunteer(current_store(), form.data)
    except LeadWriteError:
        flash(RETRY_MESSAGE, "error")
        return render_template("forms/volunteer.html", form=form), 503

    return render_template(
        "forms/thanks.html",
        heading="Thank you for volunteering",
        message="Our team will review your application and contact you about next steps.",
        name=form.name.data,
    )


# ─────────────────────────────────────────────────────────────
# /get-involved wizard
# ─────────────────────────────────────────────────────────────
def _load_state() -> WizardState:
    return WizardState.from_dict(session.get(WIZARD_SESSION_KEY))


def _save_state(state: WizardState) -> None:
    session[WIZARD_SESSION_KEY] = state.to_session()


def _render_wizard(state: WizardState):
    form = None
    if state.form_class is not None:
        form = state.form_class(formdata=MultiDict(list(state.values.items())))
    qr_svg = PaymentService.qr_svg(state.payment_uri) if state.step is Step.PAYMENT_INSTRUCTIONS else None
    return render_template(
        "forms/get_involved.html",
        state=state,
        form=form,
        kinds=INVOLVEMENT_KINDS,
        Step=Step,
        qr_svg=Markup(qr_svg) if qr_svg else None,
    )


def _action_from(form: Mapping[str, str], state: WizardState):
    action = (form.get("action") or "").strip().lower()
    if action == "choose":
        return Choose((form.get("kind") or "").strip().lower())
    if action == "back":
        return Back()
    if action == "reset":
        return Reset()
    if action == "submit":
        names = field_names(state.form_class) if state.form_class else []
        return Submit({name: form.get(name, "") for name in names})
    abort(400, description="Unknown wizard action.")


@bp.get("/get-involved")
def get_involved():
    state = _load_state()
    # deep links such as /get-involved?type=donate open the form directly
    kind = (request.args.get("type") or "").strip().lower()
    if kind in INVOLVEMENT_KINDS and state.step is Step.CHOOSING:
        state = transition(state, Choose(kind))
        _save_state(state)
    return _render_wizard(state)


@bp.post("/get-involved")
def get_involved_action():
    state = _load_state()
    action = _action_from(request.form, state)
    dispatcher = WizardDispatcher(current_store(), load_site_context())
    nxt = dispatcher.dispatch(state, action)
    _save_state(nxt)
    if nxt.lead_id is not None and nxt.lead_id != state.lead_id:
        logger.info("Get-involved %s submission saved id=%s", nxt.kind, nxt.lead_id)
    if nxt.errors or nxt.message:
        # the session carries no entered values; the form is rendered from this request
        return _render_wizard(nxt), (503 if nxt.message == RETRY_MESSAGE else 400)
    return redirect(url_for("forms.get_involved"), code=303)
