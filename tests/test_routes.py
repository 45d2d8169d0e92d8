from datetime import timedelta

from sqlalchemy import func, select

from ngosite.extensions import db
from ngosite.models import ContactSubmission, DonationPledge, VolunteerApplication, Website
from ngosite.services.record_store import RecordStore
from tests.conftest import OTHER_SITE, SITE, make_campaign, make_event, make_post, make_program


def _count(app, model):
    with app.app_context():
        return db.session.execute(select(func.count()).select_from(model)).scalar_one()


def _html(resp):
    return resp.get_data(as_text=True)


# ---------- pages ----------
def test_empty_campaigns_page_shows_one_empty_state(client):
    resp = client.get("/campaigns")
    assert resp.status_code == 200
    body = _html(resp)
    assert body.count("data-empty-state") == 1
    assert 'data-card="campaign"' not in body


def test_campaigns_page_renders_each_campaign_once(client, add):
    add(make_campaign("water"), make_campaign("kits", is_active=False), make_campaign("theirs", site=OTHER_SITE))
    body = _html(client.get("/campaigns"))
    assert body.count('data-card="campaign"') == 2
    assert "data-empty-state" not in body
    assert 'data-section="active"' in body
    assert 'data-section="completed"' in body
    assert "25% funded" in body


def test_home_renders_without_content(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert _html(resp).count("data-empty-state") == 1
    assert resp.headers.get("X-Request-ID")


def test_home_uses_website_settings(client, add):
    add(Website(site=SITE, name="Dignity Unlimited", tagline="Hope in action"))
    body = _html(client.get("/"))
    assert "Dignity Unlimited" in body


def test_list_pages_render(client, add, now):
    add(make_program("scholarships"), make_event("camp", start=now + timedelta(days=2)), make_post("notes"))
    for path in ("/programs", "/events", "/blog", "/about", "/impact", "/gallery", "/partners", "/contact"):
        assert client.get(path).status_code == 200, path
    assert 'data-card="program"' in _html(client.get("/programs?category=Education"))
    assert 'data-card="event"' in _html(client.get("/events"))
    assert 'data-card="post"' in _html(client.get("/blog"))


def test_detail_pages(client, add, now):
    add(make_program("scholarships"), make_campaign("water"), make_event("camp", start=now + timedelta(days=2)), make_post("notes"))
    assert 'data-detail="program"' in _html(client.get("/programs/scholarships"))
    assert 'data-detail="campaign"' in _html(client.get("/campaigns/water"))
    assert 'data-detail="event"' in _html(client.get("/events/camp"))
    assert 'data-detail="post"' in _html(client.get("/blog/notes"))


def test_other_sites_slug_is_404(client, add):
    add(make_campaign("theirs", site=OTHER_SITE))
    resp = client.get("/campaigns/theirs")
    assert resp.status_code == 404
    assert 'data-error="404"' in _html(resp)


def test_detail_fetch_failure_is_500(client, add, monkeypatch):
    add(make_program("scholarships"))

    def explode(self, *args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(RecordStore, "fetch_by_slug", explode)
    resp = client.get("/programs/scholarships")
    assert resp.status_code == 500
    assert 'data-error="500"' in _html(resp)


# ---------- lead forms ----------
def test_contact_form_creates_submission(client, app):
    resp = client.post("/contact", data={"name": "Ravi", "email": "ravi@duaf.org", "message": "Hello there"})
    assert resp.status_code == 200
    assert "data-acknowledged" in _html(resp)
    with app.app_context():
        row = db.session.execute(select(ContactSubmission)).scalar_one()
        assert row.site == SITE
        assert row.type == "general"
        assert row.subject == "Contact Form Submission"


def test_invalid_contact_form_is_400_and_writes_nothing(client, app):
    resp = client.post("/contact", data={"name": "", "email": "nope", "message": ""})
    assert resp.status_code == 400
    assert _count(app, ContactSubmission) == 0


def test_volunteer_form_creates_application(client, app):
    resp = client.post(
        "/volunteer",
        data={"name": "Meera", "email": "meera@duaf.org", "skills": "teaching, first aid", "availability": "Weekends"},
    )
    assert resp.status_code == 200
    with app.app_context():
        row = db.session.execute(select(VolunteerApplication)).scalar_one()
        assert row.skills == ["teaching", "first aid"]
        assert row.status == "pending"


# ---------- get-involved wizard ----------
PLEDGE = {"donor_name": "Asha Rao", "donor_email": "asha@gmail.com", "amount": "500"}


def _act(client, **data):
    resp = client.post("/get-involved", data=data)
    assert resp.status_code == 303
    return _html(client.get("/get-involved"))


def test_wizard_starts_at_choosing(client):
    body = _html(client.get("/get-involved"))
    assert 'data-step="choosing"' in body


def test_wizard_donation_flow(client, app):
    assert 'data-step="donate_form"' in _act(client, action="choose", kind="donate")

    resp = client.post("/get-involved", data=dict(PLEDGE, action="submit", amount="0"))
    assert resp.status_code == 400
    body = _html(resp)
    assert 'data-step="donate_form"' in body
    assert "asha@gmail.com" in body
    assert _count(app, DonationPledge) == 0

    body = _act(client, action="submit", **PLEDGE)
    assert 'data-step="payment_instructions"' in body
    assert "data-payment-instructions" in body
    assert "am=500.00" in body
    payment = body.split("data-payment-instructions", 1)[1]
    assert "<svg" in payment
    assert _count(app, DonationPledge) == 1

    assert 'data-step="choosing"' in _act(client, action="reset")


def test_wizard_deep_link_and_back(client):
    assert 'data-step="volunteer_form"' in _html(client.get("/get-involved?type=volunteer"))
    assert 'data-step="choosing"' in _act(client, action="back")


def test_wizard_general_submission_is_acknowledged(client, app):
    _act(client, action="choose", kind="partner")
    body = _act(client, action="submit", name="Lotus Foods", email="csr@lotusfoods.in", message="We'd like to sponsor meals.")
    assert "data-acknowledged" in body
    with app.app_context():
        row = db.session.execute(select(ContactSubmission)).scalar_one()
        assert row.type == "partner"
        assert row.subject == "Get Involved - partner"


def test_wizard_unknown_action_is_400(client):
    assert client.post("/get-involved", data={"action": "launch"}).status_code == 400


# ---------- operational ----------
def test_healthz_and_version_are_json(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.get_json()["site"] == SITE
    assert client.get("/version").get_json()["site"] == SITE


def test_health_live_and_ready(client):
    assert client.get("/health/live").get_json()["status"] == "ok"
    resp = client.get("/health/ready")
    assert resp.status_code == 200
    assert resp.get_json()["parts"]["database"]["ok"] is True


def test_unknown_health_path_is_json_404(client):
    resp = client.get("/health/nope")
    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False


def test_health_report_flags_missing_site_settings(client, add):
    parts = client.get("/health/").get_json()["parts"]
    assert parts["site"]["status"] == "degraded"
    assert parts["payments"]["ok"] is True

    add(Website(site=SITE, name="DUAF"))
    report = client.get("/health/").get_json()
    assert report["parts"]["site"]["status"] == "ok"
    assert report["status"] == "ok"


def test_wizard_invalid_submit_keeps_long_message_without_bloating_session(client, app):
    _act(client, action="choose", kind="general")
    message = "We run a weekend library for children. " * 120
    resp = client.post("/get-involved", data={"action": "submit", "name": "Ravi", "email": "not-an-email", "message": message})

    assert resp.status_code == 400
    body = _html(resp)
    assert 'data-step="general_form"' in body
    assert message.strip() in body
    assert _count(app, ContactSubmission) == 0

    with client.session_transaction() as sess:
        saved = sess["get_involved"]
    assert saved["step"] == "general_form"
    assert "values" not in saved
    assert len(repr(saved)) < 500


def test_wizard_unknown_kind_is_rendered_with_message(client):
    resp = client.post("/get-involved", data={"action": "choose", "kind": "lottery"})
    assert resp.status_code == 400
    assert 'data-step="choosing"' in _html(resp)
    assert "Please choose a way to get involved." in _html(resp)
