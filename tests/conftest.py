from datetime import timedelta
from decimal import Decimal

import pytest

from ngosite import create_app
from ngosite.extensions import db as _db
from ngosite.models import BlogPost, Campaign, Event, Program
from ngosite.services.content import utcnow
from ngosite.services.record_store import RecordStore
from ngosite.services.site import build_site_context

SITE = "ngo"
OTHER_SITE = "other"


@pytest.fixture
def app(tmp_path):
    app = create_app("testing", SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'ngosite-test.db'}")
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db_session(app):
    with app.app_context():
        yield _db.session
        _db.session.rollback()


@pytest.fixture
def store(db_session):
    return RecordStore(SITE)


@pytest.fixture
def site(app):
    return build_site_context(app.config)


@pytest.fixture
def now():
    return utcnow().replace(microsecond=0)


@pytest.fixture
def add(app):
    """Persist rows in their own app context; returns their ids."""

    def _add(*rows):
        with app.app_context():
            for row in rows:
                _db.session.add(row)
            _db.session.commit()
            return [row.id for row in rows]

    return _add


# ---------- row factories ----------
def make_campaign(slug="clean-water", **kw):
    defaults = dict(
        site=SITE,
        slug=slug,
        title=slug.replace("-", " ").title(),
        short_description="Bring clean water to every household.",
        goal_amount=Decimal("1000"),
        raised_amount=Decimal("250"),
        is_active=True,
    )
    defaults.update(kw)
    return Campaign(**defaults)


def make_program(slug="girls-education", **kw):
    defaults = dict(
        site=SITE,
        slug=slug,
        title=slug.replace("-", " ").title(),
        description="Scholarships and mentoring.",
        category="Education",
        status="published",
    )
    defaults.update(kw)
    return Program(**defaults)


def make_event(slug="health-camp", start=None, **kw):
    defaults = dict(
        site=SITE,
        slug=slug,
        title=slug.replace("-", " ").title(),
        start_date=start or (utcnow() + timedelta(days=7)),
        location="Community Hall",
        is_active=True,
    )
    defaults.update(kw)
    return Event(**defaults)


def make_post(slug="field-notes", **kw):
    defaults = dict(
        site=SITE,
        slug=slug,
        title=slug.replace("-", " ").title(),
        content="We visited three villages this month.",
        category="Stories",
        status="published",
        published_at=utcnow() - timedelta(days=1),
    )
    defaults.update(kw)
    return BlogPost(**defaults)
