from datetime import timedelta
from decimal import Decimal

import pytest

from ngosite.models import BlogPost, Campaign, ContactSubmission, Media, Partner, Program
from ngosite.services.record_store import LeadWriteError, RecordStore, media_ids
from tests.conftest import OTHER_SITE, SITE, make_campaign, make_post, make_program


def test_store_requires_site_key():
    with pytest.raises(ValueError):
        RecordStore("")


def test_reads_are_scoped_to_one_site(add, store):
    add(make_campaign("ours"), make_campaign("theirs", site=OTHER_SITE))
    slugs = [c.slug for c in store.fetch_list(Campaign)]
    assert slugs == ["ours"]
    assert store.fetch_by_slug(Campaign, "theirs") is None
    assert store.fetch_by_slug(Campaign, "ours").site == SITE


def test_drafts_and_future_posts_are_hidden(add, store, now):
    add(
        make_post("live", published_at=now - timedelta(hours=1)),
        make_post("scheduled", published_at=now + timedelta(days=2)),
        make_post("undated", published_at=None),
        make_post("draft", status="draft"),
    )
    assert [p.slug for p in store.fetch_list(BlogPost, now=now)] == ["live"]
    assert store.fetch_by_slug(BlogPost, "scheduled", now=now) is None
    assert store.fetch_by_slug(BlogPost, "draft", now=now) is None


def test_hidden_curated_rows_are_excluded(add, store):
    add(
        Partner(site=SITE, name="Visible Co", order_index=2),
        Partner(site=SITE, name="Hidden Co", is_visible=False, order_index=1),
        Partner(site=SITE, name="First Co", order_index=0),
    )
    assert [p.name for p in store.fetch_list(Partner)] == ["First Co", "Visible Co"]


def test_filters_limit_and_exclude(add, store):
    ids = add(
        make_program("a", order_index=0),
        make_program("b", order_index=1),
        make_program("c", order_index=2, category="Health"),
    )
    education = store.fetch_list(Program, filters={"category": "Education"})
    assert [p.slug for p in education] == ["a", "b"]
    assert [p.slug for p in store.fetch_list(Program, limit=1)] == ["a"]
    assert [p.slug for p in store.fetch_list(Program, exclude_id=ids[0])] == ["b", "c"]


def test_fetch_media_only_returns_this_sites_rows(add, store):
    ours, theirs = add(
        Media(site=SITE, file_name="a.png", file_path="a.png", file_url="https://cdn.duaf.org/a.png"),
        Media(site=OTHER_SITE, file_name="b.png", file_path="b.png", file_url="https://cdn.other.org/b.png"),
    )
    found = store.fetch_media([ours, theirs, None, "x"])
    assert list(found) == [ours]
    assert store.fetch_media([]) == {}


def test_create_lead_returns_id(store):
    lead_id = store.create(
        ContactSubmission,
        name="Ravi",
        email="ravi@duaf.org",
        message="Hello",
        type="general",
        subject="Contact Form Submission",
    )
    row = store.session.get(ContactSubmission, lead_id)
    assert row.site == SITE
    assert row.status == "new"


def test_create_failure_rolls_back_and_raises(store):
    with pytest.raises(LeadWriteError):
        store.create(ContactSubmission, name=None, email="ravi@duaf.org", message="x", type="general", subject="s")
    # the session is usable again after the rollback
    assert store.fetch_list(Campaign) == []


def test_media_ids_ignores_paths_and_bools():
    rows = [Program(featured_image_id=4), Program(featured_image_id=None)]
    assert media_ids(rows, "featured_image_id") == [4]
    assert media_ids([Campaign(banner_image_path="x.png", goal_amount=Decimal("1"))], "banner_image_path") == []
