from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from ngosite.services.content import (
    FALLBACK_COPY,
    ImageResolver,
    Progress,
    extract_distinct_categories,
    filter_publicly_visible,
    group_stats_by_year,
    is_publicly_visible,
    partition_by_activity,
    partition_by_temporal_state,
    related_programs,
    resolve_campaign,
    resolve_event,
    resolve_hero,
    resolve_image_url,
    resolve_post,
    resolve_progress,
)

BASE = "https://cdn.example.org/storage/v1/object/public"
NOW = datetime(2025, 6, 1, 12, 0, 0)


@pytest.mark.parametrize(
    "goal,raised,expected",
    [
        (1000, 250, 25),
        (1000, 1500, 100),
        (1000, 1000, 100),
        (None, 500, 0),
        (1000, None, 0),
        (0, 500, 0),
        (-10, 500, 0),
        (Decimal("300"), Decimal("100"), 100 / 3),
        (1000, -50, 0),
    ],
)
def test_resolve_progress(goal, raised, expected):
    assert resolve_progress(goal, raised) == pytest.approx(expected)


def test_progress_bar_width_is_unrounded_and_label_rounded():
    p = Progress.of(Decimal("1000"), Decimal("125"))
    assert p.percent == 12.5
    assert p.width == "12.5%"
    assert p.rounded == 13
    assert p.label == "13% funded"
    assert Progress.of(100, 500).width == "100%"
    assert Progress.of(None, 5).width == "0%"


def test_resolve_image_url_storage_path():
    url = resolve_image_url("campaigns/clean water.jpg", storage_base=BASE + "/", bucket="media")
    assert url == f"{BASE}/media/campaigns/clean%20water.jpg"


def test_resolve_image_url_media_id_and_misses():
    media = {7: SimpleNamespace(file_url="https://files.example.org/logo.png")}
    assert resolve_image_url(7, media, storage_base=BASE) == "https://files.example.org/logo.png"
    assert resolve_image_url(8, media, storage_base=BASE) is None
    assert resolve_image_url(None, media, storage_base=BASE) is None
    assert resolve_image_url("", media, storage_base=BASE) is None
    assert resolve_image_url("   ", media, storage_base=BASE) is None


def test_resolve_image_url_passes_absolute_urls_through():
    assert resolve_image_url("https://img.example.org/a.png", storage_base=BASE) == "https://img.example.org/a.png"


def test_image_resolver_merges_media():
    images = ImageResolver(BASE, "media").with_media({3: SimpleNamespace(file_url="https://x/3.png")})
    assert images(3) == "https://x/3.png"
    assert images("a.png") == f"{BASE}/media/a.png"


def test_partition_by_temporal_state_is_exhaustive_and_inclusive():
    events = [
        SimpleNamespace(slug="past", start_date=NOW - timedelta(seconds=1)),
        SimpleNamespace(slug="now", start_date=NOW),
        SimpleNamespace(slug="later", start_date=NOW + timedelta(days=3)),
        SimpleNamespace(slug="long-ago", start_date=NOW - timedelta(days=300)),
    ]
    upcoming, past = partition_by_temporal_state(events, NOW)
    assert [e.slug for e in upcoming] == ["now", "later"]
    assert [e.slug for e in past] == ["past", "long-ago"]
    assert len(upcoming) + len(past) == len(events)


def test_partition_by_activity_keeps_order():
    rows = [SimpleNamespace(n=1, is_active=False), SimpleNamespace(n=2, is_active=True), SimpleNamespace(n=3, is_active=False)]
    active, inactive = partition_by_activity(rows)
    assert [r.n for r in active] == [2]
    assert [r.n for r in inactive] == [1, 3]


def test_extract_distinct_categories():
    assert extract_distinct_categories(["Health", "", "Health", "Education", None]) == ["Health", "Education"]
    rows = [SimpleNamespace(category="Water"), SimpleNamespace(category=None), SimpleNamespace(category="  ")]
    assert extract_distinct_categories(rows) == ["Water"]
    assert extract_distinct_categories([]) == []


def test_visibility_predicate():
    published_post = SimpleNamespace(status="published", published_at=NOW - timedelta(days=1))
    future_post = SimpleNamespace(status="published", published_at=NOW + timedelta(days=1))
    undated_post = SimpleNamespace(status="published", published_at=None)
    draft = SimpleNamespace(status="draft")
    hidden_partner = SimpleNamespace(is_visible=False)
    plain = SimpleNamespace(title="no flags")

    assert is_publicly_visible(published_post, NOW)
    assert not is_publicly_visible(future_post, NOW)
    assert not is_publicly_visible(undated_post, NOW)
    assert not is_publicly_visible(draft, NOW)
    assert not is_publicly_visible(hidden_partner, NOW)
    assert is_publicly_visible(plain, NOW)

    rows = [published_post, future_post, undated_post, draft, hidden_partner, plain]
    once = filter_publicly_visible(rows, NOW)
    assert once == [published_post, plain]
    assert filter_publicly_visible(once, NOW) == once


def test_group_stats_by_year():
    stats = [
        SimpleNamespace(label="a", year=None),
        SimpleNamespace(label="b", year=2023),
        SimpleNamespace(label="c", year=2024),
        SimpleNamespace(label="d", year=2023),
    ]
    groups = group_stats_by_year(stats)
    assert [s.label for s in groups.overall] == ["a"]
    assert [(y, [s.label for s in rows]) for y, rows in groups.by_year] == [(2024, ["c"]), (2023, ["b", "d"])]


def test_related_programs_same_category_without_self():
    program = SimpleNamespace(id=1, category="Health")
    candidates = [
        SimpleNamespace(id=1, category="Health"),
        SimpleNamespace(id=2, category="Education"),
        SimpleNamespace(id=3, category="Health"),
        SimpleNamespace(id=4, category="Health"),
        SimpleNamespace(id=5, category="Health"),
        SimpleNamespace(id=6, category="Health"),
    ]
    assert [p.id for p in related_programs(program, candidates)] == [3, 4, 5]
    assert related_programs(SimpleNamespace(id=9, category=""), candidates) == []


def _campaign(**kw):
    base = dict(
        id=1,
        slug="clean-water",
        title="Clean Water",
        short_description=None,
        long_description=None,
        banner_image_path=None,
        goal_amount=None,
        raised_amount=None,
        is_active=True,
    )
    base.update(kw)
    return SimpleNamespace(**base)


def test_resolve_campaign_applies_fallbacks_once():
    view = resolve_campaign(_campaign(), ImageResolver(BASE, "media"))
    assert view.summary == FALLBACK_COPY["campaign_summary"].format(title="Clean Water")
    assert view.image_url is None
    assert view.raised == Decimal("0")
    assert view.progress.percent == 0
    assert not view.has_goal


def test_resolve_campaign_with_goal_and_banner():
    view = resolve_campaign(
        _campaign(goal_amount=Decimal("1000"), raised_amount=Decimal("250"), banner_image_path="c/banner.jpg"),
        ImageResolver(BASE, "media"),
    )
    assert view.has_goal
    assert view.progress.percent == 25
    assert view.image_url == f"{BASE}/media/c/banner.jpg"


def test_resolve_event_marks_past_and_registration():
    rec = SimpleNamespace(
        id=1,
        slug="camp",
        title="Camp",
        short_description=None,
        long_description=None,
        cover_image_path=None,
        start_date=NOW - timedelta(hours=1),
        end_date=None,
        location=None,
        map_url=None,
        registration_url="https://forms.example.org/camp",
        is_featured=False,
    )
    view = resolve_event(rec, ImageResolver(BASE), NOW)
    assert view.is_past
    assert not view.can_register
    assert view.location == FALLBACK_COPY["event_location"]


def test_resolve_post_builds_excerpt_and_author():
    rec = SimpleNamespace(
        id=1,
        slug="s",
        title="Story",
        excerpt=None,
        content="word " * 100,
        featured_image_id=None,
        category=None,
        tags=["water", "", None],
        author_name=None,
        published_at=NOW,
    )
    view = resolve_post(rec, ImageResolver(BASE))
    assert view.author == FALLBACK_COPY["post_author"]
    assert view.excerpt.endswith("…")
    assert len(view.excerpt) <= 161
    assert view.tags == ("water",)


def test_resolve_hero_falls_back_when_missing():
    hero = resolve_hero(None, ImageResolver(BASE))
    assert hero.title == FALLBACK_COPY["hero_title"]
    assert hero.cta_url == "/get-involved"
