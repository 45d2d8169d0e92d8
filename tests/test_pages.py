from datetime import timedelta

import pytest

from ngosite.models import GalleryImage, ImpactStat, Program
from ngosite.services.pages import EMPTY_STATES, PageAssembler, PageNotFound, Section, compose_page, gather
from tests.conftest import OTHER_SITE, SITE, make_campaign, make_event, make_post, make_program


@pytest.fixture
def pages(store, site, now):
    return PageAssembler(store, site, now=now)


def test_compose_page_drops_empty_sections():
    page = compose_page("blog", "Blog", [Section("posts", "Posts", "post", ()), Section("x", "X", "post", (1,))])
    assert page.section_keys == ["x"]
    assert page.empty_state is None


def test_compose_page_with_nothing_has_one_empty_state():
    page = compose_page("campaigns", "Campaigns", [Section("active", "Active", "campaign", ())])
    assert page.sections == ()
    assert page.empty_state == EMPTY_STATES["campaigns"]


def test_gather_isolates_a_failing_loader():
    def broken():
        raise RuntimeError("db down")

    rows = gather({"ok": lambda: [1, 2], "broken": broken, "none": lambda: None})
    assert rows == {"ok": [1, 2], "broken": [], "none": []}


def test_gather_concurrently_under_app_context(app):
    def broken():
        raise RuntimeError("db down")

    rows = gather({"a": lambda: ["a"], "b": broken, "c": lambda: ["c"]}, app=app, concurrent=True)
    assert rows == {"a": ["a"], "b": [], "c": ["c"]}


def test_campaigns_page_empty(pages):
    page = pages.campaigns()
    assert page.sections == ()
    assert page.empty_state is EMPTY_STATES["campaigns"]


def test_campaigns_page_splits_active_and_completed(add, pages):
    add(make_campaign("water"), make_campaign("kits", is_active=False), make_campaign("elsewhere", site=OTHER_SITE))
    page = pages.campaigns()
    assert page.section_keys == ["active", "completed"]
    assert [v.slug for v in page.section("active").items] == ["water"]
    assert [v.slug for v in page.section("completed").items] == ["kits"]
    assert page.section("active").items[0].progress.percent == 25
    assert page.empty_state is None


def test_only_completed_campaigns_renders_one_section(add, pages):
    add(make_campaign("kits", is_active=False))
    page = pages.campaigns()
    assert page.section_keys == ["completed"]


def test_events_page_partitions_by_start(add, pages, now):
    add(
        make_event("camp", start=now + timedelta(days=2)),
        make_event("drive", start=now - timedelta(days=2)),
        make_event("cancelled", start=now + timedelta(days=3), is_active=False),
    )
    page = pages.events()
    assert [v.slug for v in page.section("upcoming").items] == ["camp"]
    assert [v.slug for v in page.section("past").items] == ["drive"]
    assert page.section("past").items[0].is_past


def test_programs_page_category_filter(add, pages):
    add(
        make_program("scholarships", category="Education", order_index=0),
        make_program("clinics", category="Health", order_index=1),
        make_program("untagged", category=None, order_index=2),
    )
    page = pages.programs("Health")
    assert page.categories == ("Education", "Health")
    assert page.active_category == "Health"
    assert [v.slug for v in page.section("programs").items] == ["clinics"]

    everything = pages.programs()
    assert everything.active_category is None
    assert len(everything.section("programs").items) == 3


def test_unknown_category_shows_empty_state_but_keeps_chips(add, pages):
    add(make_program("scholarships"))
    page = pages.programs("Sports")
    assert page.sections == ()
    assert page.empty_state is EMPTY_STATES["programs"]
    assert page.categories == ("Education",)


def test_home_page_with_content(add, pages, now):
    add(
        make_campaign("water"),
        make_campaign("kits", is_active=False),
        make_program("scholarships", is_featured=True),
        make_event("camp", start=now + timedelta(days=1)),
        make_event("old-drive", start=now - timedelta(days=1)),
        make_post("notes"),
    )
    page = pages.home()
    assert page.section_keys == ["campaigns", "programs", "events", "posts"]
    assert [v.slug for v in page.section("campaigns").items] == ["water"]
    assert [v.slug for v in page.section("events").items] == ["camp"]
    assert page.extras["hero"].title
    assert page.empty_state is None


def test_home_page_empty_still_has_hero(pages):
    page = pages.home()
    assert page.sections == ()
    assert page.empty_state is EMPTY_STATES["home"]
    assert page.extras["hero"].cta_url == "/get-involved"


def test_impact_groups_stats_by_year(add, pages):
    add(
        ImpactStat(site=SITE, label="Villages", value="40+"),
        ImpactStat(site=SITE, label="Meals", value="10K", year=2023, order_index=1),
        ImpactStat(site=SITE, label="Kits", value="500", year=2024, order_index=2),
    )
    page = pages.impact()
    assert page.section_keys == ["overall", "year-2024", "year-2023"]


def test_gallery_hidden_images_are_not_shown(add, pages):
    add(
        GalleryImage(site=SITE, image_path="g/a.jpg", title="Camp", category="Events"),
        GalleryImage(site=SITE, image_path="g/b.jpg", is_visible=False, category="Hidden"),
    )
    page = pages.gallery()
    items = page.section("photos").items
    assert [i.title for i in items] == ["Camp"]
    assert items[0].image_url == "https://cdn.example.org/storage/v1/object/public/media/g/a.jpg"
    assert page.categories == ("Events",)


def test_program_detail_lists_related_programs(add, pages):
    add(
        make_program("scholarships", order_index=0),
        make_program("mentoring", order_index=1),
        make_program("clinics", category="Health", order_index=2),
    )
    page = pages.program_detail("scholarships")
    assert page.item.slug == "scholarships"
    assert [v.slug for v in page.section("related").items] == ["mentoring"]


@pytest.mark.parametrize(
    "method,slug",
    [
        ("program_detail", "missing"),
        ("campaign_detail", "missing"),
        ("event_detail", "missing"),
        ("blog_detail", "missing"),
    ],
)
def test_detail_not_found(pages, method, slug):
    with pytest.raises(PageNotFound):
        getattr(pages, method)(slug)


def test_detail_of_another_sites_record_is_not_found(add, pages):
    add(make_campaign("theirs", site=OTHER_SITE), make_post("their-post", site=OTHER_SITE))
    with pytest.raises(PageNotFound):
        pages.campaign_detail("theirs")
    with pytest.raises(PageNotFound):
        pages.blog_detail("their-post")


def test_draft_program_detail_is_not_found(add, pages):
    add(make_program("hidden", status="draft"))
    with pytest.raises(PageNotFound):
        pages.program_detail("hidden")


def test_detail_fetch_errors_propagate(pages, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(pages.store, "fetch_by_slug", explode)
    with pytest.raises(RuntimeError):
        pages.program_detail("scholarships")


def test_inactive_campaign_detail_is_still_shown(add, pages):
    add(make_campaign("kits", is_active=False))
    page = pages.campaign_detail("kits")
    assert page.item.is_active is False
    assert page.item.progress.label == "25% funded"


def test_list_loader_failure_renders_empty_section(add, pages, monkeypatch):
    add(make_program("scholarships"))
    real = pages.store.fetch_list

    def flaky(model, **kwargs):
        if model is Program:
            raise RuntimeError("timeout")
        return real(model, **kwargs)

    monkeypatch.setattr(pages.store, "fetch_list", flaky)
    page = pages.programs()
    assert page.sections == ()
    assert page.empty_state is EMPTY_STATES["programs"]


def test_home_page_previews_featured_programs_only(add, pages):
    add(make_program("featured", is_featured=True, order_index=1), make_program("plain", order_index=0))
    page = pages.home()
    assert [v.slug for v in page.section("programs").items] == ["featured"]


def test_home_page_without_featured_programs_drops_the_section(add, pages):
    add(make_program("plain"))
    assert pages.home().section("programs") is None
