"""
ngosite.services.pages — assemble every public page from site-scoped reads.

Each page follows the same contract:

1. independent reads go out as one batch (``gather``), concurrently when the
   app allows it; a failing loader is logged and its section rendered empty
2. media-table lookups for the fetched rows run after that batch
3. rows are resolved into view objects (``ngosite.services.content``)
4. empty sections are dropped; a page with no sections left carries exactly
   one ``EmptyState``
5. detail pages raise ``PageNotFound`` rather than render partially
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from werkzeug.exceptions import NotFound

from ngosite.extensions import run_in_app_context
from ngosite.models import (
    AboutSection,
    BlogPost,
    Campaign,
    CaseStudy,
    ContactInfo,
    Event,
    GalleryImage,
    HeroSection,
    ImpactStat,
    Partner,
    Program,
    Report,
    TeamMember,
    Testimonial,
    TimelineItem,
)
from ngosite.services import content as c
from ngosite.services.record_store import RecordStore, media_ids

logger = logging.getLogger(__name__)


class PageNotFound(NotFound):
    description = "We couldn't find what you were looking for. It may have moved or is no longer available."


# ─────────────────────────────────────────────────────────────
# Page data contract
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Section:
    key: str
    title: str
    card: str
    items: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class EmptyState:
    title: str
    message: str
    cta_label: str
    cta_endpoint: str


@dataclass(frozen=True)
class PageResult:
    kind: str
    title: str
    sections: Tuple[Section, ...] = ()
    empty_state: Optional[EmptyState] = None
    item: Any = None
    categories: Tuple[str, ...] = ()
    active_category: Optional[str] = None
    extras: Mapping[str, Any] = field(default_factory=dict)

    def section(self, key: str) -> Optional[Section]:
        for s in self.sections:
            if s.key == key:
                return s
        return None

    @property
    def section_keys(self) -> List[str]:
        return [s.key for s in self.sections]


_GET_INVOLVED = "forms.get_involved"
_CONTACT = "forms.contact"

EMPTY_STATES: Dict[str, EmptyState] = {
    "home": EmptyState(
        "We're just getting started",
        "Our programs, campaigns and stories will appear here soon.",
        "Get involved",
        _GET_INVOLVED,
    ),
    "about": EmptyState(
        "Our story is on its way",
        "We're putting together our history and the people behind our work.",
        "Contact us",
        _CONTACT,
    ),
    "programs": EmptyState(
        "No programs to show yet",
        "New programs are being planned. Reach out if you'd like to help shape them.",
        "Get involved",
        _GET_INVOLVED,
    ),
    "campaigns": EmptyState(
        "No campaigns right now",
        "There are no fundraising campaigns at the moment. You can still support our work directly.",
        "Get involved",
        _GET_INVOLVED,
    ),
    "events": EmptyState(
        "No events scheduled",
        "Check back soon for upcoming events, or get in touch to host one with us.",
        "Contact us",
        _CONTACT,
    ),
    "blog": EmptyState(
        "No stories published yet",
        "Updates from the field will be posted here.",
        "Get involved",
        _GET_INVOLVED,
    ),
    "gallery": EmptyState(
        "No photos yet",
        "Photos from our programs and events will appear here.",
        "Get involved",
        _GET_INVOLVED,
    ),
    "partners": EmptyState(
        "Become our first partner",
        "We're looking for organisations who share our mission.",
        "Partner with us",
        _GET_INVOLVED,
    ),
    "impact": EmptyState(
        "Impact report coming soon",
        "We're compiling the numbers and stories behind our work.",
        "Contact us",
        _CONTACT,
    ),
    "contact": EmptyState(
        "Contact details coming soon",
        "You can still send us a message using the form below.",
        "Get involved",
        _GET_INVOLVED,
    ),
}


def compose_page(kind: str, title: str, sections: Iterable[Section], **kwargs: Any) -> PageResult:
    """Drop empty sections; attach the page's empty state only when none remain."""
    kept = tuple(s for s in sections if s.items)
    empty = None if kept else EMPTY_STATES[kind]
    return PageResult(kind=kind, title=title, sections=kept, empty_state=empty, **kwargs)


# ─────────────────────────────────────────────────────────────
# Batched reads
# ─────────────────────────────────────────────────────────────
Loader = Callable[[], Sequence[Any]]


def _settle(key: str, call: Callable[[], Any]) -> List[Any]:
    try:
        rows = call()
    except Exception:
        logger.exception("Section %r failed to load; rendering it as empty", key)
        return []
    return list(rows or [])


def gather(loaders: Mapping[str, Loader], *, app=None, concurrent: bool = False) -> Dict[str, List[Any]]:
    """
    Run independent loaders and return ``{key: rows}``.

    With ``concurrent`` and an ``app``, each loader runs on the shared pool
    under its own application context; otherwise they run in order on the
    calling thread. Either way a failing loader yields ``[]``.
    """
    if concurrent and app is not None and len(loaders) > 1:
        futures = {key: run_in_app_context(app, fn) for key, fn in loaders.items()}
        return {key: _settle(key, fut.result) for key, fut in futures.items()}
    return {key: _settle(key, fn) for key, fn in loaders.items()}


def _one(rows: Sequence[Any]) -> Optional[Any]:
    return rows[0] if rows else None


# ─────────────────────────────────────────────────────────────
# Assembler
# ─────────────────────────────────────────────────────────────
class PageAssembler:
    """Builds ``PageResult``s for one request: one site, one clock."""

    def __init__(self, store: RecordStore, site, *, now: Optional[datetime] = None, app=None):
        self.store = store
        self.site = site
        self.now = now or c.utcnow()
        self.app = app

    def _gather(self, loaders: Mapping[str, Loader]) -> Dict[str, List[Any]]:
        return gather(loaders, app=self.app, concurrent=bool(self.site.fetch_concurrency))

    def _list(self, model, **kw) -> Loader:
        store, now = self.store, self.now
        return lambda: store.fetch_list(model, now=now, **kw)

    def _singleton(self, model) -> Loader:
        store = self.store
        return lambda: [r for r in (store.fetch_singleton(model),) if r is not None]

    def _images(self, *groups: Tuple[Sequence[Any], Tuple[str, ...]]) -> c.ImageResolver:
        ids: List[int] = []
        for rows, attrs in groups:
            ids.extend(media_ids(rows, *attrs))
        return self.site.images(self.store.fetch_media(ids) if ids else {})

    # ------------------------------------------------------------- home
    def home(self) -> PageResult:
        lim = self.site.limit
        rows = self._gather(
            {
                "hero": self._singleton(HeroSection),
                "campaigns": self._list(Campaign, filters={"is_active": True}, limit=lim("campaigns", 3)),
                "programs": self._list(Program, filters={"is_featured": True}, limit=lim("programs", 6)),
                "events": self._list(
                    Event,
                    filters={"is_active": True},
                    where=(Event.start_date >= self.now,),
                    limit=lim("events", 3),
                ),
                "stats": self._list(ImpactStat, limit=lim("stats", 6)),
                "testimonials": self._list(Testimonial, limit=lim("testimonials", 6)),
                "posts": self._list(BlogPost, limit=lim("posts", 3)),
                "partners": self._list(Partner, limit=lim("partners", 12)),
            }
        )
        images = self._images(
            (rows["programs"], ("featured_image_id",)),
            (rows["posts"], ("featured_image_id",)),
            (rows["partners"], ("logo_id",)),
        )
        upcoming = c.partition_by_temporal_state(rows["events"], self.now).upcoming
        return compose_page(
            "home",
            self.site.name,
            [
                Section("campaigns", "Active campaigns", "campaign", tuple(c.resolve_all(c.resolve_campaign, rows["campaigns"], images))),
                Section("programs", "Featured programs", "program", tuple(c.resolve_all(c.resolve_program, rows["programs"], images))),
                Section("stats", "Our impact", "stat", tuple(c.resolve_all(c.resolve_impact_stat, rows["stats"], images))),
                Section("events", "Upcoming events", "event", tuple(c.resolve_event(e, images, self.now) for e in upcoming)),
                Section("testimonials", "Voices from the community", "testimonial", tuple(c.resolve_all(c.resolve_testimonial, rows["testimonials"], images))),
                Section("posts", "Latest stories", "post", tuple(c.resolve_all(c.resolve_post, rows["posts"], images))),
                Section("partners", "Our partners", "partner", tuple(c.resolve_all(c.resolve_partner, rows["partners"], images))),
            ],
            extras={"hero": c.resolve_hero(_one(rows["hero"]), images)},
        )

    # ------------------------------------------------------------- about
    def about(self) -> PageResult:
        rows = self._gather(
            {
                "about": self._singleton(AboutSection),
                "team": self._list(TeamMember),
                "timeline": self._list(TimelineItem),
            }
        )
        images = self.site.images()
        about = c.resolve_about(_one(rows["about"]), images)
        return compose_page(
            "about",
            "About us",
            [
                Section("story", "Who we are", "about", (about,) if about else ()),
                Section("timeline", "Our journey", "timeline", tuple(c.resolve_all(c.resolve_timeline_item, rows["timeline"], images))),
                Section("team", "Our team", "team", tuple(c.resolve_all(c.resolve_team_member, rows["team"], images))),
            ],
        )

    # ------------------------------------------------------------- filtered lists
    def _filtered(self, model, category: Optional[str], **kw) -> Tuple[List[Any], List[str], Optional[str]]:
        """Rows for the selected category plus the chips from the unfiltered list."""
        category = (category or "").strip() or None
        loaders = {"all": self._list(model, **kw)}
        if category:
            filters = dict(kw.pop("filters", None) or {}, category=category)
            loaders["filtered"] = self._list(model, filters=filters, **kw)
        rows = self._gather(loaders)
        categories = c.extract_distinct_categories(rows["all"])
        return (rows["filtered"] if category else rows["all"]), categories, category

    def programs(self, category: Optional[str] = None) -> PageResult:
        rows, categories, active = self._filtered(Program, category)
        images = self._images((rows, ("featured_image_id",)))
        return compose_page(
            "programs",
            "Programs",
            [Section("programs", active or "All programs", "program", tuple(c.resolve_all(c.resolve_program, rows, images)))],
            categories=tuple(categories),
            active_category=active,
        )

    def blog(self, category: Optional[str] = None) -> PageResult:
        rows, categories, active = self._filtered(BlogPost, category)
        images = self._images((rows, ("featured_image_id",)))
        return compose_page(
            "blog",
            "Stories & updates",
            [Section("posts", active or "Latest stories", "post", tuple(c.resolve_all(c.resolve_post, rows, images)))],
            categories=tuple(categories),
            active_category=active,
        )

    def gallery(self, category: Optional[str] = None) -> PageResult:
        rows, categories, active = self._filtered(GalleryImage, category)
        images = self.site.images()
        return compose_page(
            "gallery",
            "Gallery",
            [Section("photos", active or "All photos", "gallery", tuple(c.resolve_all(c.resolve_gallery_image, rows, images)))],
            categories=tuple(categories),
            active_category=active,
        )

    def partners(self, category: Optional[str] = None) -> PageResult:
        rows, categories, active = self._filtered(Partner, category)
        images = self._images((rows, ("logo_id",)))
        return compose_page(
            "partners",
            "Partners",
            [Section("partners", active or "Our partners", "partner", tuple(c.resolve_all(c.resolve_partner, rows, images)))],
            categories=tuple(categories),
            active_category=active,
        )

    # ------------------------------------------------------------- campaigns / events
    def campaigns(self) -> PageResult:
        rows = self._gather({"campaigns": self._list(Campaign)})
        images = self.site.images()
        active, completed = c.partition_by_activity(rows["campaigns"])
        return compose_page(
            "campaigns",
            "Campaigns",
            [
                Section("active", "Active", "campaign", tuple(c.resolve_all(c.resolve_campaign, active, images))),
                Section("completed", "Completed", "campaign", tuple(c.resolve_all(c.resolve_campaign, completed, images))),
            ],
        )

    def events(self) -> PageResult:
        rows = self._gather({"events": self._list(Event, filters={"is_active": True})})
        images = self.site.images()
        upcoming, past = c.partition_by_temporal_state(rows["events"], self.now)
        return compose_page(
            "events",
            "Events",
            [
                Section("upcoming", "Upcoming", "event", tuple(c.resolve_event(e, images, self.now) for e in upcoming)),
                Section("past", "Past", "event", tuple(c.resolve_event(e, images, self.now) for e in past)),
            ],
        )

    # ------------------------------------------------------------- impact / contact
    def impact(self) -> PageResult:
        rows = self._gather(
            {
                "stats": self._list(ImpactStat),
                "case_studies": self._list(CaseStudy),
                "reports": self._list(Report),
            }
        )
        images = self._images(
            (rows["case_studies"], ("featured_image_id",)),
            (rows["reports"], ("file_id",)),
        )
        groups = c.group_stats_by_year(c.resolve_all(c.resolve_impact_stat, rows["stats"], images))
        sections = [Section("overall", "Overall", "stat", tuple(groups.overall))]
        sections += [Section(f"year-{year}", str(year), "stat", tuple(stats)) for year, stats in groups.by_year]
        sections += [
            Section("case_studies", "Case studies", "case_study", tuple(c.resolve_all(c.resolve_case_study, rows["case_studies"], images))),
            Section("reports", "Reports", "report", tuple(c.resolve_all(c.resolve_report, rows["reports"], images))),
        ]
        return compose_page("impact", "Our impact", sections)

    def contact(self) -> PageResult:
        rows = self._gather({"contact": self._singleton(ContactInfo)})
        info = c.resolve_contact(_one(rows["contact"]), self.site.images())
        return compose_page(
            "contact",
            "Contact us",
            [Section("contact", "Get in touch", "contact", (info,) if info else ())],
        )

    # ------------------------------------------------------------- details
    def _require(self, record: Any) -> Any:
        if record is None:
            raise PageNotFound()
        return record

    def program_detail(self, slug: str) -> PageResult:
        program = self._require(self.store.fetch_by_slug(Program, slug, now=self.now))
        candidates: List[Any] = []
        if (program.category or "").strip():
            candidates = self.store.fetch_list(
                Program, filters={"category": program.category}, exclude_id=program.id, limit=3, now=self.now
            )
        related = c.related_programs(program, candidates, limit=3)
        images = self._images(([program, *related], ("featured_image_id",)))
        view = c.resolve_program(program, images)
        return PageResult(
            kind="program_detail",
            title=view.title,
            item=view,
            sections=tuple(
                s for s in [Section("related", "Related programs", "program", tuple(c.resolve_all(c.resolve_program, related, images)))] if s.items
            ),
        )

    def campaign_detail(self, slug: str) -> PageResult:
        campaign = self._require(self.store.fetch_by_slug(Campaign, slug, now=self.now))
        view = c.resolve_campaign(campaign, self.site.images())
        return PageResult(kind="campaign_detail", title=view.title, item=view)

    def event_detail(self, slug: str) -> PageResult:
        event = self._require(self.store.fetch_by_slug(Event, slug, filters={"is_active": True}, now=self.now))
        view = c.resolve_event(event, self.site.images(), self.now)
        return PageResult(kind="event_detail", title=view.title, item=view)

    def blog_detail(self, slug: str) -> PageResult:
        post = self._require(self.store.fetch_by_slug(BlogPost, slug, now=self.now))
        images = self._images(([post], ("featured_image_id",)))
        view = c.resolve_post(post, images)
        return PageResult(kind="blog_detail", title=view.title, item=view)
