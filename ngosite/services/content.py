"""
ngosite.services.content — record → presentation-shape resolvers.

Every fallback, derived field and ordering/partition rule a page needs is
applied here exactly once, so templates only print values:

- resolve_progress / Progress: funding percentage (one stored computation,
  two renderings: bar width and rounded label)
- resolve_image_url / ImageResolver: storage paths and media-table ids → URLs
- partition_by_temporal_state / partition_by_activity: stable partitions
- extract_distinct_categories: category filter chips without a second query
- is_publicly_visible / filter_publicly_visible: the one visibility predicate
- resolve_* functions: one frozen view per entity type
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple
from urllib.parse import quote

from ngosite.models.mixins import PUBLISHED

FALLBACK_COPY: Dict[str, str] = {
    "hero_title": "Together, we can change lives",
    "hero_subtitle": "Join our community of volunteers, donors and partners building a better tomorrow.",
    "hero_cta_label": "Get Involved",
    "hero_cta_url": "/get-involved",
    "campaign_summary": "Support {title} and help us reach our goal.",
    "program_summary": "Learn more about {title} and how it serves our community.",
    "event_summary": "Join us for {title}.",
    "event_location": "Location to be announced",
    "post_author": "Our Team",
    "gallery_alt": "Gallery photo",
    "partner_description": "",
}

EXCERPT_LENGTH = 160


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _naive_utc(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError, InvalidOperation):
        return None
    return f if math.isfinite(f) else None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


# ─────────────────────────────────────────────────────────────
# Progress
# ─────────────────────────────────────────────────────────────
def resolve_progress(goal: Any, raised: Any) -> float:
    """
    Funding percentage in [0, 100], unrounded.

    A missing or non-positive goal yields 0 whatever was raised; a missing
    raised amount counts as 0.
    """
    g = _as_float(goal)
    if g is None or g <= 0:
        return 0.0
    r = _as_float(raised) or 0.0
    return min(100.0, max(0.0, r / g * 100.0))


@dataclass(frozen=True)
class Progress:
    percent: float

    @classmethod
    def of(cls, goal: Any, raised: Any) -> "Progress":
        return cls(resolve_progress(goal, raised))

    @property
    def rounded(self) -> int:
        return int(Decimal(repr(self.percent)).to_integral_value(rounding=ROUND_HALF_UP))

    @property
    def width(self) -> str:
        # CSS width uses the unrounded value
        return f"{self.percent:.4f}".rstrip("0").rstrip(".") + "%"

    @property
    def label(self) -> str:
        return f"{self.rounded}% funded"


# ─────────────────────────────────────────────────────────────
# Images
# ─────────────────────────────────────────────────────────────
def public_storage_url(path: Any, *, storage_base: str, bucket: str = "") -> Optional[str]:
    """Deterministic public URL for a stored relative path. No I/O."""
    s = _text(path) if isinstance(path, str) else ""
    if not s:
        return None
    if "://" in s or s.startswith("//"):
        return s
    parts = [storage_base.rstrip("/")]
    if bucket and bucket.strip("/"):
        parts.append(bucket.strip("/"))
    parts.append(quote(s.lstrip("/"), safe="/"))
    return "/".join(parts)


def resolve_image_url(
    reference: Any,
    media: Optional[Mapping[int, Any]] = None,
    *,
    storage_base: str,
    bucket: str = "",
) -> Optional[str]:
    """
    Inline storage path → public URL; media-table id → stored ``file_url``.
    Missing, empty or unknown references give None, never an exception.
    """
    if reference is None or isinstance(reference, bool):
        return None
    if isinstance(reference, int):
        row = (media or {}).get(reference)
        url = _text(getattr(row, "file_url", None)) if row is not None else ""
        return url or None
    if isinstance(reference, str):
        return public_storage_url(reference, storage_base=storage_base, bucket=bucket)
    return None


@dataclass(frozen=True)
class ImageResolver:
    storage_base: str
    bucket: str = ""
    media: Mapping[int, Any] = field(default_factory=dict)

    def __call__(self, reference: Any) -> Optional[str]:
        return resolve_image_url(
            reference, self.media, storage_base=self.storage_base, bucket=self.bucket
        )

    def with_media(self, media: Mapping[int, Any]) -> "ImageResolver":
        merged = dict(self.media)
        merged.update(media or {})
        return replace(self, media=merged)


# ─────────────────────────────────────────────────────────────
# Partitions, categories, visibility
# ─────────────────────────────────────────────────────────────
class TemporalPartition(NamedTuple):
    upcoming: List[Any]
    past: List[Any]


class ActivityPartition(NamedTuple):
    active: List[Any]
    inactive: List[Any]


def is_past_start(start: Any, now: datetime) -> bool:
    """An event is past once its start is strictly before ``now``."""
    s = _naive_utc(start)
    n = _naive_utc(now)
    if s is None or n is None:
        return False
    return s < n


def partition_by_temporal_state(events: Iterable[Any], now: datetime) -> TemporalPartition:
    """Upcoming when ``start_date >= now``; input order is kept in both halves."""
    upcoming: List[Any] = []
    past: List[Any] = []
    for ev in events or ():
        (past if is_past_start(getattr(ev, "start_date", None), now) else upcoming).append(ev)
    return TemporalPartition(upcoming, past)


def partition_by_activity(campaigns: Iterable[Any]) -> ActivityPartition:
    active: List[Any] = []
    inactive: List[Any] = []
    for c in campaigns or ():
        (active if bool(getattr(c, "is_active", False)) else inactive).append(c)
    return ActivityPartition(active, inactive)


def _category_of(item: Any) -> Any:
    if item is None or isinstance(item, str):
        return item
    return getattr(item, "category", None)


def extract_distinct_categories(records: Iterable[Any]) -> List[str]:
    """Non-empty categories in first-seen order. Blank/absent ones are dropped."""
    out: List[str] = []
    seen = set()
    for rec in records or ():
        cat = _category_of(rec)
        if not isinstance(cat, str) or not cat.strip():
            continue
        if cat not in seen:
            seen.add(cat)
            out.append(cat)
    return out


_MISSING = object()


def is_publicly_visible(record: Any, now: Optional[datetime] = None) -> bool:
    status = getattr(record, "status", _MISSING)
    if status is not _MISSING and status != PUBLISHED:
        return False
    if getattr(record, "is_visible", True) is False:
        return False
    published_at = getattr(record, "published_at", _MISSING)
    if published_at is not _MISSING:
        ts = _naive_utc(published_at)
        if ts is None or ts > _naive_utc(now or utcnow()):
            return False
    return True


def filter_publicly_visible(records: Iterable[Any], now: Optional[datetime] = None) -> List[Any]:
    moment = now or utcnow()
    return [r for r in records or () if is_publicly_visible(r, moment)]


# ─────────────────────────────────────────────────────────────
# Presentation shapes
# ─────────────────────────────────────────────────────────────
def _excerpt(text: Any, length: int = EXCERPT_LENGTH) -> str:
    s = " ".join(_text(text).split())
    if len(s) <= length:
        return s
    cut = s[:length].rsplit(" ", 1)[0]
    return f"{cut}…"


def _amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


@dataclass(frozen=True)
class HeroView:
    title: str
    subtitle: str
    image_url: Optional[str]
    cta_label: str
    cta_url: str


@dataclass(frozen=True)
class CampaignView:
    id: int
    slug: str
    title: str
    summary: str
    body: str
    image_url: Optional[str]
    goal: Optional[Decimal]
    raised: Decimal
    progress: Progress
    is_active: bool

    @property
    def has_goal(self) -> bool:
        return self.goal is not None and self.goal > 0


@dataclass(frozen=True)
class ProgramView:
    id: int
    slug: str
    title: str
    summary: str
    body: str
    category: Optional[str]
    image_url: Optional[str]
    is_featured: bool
    start_date: Optional[date]
    end_date: Optional[date]
    is_ongoing: bool


@dataclass(frozen=True)
class EventView:
    id: int
    slug: str
    title: str
    summary: str
    body: str
    image_url: Optional[str]
    start_date: datetime
    end_date: Optional[datetime]
    location: str
    map_url: Optional[str]
    registration_url: Optional[str]
    is_featured: bool
    is_past: bool

    @property
    def can_register(self) -> bool:
        return bool(self.registration_url) and not self.is_past


@dataclass(frozen=True)
class PostView:
    id: int
    slug: str
    title: str
    excerpt: str
    body: str
    image_url: Optional[str]
    category: Optional[str]
    tags: Tuple[str, ...]
    author: str
    published_at: Optional[datetime]


@dataclass(frozen=True)
class TeamMemberView:
    name: str
    role: str
    bio: str
    photo_url: Optional[str]
    email: Optional[str]
    social_links: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class PartnerView:
    name: str
    description: str
    logo_url: Optional[str]
    website_url: Optional[str]
    category: Optional[str]


@dataclass(frozen=True)
class TestimonialView:
    quote: str
    author_name: str
    author_role: str
    photo_url: Optional[str]


@dataclass(frozen=True)
class ImpactStatView:
    label: str
    value: str
    icon: Optional[str]
    year: Optional[int]


@dataclass(frozen=True)
class GalleryImageView:
    title: str
    caption: str
    alt: str
    image_url: Optional[str]
    category: Optional[str]


@dataclass(frozen=True)
class TimelineView:
    year: str
    title: str
    description: str


@dataclass(frozen=True)
class CaseStudyView:
    slug: str
    title: str
    summary: str
    image_url: Optional[str]
    location: Optional[str]
    year: Optional[int]


@dataclass(frozen=True)
class ReportView:
    title: str
    description: str
    file_url: Optional[str]
    year: Optional[int]
    category: Optional[str]


@dataclass(frozen=True)
class AboutView:
    mission: str
    vision: str
    story: str
    image_url: Optional[str]


@dataclass(frozen=True)
class ContactView:
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    map_url: Optional[str]
    office_hours: Optional[str]
    social_links: Tuple[Tuple[str, str], ...]


def social_link_pairs(raw: Any) -> Tuple[Tuple[str, str], ...]:
    if not isinstance(raw, Mapping):
        return ()
    return tuple((str(k), str(v)) for k, v in raw.items() if _text(v))


def resolve_hero(record: Any, images: ImageResolver) -> HeroView:
    if record is None:
        return HeroView(
            title=FALLBACK_COPY["hero_title"],
            subtitle=FALLBACK_COPY["hero_subtitle"],
            image_url=None,
            cta_label=FALLBACK_COPY["hero_cta_label"],
            cta_url=FALLBACK_COPY["hero_cta_url"],
        )
    return HeroView(
        title=_text(record.title) or FALLBACK_COPY["hero_title"],
        subtitle=_text(record.subtitle) or FALLBACK_COPY["hero_subtitle"],
        image_url=images(record.background_image_path),
        cta_label=_text(record.cta_label) or FALLBACK_COPY["hero_cta_label"],
        cta_url=_text(record.cta_url) or FALLBACK_COPY["hero_cta_url"],
    )


def resolve_campaign(record: Any, images: ImageResolver) -> CampaignView:
    title = _text(record.title)
    goal = _amount(record.goal_amount)
    raised = _amount(record.raised_amount) or Decimal("0")
    return CampaignView(
        id=record.id,
        slug=record.slug,
        title=title,
        summary=_text(record.short_description) or FALLBACK_COPY["campaign_summary"].format(title=title),
        body=_text(record.long_description),
        image_url=images(record.banner_image_path),
        goal=goal,
        raised=raised,
        progress=Progress.of(goal, raised),
        is_active=bool(record.is_active),
    )


def resolve_program(record: Any, images: ImageResolver) -> ProgramView:
    title = _text(record.title)
    return ProgramView(
        id=record.id,
        slug=record.slug,
        title=title,
        summary=_text(record.description) or FALLBACK_COPY["program_summary"].format(title=title),
        body=_text(record.content) or _text(record.description),
        category=_text(record.category) or None,
        image_url=images(record.featured_image_id),
        is_featured=bool(record.is_featured),
        start_date=record.start_date,
        end_date=record.end_date,
        is_ongoing=bool(record.is_ongoing),
    )


def resolve_event(record: Any, images: ImageResolver, now: datetime) -> EventView:
    title = _text(record.title)
    return EventView(
        id=record.id,
        slug=record.slug,
        title=title,
        summary=_text(record.short_description) or FALLBACK_COPY["event_summary"].format(title=title),
        body=_text(record.long_description),
        image_url=images(record.cover_image_path),
        start_date=record.start_date,
        end_date=record.end_date,
        location=_text(record.location) or FALLBACK_COPY["event_location"],
        map_url=_text(record.map_url) or None,
        registration_url=_text(record.registration_url) or None,
        is_featured=bool(record.is_featured),
        is_past=is_past_start(record.start_date, now),
    )


def resolve_post(record: Any, images: ImageResolver) -> PostView:
    tags = record.tags if isinstance(record.tags, (list, tuple)) else []
    return PostView(
        id=record.id,
        slug=record.slug,
        title=_text(record.title),
        excerpt=_text(record.excerpt) or _excerpt(record.content),
        body=_text(record.content),
        image_url=images(record.featured_image_id),
        category=_text(record.category) or None,
        tags=tuple(t for t in (_text(x) for x in tags) if t),
        author=_text(record.author_name) or FALLBACK_COPY["post_author"],
        published_at=record.published_at,
    )


def resolve_team_member(record: Any, images: ImageResolver) -> TeamMemberView:
    return TeamMemberView(
        name=_text(record.name),
        role=_text(record.role),
        bio=_text(record.bio),
        photo_url=images(record.photo_path),
        email=_text(record.email) or None,
        social_links=social_link_pairs(record.social_links),
    )


def resolve_partner(record: Any, images: ImageResolver) -> PartnerView:
    return PartnerView(
        name=_text(record.name),
        description=_text(record.description) or FALLBACK_COPY["partner_description"],
        logo_url=images(record.logo_id),
        website_url=_text(record.website_url) or None,
        category=_text(record.category) or None,
    )


def resolve_testimonial(record: Any, images: ImageResolver) -> TestimonialView:
    return TestimonialView(
        quote=_text(record.quote),
        author_name=_text(record.author_name),
        author_role=_text(record.author_role),
        photo_url=images(record.photo_path),
    )


def resolve_impact_stat(record: Any, images: ImageResolver) -> ImpactStatView:
    return ImpactStatView(
        label=_text(record.label),
        value=_text(record.value),
        icon=_text(record.icon) or None,
        year=record.year,
    )


def resolve_gallery_image(record: Any, images: ImageResolver) -> GalleryImageView:
    title = _text(record.title)
    caption = _text(record.caption)
    return GalleryImageView(
        title=title,
        caption=caption,
        alt=title or caption or FALLBACK_COPY["gallery_alt"],
        image_url=images(record.image_path),
        category=_text(record.category) or None,
    )


def resolve_timeline_item(record: Any, images: ImageResolver) -> TimelineView:
    return TimelineView(
        year=_text(record.year),
        title=_text(record.title),
        description=_text(record.description),
    )


def resolve_case_study(record: Any, images: ImageResolver) -> CaseStudyView:
    return CaseStudyView(
        slug=record.slug,
        title=_text(record.title),
        summary=_excerpt(record.description),
        image_url=images(record.featured_image_id),
        location=_text(record.location) or None,
        year=record.year,
    )


def resolve_report(record: Any, images: ImageResolver) -> ReportView:
    return ReportView(
        title=_text(record.title),
        description=_text(record.description),
        file_url=images(record.file_id),
        year=record.year,
        category=_text(record.category) or None,
    )


def resolve_about(record: Any, images: ImageResolver) -> Optional[AboutView]:
    if record is None:
        return None
    view = AboutView(
        mission=_text(record.mission),
        vision=_text(record.vision),
        story=_text(record.story),
        image_url=images(record.image_path),
    )
    return view if (view.mission or view.vision or view.story) else None


def resolve_contact(record: Any, images: ImageResolver) -> Optional[ContactView]:
    if record is None:
        return None
    return ContactView(
        email=_text(record.email) or None,
        phone=_text(record.phone) or None,
        address=_text(record.address) or None,
        map_url=_text(record.map_url) or None,
        office_hours=_text(record.office_hours) or None,
        social_links=social_link_pairs(record.social_links),
    )


def resolve_all(resolver, records: Iterable[Any], images: ImageResolver) -> List[Any]:
    return [resolver(r, images) for r in records or ()]


# ─────────────────────────────────────────────────────────────
# Groupings
# ─────────────────────────────────────────────────────────────
class StatGroups(NamedTuple):
    overall: List[Any]
    by_year: List[Tuple[int, List[Any]]]


def group_stats_by_year(stats: Iterable[Any]) -> StatGroups:
    """Yearless stats are 'overall'; dated ones grouped newest year first."""
    overall: List[Any] = []
    years: Dict[int, List[Any]] = {}
    for s in stats or ():
        year = getattr(s, "year", None)
        if year is None:
            overall.append(s)
        else:
            years.setdefault(int(year), []).append(s)
    return StatGroups(overall, sorted(years.items(), key=lambda kv: kv[0], reverse=True))


def related_programs(program: Any, candidates: Sequence[Any], limit: int = 3) -> List[Any]:
    """Same non-empty category, never the program itself; upstream order kept."""
    cat = _text(getattr(program, "category", None))
    if not cat:
        return []
    own_id = getattr(program, "id", None)
    out = [c for c in candidates if _text(getattr(c, "category", None)) == cat and getattr(c, "id", None) != own_id]
    return out[: max(0, int(limit))]
