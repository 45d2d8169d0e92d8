"""
ngosite.services.record_store — the one gateway between pages and the database.

Every read is scoped to a single site key and passes through the same
visibility clause, so no page can forget to hide drafts or another tenant's
rows. Writes are limited to lead records.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type

from sqlalchemy import and_, select, true
from sqlalchemy.exc import SQLAlchemyError

from ngosite.extensions import db
from ngosite.models import (
    BlogPost,
    Campaign,
    CaseStudy,
    Event,
    GalleryImage,
    HeroSection,
    ImpactStat,
    Media,
    Partner,
    Program,
    Report,
    TeamMember,
    Testimonial,
    TimelineItem,
    Website,
)
from ngosite.models.mixins import PUBLISHED, CuratedMixin, PublishableMixin
from ngosite.services.content import utcnow

logger = logging.getLogger(__name__)


class LeadWriteError(RuntimeError):
    """A lead record could not be persisted; the session has been rolled back."""


# Default ordering per entity: (column, direction) pairs, id as final tiebreaker.
ORDERING: Dict[type, Tuple[Tuple[str, str], ...]] = {
    Campaign: (("created_at", "desc"), ("id", "desc")),
    Program: (("order_index", "asc"), ("id", "asc")),
    Event: (("start_date", "asc"), ("id", "asc")),
    BlogPost: (("published_at", "desc"), ("id", "desc")),
    TeamMember: (("order_index", "asc"), ("id", "asc")),
    Partner: (("order_index", "asc"), ("id", "asc")),
    Testimonial: (("order_index", "asc"), ("id", "asc")),
    ImpactStat: (("order_index", "asc"), ("id", "asc")),
    GalleryImage: (("order_index", "asc"), ("id", "asc")),
    TimelineItem: (("order_index", "asc"), ("id", "asc")),
    HeroSection: (("order_index", "asc"), ("id", "asc")),
    CaseStudy: (("order_index", "asc"), ("id", "asc")),
    Report: (("year", "desc"), ("order_index", "asc"), ("id", "asc")),
}


def visible_clause(model: Type[Any], now: Optional[datetime] = None):
    """
    SQL form of the public-visibility predicate:
      - status == 'published' where the model is publishable
      - is_visible is true where the model is curated
      - published_at present and not in the future where the model has one
    """
    clauses = []
    if issubclass(model, PublishableMixin):
        clauses.append(model.status == PUBLISHED)
    if issubclass(model, CuratedMixin):
        clauses.append(model.is_visible.is_(True))
    if hasattr(model, "published_at"):
        clauses.append(model.published_at.is_not(None))
        clauses.append(model.published_at <= (now or utcnow()))
    return and_(*clauses) if clauses else true()


def _order_by(model: Type[Any]):
    cols = []
    for name, direction in ORDERING.get(model, (("id", "asc"),)):
        col = getattr(model, name)
        cols.append(col.desc() if direction == "desc" else col.asc())
    return cols


class RecordStore:
    """
    Site-scoped reads and lead writes.

    ``session`` defaults to the Flask-SQLAlchemy scoped session, which resolves
    per application context; a store can therefore be shared by loaders that
    run on worker threads under their own context.
    """

    def __init__(self, site: str, session=None):
        if not site:
            raise ValueError("RecordStore needs a site key")
        self.site = site
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def _select(self, model: Type[Any], now: Optional[datetime], filters: Optional[Mapping[str, Any]]):
        stmt = select(model).where(model.site == self.site, visible_clause(model, now))
        for name, value in (filters or {}).items():
            stmt = stmt.where(getattr(model, name) == value)
        return stmt

    # ------------------------------------------------------------------ reads
    def fetch_list(
        self,
        model: Type[Any],
        *,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        exclude_id: Optional[int] = None,
        where: Sequence[Any] = (),
        now: Optional[datetime] = None,
    ) -> List[Any]:
        stmt = self._select(model, now, filters)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        for clause in where:
            stmt = stmt.where(clause)
        stmt = stmt.order_by(*_order_by(model))
        if limit is not None:
            stmt = stmt.limit(max(0, int(limit)))
        return list(self.session.execute(stmt).scalars().all())

    def fetch_by_slug(
        self,
        model: Type[Any],
        slug: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> Optional[Any]:
        """None when the slug is unknown, hidden, or belongs to another site."""
        if not slug:
            return None
        stmt = self._select(model, now, filters).where(model.slug == slug).limit(1)
        return self.session.execute(stmt).scalars().first()

    def fetch_singleton(self, model: Type[Any]) -> Optional[Any]:
        stmt = self._select(model, None, None).order_by(*_order_by(model)).limit(1)
        return self.session.execute(stmt).scalars().first()

    def fetch_media(self, ids: Iterable[Any]) -> Dict[int, Media]:
        wanted = sorted({i for i in ids if isinstance(i, int) and not isinstance(i, bool)})
        if not wanted:
            return {}
        stmt = select(Media).where(Media.site == self.site, Media.id.in_(wanted))
        return {m.id: m for m in self.session.execute(stmt).scalars().all()}

    def fetch_website(self) -> Optional[Website]:
        stmt = select(Website).where(Website.site == self.site).limit(1)
        return self.session.execute(stmt).scalars().first()

    # ----------------------------------------------------------------- writes
    def create(self, model: Type[Any], **values: Any) -> int:
        """
        Insert one lead row for this site and commit. Returns the new id.
        Raises LeadWriteError (after rollback) on any database failure.
        """
        session = self.session
        try:
            row = model(site=self.site, **values)
            session.add(row)
            session.flush()
            row_id = int(row.id)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Failed to create %s row for site=%s", model.__name__, self.site)
            raise LeadWriteError(f"could not save {model.__name__}") from exc
        logger.info("Created %s id=%s site=%s", model.__name__, row_id, self.site)
        return row_id


def media_ids(records: Sequence[Any], *attrs: str) -> List[int]:
    """Collect media-table ids referenced by ``attrs`` across ``records``."""
    out: List[int] = []
    for rec in records:
        for attr in attrs:
            val = getattr(rec, attr, None)
            if isinstance(val, int) and not isinstance(val, bool):
                out.append(val)
    return out
