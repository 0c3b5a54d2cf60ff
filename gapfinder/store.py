"""Analysis store -- the persistence boundary of the gap analysis engine.

``AnalysisStore`` is the narrow contract the service depends on;
``SQLAlchemyAnalysisStore`` implements it on top of the ORM models.
Stored rows are returned as plain dicts.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import case, delete, func, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from gapfinder.database import create_db_engine, create_session_factory, init_db, session_scope
from gapfinder.errors import CategoryNotFound
from gapfinder.models import Category, ContentGapAnalysis, ContentGapRecommendation, Post
from gapfinder.schemas import ContentGapRecord, ContentRecommendation
from gapfinder.utils.helpers import slugify

logger = logging.getLogger(__name__)


class AnalysisStore(ABC):
    """Persistence contract used by ``ContentGapAnalysisService``."""

    @abstractmethod
    def fetch_category(self, category_id: Any) -> Optional[dict]:
        """Return ``{"id", "name"}`` or None when the category does not exist."""

    @abstractmethod
    def fetch_existing_content(self, category_id: Any) -> list[dict]:
        """Posts of the category: id, title, body, published_at, view_count."""

    @abstractmethod
    def persist_gap_records(
        self,
        category_id: Any,
        user_id: Optional[str],
        run_id: str,
        records: list[ContentGapRecord],
    ) -> list[int]:
        """Write every record of one run atomically; return the new ids."""

    @abstractmethod
    def fetch_stored_gap_records(
        self, category_id: Any = None, limit: int = 50,
    ) -> list[dict]:
        """Stored gap records ordered by opportunity, highest first."""

    @abstractmethod
    def fetch_gap_record(self, gap_id: int) -> Optional[dict]:
        """One stored gap record, or None."""

    @abstractmethod
    def delete_gap_records(self, gap_ids: list[int]) -> int:
        """Delete gap records (and their recommendations); return rows removed."""

    @abstractmethod
    def persist_recommendation(
        self, gap_analysis_id: int, recommendation: ContentRecommendation,
    ) -> dict:
        """Store a recommendation linked to a gap record."""

    @abstractmethod
    def fetch_recommendations(
        self, status: Optional[str] = None, priority: Optional[str] = None,
    ) -> list[dict]:
        """Stored recommendations, high priority first then newest first."""

    @abstractmethod
    def update_recommendation(
        self,
        recommendation_id: int,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        completed_at: Optional[datetime] = None,
    ) -> Optional[dict]:
        """Update the given fields; None when the recommendation does not exist."""

    @abstractmethod
    def gap_statistics(self, category_id: Any = None) -> dict:
        """Aggregate counts and sums over stored records."""


# ---------------------------------------------------------------------------
# Row -> dict helpers
# ---------------------------------------------------------------------------

def _gap_to_dict(row: ContentGapAnalysis) -> dict[str, Any]:
    return {
        "id": row.id,
        "category_id": row.category_id,
        "category_name": row.category.name if row.category else None,
        "analysis_run_id": row.analysis_run_id,
        "keyword": row.keyword,
        "search_volume": row.search_volume,
        "difficulty": row.difficulty,
        "competition": row.competition,
        "existing_content_count": row.existing_content,
        "opportunity": row.opportunity,
        "recommended_type": row.recommended_type,
        "priority": row.priority,
        "estimated_traffic": row.estimated_traffic,
        "estimated_revenue": row.estimated_revenue,
        "created_by": row.created_by,
        "analysis_date": row.analysis_date,
    }


def _recommendation_to_dict(row: ContentGapRecommendation) -> dict[str, Any]:
    gap = row.gap_analysis
    return {
        "id": row.id,
        "gap_analysis_id": row.gap_analysis_id,
        "keyword": gap.keyword if gap else None,
        "category_id": gap.category_id if gap else None,
        "title": row.title,
        "description": row.description,
        "content_type": row.content_type,
        "target_keywords": list(row.target_keywords or []),
        "estimated_word_count": row.estimated_word_count,
        "estimated_time": row.estimated_time,
        "priority": row.priority,
        "status": row.status,
        "assigned_to": row.assigned_to,
        "completed_at": row.completed_at,
        "created_at": row.created_at,
    }


_PRIORITY_RANK = case(
    (ContentGapRecommendation.priority == "high", 0),
    (ContentGapRecommendation.priority == "medium", 1),
    (ContentGapRecommendation.priority == "low", 2),
    else_=3,
)


class SQLAlchemyAnalysisStore(AnalysisStore):
    """``AnalysisStore`` on a SQLAlchemy session factory.

    Every public method runs in its own transaction; a failing write is
    rolled back in full.

    Usage::

        store = SQLAlchemyAnalysisStore.from_url("sqlite:///data/gapfinder.db")
        category_id = store.add_category("SEO")
    """

    def __init__(self, session_factory: sessionmaker):
        self._factory = session_factory

    @classmethod
    def from_url(cls, database_url: Optional[str] = None, echo: bool = False) -> "SQLAlchemyAnalysisStore":
        """Build an engine for *database_url*, create tables, and wrap it."""
        engine = create_db_engine(database_url, echo=echo)
        init_db(engine)
        return cls(create_session_factory(engine))

    def _session(self):
        return session_scope(self._factory)

    # ------------------------------------------------------------------
    # Categories and posts
    # ------------------------------------------------------------------

    def add_category(self, name: str, slug: Optional[str] = None) -> int:
        if not name or not name.strip():
            raise ValueError("Category name must not be empty")
        with self._session() as session:
            category = Category(name=name.strip(), slug=slug or slugify(name) or None)
            session.add(category)
            session.flush()
            logger.info("Created category %d (%s)", category.id, category.name)
            return category.id

    def add_post(
        self,
        category_id: int,
        title: str,
        body: str = "",
        published_at: Optional[datetime] = None,
        view_count: int = 0,
    ) -> int:
        with self._session() as session:
            if session.get(Category, category_id) is None:
                raise CategoryNotFound(category_id)
            post = Post(
                category_id=category_id,
                title=title,
                body=body,
                published_at=published_at,
                view_count=view_count,
            )
            session.add(post)
            session.flush()
            return post.id

    def fetch_category(self, category_id: Any) -> Optional[dict]:
        with self._session() as session:
            category = session.get(Category, category_id)
            if category is None:
                return None
            return {"id": category.id, "name": category.name}

    def fetch_existing_content(self, category_id: Any) -> list[dict]:
        with self._session() as session:
            posts = session.scalars(
                select(Post).where(Post.category_id == category_id).order_by(Post.id)
            ).all()
            return [
                {
                    "id": p.id,
                    "title": p.title,
                    "body": p.body or "",
                    "published_at": p.published_at,
                    "view_count": p.view_count,
                }
                for p in posts
            ]

    # ------------------------------------------------------------------
    # Gap records
    # ------------------------------------------------------------------

    def persist_gap_records(
        self,
        category_id: Any,
        user_id: Optional[str],
        run_id: str,
        records: list[ContentGapRecord],
    ) -> list[int]:
        with self._session() as session:
            rows = [
                ContentGapAnalysis(
                    category_id=category_id,
                    analysis_run_id=run_id,
                    keyword=r.keyword,
                    search_volume=r.search_volume,
                    difficulty=r.difficulty,
                    competition=r.competition,
                    existing_content=r.existing_content_count,
                    opportunity=r.opportunity,
                    recommended_type=r.recommended_type,
                    priority=r.priority,
                    estimated_traffic=r.estimated_traffic,
                    estimated_revenue=r.estimated_revenue,
                    created_by=user_id,
                )
                for r in records
            ]
            session.add_all(rows)
            session.flush()
            ids = [row.id for row in rows]
        logger.info("Persisted %d gap records for category %s (run %s)", len(ids), category_id, run_id)
        return ids

    def fetch_stored_gap_records(self, category_id: Any = None, limit: int = 50) -> list[dict]:
        stmt = (
            select(ContentGapAnalysis)
            .options(selectinload(ContentGapAnalysis.category))
            .order_by(ContentGapAnalysis.opportunity.desc(), ContentGapAnalysis.id)
            .limit(limit)
        )
        if category_id is not None:
            stmt = stmt.where(ContentGapAnalysis.category_id == category_id)
        with self._session() as session:
            return [_gap_to_dict(row) for row in session.scalars(stmt).all()]

    def fetch_gap_record(self, gap_id: int) -> Optional[dict]:
        with self._session() as session:
            row = session.get(ContentGapAnalysis, gap_id)
            return _gap_to_dict(row) if row is not None else None

    def delete_gap_records(self, gap_ids: list[int]) -> int:
        with self._session() as session:
            result = session.execute(
                delete(ContentGapAnalysis).where(ContentGapAnalysis.id.in_(gap_ids))
            )
            removed = result.rowcount or 0
        logger.info("Deleted %d gap records", removed)
        return removed

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def persist_recommendation(
        self, gap_analysis_id: int, recommendation: ContentRecommendation,
    ) -> dict:
        with self._session() as session:
            row = ContentGapRecommendation(
                gap_analysis_id=gap_analysis_id,
                title=recommendation.title,
                description=recommendation.description,
                content_type=recommendation.content_type,
                target_keywords=list(recommendation.target_keywords),
                estimated_word_count=recommendation.estimated_word_count,
                estimated_time=recommendation.estimated_time,
                priority=recommendation.priority,
                assigned_to=recommendation.assigned_to,
            )
            session.add(row)
            session.flush()
            return _recommendation_to_dict(row)

    def fetch_recommendations(
        self, status: Optional[str] = None, priority: Optional[str] = None,
    ) -> list[dict]:
        stmt = (
            select(ContentGapRecommendation)
            .options(selectinload(ContentGapRecommendation.gap_analysis))
            .order_by(
                _PRIORITY_RANK,
                ContentGapRecommendation.created_at.desc(),
                ContentGapRecommendation.id.desc(),
            )
        )
        if status:
            stmt = stmt.where(ContentGapRecommendation.status == status)
        if priority:
            stmt = stmt.where(ContentGapRecommendation.priority == priority)
        with self._session() as session:
            return [_recommendation_to_dict(r) for r in session.scalars(stmt).all()]

    def update_recommendation(
        self,
        recommendation_id: int,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        completed_at: Optional[datetime] = None,
    ) -> Optional[dict]:
        with self._session() as session:
            row = session.get(ContentGapRecommendation, recommendation_id)
            if row is None:
                return None
            if status is not None:
                row.status = status
            if assigned_to is not None:
                row.assigned_to = assigned_to
            if completed_at is not None:
                row.completed_at = completed_at
            session.flush()
            return _recommendation_to_dict(row)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def gap_statistics(self, category_id: Any = None) -> dict:
        with self._session() as session:
            return self._statistics(session, category_id)

    @staticmethod
    def _statistics(session: Session, category_id: Any) -> dict:
        totals_stmt = select(
            func.count(ContentGapAnalysis.id),
            func.coalesce(func.sum(ContentGapAnalysis.estimated_traffic), 0),
            func.coalesce(func.sum(ContentGapAnalysis.estimated_revenue), 0.0),
        )
        high_stmt = select(func.count(ContentGapAnalysis.id)).where(
            ContentGapAnalysis.priority == "high"
        )
        rec_stmt = select(ContentGapRecommendation.status, func.count(ContentGapRecommendation.id))
        if category_id is not None:
            in_category = ContentGapAnalysis.category_id == category_id
            totals_stmt = totals_stmt.where(in_category)
            high_stmt = high_stmt.where(in_category)
            rec_stmt = rec_stmt.join(ContentGapRecommendation.gap_analysis).where(in_category)

        total_analyses, traffic, revenue = session.execute(totals_stmt).one()
        high_priority = session.scalar(high_stmt)
        by_status = dict(session.execute(rec_stmt.group_by(ContentGapRecommendation.status)).all())

        return {
            "total_analyses": total_analyses,
            "total_recommendations": sum(by_status.values()),
            "pending_recommendations": by_status.get("pending", 0),
            "completed_recommendations": by_status.get("completed", 0),
            "high_priority_gaps": high_priority or 0,
            "total_estimated_traffic": int(traffic or 0),
            "total_estimated_revenue": float(revenue or 0.0),
        }
