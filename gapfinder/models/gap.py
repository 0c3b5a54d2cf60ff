"""Content gap analysis and recommendation SQLAlchemy models."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gapfinder.database import Base

if TYPE_CHECKING:
    from gapfinder.models.category import Category


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentGapAnalysis(Base):
    """One scored keyword from one analysis run of one category.

    Rows are written once and never updated; re-running an analysis adds
    a new set of rows under a new ``analysis_run_id``.
    """

    __tablename__ = "content_gap_analyses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    analysis_run_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    keyword: Mapped[str] = mapped_column(String(500), nullable=False)
    search_volume: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    difficulty: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    competition: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    existing_content: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    opportunity: Mapped[float] = mapped_column(Float, default=0.0, nullable=False, index=True)
    recommended_type: Mapped[str] = mapped_column(String(50), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    estimated_traffic: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    estimated_revenue: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    analysis_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    category: Mapped["Category"] = relationship("Category", back_populates="gap_analyses")
    recommendations: Mapped[list["ContentGapRecommendation"]] = relationship(
        back_populates="gap_analysis", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<ContentGapAnalysis id={self.id} keyword={self.keyword!r} opp={self.opportunity:.1f}>"


class ContentGapRecommendation(Base):
    """Content brief promoted from a stored gap record."""

    __tablename__ = "content_gap_recommendations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gap_analysis_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("content_gap_analyses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_keywords: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    estimated_word_count: Mapped[int] = mapped_column(Integer, default=1500)
    estimated_time: Mapped[int] = mapped_column(Integer, default=120)
    priority: Mapped[str] = mapped_column(String(20), default="medium", nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), default="pending", nullable=False, index=True)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    gap_analysis: Mapped["ContentGapAnalysis"] = relationship(back_populates="recommendations")

    def __repr__(self) -> str:
        return f"<ContentGapRecommendation id={self.id} title={self.title!r} status={self.status}>"
