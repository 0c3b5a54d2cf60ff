"""Data types flowing through the content-gap analysis pipeline."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

PILLAR = "pillar"
ARTICLE = "article"
GUIDE = "guide"
TUTORIAL = "tutorial"
CONTENT_TYPES = (PILLAR, ARTICLE, GUIDE, TUTORIAL)

HIGH = "high"
MEDIUM = "medium"
LOW = "low"
PRIORITIES = (HIGH, MEDIUM, LOW)

RECOMMENDATION_STATUSES = ("pending", "in_progress", "completed", "cancelled")


@dataclass
class ExistingContentItem:
    """A piece of content already published in the analysed category."""
    id: Any
    title: str
    keywords: list[str] = field(default_factory=list)  # top 20 by frequency
    published_at: Optional[datetime] = None
    view_count: int = 0


@dataclass
class CompetitorSnapshot:
    """One competing domain as reported by a competitor data provider."""
    domain: str
    content_count: int
    avg_ranking: float


@dataclass
class CompetitorAggregate:
    """Rollup of all competitor snapshots for a category."""
    competitors: list[CompetitorSnapshot] = field(default_factory=list)
    average_content_count: float = 0.0
    average_ranking: float = 0.0
    total_competition: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class KeywordCandidate:
    """Candidate keyword with its estimated metrics."""
    keyword: str
    search_volume: int
    difficulty: int
    competition: int
    existing_content_count: int


@dataclass
class ContentGapRecord:
    """Scored, classified candidate keyword."""
    keyword: str
    search_volume: int
    difficulty: int
    competition: int
    existing_content_count: int
    opportunity: float
    recommended_type: str
    priority: str
    estimated_traffic: int
    estimated_revenue: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ContentRecommendation:
    """Actionable content brief derived from a gap record."""
    title: str
    description: str
    content_type: str
    target_keywords: list[str]
    estimated_word_count: int
    estimated_time: int  # minutes
    priority: str
    assigned_to: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class AnalysisSummary:
    """Rollup statistics over every gap record of one run."""
    total_opportunities: int
    average_difficulty: int
    total_estimated_traffic: int
    total_estimated_revenue: int
    priority_breakdown: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class GapAnalysisResult:
    """Everything one call to ``analyze_category_gaps`` produces."""
    run_id: str
    category_id: Any
    category_name: str
    gaps: list[ContentGapRecord]
    recommendations: list[ContentRecommendation]
    summary: AnalysisSummary
    competitors: CompetitorAggregate

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "gaps": [g.to_dict() for g in self.gaps],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "summary": self.summary.to_dict(),
            "competitors": self.competitors.to_dict(),
        }
