"""Content gap analysis service -- the library entry point.

``analyze_category_gaps`` runs the whole pipeline for one category:

    category -> existing content + candidate keywords -> per-keyword
    metrics -> ranked gaps -> recommendations + summary -> persisted rows

The remaining methods manage stored results and recommendations.
"""

import csv
import io
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from gapfinder.errors import AnalysisFailure, CategoryNotFound, RecordNotFound
from gapfinder.integrations.competitor_data import (
    CompetitorDataProvider,
    StaticCompetitorProvider,
    aggregate_competitors,
)
from gapfinder.modules.gap_analysis.content_indexer import ExistingContentIndexer
from gapfinder.modules.gap_analysis.gap_analyzer import GapAnalyzer
from gapfinder.modules.gap_analysis.keyword_generator import KeywordGenerator
from gapfinder.modules.gap_analysis.metric_estimator import (
    MetricEstimator,
    SimulatedMetricEstimator,
)
from gapfinder.modules.gap_analysis.recommendations import RecommendationEngine
from gapfinder.modules.gap_analysis.summary import SummaryAggregator
from gapfinder.schemas import (
    CONTENT_TYPES,
    PRIORITIES,
    RECOMMENDATION_STATUSES,
    ContentGapRecord,
    ContentRecommendation,
    GapAnalysisResult,
)
from gapfinder.store import AnalysisStore

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Keyword",
    "Search Volume",
    "Difficulty",
    "Competition",
    "Existing Content",
    "Opportunity",
    "Recommended Type",
    "Priority",
    "Estimated Traffic",
    "Estimated Revenue",
    "Category",
    "Analysis Date",
]


def _record_from_stored(row: dict) -> ContentGapRecord:
    return ContentGapRecord(
        keyword=row["keyword"],
        search_volume=row["search_volume"],
        difficulty=row["difficulty"],
        competition=row["competition"],
        existing_content_count=row["existing_content_count"],
        opportunity=row["opportunity"],
        recommended_type=row["recommended_type"],
        priority=row["priority"],
        estimated_traffic=row["estimated_traffic"],
        estimated_revenue=row["estimated_revenue"],
    )


class ContentGapAnalysisService:
    """Run content gap analyses and manage their stored results.

    Every collaborator is injected; only the store is required.

    Usage::

        store = SQLAlchemyAnalysisStore.from_url("sqlite:///data/gapfinder.db")
        service = ContentGapAnalysisService(store, estimator=SimulatedMetricEstimator(seed=7))
        result = service.analyze_category_gaps(category_id=1, user_id="editor")
    """

    def __init__(
        self,
        store: AnalysisStore,
        estimator: Optional[MetricEstimator] = None,
        competitor_provider: Optional[CompetitorDataProvider] = None,
        keyword_generator: Optional[KeywordGenerator] = None,
        indexer: Optional[ExistingContentIndexer] = None,
        analyzer: Optional[GapAnalyzer] = None,
        recommendation_engine: Optional[RecommendationEngine] = None,
        summary_aggregator: Optional[SummaryAggregator] = None,
    ):
        self._store = store
        self._estimator = estimator or SimulatedMetricEstimator()
        self._competitors = competitor_provider or StaticCompetitorProvider()
        self._generator = keyword_generator or KeywordGenerator()
        self._indexer = indexer or ExistingContentIndexer()
        self._analyzer = analyzer or GapAnalyzer()
        self._recommender = recommendation_engine or RecommendationEngine()
        self._summarizer = summary_aggregator or SummaryAggregator()

    # ------------------------------------------------------------------
    # analyze_category_gaps
    # ------------------------------------------------------------------

    def analyze_category_gaps(self, category_id: Any, user_id: Optional[str] = None) -> GapAnalysisResult:
        """Analyse one category end to end and persist its gap records.

        Raises:
            CategoryNotFound: *category_id* does not resolve.
            AnalysisFailure: anything else went wrong; nothing is persisted
                unless the whole record set was written.
        """
        run_id = uuid.uuid4().hex
        logger.info("Starting gap analysis run %s for category %s", run_id, category_id)
        try:
            category = self._store.fetch_category(category_id)
            if category is None:
                raise CategoryNotFound(category_id)

            existing = self._indexer.index(self._store.fetch_existing_content(category_id))
            competitors = aggregate_competitors(self._competitors.fetch_competitors(category_id))
            keywords = self._generator.generate(category["name"])
            candidates = self._estimator.estimate_all(keywords, existing)

            gaps = self._analyzer.analyze(candidates, competitors, existing)
            recommendations = self._recommender.recommend(gaps)
            summary = self._summarizer.summarize(gaps)

            self._store.persist_gap_records(category_id, user_id, run_id, gaps)
        except CategoryNotFound:
            logger.warning("Gap analysis aborted: category %s not found", category_id)
            raise
        except Exception as exc:
            logger.exception("Gap analysis run %s failed for category %s", run_id, category_id)
            raise AnalysisFailure("Failed to analyze content gaps") from exc

        logger.info(
            "Gap analysis run %s complete: %d gaps, %d recommendations, %d high priority",
            run_id, len(gaps), len(recommendations), summary.priority_breakdown.get("high", 0),
        )
        return GapAnalysisResult(
            run_id=run_id,
            category_id=category_id,
            category_name=category["name"],
            gaps=gaps,
            recommendations=recommendations,
            summary=summary,
            competitors=competitors,
        )

    # ------------------------------------------------------------------
    # Stored results
    # ------------------------------------------------------------------

    def get_stored_analysis(self, category_id: Any = None, limit: int = 50) -> list[dict]:
        """Stored gap records, highest opportunity first."""
        if limit <= 0:
            raise ValueError("limit must be positive")
        return self._store.fetch_stored_gap_records(category_id, limit)

    def delete_analysis_result(self, gap_id: int) -> None:
        if self._store.fetch_gap_record(gap_id) is None:
            raise RecordNotFound("Gap analysis", gap_id)
        self._store.delete_gap_records([gap_id])

    def bulk_delete_analysis_results(self, gap_ids: list[int]) -> int:
        if not gap_ids:
            raise ValueError("IDs list is required")
        return self._store.delete_gap_records(list(gap_ids))

    def get_analysis_statistics(self, category_id: Any = None) -> dict:
        """Counts and totals over stored records, plus a completion rate."""
        stats = self._store.gap_statistics(category_id)
        total = stats["total_recommendations"]
        stats["completion_rate"] = (
            round(stats["completed_recommendations"] / total * 100) if total else 0
        )
        return stats

    def export_analysis_csv(self, category_id: Any = None, limit: int = 1000) -> str:
        """Stored gap records as CSV text, every cell quoted."""
        rows = self.get_stored_analysis(category_id, limit)
        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for row in rows:
            analysis_date = row.get("analysis_date")
            writer.writerow([
                row["keyword"],
                row["search_volume"],
                row["difficulty"],
                row["competition"],
                row["existing_content_count"],
                row["opportunity"],
                row["recommended_type"],
                row["priority"],
                row["estimated_traffic"],
                row["estimated_revenue"],
                row.get("category_name") or "N/A",
                analysis_date.isoformat() if analysis_date else "",
            ])
        logger.info("Exported %d gap records to CSV", len(rows))
        return buf.getvalue()

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def create_recommendation(
        self,
        gap_analysis_id: int,
        title: str,
        description: str,
        content_type: str,
        target_keywords: Optional[list[str]] = None,
        estimated_word_count: int = 1500,
        estimated_time: int = 120,
        priority: str = "medium",
        assigned_to: Optional[str] = None,
    ) -> dict:
        """Store a hand-written recommendation against a stored gap record."""
        if not title or not description or not content_type:
            raise ValueError("title, description and content_type are required")
        if content_type not in CONTENT_TYPES:
            raise ValueError(f"Unknown content type: {content_type!r}")
        if priority not in PRIORITIES:
            raise ValueError(f"Unknown priority: {priority!r}")
        if self._store.fetch_gap_record(gap_analysis_id) is None:
            raise RecordNotFound("Gap analysis", gap_analysis_id)

        recommendation = ContentRecommendation(
            title=title,
            description=description,
            content_type=content_type,
            target_keywords=list(target_keywords or []),
            estimated_word_count=estimated_word_count,
            estimated_time=estimated_time,
            priority=priority,
            assigned_to=assigned_to,
        )
        return self._store.persist_recommendation(gap_analysis_id, recommendation)

    def promote_gap(self, gap_analysis_id: int, assigned_to: Optional[str] = None) -> dict:
        """Build the standard brief for a stored gap record and store it."""
        row = self._store.fetch_gap_record(gap_analysis_id)
        if row is None:
            raise RecordNotFound("Gap analysis", gap_analysis_id)
        recommendation = self._recommender.build(_record_from_stored(row), assigned_to=assigned_to)
        stored = self._store.persist_recommendation(gap_analysis_id, recommendation)
        logger.info("Promoted gap %d (%s) to recommendation %d", gap_analysis_id, row["keyword"], stored["id"])
        return stored

    def get_recommendations(
        self, status: Optional[str] = None, priority: Optional[str] = None,
    ) -> list[dict]:
        return self._store.fetch_recommendations(status, priority)

    def update_recommendation_status(
        self,
        recommendation_id: int,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        completed_at: Optional[datetime] = None,
    ) -> dict:
        """Change status / assignee; completing stamps ``completed_at`` if not given."""
        if status is not None and status not in RECOMMENDATION_STATUSES:
            raise ValueError(f"Unknown status: {status!r}")
        if status == "completed" and completed_at is None:
            completed_at = datetime.now(timezone.utc)
        updated = self._store.update_recommendation(
            recommendation_id, status=status, assigned_to=assigned_to, completed_at=completed_at,
        )
        if updated is None:
            raise RecordNotFound("Recommendation", recommendation_id)
        return updated
