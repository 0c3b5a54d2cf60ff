"""Tests for ContentGapAnalysisService over an in-memory SQLite store.

Covers the end-to-end analysis run, error propagation, stored results,
recommendations, statistics, and CSV export.
"""

import csv
import io
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from gapfinder.errors import AnalysisFailure, CategoryNotFound, RecordNotFound


# ===========================================================================
# 1. End-to-end analysis
# ===========================================================================
class TestAnalyzeCategoryGaps:
    """analyze_category_gaps with deterministic metrics."""

    def test_fixed_metrics_scenario(self, service, empty_category):
        result = service.analyze_category_gaps(empty_category, "editor")

        assert result.category_id == empty_category
        assert result.category_name == "SEO"
        assert len(result.run_id) == 32
        assert len(result.gaps) == 58
        for gap in result.gaps:
            assert gap.opportunity == pytest.approx(61.0)
            assert gap.priority == "medium"
            assert gap.recommended_type == "article"
            assert gap.existing_content_count == 0
            assert gap.estimated_traffic == 326

    def test_fixed_metrics_recommendations(self, service, empty_category):
        result = service.analyze_category_gaps(empty_category, "editor")
        assert len(result.recommendations) == 10
        first = result.recommendations[0]
        assert first.title == "SEO: Everything You Need to Know"
        assert first.target_keywords == ["SEO", "SEO examples", "SEO tips", "SEO best practices"]
        assert first.priority == "medium"
        assert all(len(r.target_keywords) == 4 for r in result.recommendations)

    def test_fixed_metrics_summary(self, service, empty_category):
        summary = service.analyze_category_gaps(empty_category, "editor").summary
        assert summary.total_opportunities == 58
        assert summary.average_difficulty == 30
        assert summary.total_estimated_traffic == 58 * 326
        assert summary.total_estimated_revenue == 58 * 326
        assert summary.priority_breakdown == {"high": 0, "medium": 58, "low": 0}

    def test_competitor_aggregate_in_result(self, service, empty_category):
        result = service.analyze_category_gaps(empty_category)
        assert result.competitors.total_competition == 473
        assert len(result.competitors.competitors) == 3

    def test_existing_content_is_counted(self, store, seeded_category):
        from gapfinder.modules.gap_analysis import ContentGapAnalysisService, SimulatedMetricEstimator
        service = ContentGapAnalysisService(store, estimator=SimulatedMetricEstimator(seed=1))
        result = service.analyze_category_gaps(seeded_category, "editor")
        by_keyword = {g.keyword: g for g in result.gaps}
        assert by_keyword["SEO"].existing_content_count == 1
        assert by_keyword["SEO guide"].existing_content_count == 1
        assert by_keyword["SEO tips"].existing_content_count == 0

    def test_gaps_sorted_and_in_range(self, store, seeded_category):
        from gapfinder.modules.gap_analysis import ContentGapAnalysisService, SimulatedMetricEstimator
        service = ContentGapAnalysisService(store, estimator=SimulatedMetricEstimator(seed=99))
        gaps = service.analyze_category_gaps(seeded_category).gaps
        opportunities = [g.opportunity for g in gaps]
        assert opportunities == sorted(opportunities, reverse=True)
        for g in gaps:
            assert 0 <= g.difficulty <= 100
            assert 0 <= g.competition <= 100
            assert 0 <= g.opportunity <= 100
            assert g.estimated_traffic >= 0
            assert g.estimated_revenue >= 0

    def test_result_to_dict(self, service, empty_category):
        data = service.analyze_category_gaps(empty_category, "editor").to_dict()
        assert set(data) == {
            "run_id", "category_id", "category_name", "gaps",
            "recommendations", "summary", "competitors",
        }
        assert data["summary"]["priority_breakdown"]["medium"] == 58

    def test_unknown_category(self, service, store):
        with pytest.raises(CategoryNotFound) as excinfo:
            service.analyze_category_gaps(999, "editor")
        assert excinfo.value.category_id == 999
        assert store.fetch_stored_gap_records() == []

    def test_estimator_failure_becomes_analysis_failure(self, store, empty_category):
        from gapfinder.modules.gap_analysis import ContentGapAnalysisService
        estimator = MagicMock()
        estimator.estimate_all.side_effect = RuntimeError("keyword API down")
        service = ContentGapAnalysisService(store, estimator=estimator)

        with pytest.raises(AnalysisFailure) as excinfo:
            service.analyze_category_gaps(empty_category, "editor")
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert store.fetch_stored_gap_records() == []

    def test_persist_failure_becomes_analysis_failure(self, fixed_estimator):
        from gapfinder.modules.gap_analysis import ContentGapAnalysisService
        store = MagicMock()
        store.fetch_category.return_value = {"id": 1, "name": "SEO"}
        store.fetch_existing_content.return_value = []
        store.persist_gap_records.side_effect = OSError("disk full")
        service = ContentGapAnalysisService(store, estimator=fixed_estimator)

        with pytest.raises(AnalysisFailure):
            service.analyze_category_gaps(1, "editor")
        store.persist_gap_records.assert_called_once()

    def test_repeated_runs_add_new_rows(self, service, empty_category):
        first = service.analyze_category_gaps(empty_category, "editor")
        second = service.analyze_category_gaps(empty_category, "editor")
        assert first.run_id != second.run_id

        stored = service.get_stored_analysis(empty_category, limit=500)
        assert len(stored) == 116
        assert {row["analysis_run_id"] for row in stored} == {first.run_id, second.run_id}


# ===========================================================================
# 2. Stored results
# ===========================================================================
class TestStoredAnalysis:
    """Reading back and deleting persisted gap records."""

    def test_round_trip_is_ordered_prefix(self, store, empty_category):
        from gapfinder.modules.gap_analysis import ContentGapAnalysisService, SimulatedMetricEstimator
        service = ContentGapAnalysisService(store, estimator=SimulatedMetricEstimator(seed=2024))
        result = service.analyze_category_gaps(empty_category, "editor")

        stored = service.get_stored_analysis(empty_category, limit=20)
        assert [row["keyword"] for row in stored] == [g.keyword for g in result.gaps[:20]]
        assert [row["opportunity"] for row in stored] == [g.opportunity for g in result.gaps[:20]]
        assert all(row["created_by"] == "editor" for row in stored)
        assert all(row["category_name"] == "SEO" for row in stored)

    def test_category_filter(self, service, store):
        seo = store.add_category("SEO")
        ppc = store.add_category("PPC")
        service.analyze_category_gaps(seo)
        service.analyze_category_gaps(ppc)

        rows = service.get_stored_analysis(ppc, limit=100)
        assert len(rows) == 58
        assert {row["category_id"] for row in rows} == {ppc}
        assert len(service.get_stored_analysis(limit=200)) == 116

    def test_limit_must_be_positive(self, service):
        with pytest.raises(ValueError):
            service.get_stored_analysis(limit=0)

    def test_delete_analysis_result(self, service, store, empty_category):
        service.analyze_category_gaps(empty_category)
        gap_id = service.get_stored_analysis(empty_category, limit=1)[0]["id"]

        service.delete_analysis_result(gap_id)
        assert store.fetch_gap_record(gap_id) is None
        with pytest.raises(RecordNotFound):
            service.delete_analysis_result(gap_id)

    def test_bulk_delete(self, service, empty_category):
        service.analyze_category_gaps(empty_category)
        ids = [row["id"] for row in service.get_stored_analysis(empty_category, limit=5)]

        assert service.bulk_delete_analysis_results(ids + [99999]) == 5
        assert len(service.get_stored_analysis(empty_category, limit=100)) == 53

    def test_bulk_delete_requires_ids(self, service):
        with pytest.raises(ValueError):
            service.bulk_delete_analysis_results([])

    def test_delete_cascades_to_recommendations(self, service, empty_category):
        service.analyze_category_gaps(empty_category)
        gap_id = service.get_stored_analysis(empty_category, limit=1)[0]["id"]
        service.promote_gap(gap_id)
        assert len(service.get_recommendations()) == 1

        service.delete_analysis_result(gap_id)
        assert service.get_recommendations() == []


# ===========================================================================
# 3. Recommendations
# ===========================================================================
class TestRecommendations:
    """Creating, listing, and updating stored recommendations."""

    @pytest.fixture()
    def gap_id(self, service, empty_category):
        service.analyze_category_gaps(empty_category, "editor")
        return service.get_stored_analysis(empty_category, limit=1)[0]["id"]

    def test_promote_gap(self, service, gap_id):
        rec = service.promote_gap(gap_id, assigned_to="alice")
        assert rec["gap_analysis_id"] == gap_id
        assert rec["keyword"] == "SEO"
        assert rec["title"] == "SEO: Everything You Need to Know"
        assert rec["content_type"] == "article"
        assert rec["status"] == "pending"
        assert rec["assigned_to"] == "alice"
        assert len(rec["target_keywords"]) == 4

    def test_promote_unknown_gap(self, service):
        with pytest.raises(RecordNotFound):
            service.promote_gap(12345)

    def test_create_recommendation(self, service, gap_id):
        rec = service.create_recommendation(
            gap_id,
            title="SEO checklist",
            description="A one-page checklist.",
            content_type="guide",
            target_keywords=["seo checklist"],
            priority="high",
        )
        assert rec["id"] > 0
        assert rec["estimated_word_count"] == 1500
        assert rec["estimated_time"] == 120
        assert rec["target_keywords"] == ["seo checklist"]

    @pytest.mark.parametrize("overrides", [
        {"title": ""},
        {"content_type": "podcast"},
        {"priority": "urgent"},
    ])
    def test_create_recommendation_validation(self, service, gap_id, overrides):
        kwargs = {"title": "T", "description": "D", "content_type": "article"}
        kwargs.update(overrides)
        with pytest.raises(ValueError):
            service.create_recommendation(gap_id, **kwargs)

    def test_create_recommendation_unknown_gap(self, service):
        with pytest.raises(RecordNotFound):
            service.create_recommendation(4242, "T", "D", "article")

    def test_listing_order_and_filters(self, service, gap_id):
        for priority in ("low", "high", "medium", "high"):
            service.create_recommendation(gap_id, "T " + priority, "D", "article", priority=priority)

        rows = service.get_recommendations()
        assert [r["priority"] for r in rows] == ["high", "high", "medium", "low"]
        # newest first inside a tier
        assert rows[0]["id"] > rows[1]["id"]

        assert [r["priority"] for r in service.get_recommendations(priority="high")] == ["high", "high"]
        assert service.get_recommendations(status="completed") == []

    def test_update_status_completed_stamps_time(self, service, gap_id):
        rec = service.promote_gap(gap_id)
        updated = service.update_recommendation_status(rec["id"], status="completed")
        assert updated["status"] == "completed"
        assert updated["completed_at"] is not None

    def test_update_keeps_unspecified_fields(self, service, gap_id):
        rec = service.promote_gap(gap_id)
        service.update_recommendation_status(rec["id"], status="in_progress")
        updated = service.update_recommendation_status(rec["id"], assigned_to="bob")
        assert updated["status"] == "in_progress"
        assert updated["assigned_to"] == "bob"
        assert updated["completed_at"] is None

    def test_update_explicit_completed_at(self, service, gap_id):
        rec = service.promote_gap(gap_id)
        when = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        updated = service.update_recommendation_status(rec["id"], status="completed", completed_at=when)
        assert updated["completed_at"] == when

    def test_update_validation(self, service, gap_id):
        rec = service.promote_gap(gap_id)
        with pytest.raises(ValueError):
            service.update_recommendation_status(rec["id"], status="archived")
        with pytest.raises(RecordNotFound):
            service.update_recommendation_status(9999, status="completed")


# ===========================================================================
# 4. Statistics and export
# ===========================================================================
class TestStatisticsAndExport:
    """Aggregates over stored rows and the CSV rendering."""

    def test_statistics(self, service, empty_category):
        service.analyze_category_gaps(empty_category)
        rows = service.get_stored_analysis(empty_category, limit=2)
        first = service.promote_gap(rows[0]["id"])
        service.promote_gap(rows[1]["id"])
        service.update_recommendation_status(first["id"], status="completed")

        stats = service.get_analysis_statistics()
        assert stats["total_analyses"] == 58
        assert stats["total_recommendations"] == 2
        assert stats["pending_recommendations"] == 1
        assert stats["completed_recommendations"] == 1
        assert stats["high_priority_gaps"] == 0
        assert stats["total_estimated_traffic"] == 58 * 326
        assert stats["total_estimated_revenue"] == pytest.approx(58 * 326.0)
        assert stats["completion_rate"] == 50

    def test_statistics_category_filter(self, service, store, empty_category):
        other = store.add_category("PPC")
        service.analyze_category_gaps(empty_category)
        gap_id = service.get_stored_analysis(empty_category, limit=1)[0]["id"]
        service.promote_gap(gap_id)

        stats = service.get_analysis_statistics(other)
        assert stats["total_analyses"] == 0
        assert stats["total_recommendations"] == 0
        assert stats["completion_rate"] == 0
        assert service.get_analysis_statistics(empty_category)["total_recommendations"] == 1

    def test_statistics_empty(self, service):
        stats = service.get_analysis_statistics()
        assert stats["total_analyses"] == 0
        assert stats["total_estimated_traffic"] == 0
        assert stats["total_estimated_revenue"] == 0.0
        assert stats["completion_rate"] == 0

    def test_export_csv(self, service, empty_category):
        from gapfinder.modules.gap_analysis.service import CSV_HEADERS
        service.analyze_category_gaps(empty_category)
        text = service.export_analysis_csv(empty_category)

        assert text.splitlines()[0] == ",".join('"%s"' % h for h in CSV_HEADERS)
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0] == CSV_HEADERS
        assert len(rows) == 59
        assert rows[1][0] == "SEO"
        assert rows[1][7] == "medium"
        assert rows[1][10] == "SEO"
        assert isinstance(datetime.fromisoformat(rows[1][11]), datetime)

    def test_export_csv_empty(self, service):
        text = service.export_analysis_csv()
        assert text.count("\n") == 1
