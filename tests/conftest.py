"""Shared pytest fixtures for GapFinder tests."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure project root is on sys.path so 'gapfinder' is importable.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)


@pytest.fixture()
def store():
    """Provide a store over a fresh in-memory SQLite database.

    Every test gets its own engine, so nothing leaks between tests.
    """
    from gapfinder.store import SQLAlchemyAnalysisStore
    return SQLAlchemyAnalysisStore.from_url("sqlite:///:memory:")


@pytest.fixture()
def empty_category(store):
    """Category "SEO" with no existing posts; returns its id."""
    return store.add_category("SEO")


@pytest.fixture()
def seeded_category(store):
    """Category "SEO" with two existing posts; returns its id."""
    category_id = store.add_category("SEO")
    store.add_post(
        category_id,
        "SEO Guide for Small Teams",
        body="Keyword research, link building and keyword mapping for small teams.",
        view_count=420,
    )
    store.add_post(
        category_id,
        "Technical audits explained",
        body="Crawl budgets, sitemaps and canonical tags. Audits catch crawl problems early.",
        view_count=95,
    )
    return category_id


@pytest.fixture()
def fixed_estimator():
    """Deterministic estimator: volume 4000, competition 20, difficulty 30."""
    from gapfinder.modules.gap_analysis import FixedMetricEstimator
    return FixedMetricEstimator(search_volume=4000, competition=20, difficulty=30)


@pytest.fixture()
def service(store, fixed_estimator):
    """Analysis service wired to the in-memory store and fixed estimator."""
    from gapfinder.modules.gap_analysis import ContentGapAnalysisService
    return ContentGapAnalysisService(store, estimator=fixed_estimator)


@pytest.fixture()
def mock_trends_client():
    """Return a mock GoogleTrendsClient with canned interest values."""
    client = MagicMock()

    def _interest(keywords, timeframe=None, geo=None):
        return {kw: (80.0 if len(kw.split()) == 1 else 20.0) for kw in keywords}

    client.get_average_interest = MagicMock(side_effect=_interest)
    return client
