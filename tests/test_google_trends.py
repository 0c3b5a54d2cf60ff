"""Tests for the pytrends-backed GoogleTrendsClient (TrendReq is patched)."""

from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from gapfinder.integrations.google_trends import GoogleTrendsClient


@pytest.fixture()
def trend_req():
    with patch("gapfinder.integrations.google_trends.TrendReq") as mock_cls:
        yield mock_cls


def _frame(data):
    df = pd.DataFrame(data)
    df["isPartial"] = False
    return df


class TestGoogleTrendsClient:

    def test_average_interest(self, trend_req):
        session = MagicMock()
        session.interest_over_time.return_value = _frame({"seo": [10, 30], "seo tools": [0, 0]})
        trend_req.return_value = session

        client = GoogleTrendsClient(geo="US", requests_per_minute=100)
        result = client.get_average_interest(["seo", "seo tools", "seo audit"])

        assert result == {"seo": 20.0, "seo tools": 0.0, "seo audit": 0.0}
        session.build_payload.assert_called_once_with(
            ["seo", "seo tools", "seo audit"], timeframe="today 12-m", geo="US",
        )

    def test_batches_of_five(self, trend_req):
        session = MagicMock()
        session.interest_over_time.return_value = pd.DataFrame()
        trend_req.return_value = session

        keywords = ["kw%d" % i for i in range(12)]
        result = GoogleTrendsClient(requests_per_minute=100).get_average_interest(keywords)

        assert session.build_payload.call_count == 3
        assert session.build_payload.call_args_list[2].args[0] == ["kw10", "kw11"]
        assert set(result) == set(keywords)
        assert all(v == 0.0 for v in result.values())

    def test_failed_batch_raises(self, trend_req):
        session = MagicMock()
        session.build_payload.side_effect = ConnectionError("429 Too Many Requests")
        trend_req.return_value = session

        with pytest.raises(ConnectionError):
            GoogleTrendsClient(requests_per_minute=100).get_average_interest(["seo", "ppc"])

    def test_failed_fetch_aborts_analysis(self, trend_req, store, empty_category):
        from gapfinder.errors import AnalysisFailure
        from gapfinder.modules.gap_analysis import ContentGapAnalysisService, TrendsMetricEstimator
        session = MagicMock()
        session.build_payload.side_effect = ConnectionError("connection reset")
        trend_req.return_value = session

        estimator = TrendsMetricEstimator(trends_client=GoogleTrendsClient(requests_per_minute=100))
        service = ContentGapAnalysisService(store, estimator=estimator)

        with pytest.raises(AnalysisFailure) as excinfo:
            service.analyze_category_gaps(empty_category, "editor")
        assert isinstance(excinfo.value.__cause__, ConnectionError)
        assert store.fetch_stored_gap_records(empty_category) == []

    def test_timeframe_and_geo_override(self, trend_req):
        session = MagicMock()
        session.interest_over_time.return_value = pd.DataFrame()
        trend_req.return_value = session

        GoogleTrendsClient(geo="US").get_average_interest(["seo"], timeframe="today 3-m", geo="")
        session.build_payload.assert_called_once_with(["seo"], timeframe="today 3-m", geo="")

    def test_trends_estimator_uses_client(self, trend_req):
        from gapfinder.modules.gap_analysis import TrendsMetricEstimator
        session = MagicMock()
        session.interest_over_time.return_value = _frame({"seo": [50, 50]})
        trend_req.return_value = session

        estimator = TrendsMetricEstimator(trends_client=GoogleTrendsClient(requests_per_minute=100))
        candidate = estimator.estimate_all(["seo"], [])[0]
        assert candidate.search_volume == 5000
        assert candidate.competition == 50
