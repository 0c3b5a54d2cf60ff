"""Content gap analysis -- keyword generation, scoring, recommendations, and summaries."""

from gapfinder.modules.gap_analysis.content_indexer import ExistingContentIndexer
from gapfinder.modules.gap_analysis.gap_analyzer import GapAnalyzer
from gapfinder.modules.gap_analysis.keyword_generator import KeywordGenerator
from gapfinder.modules.gap_analysis.metric_estimator import (
    FixedMetricEstimator,
    MetricEstimator,
    SimulatedMetricEstimator,
    TrendsMetricEstimator,
)
from gapfinder.modules.gap_analysis.recommendations import RecommendationEngine
from gapfinder.modules.gap_analysis.service import ContentGapAnalysisService
from gapfinder.modules.gap_analysis.summary import SummaryAggregator

__all__ = [
    "ContentGapAnalysisService",
    "ExistingContentIndexer",
    "FixedMetricEstimator",
    "GapAnalyzer",
    "KeywordGenerator",
    "MetricEstimator",
    "RecommendationEngine",
    "SimulatedMetricEstimator",
    "SummaryAggregator",
    "TrendsMetricEstimator",
]
