"""Rollup statistics over one run's gap records."""

from collections import Counter

from gapfinder.schemas import (
    PRIORITIES,
    AnalysisSummary,
    ContentGapRecord,
)
from gapfinder.utils.helpers import round_half_up


class SummaryAggregator:
    """Compute an ``AnalysisSummary`` for reporting."""

    def summarize(self, gaps: list[ContentGapRecord]) -> AnalysisSummary:
        """Totals, mean difficulty, and per-priority counts.

        An empty run reports zeros rather than failing on the mean.
        """
        counts = Counter(g.priority for g in gaps)
        average_difficulty = (
            sum(g.difficulty for g in gaps) / len(gaps) if gaps else 0.0
        )
        return AnalysisSummary(
            total_opportunities=len(gaps),
            average_difficulty=round_half_up(average_difficulty),
            total_estimated_traffic=sum(g.estimated_traffic for g in gaps),
            total_estimated_revenue=round_half_up(sum(g.estimated_revenue for g in gaps)),
            priority_breakdown={p: counts.get(p, 0) for p in PRIORITIES},
        )
