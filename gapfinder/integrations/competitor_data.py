"""Competitor data providers for gap analysis.

A provider returns one ``CompetitorSnapshot`` per competing domain.  The
static provider ships a fixed fixture; a live SEO-data integration only
needs to implement ``fetch_competitors``.
"""

import logging
from abc import ABC, abstractmethod
from statistics import mean
from typing import Any, Iterable, Optional

from gapfinder.schemas import CompetitorAggregate, CompetitorSnapshot

logger = logging.getLogger(__name__)

DEFAULT_COMPETITORS = (
    {"domain": "competitor1.com", "content_count": 150, "avg_ranking": 8.5},
    {"domain": "competitor2.com", "content_count": 89, "avg_ranking": 7.2},
    {"domain": "competitor3.com", "content_count": 234, "avg_ranking": 9.1},
)


class CompetitorDataProvider(ABC):
    """Source of competitor snapshots for a category."""

    @abstractmethod
    def fetch_competitors(self, category_id: Any) -> list[CompetitorSnapshot]:
        """Return the competitors for *category_id* (may be empty)."""


class StaticCompetitorProvider(CompetitorDataProvider):
    """Returns the same fixture for every category."""

    def __init__(self, competitors: Optional[Iterable[dict]] = None):
        rows = DEFAULT_COMPETITORS if competitors is None else competitors
        self._competitors = [CompetitorSnapshot(**row) for row in rows]

    def fetch_competitors(self, category_id: Any) -> list[CompetitorSnapshot]:
        return list(self._competitors)


def aggregate_competitors(competitors: list[CompetitorSnapshot]) -> CompetitorAggregate:
    """Mean content count, mean ranking, and total content across competitors."""
    if not competitors:
        return CompetitorAggregate()
    aggregate = CompetitorAggregate(
        competitors=list(competitors),
        average_content_count=mean(c.content_count for c in competitors),
        average_ranking=mean(c.avg_ranking for c in competitors),
        total_competition=sum(c.content_count for c in competitors),
    )
    logger.debug(
        "Aggregated %d competitors (total content %d)",
        len(competitors), aggregate.total_competition,
    )
    return aggregate
