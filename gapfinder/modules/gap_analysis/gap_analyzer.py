"""Gap analyzer -- opportunity scoring, classification, and traffic projection."""

import logging
import math
from typing import Optional

from gapfinder.modules.gap_analysis.metric_estimator import MAX_SEARCH_VOLUME
from gapfinder.schemas import (
    ARTICLE,
    GUIDE,
    HIGH,
    LOW,
    MEDIUM,
    PILLAR,
    TUTORIAL,
    CompetitorAggregate,
    ContentGapRecord,
    ExistingContentItem,
    KeywordCandidate,
)
from gapfinder.utils.text_processing import count_words

logger = logging.getLogger(__name__)

VOLUME_WEIGHT = 0.4
DIFFICULTY_WEIGHT = 0.3
COMPETITION_WEIGHT = 0.3


def calculate_opportunity(
    search_volume: int,
    difficulty: int,
    competition: int,
    clamp_volume: bool = True,
) -> float:
    """Weighted opportunity score on a 0-100 scale.

    Volume counts 40%, inverted difficulty 30%, inverted competition 30%.
    With ``clamp_volume=False`` volumes above 10000 may push the score
    past 100.
    """
    normalized_volume = search_volume / MAX_SEARCH_VOLUME
    if clamp_volume:
        normalized_volume = max(0.0, min(1.0, normalized_volume))
    normalized_difficulty = (100 - difficulty) / 100
    normalized_competition = (100 - competition) / 100
    return (
        normalized_volume * VOLUME_WEIGHT
        + normalized_difficulty * DIFFICULTY_WEIGHT
        + normalized_competition * COMPETITION_WEIGHT
    ) * 100


def determine_content_type(keyword: str, search_volume: int) -> str:
    words = count_words(keyword)
    if search_volume > 5000 and words <= 2:
        return PILLAR
    if search_volume > 2000:
        return ARTICLE
    if words > 3:
        return GUIDE
    return TUTORIAL


def determine_priority(opportunity: float, difficulty: int) -> str:
    if opportunity > 70 and difficulty < 50:
        return HIGH
    if opportunity > 50 and difficulty < 70:
        return MEDIUM
    return LOW


def estimate_traffic(
    search_volume: int,
    difficulty: int,
    click_through_rate: float = 0.10,
) -> int:
    """Monthly visits if the page ranks where its difficulty suggests.

    Ranking position is difficulty / 20 (at least 1); traffic falls off
    with the inverse square root of that position.
    """
    ranking_position = max(1.0, difficulty / 20)
    position_multiplier = 1 / math.sqrt(ranking_position)
    return max(0, math.floor(search_volume * click_through_rate * position_multiplier))


def estimate_revenue(
    traffic: int,
    conversion_rate: float = 0.02,
    average_order_value: float = 50,
) -> float:
    return max(0.0, traffic * conversion_rate * average_order_value)


class GapAnalyzer:
    """Score keyword candidates into ranked ``ContentGapRecord`` objects.

    Usage::

        analyzer = GapAnalyzer()
        gaps = analyzer.analyze(candidates, competitors, existing)
    """

    def __init__(
        self,
        clamp_volume: bool = True,
        click_through_rate: float = 0.10,
        conversion_rate: float = 0.02,
        average_order_value: float = 50,
    ):
        self.clamp_volume = clamp_volume
        self.click_through_rate = click_through_rate
        self.conversion_rate = conversion_rate
        self.average_order_value = average_order_value

    def score(self, candidate: KeywordCandidate) -> ContentGapRecord:
        opportunity = calculate_opportunity(
            candidate.search_volume,
            candidate.difficulty,
            candidate.competition,
            clamp_volume=self.clamp_volume,
        )
        traffic = estimate_traffic(
            candidate.search_volume, candidate.difficulty, self.click_through_rate
        )
        return ContentGapRecord(
            keyword=candidate.keyword,
            search_volume=candidate.search_volume,
            difficulty=candidate.difficulty,
            competition=candidate.competition,
            existing_content_count=candidate.existing_content_count,
            opportunity=opportunity,
            recommended_type=determine_content_type(candidate.keyword, candidate.search_volume),
            priority=determine_priority(opportunity, candidate.difficulty),
            estimated_traffic=traffic,
            estimated_revenue=estimate_revenue(
                traffic, self.conversion_rate, self.average_order_value
            ),
        )

    def analyze(
        self,
        candidates: list[KeywordCandidate],
        competitors: Optional[CompetitorAggregate] = None,
        existing: Optional[list[ExistingContentItem]] = None,
    ) -> list[ContentGapRecord]:
        """Score every candidate and sort by opportunity, highest first.

        ``competitors`` and ``existing`` are accepted so weighting can take
        them into account later; the current formula does not use them.
        """
        if competitors is not None:
            logger.debug(
                "Competitor context: avg content %.1f, avg ranking %.1f, total %d",
                competitors.average_content_count,
                competitors.average_ranking,
                competitors.total_competition,
            )
        gaps = [self.score(c) for c in candidates]
        gaps.sort(key=lambda g: g.opportunity, reverse=True)
        logger.info("Scored %d gap records (existing items: %d)", len(gaps), len(existing or []))
        return gaps
