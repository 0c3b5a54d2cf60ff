"""Keyword metric estimators: search volume, difficulty, and competition.

``MetricEstimator`` is the seam for plugging in a real keyword-data
source.  Difficulty and existing-content overlap are deterministic and
shared by every implementation; volume and competition baselines are
supplied by the subclass.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from gapfinder.schemas import ExistingContentItem, KeywordCandidate
from gapfinder.utils.text_processing import count_words

logger = logging.getLogger(__name__)

MAX_SEARCH_VOLUME = 10000
VOLUME_DAMPENING = (0.3, 0.6)
COMPETITION_DAMPENING = (0.4, 0.7)


def long_tail_factor(keyword: str, factors: tuple[float, float]) -> float:
    """Scale factor for long-tail keywords.

    ``factors[0]`` applies above three words, ``factors[1]`` above two,
    otherwise the baseline is left unscaled.
    """
    words = count_words(keyword)
    if words > 3:
        return factors[0]
    if words > 2:
        return factors[1]
    return 1.0


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _matches(keyword: str, item: ExistingContentItem) -> bool:
    needle = keyword.lower()
    return any(needle in k.lower() for k in item.keywords)


class MetricEstimator(ABC):
    """Assigns search volume, difficulty, and competition to keywords."""

    def prepare(self, keywords: list[str]) -> None:
        """Hook called once per run with every candidate before estimation."""

    @abstractmethod
    def search_volume(self, keyword: str) -> int:
        """Estimated monthly searches, >= 0."""

    @abstractmethod
    def competition(self, keyword: str) -> int:
        """Estimated competition, 0-100."""

    def difficulty(self, keyword: str, existing: list[ExistingContentItem]) -> int:
        """Word count x 10 plus 15 per existing item already covering the keyword."""
        existing_matches = sum(1 for item in existing if _matches(keyword, item))
        return int(clamp(count_words(keyword) * 10 + existing_matches * 15))

    def existing_content_count(self, keyword: str, existing: list[ExistingContentItem]) -> int:
        """Items matching by extracted keyword or by title substring."""
        needle = keyword.lower()
        return sum(
            1 for item in existing
            if _matches(keyword, item) or needle in item.title.lower()
        )

    def estimate(self, keyword: str, existing: list[ExistingContentItem]) -> KeywordCandidate:
        return KeywordCandidate(
            keyword=keyword,
            search_volume=max(0, int(self.search_volume(keyword))),
            difficulty=int(clamp(self.difficulty(keyword, existing))),
            competition=int(clamp(self.competition(keyword))),
            existing_content_count=self.existing_content_count(keyword, existing),
        )

    def estimate_all(
        self,
        keywords: Iterable[str],
        existing: list[ExistingContentItem],
    ) -> list[KeywordCandidate]:
        keywords = list(keywords)
        self.prepare(keywords)
        candidates = [self.estimate(kw, existing) for kw in keywords]
        logger.info(
            "%s estimated metrics for %d keywords",
            type(self).__name__, len(candidates),
        )
        return candidates


class SimulatedMetricEstimator(MetricEstimator):
    """Uniform random baselines dampened for long-tail keywords.

    Pass ``seed`` (or your own ``random.Random``) for reproducible runs.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random(seed)

    def search_volume(self, keyword: str) -> int:
        baseline = self._rng.random() * MAX_SEARCH_VOLUME
        return int(baseline * long_tail_factor(keyword, VOLUME_DAMPENING))

    def competition(self, keyword: str) -> int:
        baseline = self._rng.random() * 100
        return int(baseline * long_tail_factor(keyword, COMPETITION_DAMPENING))


class FixedMetricEstimator(MetricEstimator):
    """Deterministic estimator returning the same metrics for every keyword.

    ``difficulty`` overrides the overlap-based formula when given; leave it
    as ``None`` to keep the shared calculation.
    """

    def __init__(
        self,
        search_volume: int = 0,
        competition: int = 0,
        difficulty: Optional[int] = None,
    ):
        self._volume = search_volume
        self._competition = competition
        self._difficulty = difficulty

    def search_volume(self, keyword: str) -> int:
        return self._volume

    def competition(self, keyword: str) -> int:
        return self._competition

    def difficulty(self, keyword: str, existing: list[ExistingContentItem]) -> int:
        if self._difficulty is None:
            return super().difficulty(keyword, existing)
        return self._difficulty


class TrendsMetricEstimator(MetricEstimator):
    """Estimator backed by Google Trends relative interest.

    Interest (0-100, averaged over the timeframe) is scaled to the
    0-10000 volume range.  Competition follows interest, dampened for
    long-tail phrasing the same way the simulated estimator dampens it.

    Google Trends normalises each payload (at most five keywords) to its
    own peak, so interest is relative within a batch only.  Keywords
    fetched in different batches are not on a common scale, and the
    volumes produced here change if the candidate list is regrouped.
    Treat them as a ranking signal, not as absolute search counts.
    """

    def __init__(self, trends_client=None, volume_scale: int = 100):
        if trends_client is None:
            from gapfinder.integrations.google_trends import GoogleTrendsClient
            trends_client = GoogleTrendsClient()
        self._trends = trends_client
        self._volume_scale = volume_scale
        self._interest: dict[str, float] = {}

    def prepare(self, keywords: list[str]) -> None:
        # Interest is per run only; nothing carries over between analyses.
        self._interest = self._trends.get_average_interest(list(dict.fromkeys(keywords)))

    def _interest_for(self, keyword: str) -> float:
        if keyword not in self._interest:
            self._interest.update(self._trends.get_average_interest([keyword]))
        return float(self._interest.get(keyword, 0.0))

    def search_volume(self, keyword: str) -> int:
        return int(self._interest_for(keyword) * self._volume_scale)

    def competition(self, keyword: str) -> int:
        interest = self._interest_for(keyword)
        return int(interest * long_tail_factor(keyword, COMPETITION_DAMPENING))
