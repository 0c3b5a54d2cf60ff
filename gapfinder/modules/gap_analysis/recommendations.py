"""Turn top gap records into content briefs."""

import logging
from typing import Optional

from gapfinder.schemas import (
    ARTICLE,
    GUIDE,
    PILLAR,
    TUTORIAL,
    ContentGapRecord,
    ContentRecommendation,
)

logger = logging.getLogger(__name__)

TITLE_TEMPLATES = {
    PILLAR: "Complete Guide to {keyword}",
    ARTICLE: "{keyword}: Everything You Need to Know",
    GUIDE: "How to {keyword}: Step-by-Step Guide",
    TUTORIAL: "{keyword} Tutorial for Beginners",
}

DESCRIPTION_TEMPLATES = {
    PILLAR: (
        "Comprehensive guide covering all aspects of {keyword}. "
        "Learn best practices, tips, and strategies."
    ),
    ARTICLE: (
        "Discover everything about {keyword}. "
        "From basics to advanced techniques, this article covers it all."
    ),
    GUIDE: "Step-by-step guide to {keyword}. Perfect for beginners and intermediate users.",
    TUTORIAL: (
        "Learn {keyword} from scratch with this detailed tutorial. "
        "Includes examples and practical exercises."
    ),
}

RELATED_SUFFIXES = ("examples", "tips", "best practices", "tutorial", "guide")

# content type -> (word count, minutes to produce)
EFFORT = {
    PILLAR: (3000, 240),
    ARTICLE: (1500, 120),
    GUIDE: (2000, 180),
    TUTORIAL: (1200, 90),
}
DEFAULT_EFFORT = (1500, 120)

MAX_RECOMMENDATIONS = 10


class RecommendationEngine:
    """Build ``ContentRecommendation`` briefs from ranked gap records.

    Usage::

        engine = RecommendationEngine()
        recs = engine.recommend(gaps)  # top 10 only
    """

    def __init__(self, max_recommendations: int = MAX_RECOMMENDATIONS, related_count: int = 3):
        if not 1 <= max_recommendations <= MAX_RECOMMENDATIONS:
            raise ValueError(
                f"max_recommendations must be between 1 and {MAX_RECOMMENDATIONS}, got {max_recommendations}"
            )
        self.max_recommendations = max_recommendations
        self.related_count = related_count

    def generate_title(self, keyword: str, content_type: str) -> str:
        template = TITLE_TEMPLATES.get(content_type, TITLE_TEMPLATES[PILLAR])
        return template.format(keyword=keyword)

    def generate_description(self, keyword: str, content_type: str) -> str:
        template = DESCRIPTION_TEMPLATES.get(
            content_type, "Learn about {keyword} with our comprehensive guide."
        )
        return template.format(keyword=keyword)

    def related_keywords(self, keyword: str) -> list[str]:
        return [keyword + " " + s for s in RELATED_SUFFIXES][: self.related_count]

    def build(
        self,
        record: ContentGapRecord,
        assigned_to: Optional[str] = None,
    ) -> ContentRecommendation:
        """Brief for a single gap record."""
        word_count, minutes = EFFORT.get(record.recommended_type, DEFAULT_EFFORT)
        return ContentRecommendation(
            title=self.generate_title(record.keyword, record.recommended_type),
            description=self.generate_description(record.keyword, record.recommended_type),
            content_type=record.recommended_type,
            target_keywords=[record.keyword] + self.related_keywords(record.keyword),
            estimated_word_count=word_count,
            estimated_time=minutes,
            priority=record.priority,
            assigned_to=assigned_to,
        )

    def recommend(self, gaps: list[ContentGapRecord]) -> list[ContentRecommendation]:
        """Briefs for the leading records of an opportunity-sorted list."""
        recommendations = [self.build(g) for g in gaps[: self.max_recommendations]]
        logger.info("Built %d content recommendations", len(recommendations))
        return recommendations
