"""SQLAlchemy ORM models; importing this package registers every model on Base.metadata."""

from gapfinder.models.category import (
    Category,
    Post,
)
from gapfinder.models.gap import (
    ContentGapAnalysis,
    ContentGapRecommendation,
)

__all__ = [
    "Category",
    "Post",
    "ContentGapAnalysis",
    "ContentGapRecommendation",
]
