"""Index existing category content into frequency-ranked keyword lists."""

import logging
from typing import Any, Iterable, Mapping

from gapfinder.schemas import ExistingContentItem
from gapfinder.utils.text_processing import extract_keywords

logger = logging.getLogger(__name__)


class ExistingContentIndexer:
    """Turn raw posts into ``ExistingContentItem`` objects.

    Each item carries the top terms of its title and body so candidate
    keywords can be matched against what the category already covers.
    """

    def __init__(self, max_keywords: int = 20):
        self.max_keywords = max_keywords

    def index_item(self, post: Mapping[str, Any]) -> ExistingContentItem:
        """Index a single post dict (id, title, body, published_at, view_count)."""
        title = post.get("title") or ""
        body = post.get("body") or ""
        return ExistingContentItem(
            id=post.get("id"),
            title=title,
            keywords=extract_keywords(title + " " + body, limit=self.max_keywords),
            published_at=post.get("published_at"),
            view_count=int(post.get("view_count") or 0),
        )

    def index(self, posts: Iterable[Mapping[str, Any]]) -> list[ExistingContentItem]:
        items = [self.index_item(p) for p in posts]
        logger.info("Indexed %d existing content items", len(items))
        return items
