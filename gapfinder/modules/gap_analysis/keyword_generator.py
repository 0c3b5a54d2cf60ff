"""Candidate keyword generation from a category name."""

import logging

logger = logging.getLogger(__name__)

BASE_TEMPLATES = (
    "{name}",
    "{name} guide",
    "{name} tutorial",
    "{name} tips",
    "{name} best practices",
    "how to {name}",
    "{name} examples",
    "{name} for beginners",
)

LONG_TAIL_MODIFIERS = (
    "2024", "latest", "complete", "comprehensive", "ultimate",
    "step by step", "detailed", "advanced", "professional",
    "free", "online", "digital", "modern", "effective",
)


class KeywordGenerator:
    """Expand a category name into a candidate keyword universe.

    No external calls are made; the universe is a fixed set of base
    templates plus their long-tail variants.

    Usage::

        gen = KeywordGenerator()
        keywords = gen.generate("SEO")
    """

    def __init__(self, long_tail_limit: int = 50, deduplicate: bool = False):
        self.long_tail_limit = long_tail_limit
        self.deduplicate = deduplicate

    def base_keywords(self, category_name: str) -> list[str]:
        """Fill the eight base templates with *category_name*."""
        name = category_name.strip()
        if not name:
            raise ValueError("Category name must not be empty")
        return [t.format(name=name) for t in BASE_TEMPLATES]

    def long_tail_keywords(self, base_keywords: list[str]) -> list[str]:
        """Append every modifier to every base keyword, keeping the first N.

        Generation order is base-major, so the first base keyword receives
        all fourteen modifiers before the second receives any.
        """
        long_tail = [
            base + " " + modifier
            for base in base_keywords
            for modifier in LONG_TAIL_MODIFIERS
        ]
        return long_tail[: self.long_tail_limit]

    def generate(self, category_name: str) -> list[str]:
        """Return base keywords followed by long-tail keywords."""
        base = self.base_keywords(category_name)
        keywords = base + self.long_tail_keywords(base)
        if self.deduplicate:
            before = len(keywords)
            keywords = list(dict.fromkeys(keywords))
            logger.debug("Deduplicated candidates: %d -> %d", before, len(keywords))
        logger.info(
            "Generated %d candidate keywords for category %r",
            len(keywords), category_name,
        )
        return keywords
