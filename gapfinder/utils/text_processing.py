"""Text processing utilities for content-gap keyword extraction."""

import re
from collections import Counter

STOP_WORDS = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
    "by", "is", "are", "was", "were", "be", "been", "being", "have", "has",
    "had", "do", "does", "did", "will", "would", "could", "should", "may",
    "might", "can", "this", "that", "these", "those", "a", "an", "as",
})

_NON_WORD = re.compile(r"[^\w\s]")


def count_words(text: str) -> int:
    """Count words in text.

    Args:
        text: Input text.

    Returns:
        Word count.
    """
    return len(text.split())


def is_stop_word(word: str) -> bool:
    """Return True when *word* is one of the fixed English function words."""
    return word in STOP_WORDS


def tokenize(text: str) -> list[str]:
    """Lowercase *text*, drop punctuation, and split on whitespace."""
    return _NON_WORD.sub("", text.lower()).split()


def extract_keywords(text: str, limit: int = 20, min_length: int = 4) -> list[str]:
    """Extract the most frequent content terms from text.

    Tokens shorter than *min_length* characters and stop words are
    discarded.  Ties keep first-occurrence order.

    Args:
        text: Raw text (typically title + body).
        limit: Maximum number of terms returned.
        min_length: Shortest token kept.

    Returns:
        Terms ordered by descending frequency.

    Examples:
        >>> extract_keywords("Python tips: python packaging and testing tips")
        ['python', 'tips', 'packaging', 'testing']
    """
    words = [
        w for w in tokenize(text)
        if len(w) >= min_length and not is_stop_word(w)
    ]
    return [word for word, _ in Counter(words).most_common(limit)]
