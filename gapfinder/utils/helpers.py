"""General-purpose helper utilities."""

import math
import re
import unicodedata


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's ``round`` uses banker's rounding; summaries are reported the
    conventional way instead.

    Examples:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(2.4)
        2
    """
    return math.floor(value + 0.5)


def slugify(text: str, max_length: int = 75) -> str:
    """Convert text to a URL-safe slug.

    Examples:
        >>> slugify("  Best SEO Tools (2025)!  ")
        'best-seo-tools-2025'
    """
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text).strip("-")
    if len(text) > max_length:
        text = text[:max_length].rsplit("-", 1)[0]
    return text


def format_number(n: int | float) -> str:
    """Format a number with human-readable suffixes.

    Examples:
        >>> format_number(1500)
        '1.5K'
        >>> format_number(999)
        '999'
    """
    abs_n = abs(n)
    sign = "-" if n < 0 else ""
    if abs_n >= 1_000_000:
        return f"{sign}{abs_n / 1_000_000:.1f}M"
    if abs_n >= 1_000:
        return f"{sign}{abs_n / 1_000:.1f}K"
    if isinstance(n, float):
        return f"{sign}{abs_n:.1f}"
    return f"{sign}{abs_n}"
