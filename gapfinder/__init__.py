"""GapFinder -- content-gap analysis and content recommendations per category."""

__version__ = "1.0.0"
