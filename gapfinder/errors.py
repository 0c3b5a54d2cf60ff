"""Exceptions raised by the gap analysis service and store."""


class GapFinderError(Exception):
    """Base class for every GapFinder error."""


class CategoryNotFound(GapFinderError):
    """The requested category id does not resolve."""

    def __init__(self, category_id):
        self.category_id = category_id
        super().__init__(f"Category not found: {category_id}")


class RecordNotFound(GapFinderError):
    """A stored gap record or recommendation id does not resolve."""

    def __init__(self, kind: str, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class AnalysisFailure(GapFinderError):
    """Any other failure while generating, scoring, or persisting an analysis.

    The underlying exception is chained as ``__cause__``.
    """
