"""
Café Finder Errors

Raised inside the pipeline; SearchEngine.search() converts them into an
empty SearchResponse at its boundary.
"""


class FinderError(Exception):
    """Base error for the answer engine."""
    pass


class CorpusLoadError(FinderError):
    """A corpus snapshot could not be read or validated."""
    pass


class IndexNotInitializedError(FinderError):
    """An index was queried before IndexSet.initialize() completed."""
    pass
