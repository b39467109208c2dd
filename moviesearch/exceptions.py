"""
Exception classes raised by the search subsystem.
"""


class SearchIndexError(Exception):
	"""Base class for search index failures."""


class IndexBuildError(SearchIndexError):
	"""
	Raised when the index cannot be materialized from the backing store.
	Fatal at startup: the service cannot answer searches without at least one successful build.
	"""


class SnapshotError(SearchIndexError):
	"""Raised when a persisted snapshot is corrupt, partial, or has an unexpected shape."""


__all__ = [
	'SearchIndexError',
	'IndexBuildError',
	'SnapshotError',
]
