"""
Search engine module.
Merges phrase, token, and fuzzy matches into a ranked, deduplicated result list,
and owns the lifecycle of the movie/person index (load, build, rebuild).
"""

import asyncio  # run CPU and file work off the event loop
import sqlite3  # backing-store errors surfaced during a build
from pathlib import Path  # snapshot location
from typing import Dict, List, Optional, Union  # type annotations for clarity

# Import project modules for data structures and components
from .data_loader import RecordSource  # async (id, label) provider
from .exceptions import IndexBuildError, SnapshotError  # lifecycle failures
from .index_builder import build_snapshot, normalize  # index construction
from .matchers import DEFAULT_THRESHOLD, dedupe_by_id, fuzzy_token_match, phrase_match, token_match  # strategies
from .models import Index, IndexSnapshot, SearchableRecord  # core data classes
from .snapshot_store import load_snapshot, save_snapshot  # JSON persistence

# Import loguru for console logging
from loguru import logger  # simple structured logger

# Default number of results returned by the public searches
DEFAULT_LIMIT = 10


def combined_search(
	query: Optional[str],
	index: Index,
	limit: int = DEFAULT_LIMIT,
	threshold: int = DEFAULT_THRESHOLD,
) -> List[SearchableRecord]:
	"""
	Priority-ordered union of the three matchers:
	1) exact-or-fuzzy whole-phrase hits
	2) exact token hits for each query term, minus stage 1
	3) fuzzy word hits for the whole query, minus stages 1 and 2
	The concatenation is deduplicated by id (first occurrence wins) and cut to `limit`.
	"""
	if not query or not query.strip():  # empty input is not an error
		return []

	lowered = normalize(query.strip())  # same normalization as index keys

	# 1) Whole-phrase match
	stage1 = phrase_match(lowered, index.full_labels, threshold)
	taken = {r.id for r in stage1}  # ids already ranked

	# 2) Exact per-term token match
	stage2 = [r for r in token_match(lowered.split(), index.tokens) if r.id not in taken]
	taken.update(r.id for r in stage2)

	# 3) Broad fuzzy net over every indexed record
	stage3 = [r for r in fuzzy_token_match(index.flattened(), lowered, threshold) if r.id not in taken]

	logger.debug(
		f"[Engine] '{query}' on {index.kind.value} | phrase={len(stage1)} token={len(stage2)} fuzzy={len(stage3)}"
	)
	return dedupe_by_id(stage1 + stage2 + stage3)[:limit]


class SearchIndex:
	"""
	High-level search API over the movie and person indexes.
	Constructed explicitly by the application; holds no state outside the instance.
	Until load() or build() succeeds, every search returns an empty list.
	"""

	def __init__(
		self,
		source: RecordSource,  # backing record provider
		snapshot_path: Union[str, Path],  # where the JSON snapshot lives
		limit: int = DEFAULT_LIMIT,  # public search result cap
		threshold: int = DEFAULT_THRESHOLD,  # fuzzy edit-distance cutoff
	):
		self.source = source
		self.snapshot_path = Path(snapshot_path)
		self.limit = limit
		self.threshold = threshold
		self._snapshot: Optional[IndexSnapshot] = None  # swapped in whole, never mutated

	@property
	def is_ready(self) -> bool:
		"""True once an index has been loaded or built."""
		return self._snapshot is not None

	@property
	def snapshot(self) -> Optional[IndexSnapshot]:
		return self._snapshot

	def load(self) -> bool:
		"""
		Load the persisted snapshot.
		Returns False when it is absent or malformed; a malformed file is logged, not raised.
		"""
		try:
			self._snapshot = load_snapshot(self.snapshot_path)
		except FileNotFoundError:
			logger.info(f"[Index] No snapshot at {self.snapshot_path}")
			return False
		except SnapshotError as e:
			logger.warning(f"[Index] Ignoring unreadable snapshot: {e}")
			return False
		except OSError as e:  # path is a directory, unreadable, ...
			logger.warning(f"[Index] Cannot read snapshot at {self.snapshot_path}: {e}")
			return False
		return True

	async def build(self) -> IndexSnapshot:
		"""
		Fetch all records, build both indexes, persist the snapshot, then swap it in.
		Raises IndexBuildError if the backing store cannot be read or the snapshot cannot be written.
		"""
		logger.info("[Index] Building search index from the record source...")
		try:
			movies = await self.source.fetch_movies()
			people = await self.source.fetch_people()
		except (sqlite3.Error, OSError) as e:
			raise IndexBuildError(f"Could not read records from the backing store: {e}") from e

		# Built and written off the event loop; readers keep the old index meanwhile
		snapshot = await asyncio.to_thread(build_snapshot, movies, people)
		try:
			await asyncio.to_thread(save_snapshot, snapshot, self.snapshot_path)
		except OSError as e:
			raise IndexBuildError(f"Could not write snapshot to {self.snapshot_path}: {e}") from e
		self._snapshot = snapshot  # single reference swap
		logger.info(
			f"[Index] Index ready | movies={snapshot.movies.record_count()} people={snapshot.people.record_count()}"
		)
		return snapshot

	async def ensure_ready(self) -> None:
		"""Startup helper: load the snapshot if possible, otherwise build it."""
		if self.load():
			return
		await self.build()

	async def rebuild_index(self) -> None:
		"""Administrative rebuild: discard nothing until the new index is written, then replace it."""
		await self.build()

	def _search(self, query: Optional[str], index_name: str) -> List[SearchableRecord]:
		if self._snapshot is None:
			logger.warning(f"[Index] Search on {index_name} requested but index not ready")
			return []
		index = getattr(self._snapshot, index_name)
		return combined_search(query, index, limit=self.limit, threshold=self.threshold)

	def search_movies(self, query: Optional[str]) -> List[SearchableRecord]:
		"""Ranked movie matches for a free-text title query."""
		return self._search(query, 'movies')

	def search_people(self, query: Optional[str]) -> List[SearchableRecord]:
		"""Ranked actor/director matches for a free-text name query."""
		return self._search(query, 'people')

	def search_all(self, query: Optional[str]) -> Dict[str, List[SearchableRecord]]:
		"""Movies and people for the same query, each ranked independently."""
		return {'movies': self.search_movies(query), 'people': self.search_people(query)}

	def autocomplete(self, term: Optional[str], limit: int = DEFAULT_LIMIT) -> List[SearchableRecord]:
		"""Movies whose lower-cased title contains the term, in index order."""
		if self._snapshot is None or not term or not term.strip():
			return []
		needle = normalize(term.strip())
		hits = (
			record
			for key, records in self._snapshot.movies.full_labels.items()
			if needle in key
			for record in records
		)
		return dedupe_by_id(hits)[:limit]
