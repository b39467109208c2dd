"""
Data models for the movie search index.
Defines the records, index structures, and snapshot container shared across the system.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Enum gives the two entity kinds a fixed, named set of values
from enum import Enum  # movie | person
# Import typing helpers for precise and self-documenting types
from typing import Dict, List  # maps and ordered sequences


class EntityKind(Enum):
	"""
	The two kinds of things we index.
	Each kind knows how its label is named on the wire and where its full-label map lives in a snapshot.
	"""
	MOVIE = 'movie'
	PERSON = 'person'

	@property
	def label_field(self) -> str:
		"""Serialized name of the label field ('title' for movies, 'name' for people)."""
		return 'title' if self is EntityKind.MOVIE else 'name'

	@property
	def full_labels_key(self) -> str:
		"""Snapshot key holding the full-label map of this kind."""
		return 'fullTitles' if self is EntityKind.MOVIE else 'fullNames'

	@property
	def snapshot_key(self) -> str:
		"""Top-level snapshot key of this kind's index."""
		return 'movies' if self is EntityKind.MOVIE else 'people'


@dataclass(frozen=True)
class SearchableRecord:
	"""
	A single searchable entity: a movie title or a person name, exactly as stored.
	Identity across the system is by id; the label is only used for display and matching.
	"""
	id: int  # movie_id or person_id from the backing store
	label: str  # title or person name, original casing

	def to_dict(self, kind: EntityKind) -> Dict[str, object]:
		"""Serialize using the kind's label field name, e.g. {'id': 1, 'title': 'Alien'}."""
		return {'id': self.id, kind.label_field: self.label}


@dataclass
class Index:
	"""
	Inverted index for one entity kind.
	- full_labels: normalized full label -> records sharing that label
	- tokens: normalized word -> records whose label contains that word
	"""
	kind: EntityKind  # movie or person
	full_labels: Dict[str, List[SearchableRecord]] = field(default_factory=dict)  # whole-phrase lookups
	tokens: Dict[str, List[SearchableRecord]] = field(default_factory=dict)  # per-word lookups

	def flattened(self) -> List[SearchableRecord]:
		"""
		All records reachable through the token map, in map order.
		A record appears once per word of its label; callers dedupe by id.
		"""
		return [record for records in self.tokens.values() for record in records]

	def record_count(self) -> int:
		"""Number of indexed records (each full-label entry counts once)."""
		return sum(len(records) for records in self.full_labels.values())


@dataclass
class IndexSnapshot:
	"""
	Point-in-time pair of indexes (movies, people).
	Immutable once built: a change in the backing store requires a full rebuild.
	"""
	movies: Index  # title index
	people: Index  # person-name index
