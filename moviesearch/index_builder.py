"""
Index building module.
Turns (id, label) pairs from the backing store into full-label and token maps.
"""

# Typing helpers for the public API
from typing import Iterable, List, Tuple  # record pairs and token lists

# Project data structures
from .models import EntityKind, Index, IndexSnapshot, SearchableRecord  # index containers

# Console logging
from loguru import logger  # console logger


def normalize(label: str) -> str:
	"""
	Lowercase only. Whitespace, punctuation and accents are kept as-is,
	so 'pelicula' and 'película' stay distinct keys.
	"""
	return label.lower()


def tokenize(normalized: str) -> List[str]:
	"""Split a normalized label on whitespace, dropping empty tokens."""
	return normalized.split()


def build_index(records: Iterable[Tuple[int, str]], kind: EntityKind) -> Index:
	"""
	Build an Index for one entity kind.
	Records are appended in input order; labels shared by several ids are kept under one key.
	"""
	index = Index(kind=kind)  # empty maps
	for record_id, label in records:
		record = SearchableRecord(id=int(record_id), label=label)  # keep original casing for display
		key = normalize(label)  # lower-cased full label

		# Whole-label entry (no dedup: identically titled movies are legitimate)
		index.full_labels.setdefault(key, []).append(record)

		# One entry per word of the label
		for token in tokenize(key):
			index.tokens.setdefault(token, []).append(record)

	logger.debug(
		f"[Index] Built {kind.value} index | labels={len(index.full_labels)} tokens={len(index.tokens)} records={index.record_count()}"
	)
	return index


def build_snapshot(
	movies: Iterable[Tuple[int, str]],
	people: Iterable[Tuple[int, str]],
) -> IndexSnapshot:
	"""Build both indexes from the movie and person record pairs."""
	return IndexSnapshot(
		movies=build_index(movies, EntityKind.MOVIE),
		people=build_index(people, EntityKind.PERSON),
	)
