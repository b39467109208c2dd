"""
Lookup strategies over an Index.
Each matcher is independent; the search engine merges them in priority order.
"""

from typing import Dict, Iterable, List, Sequence  # type hints

from .distance import within_distance  # edit-distance check
from .models import SearchableRecord  # record type

# Default maximum edit distance for fuzzy matches
DEFAULT_THRESHOLD = 2


def dedupe_by_id(records: Iterable[SearchableRecord]) -> List[SearchableRecord]:
	"""Drop repeated ids, keeping the first occurrence and its position."""
	seen = set()  # ids already emitted
	unique: List[SearchableRecord] = []  # ordered output
	for record in records:
		if record.id in seen:
			continue
		seen.add(record.id)
		unique.append(record)
	return unique


def phrase_match(
	query: str,
	full_labels: Dict[str, List[SearchableRecord]],
	threshold: int = DEFAULT_THRESHOLD,
) -> List[SearchableRecord]:
	"""
	Exact-or-fuzzy whole-label match for a normalized query.
	An exact key hit is returned verbatim and skips the fuzzy scan. Otherwise every key
	within `threshold` edits contributes all of its records, in map order, unranked.
	"""
	exact = full_labels.get(query)
	if exact:
		return list(exact)

	matches: List[SearchableRecord] = []
	for key, records in full_labels.items():
		if within_distance(query, key, threshold):
			matches.extend(records)
	return matches


def token_match(
	terms: Sequence[str],
	tokens: Dict[str, List[SearchableRecord]],
) -> List[SearchableRecord]:
	"""
	Exact per-term token lookup.
	Hits are accumulated term by term, then deduplicated by id (first seen wins).
	Terms with no entry contribute nothing.
	"""
	hits: List[SearchableRecord] = []
	for term in terms:
		hits.extend(tokens.get(term, ()))
	return dedupe_by_id(hits)


def fuzzy_token_match(
	records: Iterable[SearchableRecord],
	query: str,
	threshold: int = DEFAULT_THRESHOLD,
) -> List[SearchableRecord]:
	"""
	Broad fuzzy net: keep a record when ANY word of its label is within `threshold`
	edits of the whole lower-cased query (the query is not split into terms here).
	"""
	lowered = query.lower()
	return [
		record
		for record in records
		if any(within_distance(lowered, word, threshold) for word in record.label.lower().split())
	]
