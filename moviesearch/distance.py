"""
Edit-distance scoring used by the fuzzy matchers.
"""

# rapidfuzz ships a C implementation of the classic unit-cost Levenshtein distance
from rapidfuzz.distance import Levenshtein  # insert/delete/substitute, no transpositions


def levenshtein(a: str, b: str) -> int:
	"""
	Minimum number of single-character insertions, deletions, or substitutions
	needed to turn `a` into `b`. Distance to or from '' is the other string's length.
	"""
	return Levenshtein.distance(a, b)


def within_distance(a: str, b: str, threshold: int) -> bool:
	"""True when levenshtein(a, b) <= threshold."""
	# score_cutoff lets rapidfuzz stop early; anything past the cutoff comes back as cutoff + 1
	return Levenshtein.distance(a, b, score_cutoff=threshold) <= threshold
