"""
Snapshot persistence module.
Saves both indexes to a single JSON file and loads them back without rebuilding.
"""

# JSON is the on-disk format: nested mapping of str -> [{id, title|name}]
import json  # serialize/deserialize
# os.replace gives an atomic swap of the finished file over the old one
import os  # atomic rename
# Pathlib for robust path handling when saving/loading
from pathlib import Path  # filesystem paths
# Typing hints for clarity of public API
from typing import Dict, List, Union  # type hints

# Project data structures and errors
from .exceptions import SnapshotError  # malformed snapshot
from .models import EntityKind, Index, IndexSnapshot, SearchableRecord  # index containers

# Console logging
from loguru import logger  # console logger


def _index_to_dict(index: Index) -> Dict[str, Dict[str, List[Dict[str, object]]]]:
	"""Convert one Index into its JSON-ready nested mapping."""
	kind = index.kind
	return {
		kind.full_labels_key: {
			key: [r.to_dict(kind) for r in records] for key, records in index.full_labels.items()
		},
		'tokens': {
			key: [r.to_dict(kind) for r in records] for key, records in index.tokens.items()
		},
	}


def snapshot_to_dict(snapshot: IndexSnapshot) -> Dict[str, object]:
	"""Serialize both indexes; this is the format documented for snapshot files."""
	return {
		EntityKind.MOVIE.snapshot_key: _index_to_dict(snapshot.movies),
		EntityKind.PERSON.snapshot_key: _index_to_dict(snapshot.people),
	}


def _parse_records(raw: object, kind: EntityKind) -> Dict[str, List[SearchableRecord]]:
	"""Parse a str -> [{id, label_field}] map, validating its shape as we go."""
	if not isinstance(raw, dict):
		raise SnapshotError(f"Expected an object of {kind.value} entries, got {type(raw).__name__}")
	parsed: Dict[str, List[SearchableRecord]] = {}
	for key, entries in raw.items():
		if not isinstance(entries, list):
			raise SnapshotError(f"Entry '{key}' of the {kind.value} index is not a list")
		records = []
		for entry in entries:
			try:
				records.append(SearchableRecord(id=int(entry['id']), label=str(entry[kind.label_field])))
			except (KeyError, TypeError, ValueError, OverflowError) as e:
				raise SnapshotError(f"Bad record under '{key}' in the {kind.value} index: {entry!r}") from e
		parsed[key] = records
	return parsed


def _index_from_dict(raw: object, kind: EntityKind) -> Index:
	"""Rebuild one Index from its nested mapping."""
	if not isinstance(raw, dict):
		raise SnapshotError(f"Missing or invalid '{kind.snapshot_key}' section")
	if kind.full_labels_key not in raw or 'tokens' not in raw:
		raise SnapshotError(f"Section '{kind.snapshot_key}' lacks '{kind.full_labels_key}' or 'tokens'")
	return Index(
		kind=kind,
		full_labels=_parse_records(raw[kind.full_labels_key], kind),
		tokens=_parse_records(raw['tokens'], kind),
	)


def snapshot_from_dict(data: object) -> IndexSnapshot:
	"""Inverse of snapshot_to_dict; raises SnapshotError on any shape mismatch."""
	if not isinstance(data, dict):
		raise SnapshotError("Snapshot root must be a JSON object")
	return IndexSnapshot(
		movies=_index_from_dict(data.get(EntityKind.MOVIE.snapshot_key), EntityKind.MOVIE),
		people=_index_from_dict(data.get(EntityKind.PERSON.snapshot_key), EntityKind.PERSON),
	)


def save_snapshot(snapshot: IndexSnapshot, filepath: Union[str, Path]) -> Path:
	"""
	Persist both indexes to `filepath`.
	The JSON is written to a sibling temp file first and then swapped in with os.replace,
	so a crash mid-write never corrupts a previously valid snapshot.
	"""
	filepath = Path(filepath)  # coerce to Path
	filepath.parent.mkdir(parents=True, exist_ok=True)  # ensure directory exists
	tmp = filepath.with_name(filepath.name + '.tmp')  # same directory keeps the rename atomic
	try:
		with open(tmp, 'w', encoding='utf-8') as f:
			json.dump(snapshot_to_dict(snapshot), f, ensure_ascii=False)
			f.flush()
			os.fsync(f.fileno())  # data on disk before the swap
		os.replace(str(tmp), str(filepath))
	finally:
		if tmp.exists():  # only left behind when the write or swap failed
			tmp.unlink()
	logger.info(
		f"[Snapshot] Saved index to {filepath} | movies={snapshot.movies.record_count()} people={snapshot.people.record_count()}"
	)
	return filepath


def load_snapshot(filepath: Union[str, Path]) -> IndexSnapshot:
	"""
	Load a previously saved snapshot.
	Raises FileNotFoundError if absent and SnapshotError if the file is corrupt or partial.
	"""
	filepath = Path(filepath)  # coerce to Path
	if not filepath.exists():
		raise FileNotFoundError(f"Snapshot file not found: {filepath}")

	try:
		with open(filepath, 'r', encoding='utf-8') as f:
			data = json.load(f)
	except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
		raise SnapshotError(f"Snapshot {filepath} is not valid JSON: {e}") from e

	snapshot = snapshot_from_dict(data)
	logger.info(
		f"[Snapshot] Loaded index from {filepath} | movies={snapshot.movies.record_count()} people={snapshot.people.record_count()}"
	)
	return snapshot
