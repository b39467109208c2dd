"""
Tests for combined search ranking and the SearchIndex lifecycle.
"""

import asyncio
import json
import sqlite3
import threading

import pytest

from moviesearch import search_engine
from moviesearch.data_loader import InMemoryRecordSource, SQLiteRecordSource
from moviesearch.exceptions import IndexBuildError
from moviesearch.index_builder import build_index
from moviesearch.models import EntityKind
from moviesearch.search_engine import SearchIndex, combined_search


class FailingSource:
	"""Record source whose backing store is unreachable."""

	async def fetch_movies(self):
		raise sqlite3.OperationalError("unable to open database file")

	async def fetch_people(self):
		raise sqlite3.OperationalError("unable to open database file")


def ids(records):
	return [r.id for r in records]


# --- combined_search ---------------------------------------------------------

def test_exact_phrase_ranks_first():
	index = build_index([(1, "Star Wars"), (2, "Star Trek")], EntityKind.MOVIE)
	results = combined_search("Star Wars", index)
	assert ids(results) == [1, 2]  # 2 arrives through the shared 'star' token


def test_person_found_through_token():
	index = build_index([(5, "Christopher Nolan"), (6, "Nora Ephron")], EntityKind.PERSON)
	results = combined_search("Nolan", index)
	assert results[0].id == 5


def test_fuzzy_only_hit_ranks_after_token_hit():
	index = build_index([(1, "Paws of Fury"), (2, "The Jaws Saga")], EntityKind.MOVIE)
	assert ids(combined_search("paws", index)) == [1, 2]


def test_misspelled_term_found_by_fuzzy_stage():
	index = build_index([(1, "Jaws 2"), (2, "Dune")], EntityKind.MOVIE)
	assert "jawz" not in index.full_labels and "jawz" not in index.tokens
	assert ids(combined_search("Jawz", index)) == [1]


def test_results_capped_and_unique():
	records = [(i, f"Movie {i}") for i in range(1, 31)] + [(100, "Movie"), (101, "movie")]
	index = build_index(records, EntityKind.MOVIE)
	results = combined_search("movie", index)
	assert len(results) == 10
	assert len(set(ids(results))) == len(results)
	assert ids(results)[:2] == [100, 101]
	assert len(combined_search("movie", index, limit=3)) == 3


@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query_returns_nothing(query):
	index = build_index([(1, "Heat")], EntityKind.MOVIE)
	assert combined_search(query, index) == []


# --- SearchIndex lifecycle ---------------------------------------------------

def test_search_before_ready_is_empty(tmp_path, source):
	index = SearchIndex(source, tmp_path / "idx.json")
	assert not index.is_ready
	assert index.search_movies("Heat") == []
	assert index.autocomplete("star") == []


def test_ensure_ready_builds_then_later_instances_load(tmp_path, source):
	path = tmp_path / "idx.json"
	first = SearchIndex(source, path)
	asyncio.run(first.ensure_ready())
	assert first.is_ready and path.exists()
	assert ids(first.search_movies("Heat"))[0] == 3

	# backing store gone: the snapshot alone must be enough
	second = SearchIndex(FailingSource(), path)
	asyncio.run(second.ensure_ready())
	assert ids(second.search_movies("Star Wars"))[0] == 1
	assert ids(second.search_people("Nolan")) == [5]


def test_malformed_snapshot_triggers_rebuild(tmp_path, source):
	path = tmp_path / "idx.json"
	path.write_text("{not json", encoding="utf-8")
	index = SearchIndex(source, path)
	assert index.load() is False
	asyncio.run(index.ensure_ready())
	assert index.is_ready
	assert "movies" in json.loads(path.read_text(encoding="utf-8"))


def test_wrong_shape_snapshot_triggers_rebuild(tmp_path, source):
	path = tmp_path / "idx.json"
	path.write_text(json.dumps({"movies": {}}), encoding="utf-8")
	index = SearchIndex(source, path)
	asyncio.run(index.ensure_ready())
	assert ids(index.search_movies("Heat"))[0] == 3


def test_unreachable_store_is_fatal_without_snapshot(tmp_path):
	missing = tmp_path / "missing.db"
	index = SearchIndex(SQLiteRecordSource(missing), tmp_path / "idx.json")
	with pytest.raises(IndexBuildError):
		asyncio.run(index.ensure_ready())
	assert not missing.exists()
	assert not index.is_ready


def test_failed_rebuild_keeps_previous_index(tmp_path, source):
	path = tmp_path / "idx.json"
	index = SearchIndex(source, path)
	asyncio.run(index.ensure_ready())
	index.source = FailingSource()
	with pytest.raises(IndexBuildError):
		asyncio.run(index.rebuild_index())
	assert ids(index.search_movies("Heat"))[0] == 3


def test_rebuild_drops_removed_records(tmp_path):
	path = tmp_path / "idx.json"
	source = InMemoryRecordSource([(1, "Heat"), (2, "Collateral")], [])
	index = SearchIndex(source, path)
	asyncio.run(index.ensure_ready())
	assert 1 in ids(index.search_movies("Heat"))

	source.movies.remove((1, "Heat"))
	asyncio.run(index.rebuild_index())
	assert 1 not in ids(index.search_movies("Heat"))

	reloaded = SearchIndex(FailingSource(), path)
	assert reloaded.load()
	assert 1 not in ids(reloaded.search_movies("Heat"))


def test_search_all_and_autocomplete(tmp_path, source):
	index = SearchIndex(source, tmp_path / "idx.json")
	asyncio.run(index.ensure_ready())

	found = index.search_all("Nolan")
	assert ids(found["people"]) == [5]
	assert set(found) == {"movies", "people"}

	assert ids(index.autocomplete("star")) == [1, 2, 4]
	assert ids(index.autocomplete("STAR", limit=2)) == [1, 2]
	assert index.autocomplete("") == []


def test_configured_limit_applies(tmp_path):
	source = InMemoryRecordSource([(i, f"Heat {i}") for i in range(20)], [])
	index = SearchIndex(source, tmp_path / "idx.json", limit=4)
	asyncio.run(index.ensure_ready())
	assert len(index.search_movies("heat")) == 4


def test_corrupt_snapshot_values_trigger_rebuild(tmp_path, source):
	path = tmp_path / "idx.json"
	path.write_text(
		'{"movies": {"fullTitles": {"heat": [{"id": 1e999, "title": "Heat"}]}, "tokens": {}},'
		' "people": {"fullNames": {}, "tokens": {}}}',
		encoding="utf-8",
	)
	index = SearchIndex(source, path)
	asyncio.run(index.ensure_ready())
	assert ids(index.search_movies("Heat"))[0] == 3


def test_unreadable_snapshot_path_is_treated_as_absent(tmp_path, source):
	path = tmp_path / "idx.json"
	path.mkdir()
	index = SearchIndex(source, path)
	assert index.load() is False
	assert not index.is_ready


def test_snapshot_write_failure_is_a_build_error(tmp_path, source, monkeypatch):
	def full_disk(*args, **kwargs):
		raise OSError("No space left on device")

	monkeypatch.setattr("moviesearch.search_engine.save_snapshot", full_disk)
	index = SearchIndex(source, tmp_path / "idx.json")
	with pytest.raises(IndexBuildError):
		asyncio.run(index.build())
	assert not index.is_ready


def test_build_runs_index_construction_off_the_event_loop(tmp_path, source, monkeypatch):
	loop_thread = threading.get_ident()
	seen = []
	real_build = search_engine.build_snapshot

	def recording_build(movies, people):
		seen.append(threading.get_ident())
		return real_build(movies, people)

	monkeypatch.setattr(search_engine, "build_snapshot", recording_build)
	index = SearchIndex(source, tmp_path / "idx.json")
	asyncio.run(index.build())
	assert seen and seen[0] != loop_thread
	assert index.is_ready
