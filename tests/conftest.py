"""
Shared fixtures for the search tests.
Makes the project root importable so `api` and `scripts` resolve without installation.
"""

import sqlite3
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from moviesearch.data_loader import InMemoryRecordSource


MOVIES = [
	(1, "Star Wars"),
	(2, "Star Trek"),
	(3, "Heat"),
	(4, "Lone Star"),
	(5, "The Godfather"),
]

PEOPLE = [
	(5, "Christopher Nolan"),
	(6, "Harrison Ford"),
	(7, "Al Pacino"),
]


@pytest.fixture
def source():
	"""Fresh mutable in-memory source per test."""
	return InMemoryRecordSource(list(MOVIES), list(PEOPLE))


@pytest.fixture
def movie_db(tmp_path):
	"""Small SQLite database shaped like the app's movie/person tables."""
	db_path = tmp_path / "movies.db"
	conn = sqlite3.connect(db_path)
	conn.execute("CREATE TABLE movie (movie_id INTEGER PRIMARY KEY, title TEXT)")
	conn.execute("CREATE TABLE person (person_id INTEGER PRIMARY KEY, person_name TEXT)")
	conn.executemany("INSERT INTO movie VALUES (?, ?)", MOVIES + [(99, None)])
	conn.executemany("INSERT INTO person VALUES (?, ?)", PEOPLE)
	conn.commit()
	conn.close()
	return db_path
