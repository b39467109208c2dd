"""
Record loading module.
Fetches the (id, label) pairs the index is built from. The search core only needs
two lists: all movie titles and all person names; how they are fetched is up to the source.
"""

# asyncio moves blocking SQLite work off the event loop
import asyncio  # to_thread
# Standard library SQLite driver (the app's database is a SQLite file)
import sqlite3  # database access
# Pathlib for filesystem-safe paths
from pathlib import Path  # database path
# Typing helpers for the source contract
from typing import List, Protocol, Sequence, Tuple, Union  # type hints

# Console logging
from loguru import logger  # console logger

# A single (id, label) pair: movie_id/title or person_id/person_name
RecordPair = Tuple[int, str]


class RecordSource(Protocol):
	"""Read-only provider of indexable records."""

	async def fetch_movies(self) -> List[RecordPair]:
		...

	async def fetch_people(self) -> List[RecordPair]:
		...


class SQLiteRecordSource:
	"""
	Reads records from the movie database's `movie` and `person` tables.
	The connection is opened read-only, so a missing database file is an error instead of
	silently creating an empty one.
	"""

	MOVIES_SQL = "SELECT movie_id, title FROM movie WHERE title IS NOT NULL ORDER BY movie_id"
	PEOPLE_SQL = "SELECT person_id, person_name FROM person WHERE person_name IS NOT NULL ORDER BY person_id"

	def __init__(self, db_path: Union[str, Path]):
		self.db_path = Path(db_path)  # location of the SQLite file

	def _query(self, sql: str) -> List[RecordPair]:
		"""Run one query on a fresh read-only connection (connections are not shared across threads)."""
		conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
		try:
			rows = conn.execute(sql).fetchall()
		finally:
			conn.close()
		return [(int(row_id), str(label)) for row_id, label in rows]

	async def fetch_movies(self) -> List[RecordPair]:
		rows = await asyncio.to_thread(self._query, self.MOVIES_SQL)
		logger.info(f"[Source] Fetched {len(rows)} movies from {self.db_path}")
		return rows

	async def fetch_people(self) -> List[RecordPair]:
		rows = await asyncio.to_thread(self._query, self.PEOPLE_SQL)
		logger.info(f"[Source] Fetched {len(rows)} people from {self.db_path}")
		return rows


class InMemoryRecordSource:
	"""Serves fixed record lists; handy for tests and for seeding from other loaders."""

	def __init__(self, movies: Sequence[RecordPair] = (), people: Sequence[RecordPair] = ()):
		# Lists are kept by reference so callers can mutate them between rebuilds
		self.movies = movies if isinstance(movies, list) else list(movies)
		self.people = people if isinstance(people, list) else list(people)

	async def fetch_movies(self) -> List[RecordPair]:
		return list(self.movies)

	async def fetch_people(self) -> List[RecordPair]:
		return list(self.people)
