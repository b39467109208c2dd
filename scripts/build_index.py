"""
Build and persist the search index snapshot.

This script:
1) Reads movie titles and person names from the SQLite database
2) Builds the full-label and token indexes for both
3) Saves the snapshot (search_index.json) atomically

Usage:
    python -m scripts.build_index [--db movies.db] [--snapshot search_index.json]

The API loads this snapshot on startup instead of rebuilding from the database.
Run it again whenever the database changes.
"""

import argparse  # command-line overrides
import asyncio  # drive the async build
import sys  # exit status
import time  # measure step timings

from loguru import logger  # console logging

from moviesearch.config import Settings, configure_logging  # env-driven settings
from moviesearch.data_loader import SQLiteRecordSource  # database reader
from moviesearch.exceptions import IndexBuildError  # build failures
from moviesearch.search_engine import SearchIndex  # index lifecycle


def parse_args(argv=None) -> argparse.Namespace:
	settings = Settings.from_env()  # defaults come from the environment
	parser = argparse.ArgumentParser(description="Rebuild the movie/person search index snapshot")
	parser.add_argument("--db", default=settings.DB_PATH, help="path to the SQLite movie database")
	parser.add_argument("--snapshot", default=settings.SNAPSHOT_PATH, help="where to write the JSON snapshot")
	parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="loguru level")
	return parser.parse_args(argv)


def main(argv=None) -> int:
	args = parse_args(argv)
	configure_logging(args.log_level)

	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Build Search Index")
	logger.info("=" * 60)

	index = SearchIndex(SQLiteRecordSource(args.db), args.snapshot)
	t0 = time.time()  # start timer
	try:
		asyncio.run(index.rebuild_index())
	except IndexBuildError as e:
		logger.error(f"[FAIL] {e}")
		return 1

	snapshot = index.snapshot
	logger.info(
		f"[OK] Indexed {snapshot.movies.record_count()} movies and {snapshot.people.record_count()} people in {time.time() - t0:.2f}s"
	)
	logger.info(f"[OK] Snapshot written to {args.snapshot}")
	logger.info("=" * 60)
	return 0


if __name__ == '__main__':
	sys.exit(main())  # invoke builder
