"""Configuration settings for the search service."""

import os
import sys
from dataclasses import dataclass, fields

from loguru import logger

ENV_PREFIX = "MOVIESEARCH_"


@dataclass
class Settings:
	"""Main configuration class."""

	# Data paths
	DB_PATH: str = "movies.db"
	SNAPSHOT_PATH: str = "search_index.json"

	# Search parameters
	SEARCH_LIMIT: int = 10
	FUZZY_THRESHOLD: int = 2
	AUTOCOMPLETE_LIMIT: int = 10

	# Logging
	LOG_LEVEL: str = "INFO"

	@classmethod
	def from_env(cls) -> "Settings":
		"""Create settings from environment variables (MOVIESEARCH_<FIELD>)."""
		settings = cls()

		for f in fields(settings):
			env_var = f"{ENV_PREFIX}{f.name}"
			if env_var in os.environ:
				value = os.environ[env_var]
				field_type = type(getattr(settings, f.name))
				if field_type == int:
					setattr(settings, f.name, int(value))
				else:
					setattr(settings, f.name, value)

		return settings


def configure_logging(level: str) -> None:
	"""Route loguru output to stderr at the configured level."""
	logger.remove()
	logger.add(sys.stderr, level=level.upper())
