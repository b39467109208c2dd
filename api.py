"""
FastAPI server exposing the movie/person search API.
Endpoints:
- GET /health: basic health check
- GET /search/movies?q=...: ranked movie matches
- GET /search/people?q=...: ranked actor/director matches
- GET /search?q=...: both lists at once
- GET /autocomplete?term=...: movie titles containing the term
- POST /admin/rebuild: force a fresh index build and snapshot write

Startup loads the saved snapshot (search_index.json) if available,
otherwise builds the index from the movie database and saves it.
"""

# Import standard libraries for timing
import time  # measure startup and request latencies
from typing import List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for response models
from fastapi import FastAPI, HTTPException, Query  # FastAPI primitives
from pydantic import BaseModel  # response schema definitions

# Import our internal modules for configuration and search
from moviesearch.config import Settings, configure_logging  # env-driven settings
from moviesearch.data_loader import RecordSource, SQLiteRecordSource  # record providers
from moviesearch.exceptions import IndexBuildError  # build failures
from moviesearch.models import SearchableRecord  # result records
from moviesearch.search_engine import SearchIndex  # core search index

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger


# Pydantic model that describes a single matched movie or person
class RecordOut(BaseModel):
	id: int  # movie_id or person_id
	label: str  # title or name as stored


# Pydantic model for a single-kind search response payload
class SearchResponse(BaseModel):
	query: str  # original query string
	kind: str  # 'movie' or 'person'
	elapsed_ms: float  # server-side search time in ms
	results: List[RecordOut]  # ranked items


# Pydantic model for the combined movies + people response
class CombinedSearchResponse(BaseModel):
	query: str  # original query string
	elapsed_ms: float  # server-side search time in ms
	movies: List[RecordOut]  # ranked movies
	people: List[RecordOut]  # ranked people


# Pydantic model returned after an administrative rebuild
class RebuildResponse(BaseModel):
	movies: int  # indexed movie records
	people: int  # indexed person records
	elapsed_seconds: float  # build duration


def _to_out(records: List[SearchableRecord]) -> List[RecordOut]:
	"""Convert engine records to response schema."""
	return [RecordOut(id=r.id, label=r.label) for r in records]


def create_app(settings: Optional[Settings] = None, source: Optional[RecordSource] = None) -> FastAPI:
	"""
	Composition root: wires settings, record source, and the SearchIndex into a FastAPI app.
	Tests pass their own settings/source; production uses environment settings and the SQLite database.
	"""
	settings = settings or Settings.from_env()  # env-based configuration
	source = source or SQLiteRecordSource(settings.DB_PATH)  # default backing store

	# Instantiate the FastAPI application with metadata
	app = FastAPI(title="Movie Search API", version="1.0.0")  # web app
	app.state.settings = settings
	app.state.search_index = SearchIndex(
		source,
		settings.SNAPSHOT_PATH,
		limit=settings.SEARCH_LIMIT,
		threshold=settings.FUZZY_THRESHOLD,
	)
	app.state.startup_seconds = 0.0  # measures how long startup took

	# FastAPI startup hook to make the index ready once
	@app.on_event("startup")
	async def startup_event():
		"""Load or build the index; a failed build aborts startup."""
		configure_logging(settings.LOG_LEVEL)  # apply configured level
		start = time.time()  # start timer for startup latency
		logger.info("[API] Startup: loading search index...")  # log intent

		await app.state.search_index.ensure_ready()  # raises IndexBuildError if the DB is unreachable

		app.state.startup_seconds = time.time() - start  # elapsed seconds
		logger.info(f"[API] Startup complete in {app.state.startup_seconds:.2f}s")  # summary log

	# Simple health endpoint for readiness checks
	@app.get("/health")
	async def health():
		"""Return minimal health info for liveness/readiness probes."""
		index: SearchIndex = app.state.search_index
		snapshot = index.snapshot
		return {
			"status": "ok",  # constant indicator
			"index_ready": index.is_ready,  # True if index loaded or built
			"startup_seconds": round(app.state.startup_seconds, 2),  # startup latency
			"movies": snapshot.movies.record_count() if snapshot else 0,
			"people": snapshot.people.record_count() if snapshot else 0,
		}

	def _single_kind(q: str, kind: str) -> SearchResponse:
		index: SearchIndex = app.state.search_index
		start = time.time()  # start timer
		logger.debug(f"[API] /search/{kind} q='{q}'")  # debug log of input
		results = index.search_movies(q) if kind == "movie" else index.search_people(q)
		elapsed_ms = (time.time() - start) * 1000  # compute ms
		logger.info(f"[API] /search {kind} served {len(results)} results in {elapsed_ms:.2f} ms")  # summary
		return SearchResponse(query=q, kind=kind, elapsed_ms=round(elapsed_ms, 2), results=_to_out(results))

	@app.get("/search/movies", response_model=SearchResponse)
	async def search_movies(q: str = Query("", description="Movie title query")):
		"""Ranked movie matches; an empty query yields an empty list."""
		return _single_kind(q, "movie")

	@app.get("/search/people", response_model=SearchResponse)
	async def search_people(q: str = Query("", description="Actor or director name query")):
		"""Ranked person matches; an empty query yields an empty list."""
		return _single_kind(q, "person")

	@app.get("/search", response_model=CombinedSearchResponse)
	async def search_all(q: str = Query("", description="Title or name query")):
		"""Movies and people matching the same query."""
		index: SearchIndex = app.state.search_index
		start = time.time()
		found = index.search_all(q)
		elapsed_ms = (time.time() - start) * 1000
		return CombinedSearchResponse(
			query=q,
			elapsed_ms=round(elapsed_ms, 2),
			movies=_to_out(found["movies"]),
			people=_to_out(found["people"]),
		)

	@app.get("/autocomplete", response_model=List[RecordOut])
	async def autocomplete(term: str = Query("", description="Partial movie title")):
		"""Movie titles containing the term, capped at the configured limit."""
		index: SearchIndex = app.state.search_index
		return _to_out(index.autocomplete(term, limit=settings.AUTOCOMPLETE_LIMIT))

	@app.post("/admin/rebuild", response_model=RebuildResponse)
	async def rebuild():
		"""Force a rebuild from the backing store; the previous index keeps serving if it fails."""
		index: SearchIndex = app.state.search_index
		start = time.time()
		try:
			await index.rebuild_index()
		except IndexBuildError as e:
			logger.error(f"[API] Rebuild failed: {e}")
			raise HTTPException(status_code=503, detail="Index rebuild failed")
		snapshot = index.snapshot
		return RebuildResponse(
			movies=snapshot.movies.record_count(),
			people=snapshot.people.record_count(),
			elapsed_seconds=round(time.time() - start, 2),
		)

	return app


# Module-level app for `uvicorn api:app`
app = create_app()
