"""
FastAPI server exposing the MoBoe API.
Endpoints:
- GET /, GET /health: API info and basic health check
- /api/auth/*: demo register/login/profile (any credentials accepted)
- POST /api/chat: assistant widget
- /api/movies*: discovery, details, related movies, random pick
- /api/movies/{id}/interaction|rating|reviews and /api/collections*: per-user state (bearer token required)

Startup loads the catalog from MOBOE_CATALOG_PATH unless one is passed to create_app().
Run: uvicorn api:app --reload
"""

# Standard libraries for timing, logging sinks and typing
import sys  # loguru sink
import time  # measure startup and request latencies
from contextlib import asynccontextmanager  # app lifespan
from typing import Callable, Dict, List, NamedTuple, Optional  # precise typing for clarity

# FastAPI primitives and Pydantic for request/response schemas
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

from moboe import config
from moboe.auth import SessionStore, TokenService
from moboe.catalog import Catalog
from moboe.chat import ChatService, build_chat_service
from moboe.data_loader import CatalogLoader
from moboe.discovery import search
from moboe.errors import AuthError, MoboeError
from moboe.interactions import InteractionStore
from moboe.models import CollectionEntry, Interaction, Movie, Query as DiscoveryQuery
from moboe.reviews import ReviewStore
from moboe.storage import Storage, user_storage
from moboe.watchlist import CollectionAggregator


# ==================== SCHEMAS ====================

class MovieOut(BaseModel):
	id: int  # unique id
	title: str  # display title
	year: int  # release year
	genres: List[str]  # list of genres
	rating: float  # critic rating 0-10
	poster_url: str = ''  # poster image URL
	overview: str = ''  # synopsis


class DiscoveryResponse(BaseModel):
	results: List[MovieOut]  # movies on this page
	total_count: int  # size of the filtered set
	page: int
	page_size: int
	total_pages: int
	elapsed_ms: float  # server-side search time in ms
	genre_suggestions: Dict[str, str] = {}  # unknown genre -> closest canonical genre


class GenreOut(BaseModel):
	name: str
	count: int


class InteractionOut(BaseModel):
	movie_id: int
	liked: bool
	bookmarked: bool
	watched: bool
	user_rating: int
	date_added: Optional[str] = None


class FlagIn(BaseModel):
	value: bool


class RatingIn(BaseModel):
	rating: int


class ReviewIn(BaseModel):
	text: str
	rating: int = 5


class ReviewOut(BaseModel):
	id: int
	text: str
	rating: int
	author: str
	date: str
	likes: int
	dislikes: int


class CollectionItem(BaseModel):
	movie: MovieOut
	interaction: InteractionOut


class StatsOut(BaseModel):
	total_count: int
	total_hours: float
	average_rating: float
	top_genre: str


class CollectionResponse(BaseModel):
	kind: str
	sort_by: str
	stats: StatsOut
	movies: List[CollectionItem]


class BulkRemoveIn(BaseModel):
	movie_ids: List[int]


class RegisterIn(BaseModel):
	username: str = ''
	email: str = ''
	password: str = ''


class LoginIn(BaseModel):
	email: str = ''
	password: str = ''


class ChatIn(BaseModel):
	message: Optional[str] = None


# ==================== CONVERTERS ====================

def movie_out(movie: Movie) -> MovieOut:
	return MovieOut(**movie.to_dict())


def interaction_out(interaction: Interaction) -> InteractionOut:
	return InteractionOut(
		movie_id=interaction.movie_id,
		liked=interaction.liked,
		bookmarked=interaction.bookmarked,
		watched=interaction.watched,
		user_rating=interaction.user_rating,
		date_added=interaction.date_added.isoformat() if interaction.date_added else None,
	)


def collection_item(entry: CollectionEntry) -> CollectionItem:
	return CollectionItem(movie=movie_out(entry.movie), interaction=interaction_out(entry.interaction))


# ==================== DEPENDENCIES ====================

bearer_scheme = HTTPBearer(auto_error=False)


class UserStores(NamedTuple):
	interactions: InteractionStore
	reviews: ReviewStore


def get_catalog(request: Request) -> Catalog:
	catalog = request.app.state.catalog
	if catalog is None:
		raise MoboeError("Catalog not loaded")
	return catalog


def get_user_id(
	request: Request,
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
	"""Bearer token -> user id; a missing or bad token is a 401."""
	if credentials is None:
		raise AuthError("Not authorized, no token provided", status_code=401)
	return request.app.state.token_service.verify(credentials.credentials)


def get_user_stores(request: Request, user_id: str = Depends(get_user_id)) -> UserStores:
	"""
	The interaction and review stores for this user, built once and kept for the app's lifetime
	so a degraded store keeps its in-memory fallback across requests.
	"""
	user_stores = request.app.state.user_stores
	stores = user_stores.get(user_id)
	if stores is None:
		storage = request.app.state.storage_factory(user_id)
		stores = UserStores(InteractionStore(storage), ReviewStore(storage))
		user_stores[user_id] = stores
		logger.debug(f"[API] Opened stores for user {user_id}")
	return stores


def get_interaction_store(stores: UserStores = Depends(get_user_stores)) -> InteractionStore:
	return stores.interactions


def get_review_store(stores: UserStores = Depends(get_user_stores)) -> ReviewStore:
	return stores.reviews


def get_aggregator(
	catalog: Catalog = Depends(get_catalog),
	interactions: InteractionStore = Depends(get_interaction_store),
) -> CollectionAggregator:
	return CollectionAggregator(catalog, interactions)


# ==================== APP FACTORY ====================

def create_app(
	catalog: Optional[Catalog] = None,
	session_store: Optional[SessionStore] = None,
	token_service: Optional[TokenService] = None,
	storage_factory: Optional[Callable[[str], Storage]] = None,
	chat_service: Optional[ChatService] = None,
	catalog_path: str = config.CATALOG_PATH,
) -> FastAPI:
	"""Build the API. Every collaborator can be injected; defaults come from moboe.config."""

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		start = time.time()  # start timer for startup latency
		if app.state.catalog is None:
			logger.info(f"[API] Startup: loading catalog from {catalog_path}...")  # log intent
			app.state.catalog = CatalogLoader().load_catalog(catalog_path)
		logger.info(f"[API] Startup complete in {time.time() - start:.2f}s with {len(app.state.catalog)} movies.")
		yield
		app.state.session_store.clear()  # demo users live only as long as the process
		app.state.user_stores.clear()
		logger.info("[API] Shutdown: session store cleared")

	app = FastAPI(title="MoBoe API", version="1.0.0", lifespan=lifespan)
	app.state.catalog = catalog
	app.state.session_store = session_store if session_store is not None else SessionStore()
	app.state.token_service = token_service or TokenService(config.JWT_SECRET, config.JWT_EXPIRES_DAYS, config.JWT_ALGORITHM)
	app.state.storage_factory = storage_factory or (lambda user_id: user_storage(config.STORAGE_DIR, user_id))
	app.state.user_stores = {}  # user id -> stores, one pair per user
	app.state.chat_service = chat_service or build_chat_service(
		config.CHAT_BACKEND,
		api_key=config.LLM_API_KEY,
		base_url=config.LLM_BASE_URL,
		model=config.LLM_MODEL,
		timeout=config.CHAT_TIMEOUT_SECONDS,
	)

	app.add_middleware(
		CORSMiddleware,
		allow_origins=config.CORS_ORIGINS,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	@app.middleware("http")
	async def log_requests(request: Request, call_next):
		start = time.time()
		response = await call_next(request)
		logger.info(f"[API] {request.method} {request.url.path} -> {response.status_code} in {(time.time() - start) * 1000:.1f} ms")
		return response

	@app.exception_handler(MoboeError)
	async def moboe_error_handler(request: Request, exc: MoboeError):
		if exc.status_code >= 500:
			logger.error(f"[API] {request.method} {request.url.path} failed: {exc}")
		return JSONResponse(status_code=exc.status_code, content={"message": str(exc), "success": False})

	# ---------- info ----------

	@app.get("/")
	async def root():
		return {
			"message": "Welcome to the MoBoe API!",
			"version": "1.0.0",
			"endpoints": {
				"auth": {"login": "/api/auth/login", "register": "/api/auth/register", "profile": "/api/auth/profile"},
				"chat": "/api/chat",
				"movies": "/api/movies",
				"collections": "/api/collections",
				"health": "/health",
			},
			"demo": {"note": "This is a demo version - accepts any login credentials!"},
		}

	@app.get("/health")
	async def health(request: Request):
		"""Return minimal health info for liveness/readiness probes."""
		catalog_ = request.app.state.catalog
		return {
			"status": "healthy",
			"catalog_ready": catalog_ is not None,
			"movies": len(catalog_) if catalog_ is not None else 0,
		}

	# ---------- auth ----------

	@app.post("/api/auth/register", status_code=201)
	def register(body: RegisterIn, request: Request):
		user = request.app.state.session_store.register(body.username, body.email, body.password)
		token = request.app.state.token_service.issue(user.id)
		return {"user": user.public(), "token": token, "success": True, "message": "Registration successful!"}

	@app.post("/api/auth/login")
	def login(body: LoginIn, request: Request):
		user = request.app.state.session_store.login(body.email, body.password)
		token = request.app.state.token_service.issue(user.id)
		return {"user": user.public(), "token": token, "success": True, "message": "Login successful!"}

	@app.get("/api/auth/profile")
	def profile(request: Request, user_id: str = Depends(get_user_id)):
		user = request.app.state.session_store.get_user(user_id)
		if user is None:
			return JSONResponse(status_code=404, content={"message": "User not found", "success": False})
		return {**user.public(), "success": True}

	# ---------- chat ----------

	@app.post("/api/chat")
	def chat(body: ChatIn, request: Request):
		reply = request.app.state.chat_service.reply(body.message)
		return {"response": reply.response, "success": True, "timestamp": reply.timestamp.isoformat()}

	# ---------- catalog & discovery ----------

	@app.get("/api/movies", response_model=DiscoveryResponse)
	def discover(
		q: str = Query("", description="Search term matched against title and overview"),
		genre: Optional[List[str]] = Query(None, description="Genre filter (repeatable, any match)"),
		year: Optional[int] = None,
		min_rating: float = 0.0,
		sort_by: str = "popularity",
		page: int = 1,
		page_size: int = config.PAGE_SIZE,
		catalog_: Catalog = Depends(get_catalog),
	):
		"""Filter, sort and paginate the catalog."""
		start = time.time()  # start timer
		genres = frozenset(genre or [])
		result = search(catalog_, DiscoveryQuery(
			search_term=q,
			genres=genres,
			year=year,
			min_rating=min_rating,
			sort_by=sort_by,
			page=page,
			page_size=page_size,
		))
		suggestions = {}
		for name in sorted(genres):
			hint = catalog_.suggest_genre(name)
			if hint:
				suggestions[name] = hint
		elapsed_ms = (time.time() - start) * 1000  # compute ms
		logger.info(f"[API] /api/movies served {len(result.results)} of {result.total_count} in {elapsed_ms:.2f} ms")
		return DiscoveryResponse(
			results=[movie_out(m) for m in result.results],
			total_count=result.total_count,
			page=result.page,
			page_size=result.page_size,
			total_pages=result.total_pages,
			elapsed_ms=round(elapsed_ms, 2),
			genre_suggestions=suggestions,
		)

	@app.get("/api/movies/random", response_model=MovieOut)
	def random_movie(catalog_: Catalog = Depends(get_catalog)):
		return movie_out(catalog_.random_movie())

	@app.get("/api/genres", response_model=List[GenreOut])
	def genres(catalog_: Catalog = Depends(get_catalog)):
		return [GenreOut(name=name, count=count) for name, count in catalog_.genre_counts().items()]

	@app.get("/api/years", response_model=List[int])
	def years(catalog_: Catalog = Depends(get_catalog)):
		return catalog_.available_years()

	@app.get("/api/movies/{movie_id}", response_model=MovieOut)
	def movie_details(movie_id: int, catalog_: Catalog = Depends(get_catalog)):
		return movie_out(catalog_.get_movie(movie_id))

	@app.get("/api/movies/{movie_id}/related", response_model=List[MovieOut])
	def related(movie_id: int, limit: int = 6, catalog_: Catalog = Depends(get_catalog)):
		return [movie_out(m) for m in catalog_.related_movies(movie_id, limit=limit)]

	# ---------- interactions ----------

	@app.get("/api/movies/{movie_id}/interaction", response_model=InteractionOut)
	def get_interaction(
		movie_id: int,
		catalog_: Catalog = Depends(get_catalog),
		store: InteractionStore = Depends(get_interaction_store),
	):
		catalog_.get_movie(movie_id)  # 404 for unknown movies
		return interaction_out(store.get_interaction(movie_id))

	@app.put("/api/movies/{movie_id}/interaction/{flag}", response_model=InteractionOut)
	def set_flag(
		movie_id: int,
		flag: str,
		body: FlagIn,
		catalog_: Catalog = Depends(get_catalog),
		store: InteractionStore = Depends(get_interaction_store),
	):
		catalog_.get_movie(movie_id)
		return interaction_out(store.set_flag(movie_id, flag, body.value))

	@app.post("/api/movies/{movie_id}/interaction/{flag}/toggle", response_model=InteractionOut)
	def toggle_flag(
		movie_id: int,
		flag: str,
		catalog_: Catalog = Depends(get_catalog),
		store: InteractionStore = Depends(get_interaction_store),
	):
		catalog_.get_movie(movie_id)
		return interaction_out(store.toggle_flag(movie_id, flag))

	@app.put("/api/movies/{movie_id}/rating", response_model=InteractionOut)
	def set_rating(
		movie_id: int,
		body: RatingIn,
		catalog_: Catalog = Depends(get_catalog),
		store: InteractionStore = Depends(get_interaction_store),
	):
		catalog_.get_movie(movie_id)
		return interaction_out(store.set_rating(movie_id, body.rating))

	# ---------- reviews ----------

	@app.get("/api/movies/{movie_id}/reviews", response_model=List[ReviewOut])
	def list_reviews(
		movie_id: int,
		catalog_: Catalog = Depends(get_catalog),
		store: ReviewStore = Depends(get_review_store),
	):
		catalog_.get_movie(movie_id)
		return [ReviewOut(**r.to_record()) for r in store.list_reviews(movie_id)]

	@app.post("/api/movies/{movie_id}/reviews", response_model=ReviewOut, status_code=201)
	def add_review(
		movie_id: int,
		body: ReviewIn,
		request: Request,
		user_id: str = Depends(get_user_id),
		catalog_: Catalog = Depends(get_catalog),
		store: ReviewStore = Depends(get_review_store),
	):
		catalog_.get_movie(movie_id)
		user = request.app.state.session_store.get_user(user_id)
		author = user.username if user else 'You'
		return ReviewOut(**store.add_review(movie_id, body.text, body.rating, author=author).to_record())

	# ---------- collections ----------

	@app.get("/api/collections")
	def collections_overview(aggregator: CollectionAggregator = Depends(get_aggregator)):
		return {"counts": aggregator.overview(), "success": True}

	@app.get("/api/collections/{kind}", response_model=CollectionResponse)
	def get_collection(
		kind: str,
		q: str = "",
		sort_by: str = "dateAdded",
		aggregator: CollectionAggregator = Depends(get_aggregator),
	):
		entries = aggregator.build_collection(kind, sort_by=sort_by, search_term=q)
		stats = aggregator.collection_stats(kind)
		return CollectionResponse(
			kind=kind,
			sort_by=sort_by,
			stats=StatsOut(
				total_count=stats.total_count,
				total_hours=round(stats.total_hours, 1),
				average_rating=round(stats.average_rating, 1),
				top_genre=stats.top_genre,
			),
			movies=[collection_item(e) for e in entries],
		)

	@app.delete("/api/collections/{kind}/{movie_id}")
	def remove_from_collection(
		kind: str,
		movie_id: int,
		aggregator: CollectionAggregator = Depends(get_aggregator),
	):
		removed = aggregator.remove_from_collection(movie_id, kind)
		return {"removed": removed, "success": True}

	@app.post("/api/collections/{kind}/bulk-remove")
	def bulk_remove(
		kind: str,
		body: BulkRemoveIn,
		aggregator: CollectionAggregator = Depends(get_aggregator),
	):
		return {"removed": aggregator.bulk_remove(body.movie_ids, kind), "success": True}

	return app


# Configure console logging once, at import, from LOG_LEVEL
logger.remove()
logger.add(sys.stderr, level=config.LOG_LEVEL)

# Instantiate the application used by `uvicorn api:app`
app = create_app()
