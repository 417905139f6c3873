"""
Streamlit UI for MoBoe.
Calls the local FastAPI server at http://localhost:8000 for discovery, details,
watchlist collections, reviews and chat. If the API is unreachable, catalog
browsing runs locally against data/movies.json (no login-only features).

Run API:   uvicorn api:app --reload
Run UI:    streamlit run streamlit_app.py
"""

# HTTP client to call the API
import requests  # make web requests to the FastAPI server
# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Dict, Optional  # indicates values can be None

# Local imports for the offline browsing fallback
from moboe import config  # default catalog path and page size
from moboe.catalog import Catalog  # in-memory catalog
from moboe.data_loader import CatalogLoader  # load movies from file
from moboe.discovery import search  # filter + sort + paginate
from moboe.models import Query, COLLECTION_KINDS, COLLECTION_SORT_KEYS, SORT_KEYS

# Default URL where the FastAPI server is expected to run locally
DEFAULT_API_URL = "http://localhost:8000"  # default API base URL

st.set_page_config(page_title="MoBoe", layout="wide")  # wide layout
st.title("🎬 MoBoe – Discover, Track and Review Movies")  # friendly header


# Cache the local catalog so we only read the file once per session
@st.cache_resource(show_spinner=True)
def init_local_catalog() -> Optional[Catalog]:
	"""Load the catalog from disk for offline browsing."""
	try:
		return CatalogLoader().load_catalog(config.CATALOG_PATH)
	except Exception as e:
		st.error(f"Failed to load local catalog: {e}")
		return None


def api_call(method: str, path: str, **kwargs):
	"""Call the API with the session's bearer token; returns parsed JSON or None on error."""
	headers = {}
	if st.session_state.get("token"):
		headers["Authorization"] = f"Bearer {st.session_state['token']}"
	try:
		resp = requests.request(method, f"{api_url}{path}", headers=headers, timeout=30, **kwargs)
	except requests.RequestException as e:  # network errors
		st.error(f"API request failed: {e}")
		return None
	if not resp.ok:
		try:
			message = resp.json().get("message", resp.text)
		except ValueError:
			message = resp.text
		st.error(f"{resp.status_code}: {message}")
		return None
	return resp.json()


def render_movie_row(movie: Dict, caption: Optional[str] = None, key_prefix: str = "discover"):
	"""Poster + details row used by every list."""
	c1, c2 = st.columns([1, 5])  # small image column + large text column
	with c1:
		if movie.get("poster_url"):
			st.image(movie["poster_url"], width=110)  # poster
	with c2:
		st.subheader(f"{movie['title']} ({movie['year']})")  # title + year
		st.caption(f"⭐ {movie['rating']}/10 | {', '.join(movie['genres'])}")
		if caption:
			st.caption(caption)
		if movie.get("overview"):
			st.write(movie["overview"])  # synopsis
		if api_available and st.button("Details", key=f"details-{key_prefix}-{movie['id']}"):
			st.session_state["selected_movie"] = movie["id"]
			st.rerun()


# ==================== SIDEBAR ====================

with st.sidebar:
	st.header("Settings")  # section label
	api_url = st.text_input("API URL", DEFAULT_API_URL)  # where the API lives

# Check quickly whether the API is reachable
api_available = False  # default assumption
try:
	api_available = requests.get(f"{api_url}/health", timeout=3).ok  # ping API health endpoint
except requests.RequestException:
	st.sidebar.info("API not reachable; browsing the local catalog only.")  # inform user

with st.sidebar:
	st.markdown("---")
	if st.session_state.get("token"):
		st.success(f"Signed in as {st.session_state.get('username')}")
		if st.button("Log out"):
			st.session_state.pop("token", None)
			st.session_state.pop("username", None)
			st.rerun()
	elif api_available:
		st.subheader("Sign in (any credentials work)")
		email = st.text_input("Email", placeholder="any@email.com")
		password = st.text_input("Password", type="password")
		if st.button("Log in", type="primary"):
			payload = api_call("POST", "/api/auth/login", json={"email": email, "password": password})
			if payload:
				st.session_state["token"] = payload["token"]
				st.session_state["username"] = payload["user"]["username"]
				st.rerun()

tab_discover, tab_watchlist, tab_chat = st.tabs(["Discover", "Watchlist", "Chat"])

# ==================== DISCOVER ====================

with tab_discover:
	selected = st.session_state.get("selected_movie")
	if selected is not None and api_available:
		# ---- movie details ----
		movie = api_call("GET", f"/api/movies/{selected}")
		if st.button("← Back to movies"):
			st.session_state.pop("selected_movie", None)
			st.rerun()
		if movie is None:  # not found: back to the catalog view
			st.session_state.pop("selected_movie", None)
		else:
			render_movie_row(movie, key_prefix="selected")
			if st.session_state.get("token"):
				interaction = api_call("GET", f"/api/movies/{selected}/interaction") or {}
				b1, b2, b3 = st.columns(3)
				for col, flag, label in ((b1, "liked", "❤️ Like"), (b2, "bookmarked", "🔖 Watchlist"), (b3, "watched", "👁 Watched")):
					with col:
						state = "✓ " if interaction.get(flag) else ""
						if st.button(f"{state}{label}", key=f"toggle-{flag}"):
							api_call("POST", f"/api/movies/{selected}/interaction/{flag}/toggle")
							st.rerun()
				stars = st.slider("Your rating (0 = unrated)", 0, 5, int(interaction.get("user_rating", 0)))
				if stars != interaction.get("user_rating", 0):
					api_call("PUT", f"/api/movies/{selected}/rating", json={"rating": stars})

				st.markdown("#### Reviews")
				with st.form("review-form", clear_on_submit=True):
					text = st.text_area("Write a review")
					rating = st.slider("Stars", 1, 5, 5)
					if st.form_submit_button("Submit review"):
						api_call("POST", f"/api/movies/{selected}/reviews", json={"text": text, "rating": rating})
				for review in api_call("GET", f"/api/movies/{selected}/reviews") or []:
					st.write(f"**{review['author']}** · {'⭐' * review['rating']} · {review['date'][:10]}")
					st.write(review["text"])
			else:
				st.info("Log in to like, bookmark, rate and review movies.")

			st.markdown("#### Related movies")
			for rel in api_call("GET", f"/api/movies/{selected}/related") or []:
				render_movie_row(rel, key_prefix="related")
	else:
		# ---- discovery list ----
		local_catalog = None if api_available else init_local_catalog()
		genres = (
			[g["name"] for g in (api_call("GET", "/api/genres") or [])] if api_available
			else (local_catalog.available_genres() if local_catalog else [])
		)
		years = (
			(api_call("GET", "/api/years") or []) if api_available
			else (local_catalog.available_years() if local_catalog else [])
		)

		f1, f2, f3, f4 = st.columns([3, 2, 1, 1])
		with f1:
			term = st.text_input("Search movies", placeholder="e.g., space, heist, Nolan")
		with f2:
			chosen_genres = st.multiselect("Genres", genres)
		with f3:
			year_choice = st.selectbox("Year", ["Any"] + [str(y) for y in years])
		with f4:
			sort_by = st.selectbox("Sort by", list(SORT_KEYS))
		min_rating = st.slider("Minimum rating", 0.0, 10.0, 0.0, 0.5)
		page = st.number_input("Page", min_value=1, value=1, step=1)
		year = None if year_choice == "Any" else int(year_choice)

		if api_available and st.button("🎲 Random movie"):
			pick = api_call("GET", "/api/movies/random")
			if pick:
				st.session_state["selected_movie"] = pick["id"]
				st.rerun()

		if api_available:
			payload = api_call("GET", "/api/movies", params={
				"q": term, "genre": chosen_genres, "year": year, "min_rating": min_rating,
				"sort_by": sort_by, "page": int(page),
			})
		elif local_catalog is not None:
			# Local mode: run the discovery engine inside this process
			result = search(local_catalog, Query(
				search_term=term, genres=frozenset(chosen_genres), year=year,
				min_rating=min_rating, sort_by=sort_by, page=int(page), page_size=config.PAGE_SIZE,
			))
			payload = {
				"results": [m.to_dict() for m in result.results],
				"total_count": result.total_count,
				"total_pages": result.total_pages,
			}
		else:
			payload = None

		if payload:
			st.success(f"{payload['total_count']} movies found · page {int(page)} of {max(payload['total_pages'], 1)}")
			st.divider()
			for movie in payload["results"]:
				render_movie_row(movie)
				st.divider()

# ==================== WATCHLIST ====================

with tab_watchlist:
	if not st.session_state.get("token"):
		st.info("Log in to see your collections.")  # collections are gated on a session
	else:
		counts = (api_call("GET", "/api/collections") or {}).get("counts", {})
		kind = st.radio("Collection", list(COLLECTION_KINDS), horizontal=True,
			format_func=lambda k: f"{k.title()} ({counts.get(k, 0)})")
		w1, w2 = st.columns([3, 1])
		with w1:
			coll_term = st.text_input("Search this collection")
		with w2:
			coll_sort = st.selectbox("Sort", list(COLLECTION_SORT_KEYS))
		payload = api_call("GET", f"/api/collections/{kind}", params={"q": coll_term, "sort_by": coll_sort})
		if payload:
			stats = payload["stats"]
			s1, s2, s3, s4 = st.columns(4)
			s1.metric("Movies", stats["total_count"])
			s2.metric("Hours", f"{stats['total_hours']}h")
			s3.metric("Avg rating", stats["average_rating"])
			s4.metric("Top genre", stats["top_genre"])

			to_remove = []
			for item in payload["movies"]:
				movie, interaction = item["movie"], item["interaction"]
				caption = f"Your rating: {interaction['user_rating']}/5" if interaction["user_rating"] else None
				if st.checkbox(f"Select {movie['title']}", key=f"sel-{kind}-{movie['id']}"):
					to_remove.append(movie["id"])
				render_movie_row(movie, caption=caption, key_prefix=kind)
				st.divider()
			if to_remove and st.button(f"Remove {len(to_remove)} from {kind}"):
				api_call("POST", f"/api/collections/{kind}/bulk-remove", json={"movie_ids": to_remove})
				st.rerun()

# ==================== CHAT ====================

with tab_chat:
	if not api_available:
		st.info("The assistant needs the API to be running.")
	else:
		history = st.session_state.setdefault("chat_history", [])
		for role, text in history:
			with st.chat_message(role):
				st.write(text)
		prompt = st.chat_input("Ask MoBoe about movies...")
		if prompt:
			history.append(("user", prompt))
			payload = api_call("POST", "/api/chat", json={"message": prompt})
			if payload:
				history.append(("assistant", payload["response"]))
			st.rerun()

# Show a footer indicator of current mode
st.sidebar.markdown("---")  # separator
st.sidebar.caption("Mode: API client" if api_available else "Mode: Local catalog (start uvicorn api:app --reload for full features)")
