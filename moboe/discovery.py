"""
Discovery engine.
Filters the catalog with a Query, sorts the survivors and slices out one page.
"""

import unicodedata  # accent folding for title collation
from typing import Callable, Dict, List

from loguru import logger  # simple structured logger

from .models import Movie, Query, DiscoveryPage, SORT_KEYS
from .catalog import Catalog
from .errors import InvalidQuery


def title_sort_key(title: str) -> str:
	"""
	Locale-style collation key for titles: accents stripped, case folded,
	so "Élan" sorts next to "Elan" and "alien" next to "Alien".
	"""
	decomposed = unicodedata.normalize('NFKD', title)
	stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
	return stripped.casefold()


# Sort definitions: key function and direction. Python's sort is stable, so ties keep catalog order.
_SORTS: Dict[str, Callable[[List[Movie]], None]] = {
	'popularity': lambda movies: movies.sort(key=lambda m: m.rating, reverse=True),  # no separate signal yet
	'rating': lambda movies: movies.sort(key=lambda m: m.rating, reverse=True),
	'year': lambda movies: movies.sort(key=lambda m: m.year, reverse=True),
	'title': lambda movies: movies.sort(key=lambda m: title_sort_key(m.title)),
}


def matches_term(movie: Movie, term: str) -> bool:
	"""Case-insensitive substring match on title or overview; blank terms match everything."""
	needle = term.strip().lower()
	if not needle:
		return True
	return needle in movie.title.lower() or needle in movie.overview.lower()


def matches_genres(movie: Movie, genres) -> bool:
	"""At least one requested genre (exact, case-sensitive); empty filter matches everything."""
	if not genres:
		return True
	return any(g in movie.genres for g in genres)


def matches_year(movie: Movie, year) -> bool:
	return year is None or movie.year == year


def matches_rating(movie: Movie, min_rating: float) -> bool:
	return movie.rating >= min_rating


def matches_query(movie: Movie, query: Query) -> bool:
	"""All four predicates must hold (AND)."""
	return (
		matches_term(movie, query.search_term)
		and matches_genres(movie, query.genres)
		and matches_year(movie, query.year)
		and matches_rating(movie, query.min_rating)
	)


def validate_query(query: Query) -> None:
	"""Reject malformed paging or sort parameters with InvalidQuery."""
	if query.page_size <= 0:
		raise InvalidQuery(f"page_size must be positive, got {query.page_size}")
	if query.page < 1:
		raise InvalidQuery(f"page must be >= 1, got {query.page}")
	if query.sort_by not in _SORTS:
		raise InvalidQuery(f"Unknown sort key '{query.sort_by}'. Expected one of: {', '.join(SORT_KEYS)}")


def sort_movies(movies: List[Movie], sort_by: str) -> List[Movie]:
	"""Sort a list of movies in place by one of SORT_KEYS and return it."""
	if sort_by not in _SORTS:
		raise InvalidQuery(f"Unknown sort key '{sort_by}'. Expected one of: {', '.join(SORT_KEYS)}")
	_SORTS[sort_by](movies)
	return movies


def search(catalog: Catalog, query: Query) -> DiscoveryPage:
	"""
	Run a discovery query against the catalog.
	Pure function: the catalog is only read, and the same inputs always give the same page.
	"""
	validate_query(query)  # fail fast on caller mistakes

	# Filter (conjunctive), keeping catalog order for the stable sort below
	filtered = [m for m in catalog if matches_query(m, query)]
	sort_movies(filtered, query.sort_by)

	# Page window, clamped; pages past the end come back empty
	start = (query.page - 1) * query.page_size
	page_items = filtered[start:start + query.page_size]
	logger.debug(
		f"[Discovery] term='{query.search_term}' genres={sorted(query.genres)} year={query.year} "
		f"min_rating={query.min_rating} sort={query.sort_by} | matched={len(filtered)} | page={query.page} -> {len(page_items)}"
	)
	return DiscoveryPage(
		results=page_items,
		total_count=len(filtered),
		page=query.page,
		page_size=query.page_size,
	)
