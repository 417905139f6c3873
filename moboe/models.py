"""
Data models for MoBoe.
Defines the core data structures used throughout the system, plus the
serialization contract used when interactions and reviews are persisted.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Timestamps are always stored timezone-aware in UTC
from datetime import datetime, timezone  # date_added / created_at handling
# Import typing helpers for precise and self-documenting types
from typing import Dict, FrozenSet, List, Optional, Tuple  # containers and optional values


# Interaction flags that can be toggled per movie
FLAG_NAMES: Tuple[str, ...] = ('liked', 'bookmarked', 'watched')

# Sort keys accepted by discovery (popularity is an alias for rating)
SORT_KEYS: Tuple[str, ...] = ('popularity', 'rating', 'year', 'title')

# Collection kinds and the extra collection-only sort keys
COLLECTION_KINDS: Tuple[str, ...] = ('bookmarked', 'liked', 'watched', 'rated')
COLLECTION_SORT_KEYS: Tuple[str, ...] = ('dateAdded', 'userRating') + SORT_KEYS


def utc_now() -> datetime:
	"""Current time as an aware UTC datetime."""
	return datetime.now(timezone.utc)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
	"""Parse an ISO-8601 string (JS style trailing 'Z' allowed) into an aware datetime."""
	if not value:
		return None
	parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
	if parsed.tzinfo is None:  # naive timestamps are treated as UTC
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
	return value.isoformat() if value else None


@dataclass(frozen=True)
class Movie:
	"""
	Represents a single catalog movie.
	Loaded once at startup and never mutated afterwards.
	"""
	id: int  # unique identifier of the movie
	title: str  # display title
	year: int  # release year (e.g., 1999)
	genres: Tuple[str, ...]  # canonical genre names, in dataset order
	rating: float  # average critic rating on a 0-10 scale
	poster_url: str = ''  # poster image URL (for UI)
	overview: str = ''  # short synopsis

	def to_dict(self) -> Dict:
		return {
			'id': self.id,
			'title': self.title,
			'year': self.year,
			'genres': list(self.genres),
			'rating': self.rating,
			'poster_url': self.poster_url,
			'overview': self.overview,
		}


@dataclass
class Interaction:
	"""
	Per-movie user state: like/bookmark/watch flags and a 0-5 rating.
	An interaction with every flag cleared and no rating is the same as no interaction.
	"""
	movie_id: int  # references Movie.id
	liked: bool = False
	bookmarked: bool = False
	watched: bool = False
	user_rating: int = 0  # 0 means unrated
	date_added: Optional[datetime] = None  # set on first interaction, never overwritten

	def is_empty(self) -> bool:
		return not (self.liked or self.bookmarked or self.watched or self.user_rating > 0)

	def to_record(self) -> Dict:
		"""Serialize to the stored movieInteractions record shape."""
		return {
			'liked': self.liked,
			'bookmarked': self.bookmarked,
			'watched': self.watched,
			'rating': self.user_rating,
			'dateAdded': _format_timestamp(self.date_added),
		}

	@classmethod
	def from_record(cls, movie_id: int, record: Dict) -> 'Interaction':
		"""
		Rebuild an Interaction from its stored record; missing keys fall back to defaults.
		Raises ValueError for a record that could not have been written by to_record.
		"""
		flags = {}
		for name in FLAG_NAMES:
			value = record.get(name, False)
			if not isinstance(value, bool):
				raise ValueError(f"flag '{name}' must be a boolean, got {value!r}")
			flags[name] = value
		user_rating = record.get('rating') or 0
		if isinstance(user_rating, bool) or not isinstance(user_rating, int) or not 0 <= user_rating <= 5:
			raise ValueError(f"rating must be an integer between 0 and 5, got {user_rating!r}")
		return cls(
			movie_id=movie_id,
			user_rating=user_rating,
			**flags,
			date_added=_parse_timestamp(record.get('dateAdded')),
		)


@dataclass
class Review:
	"""A single user-authored review of a movie."""
	id: int  # millisecond timestamp, unique within the movie
	text: str  # review body (never empty)
	rating: int  # 1 to 5 stars
	author: str = 'You'  # placeholder identity when no user name is known
	created_at: datetime = field(default_factory=utc_now)
	likes: int = 0
	dislikes: int = 0

	def to_record(self) -> Dict:
		return {
			'id': self.id,
			'text': self.text,
			'rating': self.rating,
			'author': self.author,
			'date': _format_timestamp(self.created_at),
			'likes': self.likes,
			'dislikes': self.dislikes,
		}

	@classmethod
	def from_record(cls, record: Dict) -> 'Review':
		return cls(
			id=int(record['id']),
			text=str(record['text']),
			rating=int(record['rating']),
			author=str(record.get('author') or 'You'),
			created_at=_parse_timestamp(record.get('date')) or utc_now(),
			likes=int(record.get('likes', 0)),
			dislikes=int(record.get('dislikes', 0)),
		)


@dataclass
class Query:
	"""
	A discovery request: free-text term, filters, sort key and page window.
	Transient, never persisted.
	"""
	search_term: str = ''  # case-insensitive substring on title/overview
	genres: FrozenSet[str] = frozenset()  # empty = no genre filter
	year: Optional[int] = None  # exact release year
	min_rating: float = 0.0  # movie.rating must be >= this
	sort_by: str = 'popularity'  # one of SORT_KEYS
	page: int = 1  # 1-based page number
	page_size: int = 12  # movies per page


@dataclass
class DiscoveryPage:
	"""One page of discovery results plus the size of the whole filtered set."""
	results: List[Movie]
	total_count: int
	page: int
	page_size: int

	@property
	def total_pages(self) -> int:
		# ceil division without floats
		return -(-self.total_count // self.page_size)


@dataclass
class CollectionEntry:
	movie: Movie
	interaction: Interaction


@dataclass
class CollectionStats:
	"""Summary numbers shown above a collection."""
	total_count: int
	total_hours: float
	average_rating: float
	top_genre: str
