"""
Collection aggregator.
Rebuilds the watchlist collections (bookmarked, liked, watched, rated) from the
interaction store on every call, and computes the summary stats shown above them.
"""

from collections import Counter  # genre tally for top_genre
from datetime import datetime, timezone
from typing import Dict, Iterable, List

from loguru import logger  # console logging

from .models import (
	CollectionEntry,
	CollectionStats,
	COLLECTION_KINDS,
	COLLECTION_SORT_KEYS,
)
from .catalog import Catalog
from .interactions import InteractionStore
from .discovery import title_sort_key
from .errors import InvalidQuery
from .config import AVERAGE_RUNTIME_HOURS

# Oldest possible timestamp, for records without a date_added
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

# Per-kind removal: which Interaction attribute is cleared, and to what value
_CLEAR_VALUES = {
	'bookmarked': ('bookmarked', False),
	'liked': ('liked', False),
	'watched': ('watched', False),
	'rated': ('user_rating', 0),
}


def _check_kind(kind: str) -> None:
	if kind not in COLLECTION_KINDS:
		raise InvalidQuery(f"Unknown collection '{kind}'. Expected one of: {', '.join(COLLECTION_KINDS)}")


def in_collection(interaction, kind: str) -> bool:
	"""Membership rule: the kind's flag is set, or the user rating is positive for 'rated'."""
	if kind == 'rated':
		return interaction.user_rating > 0
	return bool(getattr(interaction, kind))


def matches_collection_term(entry: CollectionEntry, term: str) -> bool:
	"""Case-insensitive substring on title, overview, any genre name, or the year."""
	needle = term.strip().lower()
	if not needle:
		return True
	movie = entry.movie
	return (
		needle in movie.title.lower()
		or needle in movie.overview.lower()
		or any(needle in g.lower() for g in movie.genres)
		or needle in str(movie.year)
	)


def sort_entries(entries: List[CollectionEntry], sort_by: str) -> List[CollectionEntry]:
	"""In-place stable sort by one of COLLECTION_SORT_KEYS."""
	if sort_by not in COLLECTION_SORT_KEYS:
		raise InvalidQuery(f"Unknown sort key '{sort_by}'. Expected one of: {', '.join(COLLECTION_SORT_KEYS)}")
	if sort_by == 'dateAdded':
		entries.sort(key=lambda e: e.interaction.date_added or _EPOCH, reverse=True)
	elif sort_by == 'userRating':
		entries.sort(key=lambda e: e.interaction.user_rating, reverse=True)
	elif sort_by == 'year':
		entries.sort(key=lambda e: e.movie.year, reverse=True)
	elif sort_by == 'title':
		entries.sort(key=lambda e: title_sort_key(e.movie.title))
	else:  # rating / popularity
		entries.sort(key=lambda e: e.movie.rating, reverse=True)
	return entries


def compute_stats(entries: List[CollectionEntry], runtime_hours: float = AVERAGE_RUNTIME_HOURS) -> CollectionStats:
	"""
	Stats over a collection: count, estimated hours, mean movie rating and top genre.
	Genre ties go to whichever genre was counted first, walking the entries in order.
	"""
	total = len(entries)
	if not total:
		return CollectionStats(total_count=0, total_hours=0.0, average_rating=0.0, top_genre='None')

	genre_counts = Counter()
	for entry in entries:
		genre_counts.update(entry.movie.genres)
	# most_common keeps first-encountered order among equal counts
	top_genre = genre_counts.most_common(1)[0][0] if genre_counts else 'None'

	return CollectionStats(
		total_count=total,
		total_hours=total * runtime_hours,
		average_rating=sum(e.movie.rating for e in entries) / total,
		top_genre=top_genre,
	)


class CollectionAggregator:
	"""
	Reads and writes collections through the InteractionStore only.
	Nothing is cached between calls: each call sees the latest stored state.
	"""

	def __init__(self, catalog: Catalog, interactions: InteractionStore):
		self.catalog = catalog  # read-only movie lookup
		self.interactions = interactions  # the only source of collection state

	def _entries(self, kind: str) -> List[CollectionEntry]:
		"""Members of a collection, in default (most recently added first) order."""
		_check_kind(kind)
		entries: List[CollectionEntry] = []
		for movie_id, interaction in self.interactions.all_interactions().items():
			if not in_collection(interaction, kind):
				continue
			movie = self.catalog.find_movie(movie_id)
			if movie is None:  # interaction left over from an older catalog
				logger.debug(f"[Collections] Skipping interaction for unknown movie {movie_id}")
				continue
			entries.append(CollectionEntry(movie=movie, interaction=interaction))
		return sort_entries(entries, 'dateAdded')

	def build_collection(self, kind: str, sort_by: str = 'dateAdded', search_term: str = '') -> List[CollectionEntry]:
		"""Filtered and sorted collection members."""
		entries = [e for e in self._entries(kind) if matches_collection_term(e, search_term)]
		sort_entries(entries, sort_by)
		logger.debug(f"[Collections] {kind} | sort={sort_by} | term='{search_term}' | {len(entries)} movies")
		return entries

	def collection_stats(self, kind: str) -> CollectionStats:
		"""Stats over the whole collection (search terms don't apply)."""
		return compute_stats(self._entries(kind))

	def overview(self) -> Dict[str, int]:
		"""Member counts for every collection kind (tab badges)."""
		interactions = [
			i for movie_id, i in self.interactions.all_interactions().items()
			if self.catalog.find_movie(movie_id) is not None
		]
		return {kind: sum(1 for i in interactions if in_collection(i, kind)) for kind in COLLECTION_KINDS}

	def remove_from_collection(self, movie_id: int, kind: str) -> bool:
		"""
		Clear only the flag (or rating) behind this collection.
		Returns False when the movie has no interaction record at all.
		"""
		_check_kind(kind)
		if movie_id not in self.interactions.all_interactions():
			return False
		attr, value = _CLEAR_VALUES[kind]
		if attr == 'user_rating':
			self.interactions.set_rating(movie_id, value)
		else:
			self.interactions.set_flag(movie_id, attr, value)
		logger.info(f"[Collections] Removed movie {movie_id} from {kind}")
		return True

	def bulk_remove(self, movie_ids: Iterable[int], kind: str) -> int:
		"""Remove several movies; ids without a record are skipped. Returns how many were removed."""
		_check_kind(kind)
		removed = 0
		for movie_id in dict.fromkeys(movie_ids):  # de-duplicate, keep order
			if self.remove_from_collection(movie_id, kind):
				removed += 1
		logger.info(f"[Collections] Bulk removal from {kind}: {removed} movie(s)")
		return removed
