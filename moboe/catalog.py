"""
Catalog store.
Holds the immutable movie list for a session together with its derived genre and year indexes.
"""

import random  # random pick for the "surprise me" button
from collections import Counter  # genre occurrence counts
from typing import Dict, Iterable, List, Optional

from rapidfuzz import process, fuzz  # fuzzy matching for genre hints

from loguru import logger

from .models import Movie
from .errors import NotFound


class Catalog:
	"""
	Read-only collection of movies, in dataset order.
	Other components look movies up here but never modify them.
	"""

	def __init__(self, movies: Iterable[Movie]):
		self._movies = tuple(movies)  # insertion order is the tie-break order everywhere
		self._by_id: Dict[int, Movie] = {m.id: m for m in self._movies}  # id lookup

		# Genre index: canonical name -> number of movies, in first-seen order
		self._genre_counts = Counter()
		for movie in self._movies:
			self._genre_counts.update(movie.genres)

		self._years = sorted({m.year for m in self._movies}, reverse=True)  # newest first
		logger.info(
			f"[Catalog] Ready with {len(self._movies)} movies, {len(self._genre_counts)} genres, {len(self._years)} years"
		)

	def __len__(self) -> int:
		return len(self._movies)

	def __iter__(self):
		return iter(self._movies)

	def get_movie(self, movie_id: int) -> Movie:
		"""Return the movie with this id or raise NotFound."""
		movie = self._by_id.get(movie_id)
		if movie is None:
			raise NotFound(f"Movie {movie_id} not found")
		return movie

	def find_movie(self, movie_id: int) -> Optional[Movie]:
		return self._by_id.get(movie_id)

	def genre_counts(self) -> Dict[str, int]:
		return dict(self._genre_counts)

	def available_genres(self) -> List[str]:
		return list(self._genre_counts)

	def available_years(self) -> List[int]:
		return list(self._years)

	def related_movies(self, movie_id: int, limit: int = 6) -> List[Movie]:
		"""Movies sharing at least one genre with the given movie, in catalog order."""
		movie = self.get_movie(movie_id)
		wanted = set(movie.genres)
		related = [m for m in self._movies if m.id != movie.id and wanted.intersection(m.genres)]
		return related[:limit]

	def random_movie(self, rng: Optional[random.Random] = None) -> Movie:
		"""Pick a movie at random. Raises NotFound on an empty catalog."""
		if not self._movies:
			raise NotFound("Catalog is empty")
		return (rng or random).choice(self._movies)

	def suggest_genre(self, name: str, score_cutoff: float = 70.0) -> Optional[str]:
		"""
		Closest canonical genre for a name that doesn't match exactly.
		Genre filters stay case-sensitive; this is only used for hints.
		"""
		if not name or name in self._genre_counts:
			return None
		match = process.extractOne(
			name,
			list(self._genre_counts),
			scorer=fuzz.WRatio,
			processor=str.lower,
			score_cutoff=score_cutoff,
		)
		if match is None:
			return None
		logger.debug(f"[Catalog] Genre hint | requested={name} | suggestion={match[0]} | score={match[1]:.1f}")
		return match[0]
