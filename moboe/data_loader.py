"""
Catalog loading module.
Loads movies from a JSON document or JSONL file, validates the required fields,
and builds the in-memory Catalog.
"""

# Standard libs for JSON parsing, typing, and paths
import json  # read JSON documents and JSON lines
from typing import Dict, Iterable, List, Tuple  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our Movie data class and the catalog it populates
from .models import Movie  # structured movie record
from .catalog import Catalog  # indexed, read-only movie collection

# Console logging
from loguru import logger  # console logger


class CatalogLoader:
	"""
	Handles loading and validating movie data.
	Records with missing or malformed required fields are skipped with a warning.
	"""

	# Fields every raw record must carry (after alias resolution)
	REQUIRED_FIELDS: Tuple[str, ...] = ('id', 'title', 'year', 'genres', 'rating')

	def load_catalog(self, filepath: str) -> Catalog:
		"""Load a catalog from either a .json document or a .jsonl file."""
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Movie data file not found: {filepath}")

		if filepath.suffix == '.jsonl':
			movies = self.load_movies_from_jsonl(filepath)
		else:
			movies = self.load_movies_from_json(filepath)
		return Catalog(movies)

	def load_movies_from_json(self, filepath) -> List[Movie]:
		"""
		Load movies from a JSON document shaped like {"movies": [...], "genres": [...]}.
		A bare JSON array of movie objects is accepted too.
		"""
		filepath = Path(filepath)
		logger.info(f"[CatalogLoader] Loading movies from {filepath}...")  # log action

		with open(filepath, 'r', encoding='utf-8') as f:
			document = json.load(f)  # whole-document parse; errors propagate

		records = document.get('movies', []) if isinstance(document, dict) else document
		movies = self._parse_records(enumerate(records, 1))
		logger.info(f"[CatalogLoader] Successfully loaded {len(movies)} movies.")  # summary
		return movies

	def load_movies_from_jsonl(self, filepath) -> List[Movie]:
		"""
		Load movies from a JSON Lines (JSONL) file where each line is one JSON object.
		Returns a list of Movie objects.
		"""
		filepath = Path(filepath)
		logger.info(f"[CatalogLoader] Loading movies from {filepath}...")  # log action

		records = []  # (line number, raw dict) pairs
		# Read line-by-line so one bad line doesn't sink the whole file
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():  # tolerate blank lines
					continue
				try:
					records.append((line_num, json.loads(line.strip())))  # parse JSON object per line
				except json.JSONDecodeError as e:
					logger.warning(f"[CatalogLoader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line
					continue  # move on

		movies = self._parse_records(records)
		logger.info(f"[CatalogLoader] Successfully loaded {len(movies)} movies.")  # summary
		return movies

	def _parse_records(self, records: Iterable[Tuple[int, Dict]]) -> List[Movie]:
		"""Convert raw records into movies, dropping invalid ones and duplicate ids."""
		movies: List[Movie] = []  # accumulator for parsed Movie objects
		seen_ids = set()  # ids already taken (first record wins)
		for position, data in records:
			try:
				movie = self._parse_movie_data(data)  # convert dict -> Movie
			except (KeyError, TypeError, ValueError) as e:
				logger.warning(f"[CatalogLoader] Skipping movie record #{position}: {e}")  # unusable record
				continue
			if movie.id in seen_ids:
				logger.warning(f"[CatalogLoader] Skipping duplicate movie id {movie.id} at record #{position}")
				continue
			seen_ids.add(movie.id)
			movies.append(movie)
		return movies

	def _parse_movie_data(self, data: Dict) -> Movie:
		"""
		Convert a raw dictionary (from file) into a strongly-typed Movie object.
		Raises KeyError/ValueError when a required field is absent or unusable.
		"""
		if not isinstance(data, dict):
			raise TypeError(f"expected an object, got {type(data).__name__}")

		# Resolve field aliases used by different dataset exports
		raw = {
			'id': data.get('id'),
			'title': data.get('title'),
			'year': data.get('year', data.get('releaseYear')),
			'genres': data.get('genres', data.get('genre')),
			'rating': data.get('rating'),
		}
		missing = [name for name in self.REQUIRED_FIELDS if raw[name] in (None, '')]
		if missing:
			raise KeyError(f"missing required field(s): {', '.join(missing)}")

		genres = self._parse_comma_separated(raw['genres'])  # list of genres
		if not genres:
			raise ValueError("genres must be non-empty")

		title = str(raw['title']).strip()
		if not title:
			raise ValueError("title must be non-empty")

		rating = float(raw['rating'])
		if not 0.0 <= rating <= 10.0:
			raise ValueError(f"rating {rating} outside 0-10")

		return Movie(
			id=int(raw['id']),
			title=title,
			year=int(raw['year']),
			genres=tuple(dict.fromkeys(genres)),  # ordered, de-duplicated
			rating=rating,
			poster_url=str(data.get('poster') or data.get('poster_url') or data.get('url') or ''),
			overview=str(data.get('overview') or ''),
		)

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings. Genre names keep their original casing.
		"""
		if value is None:  # missing field
			return []  # treat as empty list
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item and str(item).strip()]  # clean each
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]  # split/trim
		return []  # any other type becomes empty
