"""
Review store.
Append-only, newest-first review lists per movie, persisted in the movieReviews namespace.
"""

from typing import Callable, Dict, List, Optional
from datetime import datetime

from loguru import logger

from .models import Review, utc_now
from .storage import NamespaceStore, Storage, REVIEWS_NAMESPACE
from .errors import InvalidReview

MIN_REVIEW_RATING = 1
MAX_REVIEW_RATING = 5
DEFAULT_AUTHOR = 'You'


def clamp_rating(rating) -> int:
	"""Out-of-range star ratings are pulled into 1-5; non-numeric ones raise InvalidReview."""
	try:
		stars = int(rating)
	except (TypeError, ValueError, OverflowError) as e:
		raise InvalidReview(f"Review rating must be a number, got {rating!r}") from e
	return max(MIN_REVIEW_RATING, min(MAX_REVIEW_RATING, stars))


class ReviewStore(NamespaceStore):
	"""Reviews keyed by movie id. Reviews are never edited or deleted."""

	namespace = REVIEWS_NAMESPACE

	def __init__(self, storage: Storage, clock: Optional[Callable[[], datetime]] = None):
		super().__init__(storage)
		self._clock = clock or utc_now

	def _load_all(self) -> Dict[str, List[Dict]]:
		data = self._read_object()
		for key, records in data.items():
			if not isinstance(records, list):
				self._degrade(f"review list for '{key}' is {type(records).__name__}")
				return {}
		return data

	def list_reviews(self, movie_id: int) -> List[Review]:
		"""Reviews for a movie, most recent first."""
		records = self._load_all().get(str(movie_id), [])
		try:
			return [Review.from_record(r) for r in records]
		except (AttributeError, KeyError, TypeError, ValueError) as e:
			self._degrade(f"corrupt review record for movie {movie_id} ({e})")
			return []

	def add_review(self, movie_id: int, text: str, rating: int, author: str = DEFAULT_AUTHOR) -> Review:
		"""
		Validate, create and prepend a review, then persist the movie's full list.
		Empty text raises InvalidReview; rating is clamped into 1-5.
		"""
		if not isinstance(text, str) or not text.strip():
			raise InvalidReview("Review text cannot be empty")

		data = self._load_all()
		existing = data.get(str(movie_id), [])

		created_at = self._clock()
		review_id = int(created_at.timestamp() * 1000)  # millisecond timestamp
		taken = {r.get('id') for r in existing if isinstance(r, dict)}
		while review_id in taken:  # two reviews in the same millisecond
			review_id += 1

		review = Review(
			id=review_id,
			text=text,
			rating=clamp_rating(rating),
			author=(author or '').strip() or DEFAULT_AUTHOR,
			created_at=created_at,
		)
		data[str(movie_id)] = [review.to_record()] + existing
		self._write_object(data)
		logger.info(f"[ReviewStore] Added review {review.id} for movie {movie_id} (rating={review.rating})")
		return review
