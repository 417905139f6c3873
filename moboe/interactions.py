"""
Interaction store.
Keeps the like/bookmark/watch flags and the 0-5 user rating per movie.
Every call is a full read-modify-write of the interaction map, saved before returning.
"""

from typing import Callable, Dict, Optional
from datetime import datetime

from loguru import logger

from .models import Interaction, FLAG_NAMES, utc_now
from .storage import NamespaceStore, Storage, INTERACTIONS_NAMESPACE
from .errors import InvalidInteraction


class InteractionStore(NamespaceStore):
	"""
	Per-user interaction state keyed by movie id.
	Reads fall back to an empty map when storage is broken; writes never raise storage errors.
	"""

	namespace = INTERACTIONS_NAMESPACE

	def __init__(self, storage: Storage, clock: Optional[Callable[[], datetime]] = None):
		super().__init__(storage)
		self._clock = clock or utc_now  # injectable for tests

	def all_interactions(self) -> Dict[int, Interaction]:
		"""Every stored interaction, in storage order."""
		interactions: Dict[int, Interaction] = {}
		for key, record in self._read_object().items():
			try:
				movie_id = int(key)
				interactions[movie_id] = Interaction.from_record(movie_id, record)
			except (AttributeError, TypeError, ValueError) as e:
				# one broken record means the blob can't be trusted
				self._degrade(f"corrupt interaction record for '{key}' ({e})")
				return {}
		return interactions

	def get_interaction(self, movie_id: int) -> Interaction:
		"""The stored interaction, or a fresh all-false one (not saved) if absent."""
		return self.all_interactions().get(movie_id) or Interaction(movie_id=movie_id)

	def set_flag(self, movie_id: int, flag: str, value: bool) -> Interaction:
		"""Set one of liked/bookmarked/watched; other fields and date_added are left alone."""
		if flag not in FLAG_NAMES:
			raise InvalidInteraction(f"Unknown interaction flag '{flag}'. Expected one of: {', '.join(FLAG_NAMES)}")
		return self._update(movie_id, flag, bool(value))

	def toggle_flag(self, movie_id: int, flag: str) -> Interaction:
		"""Flip a flag (the detail page buttons)."""
		if flag not in FLAG_NAMES:
			raise InvalidInteraction(f"Unknown interaction flag '{flag}'. Expected one of: {', '.join(FLAG_NAMES)}")
		return self._update(movie_id, flag, not getattr(self.get_interaction(movie_id), flag))

	def set_rating(self, movie_id: int, rating: int) -> Interaction:
		"""Set the 0-5 user rating (0 clears it)."""
		if isinstance(rating, bool) or not isinstance(rating, int) or not 0 <= rating <= 5:
			raise InvalidInteraction(f"User rating must be an integer between 0 and 5, got {rating!r}")
		return self._update(movie_id, 'user_rating', rating)

	def _update(self, movie_id: int, attr: str, value) -> Interaction:
		interactions = self.all_interactions()
		interaction = interactions.get(movie_id)
		if interaction is None:
			# first action on this movie creates the record
			interaction = Interaction(movie_id=movie_id, date_added=self._clock())
			interactions[movie_id] = interaction
		elif interaction.date_added is None:
			interaction.date_added = self._clock()  # legacy record without a timestamp
		setattr(interaction, attr, value)
		self._save(interactions)
		logger.debug(f"[InteractionStore] movie={movie_id} {attr}={value}")
		return interaction

	def _save(self, interactions: Dict[int, Interaction]) -> None:
		self._write_object({str(movie_id): i.to_record() for movie_id, i in interactions.items()})
