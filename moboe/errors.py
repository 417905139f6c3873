"""
Error types raised by MoBoe components.
The API maps each one to an HTTP status; nothing here is fatal to the process.
"""


class MoboeError(Exception):
	"""Base class for all MoBoe errors."""
	status_code = 500


class InvalidQuery(MoboeError, ValueError):
	"""Malformed pagination or sort parameters in a discovery query."""
	status_code = 400


class InvalidReview(MoboeError, ValueError):
	"""Review submission rejected (empty text)."""
	status_code = 400


class InvalidInteraction(MoboeError, ValueError):
	"""Unknown interaction flag or user rating outside 0-5."""
	status_code = 400


class NotFound(MoboeError, LookupError):
	"""Requested movie id is not in the catalog."""
	status_code = 404


class PersistenceUnavailable(MoboeError):
	"""Storage read/write failed. The stores absorb this and fall back to an empty state."""
	status_code = 503


class AuthError(MoboeError):
	"""Missing credentials, duplicate registration, or a missing/invalid token."""

	def __init__(self, message: str, status_code: int = 400):
		super().__init__(message)
		self.status_code = status_code


class InvalidMessage(MoboeError, ValueError):
	"""Chat message is empty, not a string, or too long."""
	status_code = 400


class ChatUnavailable(MoboeError):
	"""The chat completion backend failed or did not answer in time."""

	def __init__(self, message: str, timed_out: bool = False):
		super().__init__(message)
		self.timed_out = timed_out
		self.status_code = 504 if timed_out else 503
