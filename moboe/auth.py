"""
Demo authentication.
Accepts any credentials, keeps users in an in-memory SessionStore, and issues
JWT bearer tokens. The store is created with the app and cleared on restart.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt  # PyJWT
from loguru import logger

from .errors import AuthError
from .models import utc_now


@dataclass
class User:
	id: str
	username: str
	email: str
	created_at: datetime = field(default_factory=utc_now)

	def public(self) -> Dict[str, str]:
		return {'id': self.id, 'username': self.username, 'email': self.email}


class SessionStore:
	"""
	In-memory user registry keyed by email.
	Passwords are required by the forms but never stored or checked.
	"""

	def __init__(self):
		self._users: Dict[str, User] = {}
		self._last_id = 0

	def __len__(self) -> int:
		return len(self._users)

	def _next_id(self) -> str:
		# millisecond timestamp ids, bumped when two users arrive in the same millisecond
		candidate = int(time.time() * 1000)
		self._last_id = max(candidate, self._last_id + 1)
		return str(self._last_id)

	def register(self, username: str, email: str, password: str) -> User:
		if not username or not email or not password:
			raise AuthError("Please provide username, email, and password")
		if email in self._users:
			raise AuthError("User already exists with this email")
		user = User(id=self._next_id(), username=username, email=email)
		self._users[email] = user
		logger.info(f"[Auth] New user registered: {username} ({email})")
		return user

	def login(self, email: str, password: str) -> User:
		"""Any credentials work: unknown emails get a demo user named after the email prefix."""
		if not email or not password:
			raise AuthError("Please provide email and password")
		user = self._users.get(email)
		if user is None:
			user = User(id=self._next_id(), username=email.split('@')[0], email=email)
			self._users[email] = user
			logger.info(f"[Auth] Demo user created: {user.username} ({email})")
		logger.info(f"[Auth] User logged in: {user.username} ({email})")
		return user

	def get_user(self, user_id: str) -> Optional[User]:
		for user in self._users.values():
			if user.id == user_id:
				return user
		return None

	def clear(self) -> None:
		self._users.clear()


class TokenService:
	"""Issues and verifies HS256 JWTs carrying the user id."""

	def __init__(self, secret: str, expires_days: int = 30, algorithm: str = 'HS256'):
		self.secret = secret
		self.expires_days = expires_days
		self.algorithm = algorithm

	def issue(self, user_id: str) -> str:
		now = datetime.now(timezone.utc)
		payload = {'id': user_id, 'iat': now, 'exp': now + timedelta(days=self.expires_days)}
		return jwt.encode(payload, self.secret, algorithm=self.algorithm)

	def verify(self, token: str) -> str:
		"""Return the user id inside a valid token, or raise AuthError (401)."""
		try:
			payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
		except jwt.PyJWTError as e:
			logger.warning(f"[Auth] Token verification failed: {e}")
			raise AuthError("Not authorized, token failed", status_code=401) from e
		user_id = payload.get('id')
		if not user_id:
			raise AuthError("Not authorized, token failed", status_code=401)
		return str(user_id)
