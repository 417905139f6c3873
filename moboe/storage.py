"""
Persistence layer.
A tiny namespaced key-value interface: load(namespace) -> blob or None, save(namespace, blob).
Blobs are serialized JSON text; the stores above decide what goes inside.
"""

import json
import re
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from .errors import PersistenceUnavailable


# Namespaces used by the interaction and review stores
INTERACTIONS_NAMESPACE = 'movieInteractions'
REVIEWS_NAMESPACE = 'movieReviews'


class Storage:
	"""Interface every backend implements."""

	def load(self, namespace: str) -> Optional[str]:
		raise NotImplementedError

	def save(self, namespace: str, blob: str) -> None:
		raise NotImplementedError


class MemoryStorage(Storage):
	"""Dict-backed storage; lives as long as the object does."""

	def __init__(self, initial: Optional[Dict[str, str]] = None):
		self._data: Dict[str, str] = dict(initial or {})

	def load(self, namespace: str) -> Optional[str]:
		return self._data.get(namespace)

	def save(self, namespace: str, blob: str) -> None:
		self._data[namespace] = blob


class JsonFileStorage(Storage):
	"""
	One <namespace>.json file per namespace inside a directory.
	Writes go to a temp file first and are then swapped in, so readers never see half a blob.
	"""

	def __init__(self, directory):
		self.directory = Path(directory)

	def _path(self, namespace: str) -> Path:
		return self.directory / f"{namespace}.json"

	def load(self, namespace: str) -> Optional[str]:
		path = self._path(namespace)
		if not path.exists():
			return None
		try:
			return path.read_text(encoding='utf-8')
		except (OSError, UnicodeDecodeError) as e:
			raise PersistenceUnavailable(f"Cannot read {path}: {e}") from e

	def save(self, namespace: str, blob: str) -> None:
		path = self._path(namespace)
		tmp_path = path.with_suffix('.json.tmp')
		try:
			self.directory.mkdir(parents=True, exist_ok=True)
			tmp_path.write_text(blob, encoding='utf-8')
			tmp_path.replace(path)
		except OSError as e:
			raise PersistenceUnavailable(f"Cannot write {path}: {e}") from e
		logger.debug(f"[Storage] Saved {namespace} ({len(blob)} bytes) to {path}")


class NamespaceStore:
	"""
	Base for stores that keep one JSON object per namespace.
	Storage faults and unparseable blobs never reach the caller: the store logs a warning
	and switches to an empty in-memory backend for the rest of its lifetime.
	"""

	namespace = ''  # set by subclasses

	def __init__(self, storage: Storage):
		self.storage = storage
		self._fallback: Optional[MemoryStorage] = None  # set once degraded

	@property
	def degraded(self) -> bool:
		return self._fallback is not None

	def _backend(self) -> Storage:
		return self._fallback if self._fallback is not None else self.storage

	def _degrade(self, reason) -> None:
		if self._fallback is None:
			logger.warning(f"[{type(self).__name__}] Storage unavailable for '{self.namespace}', using an empty in-memory map: {reason}")
			self._fallback = MemoryStorage()

	def _read_object(self) -> Dict:
		"""Load and parse the namespace blob; missing -> {}, broken -> {} (degraded)."""
		try:
			blob = self._backend().load(self.namespace)
		except PersistenceUnavailable as e:
			self._degrade(e)
			return {}
		if blob is None:
			return {}
		try:
			data = json.loads(blob)
		except ValueError as e:
			self._degrade(f"unparseable blob ({e})")
			return {}
		if not isinstance(data, dict):
			self._degrade(f"expected a JSON object, got {type(data).__name__}")
			return {}
		return data

	def _write_object(self, data: Dict) -> None:
		"""Serialize and save the whole namespace; on failure keep the data in memory."""
		blob = json.dumps(data)
		try:
			self._backend().save(self.namespace, blob)
		except PersistenceUnavailable as e:
			self._degrade(e)
			self._fallback.save(self.namespace, blob)


def user_storage(base_dir, user_id: str) -> JsonFileStorage:
	"""File storage scoped to one user (a sub-directory named after a sanitized user id)."""
	safe_id = re.sub(r'[^\w-]', '_', str(user_id)) or 'anonymous'
	return JsonFileStorage(Path(base_dir) / safe_id)
