from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_KEY = "quizConfig"
QUIZ_KEY = "generatedQuiz"
ANSWERS_KEY = "quizAnswers"


class LocalStore:
	"""String-keyed JSON store with the semantics of browser localStorage.

	Values are kept serialized. With a ``path`` the whole store is mirrored to a
	JSON file after every change so a later process can pick it up.
	"""

	def __init__(self, path: Optional[Path] = None) -> None:
		self.path = Path(path) if path is not None else None
		self._items: Dict[str, str] = {}
		if self.path is not None and self.path.exists():
			try:
				self._items = json.loads(self.path.read_text(encoding="utf-8"))
			except json.JSONDecodeError:
				logger.warning("Ignoring unreadable store file %s", self.path)
				self._items = {}

	def get(self, key: str) -> Any:
		raw = self._items.get(key)
		if raw is None:
			return None
		return json.loads(raw)

	def set(self, key: str, value: Any) -> None:
		self._items[key] = json.dumps(value, sort_keys=True)
		self._flush()

	def write_if_changed(self, key: str, value: Any) -> bool:
		"""Persist ``value`` unless it serializes identically to what is stored."""
		serialized = json.dumps(value, sort_keys=True)
		if self._items.get(key) == serialized:
			return False
		self._items[key] = serialized
		self._flush()
		return True

	def remove(self, key: str) -> None:
		if self._items.pop(key, None) is not None:
			self._flush()

	def __contains__(self, key: str) -> bool:
		return key in self._items

	def _flush(self) -> None:
		if self.path is None:
			return
		self.path.parent.mkdir(parents=True, exist_ok=True)
		self.path.write_text(json.dumps(self._items, indent=2), encoding="utf-8")
