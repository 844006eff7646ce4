from __future__ import annotations
import asyncio
import contextlib
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5
INTERVAL_SECONDS = 30.0


class Autosaver:
	"""Debounced saves on change plus a periodic backstop.

	``save`` does its own dirty check and returns whether it wrote anything.
	Without a running event loop every notification saves immediately.
	"""

	def __init__(self, save: Callable[[], bool], *, debounce: float = DEBOUNCE_SECONDS, interval: float = INTERVAL_SECONDS) -> None:
		self.save = save
		self.debounce = debounce
		self.interval = interval
		self._pending: Optional[asyncio.TimerHandle] = None
		self._task: Optional[asyncio.Task] = None

	@property
	def pending(self) -> bool:
		return self._pending is not None

	def notify(self, *, debounce: bool = False) -> None:
		self._cancel_pending()
		if debounce:
			try:
				loop = asyncio.get_running_loop()
			except RuntimeError:
				loop = None
			if loop is not None:
				self._pending = loop.call_later(self.debounce, self._fire)
				return
		self.save()

	def flush(self) -> bool:
		self._cancel_pending()
		return self.save()

	def start(self) -> None:
		if self._task is None or self._task.done():
			self._task = asyncio.get_running_loop().create_task(self._run())

	async def stop(self) -> None:
		if self._task is not None:
			self._task.cancel()
			with contextlib.suppress(asyncio.CancelledError):
				await self._task
			self._task = None
		if self._pending is not None:
			self.flush()

	def _fire(self) -> None:
		self._pending = None
		self.save()

	def _cancel_pending(self) -> None:
		if self._pending is not None:
			self._pending.cancel()
			self._pending = None

	async def _run(self) -> None:
		while True:
			await asyncio.sleep(self.interval)
			if self.save():
				logger.debug("Interval autosave wrote changes")
