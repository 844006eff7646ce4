from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from .state import SessionState

logger = logging.getLogger(__name__)

START_LABEL = "🎤 Start Speaking"
STOP_LABEL = "🎤 Stop Speaking"
UNSUPPORTED_LABEL = "🎤 Not Supported"
FAILED_MESSAGE = "Speech recognition failed. Try again."


class SpeechEngine(Protocol):
	"""A continuous recognizer with interim results.

	The engine reports back through the controller's ``handle_result``,
	``handle_error`` and ``handle_end``; every ``stop()`` and every error is
	followed by one ``handle_end`` call, as with the browser's SpeechRecognition.
	"""

	def start(self) -> None: ...

	def stop(self) -> None: ...


@dataclass(frozen=True)
class MicControl:
	label: str
	recording: bool
	disabled: bool


class SpeechCapture:
	"""At most one open-ended question receives dictation at a time."""

	def __init__(
		self,
		engine: Optional[SpeechEngine],
		state: SessionState,
		on_transcript: Callable[[int, str], None],
		on_status: Optional[Callable[[str], None]] = None,
	) -> None:
		self.engine = engine
		self.state = state
		self.on_transcript = on_transcript
		self.on_status = on_status
		# End events still owed by sessions we stopped ourselves
		self._stale_ends = 0

	@property
	def active(self) -> Optional[int]:
		return self.state.capture_target

	@active.setter
	def active(self, index: Optional[int]) -> None:
		self.state.capture_target = index

	@property
	def available(self) -> bool:
		return self.engine is not None

	def control(self, index: int) -> MicControl:
		if not self.available:
			return MicControl(label=UNSUPPORTED_LABEL, recording=False, disabled=True)
		recording = self.active == index
		return MicControl(label=STOP_LABEL if recording else START_LABEL, recording=recording, disabled=False)

	def toggle(self, index: int) -> None:
		if self.active == index:
			self.stop()
		else:
			self.start(index)

	def start(self, index: int) -> None:
		if self.engine is None:
			return
		if self.active is not None:
			self.stop()
		self.active = index
		self.engine.start()

	def stop(self) -> None:
		if self.engine is None or self.active is None:
			return
		self.active = None
		self._stale_ends += 1
		self.engine.stop()

	def handle_result(self, segments: Sequence[str]) -> None:
		if self.active is None:
			return
		# The engine hands over every segment of the session; the field gets all of it
		self.on_transcript(self.active, "".join(segments))

	def handle_error(self, error: str) -> None:
		logger.error("Speech recognition error: %s", error)
		if self.active is None:
			return
		self.active = None
		# the errored session still delivers its end event
		self._stale_ends += 1
		if self.on_status is not None:
			self.on_status(FAILED_MESSAGE)

	def handle_end(self) -> None:
		if self._stale_ends > 0:
			self._stale_ends -= 1
			return
		self.active = None
