"""
Quiz lifecycle
==============

Input -> Generating -> Taking -> Evaluating -> Results, then back to Input
(start new) or Taking (retake). Every server call captures
``SessionState.generation`` when it is issued; a reply that comes back after
the counter moved on, or after the phase changed, is dropped.

Local storage holds three keys: the form configuration, the generated quiz
with its background snapshot, and the in-progress answers tagged with the id
of the quiz they belong to.
"""
from __future__ import annotations
import logging
import re
import uuid
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..errors import InputValidationError, InvalidTransition, QuizError
from ..schemas import OPTION_LETTERS, QuizRequest, SubmitResponse
from .api import QuizApiClient
from .autosave import Autosaver, DEBOUNCE_SECONDS, INTERVAL_SECONDS
from .speech import SpeechCapture, SpeechEngine
from .state import Phase, SavedQuiz, SessionState
from .storage import ANSWERS_KEY, CONFIG_KEY, QUIZ_KEY, LocalStore

logger = logging.getLogger(__name__)

FREE_TEXT_FIELDS = {"book", "chapters"}
_ANSWER_KEY = re.compile(r"(mcq|open)(\d+)")


class QuizLifecycle:
	def __init__(
		self,
		api: QuizApiClient,
		store: LocalStore,
		*,
		engine: Optional[SpeechEngine] = None,
		state: Optional[SessionState] = None,
		debounce: float = DEBOUNCE_SECONDS,
		interval: float = INTERVAL_SECONDS,
	) -> None:
		self.api = api
		self.store = store
		self.state = state or SessionState()
		self.autosaver = Autosaver(self.persist, debounce=debounce, interval=interval)
		self.speech = SpeechCapture(engine, self.state, self._apply_transcript, self._set_message)

	@property
	def phase(self) -> Phase:
		return self.state.phase

	# ------------------------------------------------------------------
	# persistence

	def resume(self) -> Phase:
		"""Restore whatever the previous run left in local storage."""
		config = self.store.get(CONFIG_KEY)
		if config:
			try:
				self.state.config = QuizRequest.model_validate(config)
			except ValidationError:
				logger.warning("Discarding unreadable saved configuration")
				self.store.remove(CONFIG_KEY)
		saved = self.store.get(QUIZ_KEY)
		if saved:
			try:
				quiz = SavedQuiz.model_validate(saved)
			except ValidationError:
				logger.warning("Discarding unreadable saved quiz")
				self.store.remove(QUIZ_KEY)
				self.store.remove(ANSWERS_KEY)
				return self.state.phase
			self.state.quiz = quiz
			self.state.answers = self._restore_answers(quiz.quiz_id)
			self.state.phase = Phase.TAKING
		return self.state.phase

	async def open(self) -> Phase:
		"""Resume from storage and start the interval backstop."""
		phase = self.resume()
		self.autosaver.start()
		return phase

	async def aclose(self) -> None:
		self.speech.stop()
		await self.autosaver.stop()
		self.persist()

	def persist(self) -> bool:
		"""Write the part of the session that belongs to the current phase."""
		if self.state.phase is Phase.INPUT:
			return self.store.write_if_changed(CONFIG_KEY, self.state.config.model_dump(by_alias=True))
		if self.state.phase is Phase.TAKING and self.state.quiz is not None:
			return self.store.write_if_changed(
				ANSWERS_KEY, {"quizId": self.state.quiz.quiz_id, "answers": dict(self.state.answers)}
			)
		return False

	def _restore_answers(self, quiz_id: str) -> Dict[str, str]:
		saved = self.store.get(ANSWERS_KEY)
		if not isinstance(saved, dict) or saved.get("quizId") != quiz_id:
			self.store.remove(ANSWERS_KEY)
			return {}
		return {str(k): str(v) for k, v in (saved.get("answers") or {}).items()}

	def _clear_quiz(self) -> None:
		self.speech.stop()
		self.store.remove(QUIZ_KEY)
		self.store.remove(ANSWERS_KEY)
		self.state.quiz = None
		self.state.answers = {}
		self.state.result = None

	# ------------------------------------------------------------------
	# helpers

	def _expect(self, *phases: Phase) -> None:
		if self.state.phase not in phases:
			allowed = ", ".join(p.value for p in phases)
			raise InvalidTransition(f"Not allowed while {self.state.phase.value} (needs {allowed})")

	def _advance(self) -> int:
		self.state.generation += 1
		return self.state.generation

	def _stale(self, token: int, phase: Phase) -> bool:
		if self.state.generation != token or self.state.phase is not phase:
			logger.info("Dropping reply for generation %s (now %s, %s)", token, self.state.generation, self.state.phase.value)
			return True
		return False

	def _set_message(self, message: str) -> None:
		self.state.message = message

	def _apply_transcript(self, index: int, text: str) -> None:
		if self.state.phase is Phase.TAKING:
			self.set_answer(f"open{index}", text)

	# ------------------------------------------------------------------
	# Input

	def update_config(self, **changes: Any) -> QuizRequest:
		self._expect(Phase.INPUT)
		config = self.state.config.model_dump()
		config.update(changes)
		self.state.config = QuizRequest.model_validate(config)
		self.autosaver.notify(debounce=bool(FREE_TEXT_FIELDS & set(changes)))
		return self.state.config

	def reset_config(self) -> None:
		self._expect(Phase.INPUT)
		self.state.config = QuizRequest()
		self.store.remove(CONFIG_KEY)
		self.state.message = "Form reset."

	async def start_quiz(self) -> bool:
		"""Validate, then fetch a background and a quiz. True once in Taking."""
		self._expect(Phase.INPUT)
		try:
			req = self.state.config.check()
		except InputValidationError as e:
			self.state.message = str(e)
			raise
		self.autosaver.flush()
		self.state.phase = Phase.GENERATING
		self.state.message = None
		token = self._advance()
		try:
			background = await self.api.cover(req)
			data = await self.api.generate(req)
		except QuizError as e:
			if self._stale(token, Phase.GENERATING):
				return False
			self.state.phase = Phase.INPUT
			self.state.message = f"Failed to generate quiz: {e}"
			return False
		if self._stale(token, Phase.GENERATING):
			return False
		quiz = SavedQuiz(
			quiz_id=uuid.uuid4().hex,
			mcqs=data.mcqs,
			open_ended=data.open_ended,
			age_range=req.age_range,
			is_book_known=data.is_book_known,
			warning=data.warning,
			background=background,
		)
		self.store.set(QUIZ_KEY, quiz.model_dump(by_alias=True))
		self.state.quiz = quiz
		self.state.answers = self._restore_answers(quiz.quiz_id)
		self.state.result = None
		self.state.phase = Phase.TAKING
		return True

	# ------------------------------------------------------------------
	# Taking

	def set_answer(self, key: str, value: str) -> None:
		self._expect(Phase.TAKING)
		quiz = self.state.quiz
		match = _ANSWER_KEY.fullmatch(key)
		if match is None:
			raise KeyError(key)
		kind, number = match.group(1), int(match.group(2))
		count = len(quiz.mcqs) if kind == "mcq" else len(quiz.open_ended)
		if not 1 <= number <= count:
			raise KeyError(key)
		if kind == "mcq" and value not in OPTION_LETTERS:
			raise ValueError(f"{key} answer must be one of {', '.join(OPTION_LETTERS)}")
		self.state.answers[key] = value
		self.autosaver.notify(debounce=kind == "open")

	def answer_set(self) -> Dict[str, str]:
		"""Every answer key of the current quiz, blank where unanswered."""
		quiz = self.state.quiz
		if quiz is None:
			return {}
		answers = {f"mcq{i}": self.state.answers.get(f"mcq{i}", "") for i in range(1, len(quiz.mcqs) + 1)}
		answers.update({f"open{i}": self.state.answers.get(f"open{i}", "") for i in range(1, len(quiz.open_ended) + 1)})
		return answers

	def reset_answers(self) -> None:
		self._expect(Phase.TAKING)
		self.speech.stop()
		self.state.answers = {}
		self.store.remove(ANSWERS_KEY)
		self.state.message = "Quiz answers reset."

	async def submit(self) -> Optional[SubmitResponse]:
		self._expect(Phase.TAKING)
		self.speech.stop()
		self.autosaver.flush()
		quiz = self.state.quiz
		answers = self.answer_set()
		self.state.phase = Phase.EVALUATING
		self.state.message = None
		token = self._advance()
		try:
			result = await self.api.submit(quiz, answers, quiz.age_range)
		except QuizError as e:
			if self._stale(token, Phase.EVALUATING):
				return None
			logger.error("Submit failed: %s", e)
			self.state.phase = Phase.TAKING
			self.state.message = "Failed to submit quiz."
			return None
		if self._stale(token, Phase.EVALUATING):
			return None
		self.store.remove(ANSWERS_KEY)
		self.state.answers = {}
		self.state.result = result
		self.state.phase = Phase.RESULTS
		return result

	# ------------------------------------------------------------------
	# leaving a quiz

	def back_to_search(self) -> None:
		if self.state.phase is Phase.INPUT:
			raise InvalidTransition("Already on the search form")
		self._advance()
		self._clear_quiz()
		self.state.phase = Phase.INPUT
		self.state.message = "Returned to search."

	def start_new(self) -> None:
		self._expect(Phase.RESULTS)
		self._advance()
		self._clear_quiz()
		self.state.phase = Phase.INPUT
		self.state.message = "Ready for new quiz."

	def retake(self) -> None:
		self._expect(Phase.RESULTS)
		self._advance()
		self.state.answers = {}
		self.state.result = None
		self.store.remove(ANSWERS_KEY)
		self.state.phase = Phase.TAKING
