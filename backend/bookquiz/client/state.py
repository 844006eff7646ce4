from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from pydantic import Field

from ..schemas import Background, Quiz, QuizRequest, SubmitResponse


class Phase(str, Enum):
	INPUT = "input"
	GENERATING = "generating"
	TAKING = "taking"
	EVALUATING = "evaluating"
	RESULTS = "results"

	@property
	def loading(self) -> bool:
		return self in (Phase.GENERATING, Phase.EVALUATING)


class SavedQuiz(Quiz):
	"""A generated quiz as kept in local storage, with its background snapshot."""

	quiz_id: str = Field(alias="quizId")
	background: Background


@dataclass
class SessionState:
	phase: Phase = Phase.INPUT
	# Bumped on every transition that issues or abandons a server call
	generation: int = 0
	config: QuizRequest = field(default_factory=QuizRequest)
	quiz: Optional[SavedQuiz] = None
	answers: Dict[str, str] = field(default_factory=dict)
	result: Optional[SubmitResponse] = None
	capture_target: Optional[int] = None
	message: Optional[str] = None
