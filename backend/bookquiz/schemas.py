from __future__ import annotations
import re
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import InputValidationError


AGE_RANGES: List[str] = ["5-7", "8-10", "11-13", "14+"]
OPTION_LETTERS: List[str] = ["a", "b", "c", "d"]
MCQ_COUNT = 6
OPEN_COUNT = 4
MCQ_POINTS = 1
OPEN_POINTS = 10

_CHAPTER_WORD = re.compile(r"^chapters?\b\s*")


class WireModel(BaseModel):
	# Browser payloads use camelCase; Python code uses snake_case
	model_config = ConfigDict(populate_by_name=True)


class QuizRequest(WireModel):
	book: str = ""
	chapters: str = "all"
	age_range: Optional[str] = Field(default=None, alias="ageRange")
	use_generic: bool = Field(default=False, alias="useGeneric")

	def normalized(self) -> "QuizRequest":
		# "Chapters 1-3" -> "1-3"
		chapters = _CHAPTER_WORD.sub("", (self.chapters or "").strip().lower()) or "all"
		return QuizRequest(
			book=(self.book or "").strip(),
			chapters=chapters,
			age_range=self.age_range or None,
			use_generic=self.use_generic,
		)

	def check(self) -> "QuizRequest":
		"""Return the normalized request or raise InputValidationError."""
		req = self.normalized()
		if not req.age_range:
			raise InputValidationError("Please select an age range.")
		if req.age_range not in AGE_RANGES:
			raise InputValidationError(f"Age range must be one of {', '.join(AGE_RANGES)}.")
		if not req.use_generic and not req.book:
			raise InputValidationError("Please enter a book name or select generic questions.")
		return req


class MCQ(WireModel):
	model_config = ConfigDict(populate_by_name=True, frozen=True)

	question: str
	options: Dict[str, str]
	correct: str


class OpenEndedQuestion(WireModel):
	question: str
	key_points: List[str] = Field(default_factory=list, alias="keyPoints")


class QuizContent(WireModel):
	mcqs: List[MCQ]
	open_ended: List[OpenEndedQuestion] = Field(alias="openEnded")


class Quiz(QuizContent):
	age_range: str = Field(alias="ageRange")
	is_book_known: bool = Field(default=True, alias="isBookKnown")
	warning: Optional[str] = None


class GenerateResponse(QuizContent):
	is_book_known: bool = Field(alias="isBookKnown")
	warning: Optional[str] = None


class BookCheck(WireModel):
	is_known: bool = Field(alias="isKnown")
	message: str = ""


class OpenEndedScore(WireModel):
	q_num: int = Field(alias="qNum")
	score: int
	feedback: str = ""


class SubmitRequest(QuizContent):
	answers: Dict[str, Optional[str]] = Field(default_factory=dict)
	age_range: str = Field(default="", alias="ageRange")


class GradingResult(WireModel):
	feedback_fragments: List[str] = Field(default_factory=list, alias="perQuestionFeedbackHtml")
	total_score: int = Field(alias="totalScore")
	max_score: int = Field(alias="maxScore")

	@property
	def percentage(self) -> int:
		if self.max_score <= 0:
			return 0
		# Half-up, the way the browser's toFixed(0) presents it
		return int(100 * self.total_score / self.max_score + 0.5)

	@property
	def score_line(self) -> str:
		return f"Total Score: {self.total_score}/{self.max_score} ({self.percentage}%)"


class SubmitResponse(WireModel):
	feedback: str
	score: str
	total_score: int = Field(alias="totalScore")
	max_score: int = Field(alias="maxScore")
	percentage: int


class Background(WireModel):
	url: str
	type: Literal["cover", "fallback"]
	warning: Optional[str] = None


class ErrorResponse(WireModel):
	error: str
