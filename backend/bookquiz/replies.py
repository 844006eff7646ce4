"""Schema-checked decoding of free-text model replies.

Every decoder returns a ``Decoded`` holding either the typed value or a named
failure reason; nothing here lets a raw ``json`` or pydantic exception escape.
"""
from __future__ import annotations
import json
import re
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Type, TypeVar

from pydantic import ValidationError

from .errors import QuizError, ReplyDecodeError
from .schemas import (
	BookCheck,
	MCQ_COUNT,
	OPEN_COUNT,
	OPEN_POINTS,
	OPTION_LETTERS,
	OpenEndedScore,
	QuizContent,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Decoded(Generic[T]):
	value: Optional[T] = None
	error: Optional[str] = None
	raw: str = ""

	@property
	def ok(self) -> bool:
		return self.error is None

	def unwrap(self, exc_type: Type[QuizError] = ReplyDecodeError) -> T:
		if self.error is not None:
			if exc_type is ReplyDecodeError:
				raise ReplyDecodeError(self.error, self.raw)
			raise exc_type(self.error)
		return self.value  # type: ignore[return-value]


def _fail(reason: str, raw: str) -> Decoded[Any]:
	return Decoded(error=reason, raw=raw)


def extract_json(text: str) -> Any:
	"""Pull the first JSON document out of a reply; None when there is none."""
	try:
		return json.loads(text)
	except Exception:
		pass
	code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
	if code_block:
		try:
			return json.loads(code_block.group(1))
		except Exception:
			pass
	# Whichever bracket opens first is the outer document
	pairs = sorted((("{", "}"), ("[", "]")), key=lambda p: (text.find(p[0]) == -1, text.find(p[0])))
	for opener, closer in pairs:
		first = text.find(opener)
		last = text.rfind(closer)
		if first != -1 and last > first:
			try:
				return json.loads(text[first : last + 1])
			except Exception:
				continue
	return None


def decode_book_check(raw: str) -> Decoded[BookCheck]:
	data = extract_json(raw)
	if not isinstance(data, dict):
		return _fail("book check reply is not a JSON object", raw)
	if not isinstance(data.get("isKnown"), bool):
		return _fail("book check reply has no boolean isKnown", raw)
	try:
		return Decoded(value=BookCheck.model_validate(data), raw=raw)
	except ValidationError as e:
		return _fail(f"book check reply does not match schema: {e.errors()[0]['msg']}", raw)


def _normalize_mcq(item: Any, number: int) -> Any:
	if not isinstance(item, dict):
		raise ValueError(f"MCQ {number} is not an object")
	options = item.get("options")
	if not isinstance(options, dict):
		raise ValueError(f"MCQ {number} has no options object")
	options = {str(k).strip().lower(): str(v) for k, v in options.items()}
	if sorted(options) != OPTION_LETTERS:
		raise ValueError(f"MCQ {number} must have exactly options a-d")
	correct = str(item.get("correct", "")).strip().lower()
	if correct not in OPTION_LETTERS:
		raise ValueError(f"MCQ {number} correct answer '{correct}' is not one of a-d")
	question = item.get("question")
	if not isinstance(question, str) or not question.strip():
		raise ValueError(f"MCQ {number} has no question text")
	return {"question": question.strip(), "options": {k: options[k] for k in OPTION_LETTERS}, "correct": correct}


def decode_quiz(raw: str) -> Decoded[QuizContent]:
	data = extract_json(raw)
	if not isinstance(data, dict):
		return _fail("quiz reply is not a JSON object", raw)
	mcqs = data.get("mcqs")
	open_ended = data.get("openEnded")
	if not isinstance(mcqs, list) or len(mcqs) != MCQ_COUNT:
		return _fail(f"quiz reply must contain exactly {MCQ_COUNT} mcqs", raw)
	if not isinstance(open_ended, list) or len(open_ended) != OPEN_COUNT:
		return _fail(f"quiz reply must contain exactly {OPEN_COUNT} openEnded questions", raw)
	try:
		normalized = [_normalize_mcq(item, i + 1) for i, item in enumerate(mcqs)]
	except ValueError as e:
		return _fail(str(e), raw)
	try:
		content = QuizContent.model_validate({"mcqs": normalized, "openEnded": open_ended})
	except ValidationError as e:
		return _fail(f"quiz reply does not match schema: {e.errors()[0]['msg']}", raw)
	return Decoded(value=content, raw=raw)


def _clamp_score(value: Any) -> int:
	score = int(round(float(value)))
	return max(0, min(OPEN_POINTS, score))


def decode_scores(raw: str) -> Decoded[List[OpenEndedScore]]:
	data = extract_json(raw)
	# Some models wrap the array in an object
	if isinstance(data, dict):
		inner = [v for v in data.values() if isinstance(v, list)]
		data = inner[0] if len(inner) == 1 else data
	if not isinstance(data, list):
		return _fail("grading reply is not a JSON array", raw)
	scores: List[OpenEndedScore] = []
	for entry in data:
		if not isinstance(entry, dict):
			return _fail("grading reply contains a non-object entry", raw)
		try:
			scores.append(
				OpenEndedScore(
					q_num=int(entry["qNum"]),
					score=_clamp_score(entry["score"]),
					feedback=str(entry.get("feedback") or ""),
				)
			)
		except (KeyError, TypeError, ValueError) as e:
			return _fail(f"grading reply entry is malformed: {e}", raw)
	return Decoded(value=scores, raw=raw)
