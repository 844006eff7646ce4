from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

from .schemas import MCQ_COUNT, OPEN_COUNT, OPEN_POINTS, QuizRequest


_OUTPUT_SHAPE = (
	'  "mcqs": [{"question": "str", "options": {"a": "str", "b": "str", "c": "str", "d": "str"}, "correct": "letter"} ...],\n'
	'  "openEnded": [{"question": "str", "keyPoints": ["point1", "point2", ...]} ...]'
)


@dataclass(frozen=True)
class GradingItem:
	q_num: int
	question: str
	key_points: List[str]
	response: str


def unknown_book_warning(book: str) -> str:
	return f"Book '{book}' not found, using generic questions."


def build_book_check_prompt(book: str) -> str:
	return (
		f'Is the book "{book}" a known published book? '
		'Respond with JSON: {"isKnown": boolean, "message": "string"}'
	)


def _generic_body(age_range: str) -> str:
	return (
		f"Generate a generic literature quiz suitable for age range {age_range}, not tied to a specific book.\n"
		f"- Create {MCQ_COUNT} multiple-choice questions (MCQs) about general reading comprehension, literary themes, "
		"or story elements (e.g., plot, characters, setting, themes).\n"
		"- Each MCQ should have a question, 4 options (a, b, c, d), and specify the correct answer letter.\n"
		f"- Create {OPEN_COUNT} open-ended questions for written responses about general literature concepts "
		"(e.g., analyzing themes, character motivations).\n"
		"- For each open-ended question, provide the question and a list of key points for evaluation.\n"
		"- Adjust difficulty and language to be appropriate for the age range.\n"
	)


def build_generation_prompt(req: QuizRequest, *, book_known: bool) -> str:
	"""Instruction for quiz content.

	Generic requests and unrecognized titles get the general-literature quiz;
	an unrecognized title additionally carries a warning field naming it.
	"""
	if req.use_generic:
		return _generic_body(req.age_range or "") + "- Respond ONLY in JSON format: {\n" + _OUTPUT_SHAPE + "\n}"
	if not book_known:
		return (
			f'The book "{req.book}" was not found. '
			+ _generic_body(req.age_range or "")
			+ "- Respond ONLY in JSON format: {\n"
			+ _OUTPUT_SHAPE
			+ ",\n"
			+ f'  "warning": "{unknown_book_warning(req.book)}"\n'
			+ "}"
		)
	scope = "all chapters" if req.chapters == "all" else f"chapters {req.chapters}"
	return (
		f'Generate a quiz for the book "{req.book}" covering {scope}, suitable for age range {req.age_range}.\n'
		f"- Create {MCQ_COUNT} multiple-choice questions (MCQs). Each MCQ should have a question, 4 options (a, b, c, d), "
		"and specify the correct answer letter.\n"
		f"- Create {OPEN_COUNT} open-ended questions for written responses. For each, provide the question and a list "
		"of key points for evaluation.\n"
		"- Adjust difficulty and language to be appropriate for the age range.\n"
		"- Respond ONLY in JSON format: {\n" + _OUTPUT_SHAPE + "\n}"
	)


def _grading_block(item: GradingItem, age_range: str) -> str:
	return (
		f'Evaluate the student\'s response to: "{item.question}" for age range {age_range}.\n'
		f"Key points to cover: {', '.join(item.key_points)}.\n"
		f"Student response: \"{item.response}\"\n"
		f"Score out of {OPEN_POINTS} (considering age-appropriate understanding, completeness, and accuracy). "
		"Provide brief feedback.\n"
		f'Return result as: {{"qNum": {item.q_num}, "score": number, "feedback": "string"}}\n'
	)


def build_grading_prompt(items: Sequence[GradingItem], age_range: str) -> str:
	blocks = "\n".join(_grading_block(item, age_range) for item in items)
	return (
		"Evaluate the following responses:\n"
		f"{blocks}\n"
		"Respond with JSON array: [{qNum, score, feedback}, ...]"
	)
