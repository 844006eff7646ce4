from __future__ import annotations
import html
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import GradingError
from .generation import CompletionClient
from .prompts import GradingItem, build_grading_prompt
from .replies import decode_scores
from .schemas import MCQ, MCQ_POINTS, OPEN_POINTS, GradingResult, OpenEndedQuestion, OpenEndedScore

logger = logging.getLogger(__name__)

Answers = Mapping[str, Optional[str]]

NO_RESPONSE = "No response provided."
EVALUATION_ERROR = "Error evaluating response."


def _mcq_fragment(q_num: int, correct: bool, answer_letter: str) -> str:
	if correct:
		return f'<p class="correct animate__animated animate__bounceIn">Question {q_num} (MCQ): Correct!</p>'
	return (
		f'<p class="incorrect animate__animated animate__shakeX">Question {q_num} (MCQ): '
		f"Incorrect. Correct is {answer_letter.upper()}.</p>"
	)


def _open_fragment(q_num: int, score: int, feedback_html: str) -> str:
	class_name = "correct" if score >= OPEN_POINTS / 2 else "incorrect"
	return (
		f'<p>Question {q_num} (Open): <span class="{class_name}">Score: {score}/{OPEN_POINTS}</span></p>'
		f'<div class="feedback animate__animated animate__fadeIn">{feedback_html}</div>'
	)


def grade_mcqs(mcqs: Sequence[MCQ], answers: Answers) -> Tuple[int, List[str]]:
	score = 0
	fragments: List[str] = []
	for index, mcq in enumerate(mcqs):
		q_num = index + 1
		selected = answers.get(f"mcq{q_num}")
		correct = selected == mcq.correct
		if correct:
			score += MCQ_POINTS
		fragments.append(_mcq_fragment(q_num, correct, mcq.correct))
	return score, fragments


async def _score_batch(client: CompletionClient, items: Sequence[GradingItem], age_range: str) -> Dict[int, OpenEndedScore]:
	try:
		raw = await client.generate(build_grading_prompt(items, age_range))
		results = decode_scores(raw).unwrap(GradingError)
	except GradingError:
		raise
	except Exception as e:
		raise GradingError(str(e) or type(e).__name__) from e
	return {r.q_num: r for r in results}


async def grade_open_ended(
	client: CompletionClient,
	open_ended: Sequence[OpenEndedQuestion],
	answers: Answers,
	age_range: str,
	*,
	first_number: int = 1,
) -> Tuple[int, List[str]]:
	"""Grade free-text answers with a single batched model call.

	Blank answers never reach the model. When the batch call fails, each
	answered question degrades to a zero score with an error fragment.
	"""
	items: List[Optional[GradingItem]] = []
	for i, open_q in enumerate(open_ended):
		response = (answers.get(f"open{i + 1}") or "").strip()
		if not response:
			items.append(None)
			continue
		items.append(GradingItem(q_num=first_number + i, question=open_q.question, key_points=list(open_q.key_points), response=response))

	answered = [item for item in items if item is not None]
	results: Dict[int, OpenEndedScore] = {}
	failed = False
	if answered:
		try:
			results = await _score_batch(client, answered, age_range)
		except GradingError as e:
			logger.error("Batch evaluation error: %s", e)
			failed = True

	score = 0
	fragments: List[str] = []
	for i, item in enumerate(items):
		q_num = first_number + i
		if item is None:
			fragments.append(_open_fragment(q_num, 0, NO_RESPONSE))
			continue
		result = None if failed else results.get(q_num)
		if result is None:
			fragments.append(_open_fragment(q_num, 0, EVALUATION_ERROR))
			continue
		score += result.score
		fragments.append(_open_fragment(q_num, result.score, html.escape(result.feedback)))
	return score, fragments


async def grade_submission(
	client: CompletionClient,
	mcqs: Sequence[MCQ],
	open_ended: Sequence[OpenEndedQuestion],
	answers: Answers,
	age_range: str,
) -> GradingResult:
	mcq_score, mcq_fragments = grade_mcqs(mcqs, answers)
	open_score, open_fragments = await grade_open_ended(
		client, open_ended, answers, age_range, first_number=len(mcqs) + 1
	)
	return GradingResult(
		feedback_fragments=mcq_fragments + open_fragments,
		total_score=mcq_score + open_score,
		max_score=len(mcqs) * MCQ_POINTS + len(open_ended) * OPEN_POINTS,
	)
