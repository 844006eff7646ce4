from __future__ import annotations
import logging
from typing import Protocol

from .errors import GenerationError
from .prompts import build_book_check_prompt, build_generation_prompt, unknown_book_warning
from .replies import decode_book_check, decode_quiz
from .schemas import Quiz, QuizRequest

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
	async def generate(self, prompt: str) -> str: ...


async def check_book_known(client: CompletionClient, book: str) -> bool:
	raw = await client.generate(build_book_check_prompt(book))
	check = decode_book_check(raw).unwrap(GenerationError)
	logger.info("Book check for %r: known=%s (%s)", book, check.is_known, check.message)
	return check.is_known


async def generate_quiz(client: CompletionClient, req: QuizRequest) -> Quiz:
	"""Check the title (unless generic), then ask for the quiz content.

	Any transport or decode failure surfaces as GenerationError; there is no retry.
	"""
	req = req.check()
	try:
		book_known = True
		if not req.use_generic:
			book_known = await check_book_known(client, req.book)
		raw = await client.generate(build_generation_prompt(req, book_known=book_known))
		content = decode_quiz(raw).unwrap(GenerationError)
	except GenerationError as e:
		logger.error("Quiz generation error: %s", e)
		raise
	except Exception as e:
		logger.error("Quiz generation error: %s", e)
		raise GenerationError(str(e) or type(e).__name__) from e
	return Quiz(
		mcqs=content.mcqs,
		open_ended=content.open_ended,
		age_range=req.age_range,
		is_book_known=book_known,
		warning=None if book_known else unknown_book_warning(req.book),
	)
