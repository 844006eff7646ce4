from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..covers import find_background
from ..generation import generate_quiz
from ..grading import grade_submission
from ..llm_client import LLMClient, get_llm
from ..schemas import (
	Background,
	ErrorResponse,
	GenerateResponse,
	QuizRequest,
	SubmitRequest,
	SubmitResponse,
)


router = APIRouter(tags=["quiz"])

_error_responses = {400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}


@router.post("/generate", response_model=GenerateResponse, response_model_exclude_none=True, responses=_error_responses)
async def generate(req: QuizRequest, client: LLMClient = Depends(get_llm)):
	quiz = await generate_quiz(client, req)
	return GenerateResponse(
		mcqs=quiz.mcqs,
		open_ended=quiz.open_ended,
		is_book_known=quiz.is_book_known,
		warning=quiz.warning,
	)


@router.post("/submit", response_model=SubmitResponse)
async def submit(req: SubmitRequest, client: LLMClient = Depends(get_llm)):
	result = await grade_submission(client, req.mcqs, req.open_ended, req.answers, req.age_range)
	return SubmitResponse(
		feedback="".join(result.feedback_fragments),
		score=result.score_line,
		total_score=result.total_score,
		max_score=result.max_score,
		percentage=result.percentage,
	)


@router.get("/cover", response_model=Background, response_model_exclude_none=True)
async def cover(
	book: str = "",
	age_range: Optional[str] = Query(default=None, alias="ageRange"),
	use_generic: bool = Query(default=False, alias="useGeneric"),
):
	return await find_background(book, age_range, use_generic)
