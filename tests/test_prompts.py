import pytest

from bookquiz.prompts import (
	GradingItem,
	build_book_check_prompt,
	build_generation_prompt,
	build_grading_prompt,
)
from bookquiz.schemas import QuizRequest


def test_book_check_prompt_names_title():
	prompt = build_book_check_prompt("Matilda")
	assert '"Matilda"' in prompt
	assert '"isKnown"' in prompt


def test_known_book_prompt_covers_all_chapters():
	req = QuizRequest(book="Matilda", age_range="8-10").check()
	prompt = build_generation_prompt(req, book_known=True)
	assert 'for the book "Matilda" covering all chapters' in prompt
	assert "age range 8-10" in prompt
	assert "Create 6 multiple-choice" in prompt
	assert "Create 4 open-ended" in prompt
	assert "warning" not in prompt


def test_known_book_prompt_uses_chapter_range():
	req = QuizRequest(book="Matilda", chapters=" 1-3 ", age_range="8-10").check()
	prompt = build_generation_prompt(req, book_known=True)
	assert "covering chapters 1-3," in prompt


@pytest.mark.parametrize("chapters, expected", [("Chapters 1-3", "1-3"), ("chapter 5", "5"), ("All", "all"), ("Chapters", "all")])
def test_chapter_word_is_not_repeated(chapters, expected):
	req = QuizRequest(book="Matilda", chapters=chapters, age_range="8-10").check()
	assert req.chapters == expected
	assert "chapters chapter" not in build_generation_prompt(req, book_known=True)


def test_unknown_book_prompt_is_generic_with_warning():
	req = QuizRequest(book="Unknown Title XYZ", age_range="5-7").check()
	prompt = build_generation_prompt(req, book_known=False)
	assert 'The book "Unknown Title XYZ" was not found.' in prompt
	assert "not tied to a specific book" in prompt
	assert "Book 'Unknown Title XYZ' not found, using generic questions." in prompt


def test_generic_prompt_has_no_book_and_no_warning():
	req = QuizRequest(book="Ignored", age_range="14+", use_generic=True).check()
	prompt = build_generation_prompt(req, book_known=True)
	assert "Ignored" not in prompt
	assert "warning" not in prompt
	assert '"openEnded"' in prompt


def test_grading_prompt_lists_every_item_with_its_number():
	items = [
		GradingItem(q_num=7, question="Why?", key_points=["a", "b"], response="Because."),
		GradingItem(q_num=9, question="How?", key_points=["c"], response="Like so."),
	]
	prompt = build_grading_prompt(items, "11-13")
	assert '"qNum": 7' in prompt
	assert '"qNum": 9' in prompt
	assert "Key points to cover: a, b." in prompt
	assert "Because." in prompt
	assert prompt.endswith("Respond with JSON array: [{qNum, score, feedback}, ...]")
