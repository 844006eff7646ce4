import json

import pytest

from bookquiz.errors import GenerationError, ReplyDecodeError
from bookquiz.replies import decode_book_check, decode_quiz, decode_scores, extract_json

from conftest import make_quiz_payload


def test_extract_json_from_fenced_block():
	assert extract_json('Sure!\n```json\n{"isKnown": true}\n```') == {"isKnown": True}


def test_extract_json_from_surrounding_prose():
	assert extract_json('Here: [{"qNum": 7}] done') == [{"qNum": 7}]


def test_extract_json_keeps_object_holding_arrays():
	assert extract_json('Quiz: {"mcqs": [1, 2], "openEnded": []} end') == {"mcqs": [1, 2], "openEnded": []}


def test_extract_json_gives_none_for_prose():
	assert extract_json("I cannot help with that.") is None


def test_book_check_decodes():
	decoded = decode_book_check('{"isKnown": false, "message": "No such book"}')
	assert decoded.ok
	assert decoded.value.is_known is False
	assert decoded.value.message == "No such book"


def test_book_check_requires_boolean():
	decoded = decode_book_check('{"isKnown": "maybe"}')
	assert not decoded.ok
	with pytest.raises(GenerationError):
		decoded.unwrap(GenerationError)


def test_unwrap_default_keeps_raw_reply():
	decoded = decode_book_check("nope")
	with pytest.raises(ReplyDecodeError) as info:
		decoded.unwrap()
	assert info.value.raw == "nope"


def test_quiz_decodes_and_normalizes_letters():
	payload = make_quiz_payload()
	payload["mcqs"][0]["correct"] = "B"
	payload["mcqs"][1]["options"] = {"A": "w", "B": "x", "C": "y", "D": "z"}
	decoded = decode_quiz(json.dumps(payload))
	assert decoded.ok
	quiz = decoded.value
	assert len(quiz.mcqs) == 6
	assert len(quiz.open_ended) == 4
	assert quiz.mcqs[0].correct == "b"
	assert list(quiz.mcqs[1].options) == ["a", "b", "c", "d"]
	assert quiz.open_ended[0].key_points == ["point 1a", "point 1b"]


def test_quiz_rejects_wrong_counts():
	payload = make_quiz_payload()
	payload["mcqs"] = payload["mcqs"][:5]
	decoded = decode_quiz(json.dumps(payload))
	assert decoded.error == "quiz reply must contain exactly 6 mcqs"


def test_quiz_rejects_correct_letter_outside_options():
	payload = make_quiz_payload()
	payload["mcqs"][2]["correct"] = "e"
	decoded = decode_quiz(json.dumps(payload))
	assert not decoded.ok
	assert "MCQ 3" in decoded.error


def test_quiz_rejects_missing_option():
	payload = make_quiz_payload()
	del payload["mcqs"][0]["options"]["d"]
	assert not decode_quiz(json.dumps(payload)).ok


def test_scores_are_clamped_and_rounded():
	decoded = decode_scores('[{"qNum": 7, "score": 14, "feedback": "wow"}, {"qNum": 8, "score": 6.6}, {"qNum": 9, "score": -2}]')
	assert decoded.ok
	assert [s.score for s in decoded.value] == [10, 7, 0]
	assert decoded.value[1].feedback == ""


def test_scores_accept_wrapped_array():
	decoded = decode_scores('{"results": [{"qNum": 7, "score": 5, "feedback": "ok"}]}')
	assert decoded.ok
	assert decoded.value[0].q_num == 7


def test_scores_reject_entry_without_score():
	decoded = decode_scores('[{"qNum": 7}]')
	assert not decoded.ok
