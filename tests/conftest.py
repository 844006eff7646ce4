import json
from typing import List, Union

import pytest
from fastapi.testclient import TestClient

from bookquiz.llm_client import get_llm
from bookquiz.main import app
from bookquiz.settings import settings


class ScriptedLLM:
	"""Stands in for LLMClient: hands out canned replies in order and records prompts."""

	def __init__(self, *replies: Union[str, Exception]) -> None:
		self.replies: List[Union[str, Exception]] = list(replies)
		self.prompts: List[str] = []

	async def generate(self, prompt: str) -> str:
		self.prompts.append(prompt)
		if not self.replies:
			raise AssertionError(f"unexpected LLM call: {prompt[:80]}")
		reply = self.replies.pop(0)
		if isinstance(reply, Exception):
			raise reply
		return reply

	async def aclose(self) -> None:
		pass


def make_quiz_payload(correct: str = "b", warning: str = None) -> dict:
	payload = {
		"mcqs": [
			{
				"question": f"Question {i}?",
				"options": {"a": "one", "b": "two", "c": "three", "d": "four"},
				"correct": correct,
			}
			for i in range(1, 7)
		],
		"openEnded": [
			{"question": f"Explain theme {i}.", "keyPoints": [f"point {i}a", f"point {i}b"]}
			for i in range(1, 5)
		],
	}
	if warning:
		payload["warning"] = warning
	return payload


def quiz_reply(**kwargs) -> str:
	return json.dumps(make_quiz_payload(**kwargs))


@pytest.fixture
def quiz_payload():
	return make_quiz_payload()


@pytest.fixture(autouse=True)
def no_cover_lookup(monkeypatch):
	monkeypatch.setattr(settings, "cover_lookup_enabled", False)


@pytest.fixture
def llm():
	fake = ScriptedLLM()
	app.dependency_overrides[get_llm] = lambda: fake
	yield fake
	app.dependency_overrides.pop(get_llm, None)


@pytest.fixture
def client(llm):
	with TestClient(app) as c:
		yield c
