from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Optional, Type

import httpx
from pydantic import BaseModel, ValidationError

from ..covers import age_background
from ..errors import GenerationError, QuizError, TransportError
from ..schemas import Background, GenerateResponse, QuizContent, QuizRequest, SubmitResponse

logger = logging.getLogger(__name__)


class QuizApiClient:
	"""Talks to the quiz server the same way the browser front end does."""

	def __init__(self, base_url: str = "http://localhost:3000", *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
		self._client = httpx.AsyncClient(base_url=base_url, timeout=None, transport=transport)

	async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
		try:
			return await self._client.request(method, url, **kwargs)
		except httpx.RequestError as e:
			logger.error("%s %s failed: %s", method, url, e)
			raise TransportError(f"Could not reach the quiz server: {e}") from e

	@staticmethod
	def _parse(r: httpx.Response, model: Type[BaseModel], exc_type: Type[QuizError]) -> Any:
		try:
			data = r.json()
		except ValueError:
			raise exc_type(f"Server answered HTTP {r.status_code} without JSON")
		if not r.is_success or (isinstance(data, dict) and "error" in data):
			message = data.get("error") if isinstance(data, dict) else None
			raise exc_type(message or f"Server answered HTTP {r.status_code}")
		try:
			return model.model_validate(data)
		except ValidationError as e:
			raise exc_type(f"Unexpected server reply: {e.errors()[0]['msg']}") from e

	async def generate(self, req: QuizRequest) -> GenerateResponse:
		r = await self._request("POST", "/generate", json=req.model_dump(by_alias=True))
		return self._parse(r, GenerateResponse, GenerationError)

	async def submit(self, content: QuizContent, answers: Mapping[str, str], age_range: str) -> SubmitResponse:
		body: Dict[str, Any] = content.model_dump(by_alias=True, include={"mcqs", "open_ended"})
		body.update({"answers": dict(answers), "ageRange": age_range})
		r = await self._request("POST", "/submit", json=body)
		return self._parse(r, SubmitResponse, TransportError)

	async def cover(self, req: QuizRequest) -> Background:
		params = {"book": req.book, "ageRange": req.age_range or "", "useGeneric": str(req.use_generic).lower()}
		try:
			r = await self._request("GET", "/cover", params=params)
			return self._parse(r, Background, TransportError)
		except TransportError as e:
			logger.info("Cover lookup unavailable, using age background: %s", e)
			return Background(url=age_background(req.age_range), type="fallback")

	async def aclose(self) -> None:
		await self._client.aclose()
