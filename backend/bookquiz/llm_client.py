from __future__ import annotations
import logging
import httpx
from typing import Any, AsyncIterator, Dict, Optional
from .errors import TransportError
from .settings import settings

logger = logging.getLogger(__name__)


class LLMClient:
	"""Single-attempt text completion against the configured provider.

	The key is checked when a call is made rather than at construction so that
	callers which degrade on failure (grading) still get a chance to do so.
	"""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		provider: Optional[str] = None,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.provider = provider or settings.llm_provider
		if self.provider == "gemini":
			self.api_key = api_key or settings.gemini_api_key
			self.model = model or settings.gemini_model
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
		elif self.provider == "openai":
			self.api_key = api_key or settings.openai_api_key
			self.model = model or settings.openai_model
			self.base_url = base_url or settings.openai_base_url
		else:
			raise ValueError(f"Unsupported LLM provider: {self.provider}")
		self._client = httpx.AsyncClient(timeout=settings.llm_timeout_seconds, transport=transport)

	async def generate(self, prompt: str) -> str:
		if not self.api_key:
			raise TransportError(f"No API key configured for provider '{self.provider}'")
		if self.provider == "gemini":
			return await self._post_gemini(prompt)
		return await self._post_openai(prompt)

	async def _post_openai(self, prompt: str) -> str:
		headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": [{"role": "user", "content": prompt}],
		}
		r = await self._post(headers=headers, params={}, payload=payload)
		try:
			return r.json()["choices"][0]["message"]["content"]
		except Exception:
			raise TransportError(f"Unexpected OpenAI response: {r.text[:200]}")

	async def _post_gemini(self, prompt: str) -> str:
		payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
		r = await self._post(headers={}, params={"key": self.api_key}, payload=payload)
		try:
			return r.json()["candidates"][0]["content"]["parts"][0]["text"]
		except Exception:
			raise TransportError(f"Unexpected Gemini response: {r.text[:200]}")

	async def _post(self, *, headers: Dict[str, str], params: Dict[str, Any], payload: Dict[str, Any]) -> httpx.Response:
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			logger.error("%s call failed with status %s", self.provider, http_err.response.status_code)
			raise TransportError(f"{self.provider} returned HTTP {http_err.response.status_code}") from http_err
		except httpx.RequestError as net_err:
			logger.error("%s call failed: %s", self.provider, net_err)
			raise TransportError(f"Could not reach {self.provider}: {net_err}") from net_err
		return r

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_llm() -> AsyncIterator[LLMClient]:
	client = LLMClient()
	try:
		yield client
	finally:
		await client.aclose()
