from __future__ import annotations
import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx

from .schemas import Background
from .settings import settings

logger = logging.getLogger(__name__)

BACKGROUND_BY_AGE = {
	"5-7": "https://source.unsplash.com/800x600/?books,children",
	"8-10": "https://source.unsplash.com/800x600/?adventure,books",
	"11-13": "https://source.unsplash.com/800x600/?literature,teen",
	"14+": "https://source.unsplash.com/800x600/?literature,classic",
}
DEFAULT_BACKGROUND = "https://source.unsplash.com/800x600/?books"


def age_background(age_range: Optional[str]) -> str:
	return BACKGROUND_BY_AGE.get(age_range or "", DEFAULT_BACKGROUND)


def cover_url(book: str) -> str:
	title = re.sub(r"\s+", "+", book.strip())
	# default=false makes Open Library answer 404 instead of a blank placeholder
	return f"{settings.cover_base_url}/{quote(title, safe='+')}-M.jpg?default=false"


async def find_background(
	book: str,
	age_range: Optional[str],
	use_generic: bool,
	*,
	transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Background:
	"""Cover image for the title, or an age-appropriate stock background."""
	fallback = age_background(age_range)
	if use_generic or not book.strip() or not settings.cover_lookup_enabled:
		return Background(url=fallback, type="fallback")
	warning = f'Book cover not found for "{book}", using generic background.'
	client = httpx.AsyncClient(timeout=10, follow_redirects=True, transport=transport)
	try:
		r = await client.get(cover_url(book))
	except httpx.RequestError as e:
		logger.info("Cover lookup failed for %r: %s", book, e)
		return Background(url=fallback, type="fallback", warning=warning)
	finally:
		await client.aclose()
	if r.is_success and "image" in r.headers.get("content-type", ""):
		return Background(url=str(r.url), type="cover")
	logger.info("No cover for %r (status %s)", book, r.status_code)
	return Background(url=fallback, type="fallback", warning=warning)
