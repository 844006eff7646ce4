"""Logging configuration helpers for the quiz service."""

from __future__ import annotations

import logging
from logging import Logger

from .settings import settings


def configure_logging() -> Logger:
	"""Configure basic logging for the service and return the package logger."""
	logging.basicConfig(
		level=getattr(logging, settings.log_level.upper(), logging.INFO),
		format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
	)
	return logging.getLogger("bookquiz")
