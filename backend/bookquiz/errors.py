from __future__ import annotations


class QuizError(Exception):
	"""Base class for every failure the quiz service reports to a caller."""

	status_code = 500


class InputValidationError(QuizError):
	"""The quiz request is incomplete; the user has to correct it."""

	status_code = 400


class GenerationError(QuizError):
	status_code = 502


class GradingError(QuizError):
	"""Batch grading failed; callers degrade to zero-score fragments."""

	status_code = 502


class TransportError(QuizError):
	"""The LLM provider (or the quiz server) could not be reached or answered garbage."""

	status_code = 502


class ReplyDecodeError(QuizError):
	status_code = 502

	def __init__(self, reason: str, raw: str = "") -> None:
		super().__init__(reason)
		self.reason = reason
		self.raw = raw


class InvalidTransition(QuizError):
	"""A lifecycle action was attempted from a phase that does not allow it."""

	status_code = 409
