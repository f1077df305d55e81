"""Error types shared by the LLM pipeline and the route boundary.

``ProviderError`` and ``NetworkError`` are retryable upstream failures.
``ExtractionError`` and ``ShapeError`` describe a reply we could not use and
are always handled by the caller.
"""
from __future__ import annotations

import enum
import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from .settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LLMError(Exception):
	"""Base class for failures raised by the LLM pipeline."""


class ConfigurationError(LLMError):
	pass


class ProviderError(LLMError):
	def __init__(self, status_code: int, body: str = "") -> None:
		self.status_code = status_code
		self.body = body
		super().__init__(f"LLM request failed ({status_code}): {body[:500]}")


class NetworkError(LLMError):
	def __init__(self, message: str, *, timeout: bool = False) -> None:
		self.timeout = timeout
		super().__init__(message)


class ExtractionError(LLMError):
	def __init__(self, reason: str, span: Optional[str] = None) -> None:
		self.reason = reason
		self.span = span
		super().__init__(f"Structured output extraction failed: {reason}")


class ShapeError(LLMError):
	"""Parsed JSON did not have the structure the caller expected."""


class ErrorType(str, enum.Enum):
	NETWORK = "network"
	TIMEOUT = "timeout"
	SERVER = "server"
	VALIDATION = "validation"
	UNKNOWN = "unknown"


_FRIENDLY_MESSAGES = {
	ErrorType.NETWORK: "Unable to connect. Please check your internet connection.",
	ErrorType.TIMEOUT: "Request took too long. Please try again.",
	ErrorType.VALIDATION: "Please check your input and try again.",
	ErrorType.SERVER: "Server error. Please try again later.",
	ErrorType.UNKNOWN: "An unexpected error occurred. Please try again.",
}


def classify_error(error: BaseException) -> ErrorType:
	if isinstance(error, NetworkError):
		return ErrorType.TIMEOUT if error.timeout else ErrorType.NETWORK
	if isinstance(error, ProviderError):
		if error.status_code in (401, 403):
			return ErrorType.VALIDATION
		if error.status_code >= 500:
			return ErrorType.SERVER
		return ErrorType.UNKNOWN
	message = str(error).lower()
	if "timeout" in message:
		return ErrorType.TIMEOUT
	if "network" in message or "fetch" in message:
		return ErrorType.NETWORK
	if "401" in message or "403" in message:
		return ErrorType.VALIDATION
	if "500" in message or "502" in message or "503" in message:
		return ErrorType.SERVER
	return ErrorType.UNKNOWN


def user_friendly_message(error: BaseException) -> str:
	return _FRIENDLY_MESSAGES[classify_error(error)]


_FALLBACKS: dict[str, Any] = {
	"personalize": {
		"content": "Unable to personalize content at this time. The original content will be displayed.",
		"type": "explanation",
	},
	"generate-questions": {
		"question": "What is the main concept of this section?",
		"options": ["Option A", "Option B", "Option C", "Option D"],
		"correctAnswer": 0,
		"explanation": "Please review the section to understand the main concept.",
		"difficulty": "easy",
	},
	"generate-audio": {
		"conversation": [
			{
				"speaker": "teacher",
				"text": "Welcome to this audio lesson. Due to technical difficulties, the full audio lesson is not available at this time.",
			},
			{
				"speaker": "student",
				"text": "I understand. Is there an alternative way to learn this material?",
			},
		],
		"visuals": ["Full audio lesson coming soon"],
	},
}


def fallback_content(kind: str) -> Any:
	"""Canned payload used when generation fails and the caller prefers something over nothing."""
	payload = _FALLBACKS.get(kind)
	if payload is None:
		return {"content": "Content temporarily unavailable.", "type": "explanation"}
	return json.loads(json.dumps(payload))


def sanitize_error_message(error: BaseException) -> str:
	if settings.is_production:
		return "An error occurred while processing your request"
	return str(error) or "An unknown error occurred"


def log_error(error: BaseException, context: str) -> None:
	logger.error(
		"[%s] %s: %s (at %s)",
		context,
		type(error).__name__,
		error,
		datetime.now(timezone.utc).isoformat(),
		exc_info=error,
	)


async def safe_call(
	fn: Callable[[], Awaitable[T]],
	fallback: Optional[Callable[[], T]] = None,
	context: Optional[str] = None,
	*,
	fallback_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
	"""Await ``fn``; on an error in ``fallback_on`` log it and return ``fallback()``.

	Without a fallback the logged error is re-raised. Errors outside
	``fallback_on`` propagate untouched.
	"""
	try:
		return await fn()
	except fallback_on as err:
		log_error(err, context or "API call")
		if fallback is not None:
			return fallback()
		raise
