"""Capped exponential backoff for arbitrary async operations."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

import httpx

from .errors import ProviderError
from .settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
	max_retries: int = 3
	base_delay: float = 1.0
	max_delay: float = 10.0

	def __post_init__(self) -> None:
		if self.max_retries < 1:
			raise ValueError("max_retries must be at least 1")
		if self.base_delay < 0 or self.max_delay < 0:
			raise ValueError("retry delays must be non-negative")

	@classmethod
	def from_settings(cls) -> "RetryPolicy":
		return cls(
			max_retries=settings.retry_max_attempts,
			base_delay=settings.retry_base_delay,
			max_delay=settings.retry_max_delay,
		)

	def delay_for(self, attempt: int) -> float:
		return backoff_delay(attempt, self.base_delay, self.max_delay)


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
	"""Delay before retrying after the 0-based ``attempt`` failed."""
	return min(base_delay * (2 ** attempt), max_delay)


async def retry_with_backoff(
	operation: Callable[[], Awaitable[T]],
	policy: Optional[RetryPolicy] = None,
	*,
	sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
	retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
	"""Run ``operation`` up to ``policy.max_retries`` times, re-raising the last error.

	Exceptions outside ``retry_on`` propagate immediately.
	"""
	policy = policy or RetryPolicy.from_settings()
	for attempt in range(policy.max_retries):
		try:
			return await operation()
		except retry_on as err:
			if attempt >= policy.max_retries - 1:
				raise
			delay = policy.delay_for(attempt)
			logger.warning("Attempt %d failed. Retrying in %.2fs... (%s)", attempt + 1, delay, err)
			await sleep(delay)
	raise RuntimeError("Retry failed")  # unreachable, max_retries >= 1


async def fetch_with_retry(
	client: httpx.AsyncClient,
	method: str,
	url: str,
	policy: Optional[RetryPolicy] = None,
	*,
	sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
	**kwargs: Any,
) -> httpx.Response:
	"""HTTP request that also retries on non-2xx responses."""

	async def attempt() -> httpx.Response:
		response = await client.request(method, url, **kwargs)
		if not response.is_success:
			raise ProviderError(response.status_code, response.reason_phrase)
		return response

	return await retry_with_backoff(
		attempt,
		policy,
		sleep=sleep,
		retry_on=(ProviderError, httpx.RequestError),
	)
