"""Glue used by route handlers: cache, retry, chat, extract."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Optional

from fastapi import Request

from .cache import ResponseCache, make_cache_key
from .errors import ExtractionError, NetworkError, ProviderError, ShapeError
from .extraction import Shape, require_json, require_list
from .llm_client import ChatRequest, ChatResult, LLMClient
from .retry import RetryPolicy, retry_with_backoff

logger = logging.getLogger(__name__)


class LLMService:
	def __init__(
		self,
		client: LLMClient,
		cache: Optional[ResponseCache] = None,
		policy: Optional[RetryPolicy] = None,
	) -> None:
		self.client = client
		self.cache = cache
		self.policy = policy or RetryPolicy.from_settings()

	def cache_key(self, namespace: str, request: ChatRequest) -> str:
		# The api key takes part so one caller's key never serves another's reply;
		# make_cache_key hashes the payload, so the key itself is not stored.
		return make_cache_key(namespace, dataclasses.asdict(request))

	def evict(self, namespace: Optional[str], request: ChatRequest) -> None:
		"""Forget a cached reply that turned out to be unusable."""
		if namespace and self.cache is not None:
			self.cache.delete(self.cache_key(namespace, request))

	async def complete(self, request: ChatRequest, *, cache_namespace: Optional[str] = None) -> ChatResult:
		key = None
		if cache_namespace and self.cache is not None:
			key = self.cache_key(cache_namespace, request)
			cached = self.cache.get(key)
			if cached is not None:
				logger.debug("cache hit for %s", cache_namespace)
				return cached

		result = await retry_with_backoff(
			lambda: self.client.chat(request),
			self.policy,
			retry_on=(ProviderError, NetworkError),
		)
		# Empty text is a no-answer; don't pin it in the cache
		if key is not None and result.text:
			self.cache.set(key, result)
		return result

	async def complete_json(
		self,
		request: ChatRequest,
		shape: Shape = "object",
		*,
		cache_namespace: Optional[str] = None,
		list_key: Optional[str] = None,
	) -> Any:
		"""``complete`` then extract JSON; with ``list_key`` the object must carry that array.

		A reply that fails either check is evicted from the cache before the error propagates.
		"""
		result = await self.complete(request, cache_namespace=cache_namespace)
		try:
			data = require_json(result.text, shape)
			if list_key is not None:
				require_list(data, list_key)
			return data
		except (ExtractionError, ShapeError):
			self.evict(cache_namespace, request)
			raise


def get_llm_service(request: Request) -> LLMService:
	return request.app.state.llm_service
