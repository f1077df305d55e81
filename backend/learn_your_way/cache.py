"""In-process response cache with lazy TTL expiry.

There is no capacity bound and no background sweep: an expired entry lingers
until the next ``get`` for its key. Good enough for memoizing LLM replies for a
few minutes in a single process; not a general-purpose cache.
"""
from __future__ import annotations

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

DEFAULT_TTL_SECONDS = 15 * 60


@dataclass
class CacheEntry:
	value: Any
	created_at: float
	ttl: float

	def expired(self, now: float) -> bool:
		return now - self.created_at >= self.ttl


class ResponseCache:
	def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
		if default_ttl <= 0:
			raise ValueError("default_ttl must be positive")
		self.default_ttl = default_ttl
		self._clock = clock
		self._entries: Dict[str, CacheEntry] = {}
		self._lock = threading.Lock()

	def get(self, key: str) -> Optional[Any]:
		with self._lock:
			entry = self._entries.get(key)
			if entry is None:
				return None
			if entry.expired(self._clock()):
				del self._entries[key]
				return None
			return entry.value

	def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
		if ttl is not None and ttl <= 0:
			raise ValueError("ttl must be positive")
		with self._lock:
			self._entries[key] = CacheEntry(
				value=value,
				created_at=self._clock(),
				ttl=ttl if ttl is not None else self.default_ttl,
			)

	def delete(self, key: str) -> None:
		with self._lock:
			self._entries.pop(key, None)

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()

	@property
	def size(self) -> int:
		"""Stored entries, including expired ones not yet read."""
		with self._lock:
			return len(self._entries)

	def __len__(self) -> int:
		return self.size


def make_cache_key(namespace: str, payload: Any) -> str:
	body = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
	digest = hashlib.sha256(body.encode("utf-8")).hexdigest()
	return f"{namespace}:{digest}"
