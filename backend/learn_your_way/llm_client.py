from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

import httpx

from .errors import NetworkError, ProviderError
from .llm_config import LLMConfig, Provider, resolve_llm_config
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class ChatMessage:
	role: Literal["user", "assistant"]
	content: str


@dataclass(frozen=True)
class ChatRequest:
	messages: List[ChatMessage]
	system: Optional[str] = None
	temperature: Optional[float] = None
	max_tokens: Optional[int] = None
	json_mode: bool = False
	provider: Optional[str] = None
	model: Optional[str] = None
	base_url: Optional[str] = None
	api_key: Optional[str] = None

	@classmethod
	def from_prompt(cls, prompt: str, **kwargs: Any) -> "ChatRequest":
		return cls(messages=[ChatMessage(role="user", content=prompt)], **kwargs)


@dataclass
class ChatResult:
	text: str
	# Untouched provider body, kept for diagnostics only
	raw: Any = field(default=None, repr=False)


def extract_text(raw: Any) -> str:
	"""Pull the assistant text out of the response shapes providers return."""
	candidates = []
	if isinstance(raw, dict):
		choices = raw.get("choices")
		if isinstance(choices, list) and choices and isinstance(choices[0], dict):
			message = choices[0].get("message")
			if isinstance(message, dict):
				candidates.append(message.get("content"))
			candidates.append(choices[0].get("text"))
		# Ollama native /api/chat
		message = raw.get("message")
		if isinstance(message, dict):
			candidates.append(message.get("content"))
		candidates.append(raw.get("text"))
	for value in candidates:
		if value is not None:
			return value if isinstance(value, str) else ""
	return ""


class LLMClient:
	"""Single-shot chat-completions client. Retrying is left to the caller."""

	def __init__(
		self,
		*,
		settings: Optional[Settings] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
		timeout: Optional[float] = None,
	) -> None:
		self.settings = settings or default_settings
		self.timeout = timeout if timeout is not None else self.settings.llm_timeout_seconds
		self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

	def resolve(self, request: ChatRequest) -> LLMConfig:
		return resolve_llm_config(
			request.provider,
			request.base_url,
			request.model,
			request.api_key,
			settings=self.settings,
		)

	def build_payload(self, request: ChatRequest, config: LLMConfig) -> Dict[str, Any]:
		messages: List[Dict[str, str]] = []
		if request.system:
			messages.append({"role": "system", "content": request.system})
		messages.extend({"role": m.role, "content": m.content} for m in request.messages)
		payload: Dict[str, Any] = {"model": config.model, "messages": messages, "stream": False}

		max_tokens = request.max_tokens
		if max_tokens is None and self.settings.llm_max_tokens > 0:
			max_tokens = self.settings.llm_max_tokens
		if request.temperature is not None:
			payload["temperature"] = request.temperature
		if max_tokens is not None:
			payload["max_tokens"] = max_tokens
		if request.json_mode:
			payload["response_format"] = {"type": "json_object"}

		if config.provider == Provider.OLLAMA:
			# Ollama's native endpoint ignores the OpenAI fields above
			options: Dict[str, Any] = {}
			if request.temperature is not None:
				options["temperature"] = request.temperature
			if max_tokens is not None:
				options["num_predict"] = max_tokens
			if options:
				payload["options"] = options
			if request.json_mode:
				payload["format"] = "json"
		return payload

	def build_headers(self, config: LLMConfig) -> Dict[str, str]:
		headers = {"Content-Type": "application/json"}
		if config.api_key:
			headers["Authorization"] = f"Bearer {config.api_key}"
		if config.provider == Provider.OPENROUTER:
			headers["HTTP-Referer"] = self.settings.openrouter_referer
			headers["X-Title"] = self.settings.openrouter_title
		elif config.provider == Provider.ANTHROPIC:
			if config.api_key:
				headers["x-api-key"] = config.api_key
			headers["anthropic-version"] = ANTHROPIC_VERSION
		return headers

	async def chat(self, request: ChatRequest) -> ChatResult:
		config = self.resolve(request)
		payload = self.build_payload(request, config)
		logger.debug(
			"LLM chat provider=%s model=%s messages=%d json=%s",
			config.provider.value,
			config.model,
			len(payload["messages"]),
			request.json_mode,
		)
		try:
			r = await self._client.post(config.base_url, headers=self.build_headers(config), json=payload)
		except httpx.TimeoutException as err:
			raise NetworkError(f"LLM request timed out after {self.timeout}s", timeout=True) from err
		except httpx.RequestError as err:
			raise NetworkError(f"LLM network error: {err}") from err

		if not r.is_success:
			logger.warning("LLM provider %s returned HTTP %s", config.provider.value, r.status_code)
			raise ProviderError(r.status_code, r.text)
		try:
			raw = r.json()
		except ValueError as err:
			raise ProviderError(r.status_code, f"Failed to parse LLM response: {r.text[:200]}") from err
		return ChatResult(text=extract_text(raw), raw=raw)

	async def aclose(self) -> None:
		await self._client.aclose()

	async def __aenter__(self) -> "LLMClient":
		return self

	async def __aexit__(self, *exc: Any) -> None:
		await self.aclose()


async def llm_chat(request: ChatRequest, client: Optional[LLMClient] = None) -> ChatResult:
	"""One-off chat call; opens and closes its own client when none is given."""
	if client is not None:
		return await client.chat(request)
	async with LLMClient() as owned:
		return await owned.chat(request)
