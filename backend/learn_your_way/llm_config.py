"""Resolve which LLM endpoint a chat request goes to.

Precedence for every field is: explicit call-site value, then the process
environment (``Settings``), then the provider's built-in default. Nothing here
touches the network.
"""
from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse

from .errors import ConfigurationError
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Provider(str, enum.Enum):
	OPENAI = "openai"
	ANTHROPIC = "anthropic"
	GEMINI = "gemini"
	OPENROUTER = "openrouter"
	OLLAMA = "ollama"
	LOCAL = "local"


FALLBACK_PROVIDER = Provider.OLLAMA

CHAT_COMPLETIONS_SUFFIX = "/chat/completions"


@dataclass(frozen=True)
class ProviderDefaults:
	base_url: str
	model: str
	# Appended when the configured URL is a bare host with no path
	host_suffix: str
	api_key_env: Optional[str] = None
	# Endpoints that are already complete and must not be extended
	complete_suffixes: Tuple[str, ...] = (CHAT_COMPLETIONS_SUFFIX,)


PROVIDER_DEFAULTS: Dict[Provider, ProviderDefaults] = {
	Provider.OPENAI: ProviderDefaults(
		base_url="https://api.openai.com/v1/chat/completions",
		model="gpt-4o-mini",
		host_suffix="/v1/chat/completions",
		api_key_env="OPENAI_API_KEY",
	),
	Provider.ANTHROPIC: ProviderDefaults(
		base_url="https://api.anthropic.com/v1/chat/completions",
		model="claude-3-5-haiku-latest",
		host_suffix="/v1/chat/completions",
		api_key_env="ANTHROPIC_API_KEY",
	),
	Provider.GEMINI: ProviderDefaults(
		base_url="https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
		model="gemini-2.5-flash",
		host_suffix="/v1beta/openai/chat/completions",
		api_key_env="GEMINI_API_KEY",
	),
	Provider.OPENROUTER: ProviderDefaults(
		base_url="https://openrouter.ai/api/v1/chat/completions",
		model="openrouter/auto",
		host_suffix="/api/v1/chat/completions",
		api_key_env="OPENROUTER_API_KEY",
	),
	Provider.OLLAMA: ProviderDefaults(
		base_url="http://127.0.0.1:11434/v1/chat/completions",
		model="qwen3:4b",
		host_suffix="/v1/chat/completions",
		complete_suffixes=(CHAT_COMPLETIONS_SUFFIX, "/api/chat"),
	),
	Provider.LOCAL: ProviderDefaults(
		base_url="http://127.0.0.1:1234/v1/chat/completions",
		model="local-model",
		host_suffix="/v1/chat/completions",
	),
}


@dataclass(frozen=True)
class LLMConfig:
	provider: Provider
	base_url: str
	model: str
	api_key: Optional[str] = None


def parse_provider(name: Optional[str]) -> Provider:
	"""Map a free-form provider name onto ``Provider``.

	A missing name means Ollama; an unrecognized one also falls back to Ollama, with a warning.
	"""
	if isinstance(name, Provider):
		return name
	normalized = (name or "").strip().lower()
	if not normalized:
		# Nothing configured is the normal local-dev setup
		return FALLBACK_PROVIDER
	if normalized in ("lmstudio", "lm-studio", "lm_studio"):
		return Provider.LOCAL
	if normalized == "google":
		return Provider.GEMINI
	try:
		return Provider(normalized)
	except ValueError:
		logger.warning("Unknown LLM provider %r, falling back to %s", name, FALLBACK_PROVIDER.value)
		return FALLBACK_PROVIDER


def normalize_base_url(base_url: str, provider: Provider) -> str:
	"""Make sure ``base_url`` points at the provider's chat-completions endpoint."""
	url = base_url.strip()
	parsed = urlparse(url)
	if parsed.scheme not in ("http", "https") or not parsed.netloc:
		raise ConfigurationError(f"LLM base URL must be an absolute http(s) URL, got {base_url!r}")
	url = url.rstrip("/")
	defaults = PROVIDER_DEFAULTS[provider]
	if any(url.endswith(suffix) for suffix in defaults.complete_suffixes):
		return url
	if not urlparse(url).path:
		return url + defaults.host_suffix
	return url + CHAT_COMPLETIONS_SUFFIX


def _first(*values: Optional[str]) -> Optional[str]:
	for value in values:
		if value is not None and value.strip():
			return value.strip()
	return None


def resolve_llm_config(
	provider: Optional[str] = None,
	base_url: Optional[str] = None,
	model: Optional[str] = None,
	api_key: Optional[str] = None,
	*,
	settings: Optional[Settings] = None,
) -> LLMConfig:
	cfg = settings or default_settings
	explicit_provider = _first(provider)
	env_provider = _first(cfg.llm_provider)
	resolved = parse_provider(explicit_provider or env_provider)

	# Environment endpoint/model describe the environment's provider; don't
	# mix them into a request that explicitly picked a different one.
	use_env = explicit_provider is None or env_provider is None or parse_provider(env_provider) == resolved
	env_base_url = cfg.llm_base_url if use_env else None
	env_model = cfg.llm_model if use_env else None
	env_api_key = cfg.llm_api_key if use_env else None

	defaults = PROVIDER_DEFAULTS[resolved]
	provider_key = os.getenv(defaults.api_key_env) if defaults.api_key_env else None

	final_url = normalize_base_url(_first(base_url, env_base_url) or defaults.base_url, resolved)
	return LLMConfig(
		provider=resolved,
		base_url=final_url,
		model=_first(model, env_model) or defaults.model,
		api_key=_first(api_key, env_api_key, provider_key),
	)
