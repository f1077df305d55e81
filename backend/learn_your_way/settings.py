from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Provider can be "openai", "anthropic", "gemini", "openrouter", "ollama" or "local" (LM Studio)
	llm_provider: str | None = Field(default=None, validation_alias="LLM_PROVIDER")
	llm_base_url: str | None = Field(default=None, validation_alias="LLM_BASE_URL")
	llm_model: str | None = Field(default=None, validation_alias="LLM_MODEL")
	llm_api_key: str | None = Field(default=None, validation_alias="LLM_API_KEY")
	# Applied when a request does not ask for a specific max_tokens; <= 0 disables it
	llm_max_tokens: int = Field(default=256, validation_alias="LLM_MAX_TOKENS")
	llm_timeout_seconds: float = Field(default=60.0, validation_alias="LLM_TIMEOUT_SECONDS")

	# OpenRouter wants these to attribute traffic
	openrouter_referer: str = Field(default="http://localhost:3000", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Learn Your Way", validation_alias="OPENROUTER_TITLE")

	# Retry policy for upstream calls
	retry_max_attempts: int = Field(default=3, ge=1, validation_alias="LLM_RETRY_MAX_ATTEMPTS")
	retry_base_delay: float = Field(default=1.0, ge=0, validation_alias="LLM_RETRY_BASE_DELAY")
	retry_max_delay: float = Field(default=10.0, ge=0, validation_alias="LLM_RETRY_MAX_DELAY")

	# Response cache (15 minutes)
	cache_ttl_seconds: float = Field(default=15 * 60, gt=0, validation_alias="CACHE_TTL_SECONDS")

	app_env: str = Field(default="development", validation_alias="APP_ENV")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def is_production(self) -> bool:
		return self.app_env.lower() == "production"

settings = Settings()
