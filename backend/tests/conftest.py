from __future__ import annotations

from typing import Any, Callable, List, Union

import pytest
from fastapi.testclient import TestClient

from learn_your_way.cache import ResponseCache
from learn_your_way.llm_client import ChatRequest, ChatResult
from learn_your_way.llm_service import LLMService, get_llm_service
from learn_your_way.main import app
from learn_your_way.retry import RetryPolicy
from learn_your_way.settings import Settings

_ENV_VARS = (
    "LLM_PROVIDER",
    "LLM_BASE_URL",
    "LLM_MODEL",
    "LLM_API_KEY",
    "LLM_MAX_TOKENS",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "OPENROUTER_API_KEY",
    "APP_ENV",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def factory(**env: Any) -> Settings:
        return Settings(_env_file=None, **env)

    return factory


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


Reply = Union[str, Exception]


class ScriptedClient:
    """Stands in for LLMClient: replays canned replies and records requests."""

    def __init__(self, replies: List[Reply], settings: Settings) -> None:
        self.replies = list(replies)
        self.requests: List[ChatRequest] = []
        self.settings = settings

    async def chat(self, request: ChatRequest) -> ChatResult:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return ChatResult(text=reply, raw={"choices": [{"message": {"content": reply}}]})

    async def aclose(self) -> None:
        pass


@pytest.fixture
def scripted(make_settings):
    def factory(*replies: Reply, cache: bool = False, max_retries: int = 3) -> LLMService:
        client = ScriptedClient(list(replies), make_settings())
        service = LLMService(
            client,  # type: ignore[arg-type]
            ResponseCache() if cache else None,
            RetryPolicy(max_retries=max_retries, base_delay=0, max_delay=0),
        )
        return service

    return factory


@pytest.fixture
def api(scripted):
    """TestClient whose routes talk to a scripted LLM service.

    Call ``api(*replies)`` to get ``(client, service)``.
    """

    def factory(*replies: Reply, **kwargs: Any):
        service = scripted(*replies, **kwargs)
        app.dependency_overrides[get_llm_service] = lambda: service
        return TestClient(app), service

    yield factory
    app.dependency_overrides.clear()
