import asyncio
import json

import httpx
import pytest

from learn_your_way.errors import NetworkError, ProviderError
from learn_your_way.extraction import extract_json
from learn_your_way.llm_client import ChatMessage, ChatRequest, LLMClient, extract_text, llm_chat


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class Upstream:
    """Mock transport that records what the client sent."""

    def __init__(self, response=None, status=200, exc=None):
        self.response = response if response is not None else completion("hello")
        self.status = status
        self.exc = exc
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if isinstance(self.response, str):
            return httpx.Response(self.status, text=self.response)
        return httpx.Response(self.status, json=self.response)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


def run_chat(upstream, request, settings):
    async def go():
        async with LLMClient(settings=settings, transport=httpx.MockTransport(upstream)) as client:
            return await client.chat(request)

    return asyncio.run(go())


def test_chat_returns_text_and_raw(make_settings):
    upstream = Upstream()
    result = run_chat(upstream, ChatRequest.from_prompt("hi"), make_settings())
    assert result.text == "hello"
    assert result.raw == completion("hello")


def test_payload_carries_request_fields(make_settings):
    upstream = Upstream()
    request = ChatRequest(
        messages=[ChatMessage("user", "hi"), ChatMessage("assistant", "hey"), ChatMessage("user", "again")],
        system="be brief",
        temperature=0.7,
        max_tokens=10,
        json_mode=True,
        provider="openai",
        model="gpt-test",
    )
    run_chat(upstream, request, make_settings())

    sent = upstream.requests[-1]
    assert str(sent.url) == "https://api.openai.com/v1/chat/completions"
    body = upstream.last_json
    assert body["model"] == "gpt-test"
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 10
    assert body["stream"] is False
    assert body["response_format"] == {"type": "json_object"}
    assert [m["role"] for m in body["messages"]] == ["system", "user", "assistant", "user"]
    assert body["messages"][0]["content"] == "be brief"


def test_default_max_tokens_and_no_temperature(make_settings):
    upstream = Upstream()
    run_chat(upstream, ChatRequest.from_prompt("hi", provider="openai"), make_settings(LLM_MAX_TOKENS=128))
    body = upstream.last_json
    assert body["max_tokens"] == 128
    assert "temperature" not in body
    assert "response_format" not in body


def test_zero_default_max_tokens_omits_the_field(make_settings):
    upstream = Upstream()
    run_chat(upstream, ChatRequest.from_prompt("hi", provider="openai"), make_settings(LLM_MAX_TOKENS=0))
    assert "max_tokens" not in upstream.last_json


def test_ollama_gets_native_options(make_settings):
    upstream = Upstream()
    request = ChatRequest.from_prompt("hi", provider="ollama", temperature=0.2, max_tokens=50, json_mode=True)
    run_chat(upstream, request, make_settings())
    body = upstream.last_json
    assert body["options"] == {"temperature": 0.2, "num_predict": 50}
    assert body["format"] == "json"


def test_bearer_header_only_with_key(make_settings):
    upstream = Upstream()
    run_chat(upstream, ChatRequest.from_prompt("hi", provider="local"), make_settings())
    assert "authorization" not in upstream.requests[-1].headers

    run_chat(upstream, ChatRequest.from_prompt("hi", provider="openai", api_key="sk-1"), make_settings())
    assert upstream.requests[-1].headers["authorization"] == "Bearer sk-1"


def test_openrouter_attribution_headers(make_settings):
    upstream = Upstream()
    settings = make_settings(OPENROUTER_TITLE="Test App")
    run_chat(upstream, ChatRequest.from_prompt("hi", provider="openrouter", api_key="or-key"), settings)
    headers = upstream.requests[-1].headers
    assert headers["http-referer"] == "http://localhost:3000"
    assert headers["x-title"] == "Test App"
    assert headers["authorization"] == "Bearer or-key"


def test_anthropic_headers(make_settings):
    upstream = Upstream()
    run_chat(upstream, ChatRequest.from_prompt("hi", provider="anthropic", api_key="ak"), make_settings())
    headers = upstream.requests[-1].headers
    assert headers["x-api-key"] == "ak"
    assert headers["anthropic-version"] == "2023-06-01"


def test_non_success_status_raises_provider_error(make_settings):
    upstream = Upstream(response="upstream exploded", status=500)
    with pytest.raises(ProviderError) as info:
        run_chat(upstream, ChatRequest.from_prompt("hi"), make_settings())
    assert info.value.status_code == 500
    assert "500" in str(info.value)
    assert "upstream exploded" in str(info.value)


def test_non_json_body_raises_provider_error(make_settings):
    upstream = Upstream(response="<html>gateway</html>", status=200)
    with pytest.raises(ProviderError):
        run_chat(upstream, ChatRequest.from_prompt("hi"), make_settings())


def test_timeout_raises_network_error(make_settings):
    upstream = Upstream(exc=httpx.ReadTimeout("slow"))
    with pytest.raises(NetworkError) as info:
        run_chat(upstream, ChatRequest.from_prompt("hi"), make_settings())
    assert info.value.timeout is True


def test_connection_failure_raises_network_error(make_settings):
    upstream = Upstream(exc=httpx.ConnectError("refused"))
    with pytest.raises(NetworkError) as info:
        run_chat(upstream, ChatRequest.from_prompt("hi"), make_settings())
    assert info.value.timeout is False


@pytest.mark.parametrize(
    "raw,expected",
    [
        (completion("a"), "a"),
        ({"choices": [{"text": "legacy"}]}, "legacy"),
        ({"message": {"role": "assistant", "content": "native"}}, "native"),
        ({"text": "plain"}, "plain"),
        ({"choices": [{"message": {"content": None}, "text": "second"}]}, "second"),
        ({"choices": [{"message": {"content": ["parts"]}}]}, ""),
        ({"choices": []}, ""),
        ({}, ""),
        ([], ""),
        (None, ""),
    ],
)
def test_extract_text_fallback_chain(raw, expected):
    assert extract_text(raw) == expected


def test_json_reply_round_trips_through_extraction(make_settings):
    upstream = Upstream(response=completion('{"a":1}'))
    request = ChatRequest.from_prompt("Return JSON", temperature=0.7, max_tokens=10, json_mode=True)
    result = run_chat(upstream, request, make_settings())

    body = upstream.last_json
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 10
    assert body["response_format"] == {"type": "json_object"}
    assert extract_json(result.text, "object").value == {"a": 1}


def test_llm_chat_uses_given_client(make_settings):
    upstream = Upstream(response=completion("pong"))

    async def go():
        async with LLMClient(settings=make_settings(), transport=httpx.MockTransport(upstream)) as client:
            return await llm_chat(ChatRequest.from_prompt("ping"), client)

    assert asyncio.run(go()).text == "pong"
