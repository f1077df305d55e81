import asyncio
import logging

import pytest

from learn_your_way import errors
from learn_your_way.errors import (
    ErrorType,
    ExtractionError,
    NetworkError,
    ProviderError,
    classify_error,
    fallback_content,
    safe_call,
    sanitize_error_message,
    user_friendly_message,
)


@pytest.mark.parametrize(
    "error,expected",
    [
        (NetworkError("down"), ErrorType.NETWORK),
        (NetworkError("slow", timeout=True), ErrorType.TIMEOUT),
        (ProviderError(401, "no key"), ErrorType.VALIDATION),
        (ProviderError(503, "busy"), ErrorType.SERVER),
        (ProviderError(429, "slow down"), ErrorType.UNKNOWN),
        (RuntimeError("Request timeout"), ErrorType.TIMEOUT),
        (RuntimeError("Failed to fetch"), ErrorType.NETWORK),
        (RuntimeError("HTTP 403"), ErrorType.VALIDATION),
        (RuntimeError("HTTP 502 Bad Gateway"), ErrorType.SERVER),
        (RuntimeError("something odd"), ErrorType.UNKNOWN),
    ],
)
def test_classify_error(error, expected):
    assert classify_error(error) is expected


def test_user_friendly_message_hides_details():
    message = user_friendly_message(ProviderError(500, "stack trace with secrets"))
    assert message == "Server error. Please try again later."


def test_provider_error_truncates_body():
    err = ProviderError(500, "x" * 2000)
    assert str(err).startswith("LLM request failed (500): ")
    assert len(str(err)) < 600


def test_fallback_content_is_a_fresh_copy():
    first = fallback_content("generate-questions")
    first["options"].append("E")
    assert len(fallback_content("generate-questions")["options"]) == 4
    assert fallback_content("generate-audio")["conversation"][0]["speaker"] == "teacher"
    assert fallback_content("anything-else")["type"] == "explanation"


def test_sanitize_error_message(monkeypatch):
    monkeypatch.setattr(errors.settings, "app_env", "development")
    assert sanitize_error_message(RuntimeError("db exploded")) == "db exploded"
    monkeypatch.setattr(errors.settings, "app_env", "production")
    assert sanitize_error_message(RuntimeError("db exploded")) == "An error occurred while processing your request"


def test_safe_call_returns_fallback_and_logs(caplog):
    async def boom():
        raise RuntimeError("kaput")

    with caplog.at_level(logging.ERROR):
        result = asyncio.run(safe_call(boom, fallback=lambda: "plan b", context="slides"))
    assert result == "plan b"
    assert "[slides] RuntimeError: kaput" in caplog.text


def test_safe_call_reraises_without_fallback():
    async def boom():
        raise RuntimeError("kaput")

    with pytest.raises(RuntimeError):
        asyncio.run(safe_call(boom))


def test_safe_call_passes_through_success():
    async def ok():
        return 42

    assert asyncio.run(safe_call(ok)) == 42


def test_safe_call_only_falls_back_on_listed_errors(caplog):
    async def upstream_down():
        raise ProviderError(503, "busy")

    async def bad_reply():
        raise ExtractionError("no-json-found")

    with pytest.raises(ProviderError):
        asyncio.run(safe_call(upstream_down, fallback=lambda: "plan b", fallback_on=(ExtractionError,)))
    assert "ProviderError" not in caplog.text

    result = asyncio.run(safe_call(bad_reply, fallback=lambda: "plan b", context="questions", fallback_on=(ExtractionError,)))
    assert result == "plan b"
    assert "[questions] ExtractionError" in caplog.text
