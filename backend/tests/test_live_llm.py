"""Talks to a real model server. Run with ``LLM_LIVE_TESTS=1 pytest -m live``."""
import asyncio
import os

import pytest

from learn_your_way.extraction import extract_json
from learn_your_way.llm_client import ChatRequest, LLMClient
from learn_your_way.settings import Settings

pytestmark = [
    pytest.mark.live,
    pytest.mark.skipif(os.getenv("LLM_LIVE_TESTS") != "1", reason="set LLM_LIVE_TESTS=1 to hit a real LLM"),
]


@pytest.fixture(autouse=True)
def clean_env():
    # keep the developer's LLM_* configuration for live runs
    yield


def test_live_json_reply():
    request = ChatRequest.from_prompt(
        'Reply with exactly this JSON and nothing else: {"a": 1}',
        temperature=0,
        max_tokens=64,
        json_mode=True,
    )

    async def go():
        async with LLMClient(settings=Settings()) as client:
            return await client.chat(request)

    result = asyncio.run(go())
    assert result.text
    assert extract_json(result.text, "object").value == {"a": 1}
