import asyncio
import json

import httpx
import pytest
from openai import AsyncOpenAI

from neurospell.errors import RefinementError
from neurospell.services.refiner import TextRefiner
from neurospell.settings import AppSettings


def _completion(content: str) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def make_refiner(transport, **overrides) -> TextRefiner:
    settings = AppSettings(openai_api_key="sk-test", **overrides)
    client = AsyncOpenAI(
        api_key="sk-test",
        base_url="https://llm.test/v1",
        http_client=httpx.AsyncClient(transport=transport),
        max_retries=0,
    )
    return TextRefiner(settings, client=client)


def test_refiner_without_key_passes_through():
    refiner = TextRefiner(AppSettings(openai_api_key=None))
    assert refiner.mock is True
    assert asyncio.run(refiner.refine("ابت")) == "ابت"


def test_refiner_returns_completion_text():
    seen: list[dict] = []

    def handler(request):
        assert request.url.path.endswith("/chat/completions")
        body = json.loads(request.content)
        seen.append(body)
        return httpx.Response(200, json=_completion("  hello world \n"))

    refiner = make_refiner(httpx.MockTransport(handler))
    assert refiner.mock is False

    async def scenario():
        try:
            return await refiner.refine("HELO WRLD")
        finally:
            await refiner.close()

    assert asyncio.run(scenario()) == "hello world"
    body = seen[0]
    assert body["model"] == "gpt-4o-mini"
    assert body["max_tokens"] == 100
    assert body["messages"][0]["role"] == "system"
    assert "HELO WRLD" in body["messages"][1]["content"]


def test_refiner_skips_empty_sequences():
    def handler(request):
        raise AssertionError("Unexpected request")

    refiner = make_refiner(httpx.MockTransport(handler))
    assert asyncio.run(refiner.refine("")) == ""


def test_refiner_failure_keeps_raw_sequence():
    def handler(request):
        return httpx.Response(500, json={"error": {"message": "upstream down"}})

    refiner = make_refiner(httpx.MockTransport(handler))
    assert asyncio.run(refiner.refine("ABC")) == "ABC"


def test_refiner_blank_completion_keeps_raw_sequence():
    def handler(request):
        return httpx.Response(200, json=_completion("   "))

    refiner = make_refiner(httpx.MockTransport(handler))
    assert asyncio.run(refiner.refine("ABC")) == "ABC"


def test_strict_refiner_raises():
    def handler(request):
        return httpx.Response(500, json={"error": {"message": "upstream down"}})

    refiner = make_refiner(httpx.MockTransport(handler), refiner_strict=True)
    with pytest.raises(RefinementError):
        asyncio.run(refiner.refine("ABC"))
