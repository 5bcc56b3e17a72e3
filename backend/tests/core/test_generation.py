import asyncio
import json
from typing import Any

import httpx
import pytest

from app.core.generation import (
    GeminiIdeaGenerator,
    GenerationError,
    build_prompt,
    parse_blueprint,
    sample_blueprint,
)

BASE_URL = "https://ai.example.test/v1beta"


def _gemini_body(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _generator(
    handler: Any, *, api_key: str | None = "k-123", fallback: bool = False
) -> GeminiIdeaGenerator:
    return GeminiIdeaGenerator(
        api_key,
        model="test-model",
        base_url=BASE_URL,
        fallback=fallback,
        transport=httpx.MockTransport(handler),
    )


def test_build_prompt_includes_title_and_description() -> None:
    prompt = build_prompt("Invoice bot", "Chases late invoices")
    assert '"Invoice bot"' in prompt
    assert "Description: Chases late invoices" in prompt
    assert '"techStack"' in prompt


def test_parse_blueprint_extracts_json_from_text() -> None:
    doc = sample_blueprint("X")
    text = "Here you go:\n```json\n" + json.dumps(doc) + "\n```"
    out = parse_blueprint(text)
    assert out["validation"]["score"] == 7
    assert "techStack" in out
    assert "pricingModel" in out


def test_parse_blueprint_without_json() -> None:
    with pytest.raises(GenerationError, match="parse"):
        parse_blueprint("no json here")


def test_parse_blueprint_invalid_json() -> None:
    with pytest.raises(GenerationError):
        parse_blueprint("{not: valid}")


def test_generate_success() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200, json=_gemini_body(json.dumps(sample_blueprint("Invoice bot")))
        )

    out = asyncio.run(_generator(handler).generate("Invoice bot", "Chases invoices"))

    assert out["validation"]["feedback"].startswith("Invoice bot")
    assert seen["url"].path == "/v1beta/models/test-model:generateContent"
    assert seen["url"].params["key"] == "k-123"
    assert "Invoice bot" in seen["body"]["contents"][0]["parts"][0]["text"]


def test_generate_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "overloaded"})

    with pytest.raises(GenerationError, match="request failed"):
        asyncio.run(_generator(handler).generate("t", "d"))


def test_generate_empty_candidates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": []})

    with pytest.raises(GenerationError, match="no content"):
        asyncio.run(_generator(handler).generate("t", "d"))


def test_generate_unparseable_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_gemini_body("I cannot help with that."))

    with pytest.raises(GenerationError):
        asyncio.run(_generator(handler).generate("t", "d"))


def test_generate_without_api_key_makes_no_call() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    with pytest.raises(GenerationError, match="not configured"):
        asyncio.run(_generator(handler, api_key=None).generate("t", "d"))
    assert calls == []


def test_generate_fallback_returns_sample() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    out = asyncio.run(_generator(handler, fallback=True).generate("Fallback", "d"))
    assert out == sample_blueprint("Fallback")
