"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from caltrax.adapters.openai_vision_client import OpenAIVisionClient
from caltrax.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str) -> None:
        self.responses = _FakeResponses(output_text)


def _extract(client: OpenAIVisionClient, reasoning_effort: str | None) -> object:
    return asyncio.run(
        client.extract(
            model="gpt-4o",
            reasoning_effort=reasoning_effort,
            store=False,
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            schema={"type": "object"},
            prompt="Analyze this food",
        )
    )


def test_openai_vision_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps({"name": "Apple", "nutrition": {}}))
    client = OpenAIVisionClient(client=fake)

    result = _extract(client, reasoning_effort="low")

    assert result == {"name": "Apple", "nutrition": {}}
    payload = fake.responses.last_payload
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["text"]["format"]["name"] == "food_analysis"
    assert payload["input"][0]["content"][1]["detail"] == "low"


def test_openai_vision_client_omits_reasoning_when_unset() -> None:
    fake = _FakeOpenAI(json.dumps({"name": "Apple"}))

    _extract(OpenAIVisionClient(client=fake), reasoning_effort=None)

    assert "reasoning" not in fake.responses.last_payload


def test_openai_vision_client_rejects_empty_output() -> None:
    client = OpenAIVisionClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        _extract(client, reasoning_effort=None)


def test_openfoodfacts_client_fetches_product() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v2/product/123.json"
        assert "nutriments" in request.url.params["fields"]
        return httpx.Response(200, json={"status": 1, "product": {"code": "123"}})

    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    payload = asyncio.run(client.get_product("123"))
    asyncio.run(client.close())

    assert payload["status"] == 1


def test_openfoodfacts_client_maps_404_to_missing() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"status": 0})

    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    assert asyncio.run(client.get_product("000")) == {"status": 0}


def test_openfoodfacts_client_raises_on_server_error() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_product("123"))
