"""Tests for the OpenAI image provider, with the SDK client faked."""
from __future__ import annotations

import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from restyle.config import Settings
from restyle.services.imagegen import ImageGenerationError, ImageRateLimitError, OpenAIImageProvider


def _client(result=None, error=None):
    calls = []

    async def generate(**kwargs):
        calls.append(kwargs)
        if error is not None:
            raise error
        return result

    return SimpleNamespace(images=SimpleNamespace(generate=generate)), calls


def _settings():
    return Settings(openai_api_key="sk-test", openai_image_model="dall-e-3")


def test_returns_generated_url():
    response = SimpleNamespace(data=[SimpleNamespace(url="https://img.test/out.png")])
    client, calls = _client(result=response)
    provider = OpenAIImageProvider(_settings(), client=client)

    assert asyncio.run(provider.stylize("https://cdn.test/a.png")) == ["https://img.test/out.png"]
    (kwargs,) = calls
    assert kwargs["model"] == "dall-e-3"
    assert kwargs["n"] == 1
    assert kwargs["size"] == "1024x1024"
    assert kwargs["response_format"] == "url"
    assert "Ghibli" in kwargs["prompt"]


@pytest.mark.parametrize("data", [[], [SimpleNamespace(url=None)]])
def test_missing_url_is_an_error(data):
    client, _ = _client(result=SimpleNamespace(data=data))
    provider = OpenAIImageProvider(_settings(), client=client)
    with pytest.raises(ImageGenerationError, match="No valid image URL"):
        asyncio.run(provider.stylize("https://cdn.test/a.png"))


def test_rate_limit_is_translated():
    request = httpx.Request("POST", "https://api.openai.com/v1/images/generations")
    error = openai.RateLimitError("Rate limit reached", response=httpx.Response(429, request=request), body=None)
    client, _ = _client(error=error)
    provider = OpenAIImageProvider(_settings(), client=client)

    with pytest.raises(ImageRateLimitError) as info:
        asyncio.run(provider.stylize("https://cdn.test/a.png"))
    assert info.value.status_code == 429
    assert info.value.message == "Rate limit reached"


def test_other_api_errors_are_translated():
    request = httpx.Request("POST", "https://api.openai.com/v1/images/generations")
    client, _ = _client(error=openai.APIConnectionError(request=request))
    provider = OpenAIImageProvider(_settings(), client=client)

    with pytest.raises(ImageGenerationError) as info:
        asyncio.run(provider.stylize("https://cdn.test/a.png"))
    assert not isinstance(info.value, ImageRateLimitError)
    assert info.value.status_code == 500


def test_requires_api_key():
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        OpenAIImageProvider(Settings(openai_api_key=None))
