"""
Tests for the Gemini provider (via httpx.MockTransport) and the factory.
"""

import json

import httpx
import pytest

from utils import llm_providers
from utils.llm_providers import GeminiProvider, LLMProviderError, get_llm_provider


def _gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class _Recorder:
    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def _provider(handler) -> GeminiProvider:
    return GeminiProvider(
        api_key="test-key",
        default_model="gemini-test",
        base_url="https://gemini.invalid/v1beta/",
        transport=httpx.MockTransport(handler),
    )


class TestGeminiProvider:
    @pytest.mark.asyncio
    async def test_text_generation(self):
        recorder = _Recorder(httpx.Response(200, json=_gemini_body("Hello there")))
        text = await _provider(recorder).generate("Say hi", temperature=0.1, max_tokens=50)

        assert text == "Hello there"
        [request] = recorder.requests
        assert str(request.url) == "https://gemini.invalid/v1beta/models/gemini-test:generateContent"
        assert request.headers["x-goog-api-key"] == "test-key"
        assert "key=" not in str(request.url)

        body = json.loads(request.content)
        assert body["contents"][0]["parts"][0]["text"] == "Say hi"
        assert body["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 50}

    @pytest.mark.asyncio
    async def test_json_mode(self):
        recorder = _Recorder(httpx.Response(200, json=_gemini_body('[{"title": "Dune"}]')))
        result = await _provider(recorder).generate("recs", output_schema={"type": "array"})

        assert result == [{"title": "Dune"}]
        body = json.loads(recorder.requests[0].content)
        assert body["generationConfig"]["responseMimeType"] == "application/json"
        assert "Respond ONLY with valid JSON" in body["contents"][0]["parts"][0]["text"]

    @pytest.mark.asyncio
    async def test_json_mode_with_prose_returns_raw(self):
        recorder = _Recorder(httpx.Response(200, json=_gemini_body("not json at all")))
        result = await _provider(recorder).generate("recs", output_schema={"type": "array"})
        assert result == {"raw": "not json at all"}

    @pytest.mark.asyncio
    async def test_model_override(self):
        recorder = _Recorder(httpx.Response(200, json=_gemini_body("ok")))
        await _provider(recorder).generate("x", model="gemini-other")
        assert recorder.requests[0].url.path.endswith("/models/gemini-other:generateContent")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"candidates": []}, {"candidates": [{"content": {}}]}])
    async def test_missing_candidates_give_empty_text(self, payload):
        recorder = _Recorder(httpx.Response(200, json=payload))
        assert await _provider(recorder).generate("x") == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    async def test_http_errors(self, status):
        recorder = _Recorder(httpx.Response(status, json={"error": {"message": "nope"}}))
        with pytest.raises(LLMProviderError) as excinfo:
            await _provider(recorder).generate("x")
        assert str(status) in str(excinfo.value)
        assert "test-key" not in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LLMProviderError):
            await _provider(boom).generate("x")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        recorder = _Recorder(httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(LLMProviderError):
            await _provider(recorder).generate("x")


class TestFactory:
    def setup_method(self):
        llm_providers._provider_cache.clear()

    def teardown_method(self):
        llm_providers._provider_cache.clear()

    def test_gemini_is_cached(self):
        first = get_llm_provider("gemini", api_key="k", default_model="gemini-x")
        second = get_llm_provider("gemini", api_key="k", default_model="gemini-x")
        assert isinstance(first, GeminiProvider)
        assert first is second
        assert first.default_model == "gemini-x"

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_llm_provider("nonsense", api_key="k")
