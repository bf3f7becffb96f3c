"""
Thin adapter layer over generative-language APIs (Gemini, OpenAI, Anthropic).

Each provider exposes the same interface so callers never import
provider-specific code.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from config.settings import config

logger = logging.getLogger(__name__)


class LLMProviderError(Exception):
    """The provider could not be reached or answered with something unusable."""


def _parse_json_output(text: str) -> Dict[str, Any] | list:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("LLM did not return valid JSON; returning raw text")
        return {"raw": text}


class BaseLLMProvider(ABC):
    """Common interface that every concrete provider implements."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.3,
        model: str | None = None,
        max_tokens: int = 1024,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any] | list | str:
        """
        Run ``prompt`` and return the model's text.

        With ``output_schema`` the provider is asked for JSON and the decoded
        value is returned (``{"raw": text}`` if it is not valid JSON).
        """


# ═══════════════════════════════════════════════════════════════════════════════
# Gemini (REST over httpx)
# ═══════════════════════════════════════════════════════════════════════════════


class GeminiProvider(BaseLLMProvider):
    def __init__(
        self,
        api_key: str,
        default_model: str = "gemini-2.0-flash",
        *,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.default_model = default_model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.3,
        model: str | None = None,
        max_tokens: int = 1024,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any] | list | str:
        model = model or self.default_model

        generation_config: Dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        }
        if output_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            prompt += (
                f"\n\nRespond ONLY with valid JSON matching this schema:\n"
                f"{json.dumps(output_schema, indent=2)}"
            )

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        url = f"{self.base_url}/models/{model}:generateContent"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    url,
                    json=payload,
                    headers={"x-goog-api-key": self.api_key},
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise LLMProviderError(f"Gemini returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise LLMProviderError(f"Gemini request failed: {exc.__class__.__name__}") from exc
        except ValueError as exc:
            raise LLMProviderError("Gemini returned a non-JSON body") from exc

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            text = ""

        if output_schema is not None:
            return _parse_json_output(text) if text else {"raw": ""}
        return text


# ═══════════════════════════════════════════════════════════════════════════════
# OpenAI
# ═══════════════════════════════════════════════════════════════════════════════


class OpenAIProvider(BaseLLMProvider):
    def __init__(self, api_key: str, default_model: str = "gpt-4o-mini", *, timeout: float = 30.0):
        from openai import AsyncOpenAI

        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.default_model = default_model

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.3,
        model: str | None = None,
        max_tokens: int = 1024,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any] | list | str:
        from openai import OpenAIError

        model = model or self.default_model

        messages = [{"role": "user", "content": prompt}]
        kwargs: Dict[str, Any] = {}
        if output_schema is not None:
            kwargs["response_format"] = {"type": "json_object"}
            messages[0]["content"] += (
                f"\n\nRespond ONLY with valid JSON matching this schema:\n"
                f"{json.dumps(output_schema, indent=2)}"
            )

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except OpenAIError as exc:
            raise LLMProviderError(f"OpenAI request failed: {exc.__class__.__name__}") from exc

        text = response.choices[0].message.content or ""

        if output_schema is not None:
            return _parse_json_output(text)
        return text


# ═══════════════════════════════════════════════════════════════════════════════
# Anthropic
# ═══════════════════════════════════════════════════════════════════════════════


class AnthropicProvider(BaseLLMProvider):
    def __init__(
        self,
        api_key: str,
        default_model: str = "claude-3-5-haiku-latest",
        *,
        timeout: float = 30.0,
    ):
        from anthropic import AsyncAnthropic

        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self.default_model = default_model

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.3,
        model: str | None = None,
        max_tokens: int = 1024,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any] | list | str:
        from anthropic import AnthropicError

        model = model or self.default_model

        extra_instruction = ""
        if output_schema is not None:
            extra_instruction = (
                f"\n\nRespond ONLY with valid JSON matching this schema:\n"
                f"{json.dumps(output_schema, indent=2)}"
            )

        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt + extra_instruction}],
            )
        except AnthropicError as exc:
            raise LLMProviderError(f"Anthropic request failed: {exc.__class__.__name__}") from exc

        text = response.content[0].text if response.content else ""

        if output_schema is not None:
            return _parse_json_output(text)
        return text


# ═══════════════════════════════════════════════════════════════════════════════
# Factory
# ═══════════════════════════════════════════════════════════════════════════════

_provider_cache: Dict[str, BaseLLMProvider] = {}


def get_llm_provider(
    provider_name: str,
    *,
    api_key: str | None = None,
    default_model: str | None = None,
) -> BaseLLMProvider:
    """
    Return (and cache) an LLM provider instance.

    Parameters
    ----------
    provider_name : "gemini" | "openai" | "anthropic"
    api_key       : explicit key; if omitted, read from config.
    default_model : override the default model for this provider instance.
    """

    cache_key = f"{provider_name}:{default_model or 'default'}"
    if cache_key in _provider_cache:
        return _provider_cache[cache_key]

    key = api_key or config.ai_api_key
    if provider_name == "gemini":
        instance = GeminiProvider(
            api_key=key,
            default_model=default_model or "gemini-2.0-flash",
            base_url=config.ai_base_url,
            timeout=config.ai_timeout_seconds,
        )
    elif provider_name == "openai":
        instance = OpenAIProvider(
            api_key=key,
            default_model=default_model or "gpt-4o-mini",
            timeout=config.ai_timeout_seconds,
        )
    elif provider_name == "anthropic":
        instance = AnthropicProvider(
            api_key=key,
            default_model=default_model or "claude-3-5-haiku-latest",
            timeout=config.ai_timeout_seconds,
        )
    else:
        raise ValueError(f"Unsupported LLM provider: {provider_name}")

    _provider_cache[cache_key] = instance
    return instance
