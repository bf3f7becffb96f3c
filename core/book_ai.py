"""
AI-assisted book features — summaries and genre recommendations.

Plain request/response passthrough to the configured LLM provider: no
retries, no caching.  Provider failures are logged here with detail and
re-raised as ``UpstreamError`` carrying only a generic public message.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from utils.errors import UpstreamError, ValidationError
from utils.llm_providers import BaseLLMProvider, LLMProviderError
from utils.schemas import BookRecommendation

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = "Provide a concise, 1-2 sentence summary of the book '{title}' by {author}."

RECOMMENDATIONS_PROMPT = (
    "Provide 3 book recommendations in the {genre} genre as JSON with "
    "title, author, genre, and overview."
)

RECOMMENDATIONS_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "author": {"type": "string"},
            "genre": {"type": "string"},
            "overview": {"type": "string"},
        },
        "required": ["title", "author", "genre", "overview"],
    },
}


def _extract_recommendations(raw: Any) -> List[BookRecommendation]:
    """Accept a bare JSON array or an object wrapping one; drop unusable items."""
    if isinstance(raw, dict):
        raw = raw.get("recommendations", [])
    if not isinstance(raw, list):
        return []

    recs: List[BookRecommendation] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            recs.append(BookRecommendation.model_validate(item))
        except PydanticValidationError:
            logger.debug("Skipping malformed recommendation: %r", item)
    return recs


class BookAIService:
    def __init__(self, provider: Optional[BaseLLMProvider]):
        self._provider = provider

    def _require_provider(self) -> BaseLLMProvider:
        if self._provider is None:
            raise UpstreamError("AI service not configured")
        return self._provider

    async def summary(self, title: Optional[str], author: Optional[str]) -> str:
        title = (title or "").strip()
        author = (author or "").strip()
        if not title or not author:
            raise ValidationError("Title and author are required")
        provider = self._require_provider()

        try:
            text = await provider.generate(
                SUMMARY_PROMPT.format(title=title, author=author),
                temperature=0.4,
                max_tokens=256,
            )
        except LLMProviderError as exc:
            logger.error("AI summary failed for %r: %s", title, exc)
            raise UpstreamError("Error generating summary", detail=str(exc)) from exc

        if not isinstance(text, str) or not text.strip():
            logger.warning("AI summary for %r came back empty", title)
            raise UpstreamError("Could not generate summary")
        return text.strip()

    async def recommendations(self, genre: Optional[str]) -> List[BookRecommendation]:
        genre = (genre or "").strip()
        if not genre:
            raise ValidationError("Genre is required")
        provider = self._require_provider()

        try:
            raw = await provider.generate(
                RECOMMENDATIONS_PROMPT.format(genre=genre),
                temperature=0.7,
                max_tokens=1024,
                output_schema=RECOMMENDATIONS_SCHEMA,
            )
        except LLMProviderError as exc:
            logger.error("AI recommendations failed for genre %r: %s", genre, exc)
            raise UpstreamError("Error fetching recommendations", detail=str(exc)) from exc

        if isinstance(raw, dict) and "raw" in raw:
            if not str(raw["raw"] or "").strip():
                logger.warning("AI returned an empty answer for genre %r", genre)
                raise UpstreamError("No recommendations generated")
            logger.error("AI recommendations for genre %r were not JSON", genre)
            raise UpstreamError("Error fetching recommendations", detail="non-JSON output")

        recs = _extract_recommendations(raw)
        if not recs:
            logger.warning("AI returned no usable recommendations for genre %r", genre)
            raise UpstreamError("No recommendations generated")
        return recs
