"""Integration with the Gemini ``generateContent`` REST API."""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from localbrands.domain import TEMPLATE_IDS
from localbrands.errors import GeminiError

from .analysis import Language, split_data_url

logger = logging.getLogger(__name__)

PROMPT = """
You are an expert brand strategist and copywriter for high-end local brands.
Analyze this image of a product or service.
Create compelling, sophisticated copy for a modern landing page.

Return a JSON object with:
1. businessNameSuggestion: A modern, premium name for the business (if not obvious).
2. headline: A sophisticated, punchy hook (max 8 words) in {language}.
3. story: A 2-sentence emotional brand story ({language}) that elevates the perceived value.
4. suggestedTemplate: One of ["culinary", "fashion", "service"] based on the image content.
5. locationSuggestion: The city or area shown in the image, only if clearly visible.
"""

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "businessNameSuggestion": {"type": "STRING"},
        "headline": {"type": "STRING"},
        "story": {"type": "STRING"},
        "suggestedTemplate": {"type": "STRING", "enum": list(TEMPLATE_IDS)},
        "locationSuggestion": {"type": "STRING"},
    },
    "required": ["businessNameSuggestion", "headline", "story", "suggestedTemplate"],
}


class GeminiVisionClient:
    """Client for structured image analysis through Gemini."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.0-flash",
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._request_url = f"{api_base.rstrip('/')}/models/{model}:generateContent"
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    @staticmethod
    def _build_payload(image: str, language: Language) -> dict[str, Any]:
        data, mime_type = split_data_url(image)
        language_name = "Bahasa Indonesia" if language == "id" else "English"
        return {
            "contents": [
                {
                    "parts": [
                        {"inlineData": {"mimeType": mime_type, "data": data}},
                        {"text": PROMPT.format(language=language_name)},
                    ]
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    @staticmethod
    def _extract_text(payload: Any) -> str | None:
        try:
            return payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None

    async def generate(self, image: str, language: Language) -> dict[str, Any]:
        response = await self._client.post(
            self._request_url,
            params={"key": self._api_key},
            json=self._build_payload(image, language),
        )
        if response.is_error:
            logger.error("Gemini API error %s: %s", response.status_code, response.text)
            raise GeminiError(f"Gemini API error: {response.status_code}")

        text = self._extract_text(response.json())
        if not text:
            raise GeminiError("No response text from Gemini")
        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GeminiError("Gemini returned malformed JSON") from exc
        if not isinstance(result, dict):
            raise GeminiError("Gemini returned a non-object result")
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["GeminiVisionClient", "PROMPT", "RESPONSE_SCHEMA"]
