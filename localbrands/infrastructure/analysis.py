"""Image analysis with graceful degradation.

The vision model is an optional collaborator: when it is not configured,
unreachable or returns something unusable, :class:`AnalysisAdapter` hands back
fixed copy for the requested language so the wizard always has content to
show. Callers cannot tell the two cases apart.
"""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Literal, Protocol

from localbrands.domain import AnalysisResult
from localbrands.errors import GeminiError

logger = logging.getLogger(__name__)

Language = Literal["en", "id"]

_DATA_URL_PREFIX = re.compile(r"^data:(image/(?:png|jpeg|jpg|webp));base64,")

FALLBACK_CONTENT: dict[str, AnalysisResult] = {
    "en": AnalysisResult(
        business_name_suggestion="Luxe Local",
        headline="Excellence in Every Detail",
        story=(
            "Crafted with uncompromising quality, our products redefine local luxury "
            "standards for the discerning customer."
        ),
        suggested_template="service",
    ),
    "id": AnalysisResult(
        business_name_suggestion="Luxe Local",
        headline="Keunggulan dalam Setiap Detail",
        story=(
            "Dibuat dengan kualitas tanpa kompromi, produk kami mendefinisikan ulang "
            "standar kemewahan lokal untuk pelanggan yang cerdas."
        ),
        suggested_template="service",
    ),
}


def normalise_language(value: object) -> Language:
    return "id" if str(value or "").lower() == "id" else "en"


def fallback_result(language: object) -> AnalysisResult:
    return FALLBACK_CONTENT[normalise_language(language)]


def split_data_url(image: str) -> tuple[str, str]:
    """Return ``(base64_payload, mime_type)`` for a data URL or bare base64 string."""

    match = _DATA_URL_PREFIX.match(image)
    if not match:
        return image, "image/jpeg"
    mime_type = match.group(1).replace("image/jpg", "image/jpeg")
    return image[match.end() :], mime_type


class VisionClient(Protocol):
    """Contract for structured-output vision integrations."""

    async def generate(self, image: str, language: Language) -> dict[str, Any]:
        """Return the raw structured analysis for ``image``."""


class UnconfiguredVisionClient:
    """Placeholder used when no vision model credentials are available."""

    async def generate(self, image: str, language: Language) -> dict[str, Any]:
        raise GeminiError("Vision model is not configured")


class AnalysisAdapter:
    """Normalises vision output into :class:`AnalysisResult` with a fixed fallback."""

    def __init__(self, client: VisionClient, *, timeout: float | None = 30.0) -> None:
        self._client = client
        self._timeout = timeout

    async def analyze(self, image: str, language: object = "en") -> AnalysisResult:
        lang = normalise_language(language)
        try:
            raw = await asyncio.wait_for(self._client.generate(image, lang), self._timeout)
            return AnalysisResult.model_validate(raw)
        except Exception as exc:
            logger.warning("image analysis failed, using fallback content: %s", exc)
            return fallback_result(lang)


_adapter = AnalysisAdapter(UnconfiguredVisionClient())


def configure_analysis_adapter(adapter: AnalysisAdapter) -> None:
    """Install the adapter used by the HTTP boundary and new wizard sessions."""

    global _adapter
    _adapter = adapter


def get_analysis_adapter() -> AnalysisAdapter:
    return _adapter


__all__ = [
    "AnalysisAdapter",
    "FALLBACK_CONTENT",
    "Language",
    "UnconfiguredVisionClient",
    "VisionClient",
    "configure_analysis_adapter",
    "fallback_result",
    "get_analysis_adapter",
    "normalise_language",
    "split_data_url",
]
