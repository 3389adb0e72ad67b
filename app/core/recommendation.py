"""
Format and quality recommendations from a text-generation model.

Both operations fill a fixed prompt template, send it to an
OpenAI-compatible chat completion endpoint and pull ``KEY: value`` lines out
of the answer with regular expressions. Anything the model does not answer
(or a failed request) falls back to WebP at quality 80.
"""
import re
import logging
from typing import Any, Dict, List, Optional

import httpx
from openai import AsyncOpenAI

from app.config import settings
from app.core.compressor import DEFAULT_FORMAT, DEFAULT_QUALITY, parse_format

logger = logging.getLogger(__name__)

DEFAULT_REASON = "WebP offers the best balance of quality and file size for web images"
DEFAULT_CONTEXT = "Default optimization"

FORMAT_PROMPT = """You are an image optimization expert.
An image contains the following objects: {labels}.
Recommend the best compression format for this image from: webp, jpeg, png, avif.
Answer in exactly this format:
FORMAT: <format>
REASON: <one short sentence>"""

QUALITY_PROMPT = """You are an image optimization expert.
A user describes how they will use their image: "{prompt}".
Recommend a compression quality between 1 and 100 and the best format from: webp, jpeg, png, avif.
Answer in exactly this format:
QUALITY: <number>
FORMAT: <format>
CONTEXT: <one short sentence describing the use case>"""

FORMAT_RE = re.compile(r"FORMAT:\s*\**\s*([A-Za-z]+)", re.IGNORECASE)
REASON_RE = re.compile(r"REASON:\s*\**\s*(.+)", re.IGNORECASE)
QUALITY_RE = re.compile(r"QUALITY:\s*\**\s*(\d+)", re.IGNORECASE)
CONTEXT_RE = re.compile(r"CONTEXT:\s*\**\s*(.+)", re.IGNORECASE)


def _match(pattern: re.Pattern, text: str) -> Optional[str]:
    found = pattern.search(text or "")
    if not found:
        return None
    value = found.group(1).strip().strip("*").strip()
    return value or None


def parse_format_response(text: str) -> Dict[str, str]:
    """Extract ``{format, reason}`` from a model answer, filling gaps with defaults."""
    image_format = parse_format(_match(FORMAT_RE, text)) or DEFAULT_FORMAT
    reason = _match(REASON_RE, text) or DEFAULT_REASON
    return {"format": image_format.value, "reason": reason}


def parse_quality_response(text: str) -> Dict[str, Any]:
    """Extract ``{quality, format, context}`` from a model answer, filling gaps with defaults."""
    raw_quality = _match(QUALITY_RE, text)
    quality = min(int(raw_quality), 100) if raw_quality else DEFAULT_QUALITY
    image_format = parse_format(_match(FORMAT_RE, text)) or DEFAULT_FORMAT
    context = _match(CONTEXT_RE, text) or DEFAULT_CONTEXT
    return {"quality": quality, "format": image_format.value, "context": context}


class Recommender:
    """Asks a text-generation model for compression settings."""

    def __init__(
        self,
        api_key: str = settings.GEMINI_API_KEY,
        base_url: str = settings.GENERATION_BASE_URL,
        model: str = settings.GENERATION_MODEL,
        timeout: float = settings.GENERATION_TIMEOUT,
        client: Optional[Any] = None
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self._client = client

    @property
    def is_available(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                max_retries=0,
            )
        return self._client

    async def _generate(self, prompt: str) -> Optional[str]:
        """Send one prompt and return the answer text, or None on any failure."""
        if not self.is_available:
            logger.warning("Text generation is not configured, using default recommendation")
            return None
        try:
            response = await self._get_client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"AI recommendation error: {e}")
            return None

    async def recommend_format(self, labels: List[str]) -> Dict[str, str]:
        """
        Recommend an output format for an image containing the given objects.

        Returns:
            ``{"format", "reason"}``
        """
        prompt = FORMAT_PROMPT.format(labels=", ".join(labels) if labels else "no recognizable objects")
        text = await self._generate(prompt)
        if text is None:
            return {"format": DEFAULT_FORMAT.value, "reason": DEFAULT_REASON}
        recommendation = parse_format_response(text)
        logger.info(f"AI format recommendation: {recommendation['format']}")
        return recommendation

    async def recommend_quality(self, user_prompt: str) -> Dict[str, Any]:
        """
        Recommend quality and format from a free-text description of the image's use.

        Returns:
            ``{"quality", "format", "context"}``
        """
        text = await self._generate(QUALITY_PROMPT.format(prompt=user_prompt))
        if text is None:
            return {"quality": DEFAULT_QUALITY, "format": DEFAULT_FORMAT.value, "context": DEFAULT_CONTEXT}
        recommendation = parse_quality_response(text)
        logger.info(
            f"AI quality recommendation: {recommendation['format']} at {recommendation['quality']}"
        )
        return recommendation
