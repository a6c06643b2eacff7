"""Model-backed trend fallback using Gemini, OpenAI or Grok.

Used when both Google endpoints come back empty (blocked or
unreachable). The model is asked for ten current topics as JSON and the answer is
normalised by :func:`fetchers.parsers.parse_ai_trends`.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

from trend_engine.config import DEFAULT_MODELS
from trend_engine.models import AiProvider, Language, TrendItem, TrendSource

from .parsers import parse_ai_trends

logger = logging.getLogger(__name__)

GROK_BASE_URL = "https://api.x.ai/v1"
OPENAI_BASE_URL = "https://api.openai.com/v1"
SYSTEM_PROMPT = "You return only raw JSON arrays. No markdown, no explanation."

# Country wording per region: (Turkish locative, English name)
_COUNTRY_NAMES = {
    "TR": ("Türkiye'de", "Turkey"),
    "US": ("ABD'de", "the United States"),
}

_PROMPTS = {
    Language.TR: (
        "{tr_country} şu an X (Twitter) ve Google'da gündemde olan 10 trending topic'i JSON array olarak ver. "
        'Her biri {{"title": "...", "searchVolume": "...", "category": "..."}} formatında olsun. '
        "Sadece JSON döndür, başka bir şey yazma."
    ),
    Language.EN: (
        "Give me 10 currently trending topics in {en_country} on X (Twitter) and Google as a JSON array. "
        'Each item: {{"title": "...", "searchVolume": "...", "category": "..."}}. '
        "Return only JSON, nothing else."
    ),
}


def build_trend_prompt(language: Language, region: str = "TR") -> str:
    """Return the localised instruction sent to the model."""
    tr_country, en_country = _COUNTRY_NAMES.get(region, _COUNTRY_NAMES["TR"])
    return _PROMPTS[Language(language)].format(tr_country=tr_country, en_country=en_country)


class ModelCompletion(Protocol):
    """A text-completion call returning JSON text for a prompt."""

    async def complete(self, prompt: str, credential: str, provider: AiProvider) -> str:
        ...


class ProviderCompletion:
    """Default :class:`ModelCompletion` dispatching to the vendor SDKs."""

    def __init__(self, models: Optional[Dict[AiProvider, str]] = None, timeout: float = 30.0):
        self.models = dict(DEFAULT_MODELS)
        if models:
            self.models.update(models)
        self.timeout = timeout

    async def complete(self, prompt: str, credential: str, provider: AiProvider) -> str:
        provider = AiProvider(provider)
        if provider is AiProvider.GEMINI:
            return await self._call_gemini(prompt, credential)
        base_url = GROK_BASE_URL if provider is AiProvider.GROK else OPENAI_BASE_URL
        return await self._call_chat(prompt, credential, base_url, self.models[provider])

    async def _call_gemini(self, prompt: str, credential: str) -> str:
        """Gemini structured-output call via google-genai."""
        from google import genai
        from google.genai import types

        client = genai.Client(
            api_key=credential,
            http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
        )
        try:
            response = await client.aio.models.generate_content(
                model=self.models[AiProvider.GEMINI],
                contents=prompt,
                config=types.GenerateContentConfig(response_mime_type="application/json"),
            )
        finally:
            await client.aio.aclose()
        return response.text or "[]"

    async def _call_chat(self, prompt: str, credential: str, base_url: str, model: str) -> str:
        """OpenAI-compatible chat completion with a JSON object response."""
        import openai

        client = openai.AsyncOpenAI(api_key=credential, base_url=base_url, timeout=self.timeout)
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
            )
        finally:
            await client.close()
        return response.choices[0].message.content or "[]"


async def fetch_ai_trends(
    completion: ModelCompletion,
    credential: str,
    provider: AiProvider,
    language: Language,
    region: str = "TR",
) -> List[TrendItem]:
    """Ask *provider* for current trends in *region*. Returns [] on any failure."""
    provider = AiProvider(provider)
    source = TrendSource.for_provider(provider)
    prompt = build_trend_prompt(language, region)

    logger.info(f"Requesting trends from {provider.value} ({Language(language).value})")
    try:
        text = await completion.complete(prompt, credential, provider)
    except Exception as e:
        # vendor SDKs raise their own hierarchies; all of them mean "no items"
        logger.warning(
            f"{source.label} trend fetch failed: {e}",
            extra={"event": "trend_source_failed", "source": source.label, "reason": str(e)},
        )
        return []

    items = parse_ai_trends(text)
    logger.info(f"Parsed {len(items)} items from {source.label}")
    return items
