from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Union
import logging
import re

import requests

from app.config import Settings

logger = logging.getLogger("app.summarization")


FALLBACK_SUMMARY = (
    "This is a placeholder summary generated locally. "
    "Provide an OpenAI API key to enable live summarization."
)

PROMPT_PREFIX = "Summarize the following text in 2-3 sentences:\n\n"

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.?!])\s+")


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def local_summary(text: str, max_sentences: int = 3) -> str:
    """Deterministic summary: the first sentences of the normalized text."""
    normalized = normalize_whitespace(text)
    if not normalized:
        return FALLBACK_SUMMARY
    sentences = _SENTENCE_BOUNDARY.split(normalized)[:max_sentences]
    candidate = " ".join(sentences)
    return candidate if candidate else FALLBACK_SUMMARY


# Provider response shapes


@dataclass(frozen=True)
class DirectTextResponse:
    text: str


@dataclass(frozen=True)
class ChoicesResponse:
    content: str


ResponseShape = Union[DirectTextResponse, ChoicesResponse]


def parse_provider_payload(payload: Any) -> List[ResponseShape]:
    """Return the recognized shapes in extraction order (direct text first)."""
    shapes: List[ResponseShape] = []
    if not isinstance(payload, dict):
        return shapes
    output_text = payload.get("output_text")
    if isinstance(output_text, str):
        shapes.append(DirectTextResponse(output_text))
    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str):
            shapes.append(ChoicesResponse(content))
    return shapes


def extract_summary_text(shapes: List[ResponseShape]) -> Optional[str]:
    for shape in shapes:
        raw = shape.text if isinstance(shape, DirectTextResponse) else shape.content
        if raw.strip():
            return raw.strip()
    return None


# Provider call result


@dataclass(frozen=True)
class ProviderSuccess:
    text: str


@dataclass(frozen=True)
class ProviderFailure:
    reason: str


ProviderResult = Union[ProviderSuccess, ProviderFailure]


class OpenAIProvider:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        timeout_s: float = 30.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_s = timeout_s
        self.http = http or requests.Session()

    def complete(self, text: str) -> ProviderResult:
        """Issue a single summarization request. Never raises."""
        body = {
            "model": self.model,
            "input": PROMPT_PREFIX + normalize_whitespace(text),
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            resp = self.http.post(
                f"{self.base_url}/responses",
                json=body,
                headers=headers,
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            return ProviderFailure(f"request failed: {exc}")
        except Exception as exc:
            logger.exception("Unexpected error calling summarization provider")
            return ProviderFailure(f"unexpected error: {exc}")

        if not resp.ok:
            return ProviderFailure(f"provider returned status {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            return ProviderFailure(f"invalid JSON from provider: {exc}")

        text_out = extract_summary_text(parse_provider_payload(payload))
        return ProviderSuccess(text_out or "")


class Summarizer:
    def __init__(self, provider: Optional[OpenAIProvider] = None) -> None:
        self.provider = provider

    def summarize(self, text: str) -> str:
        """Summarize ``text``, falling back to :func:`local_summary`.

        Without a provider no network call is made. A provider failure or an
        empty provider answer is logged and answered locally; nothing here
        raises to the caller.
        """
        if self.provider is None:
            return local_summary(text)

        result = self.provider.complete(text)
        if isinstance(result, ProviderFailure):
            logger.warning("Summarization provider failed, using local summary: %s", result.reason)
            return local_summary(text)
        if not result.text.strip():
            logger.warning("Summarization provider returned no text, using local summary")
            return local_summary(text)
        return result.text.strip()


def build_summarizer(settings: Settings) -> Summarizer:
    if not settings.openai_api_key:
        return Summarizer(None)
    provider = OpenAIProvider(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.openai_model,
        timeout_s=settings.openai_timeout_s,
    )
    return Summarizer(provider)
