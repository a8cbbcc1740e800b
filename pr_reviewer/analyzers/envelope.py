"""Reply text extraction for the response envelopes of known model providers."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Final
from urllib.parse import urlparse

OPENAI: Final[str] = "openai"
ANTHROPIC: Final[str] = "anthropic"
GEMINI: Final[str] = "gemini"
GENERIC: Final[str] = "generic"

_HOST_PROVIDERS: Final[dict[str, str]] = {
    "api.openai.com": OPENAI,
    "api.deepseek.com": OPENAI,
    "api.anthropic.com": ANTHROPIC,
    "generativelanguage.googleapis.com": GEMINI,
}


def provider_for_endpoint(endpoint: str) -> str:
    """Return the provider hint for an endpoint URL, `generic` when the host is unknown."""

    host = (urlparse(endpoint).hostname or "").lower()
    return _HOST_PROVIDERS.get(host, GENERIC)


def _first(items: Any) -> Dict[str, Any]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


def _openai_text(envelope: Dict[str, Any]) -> str | None:
    message = _first(envelope.get("choices")).get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


def _anthropic_text(envelope: Dict[str, Any]) -> str | None:
    blocks = envelope.get("content")
    if not isinstance(blocks, list):
        return None
    texts = [block["text"] for block in blocks if isinstance(block, dict) and isinstance(block.get("text"), str)]
    return "".join(texts) if texts else None


def _gemini_text(envelope: Dict[str, Any]) -> str | None:
    content = _first(envelope.get("candidates")).get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    return "".join(texts) if texts else None


def _generic_text(envelope: Any) -> str:
    if isinstance(envelope, dict):
        choice = _first(envelope.get("choices"))
        message = choice.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        if isinstance(choice.get("text"), str):
            return choice["text"]
    if isinstance(envelope, str):
        return envelope
    return json.dumps(envelope, ensure_ascii=False)


_EXTRACTORS: Final[dict[str, Callable[[Dict[str, Any]], str | None]]] = {
    OPENAI: _openai_text,
    ANTHROPIC: _anthropic_text,
    GEMINI: _gemini_text,
}


def extract_reply_text(envelope: Any, provider: str | None = None) -> str:
    """Pull the reply text out of a provider response envelope.

    Known shapes are tried first for their provider; anything that does not
    match falls through to the generic case, which reads
    ``choices[0].message.content`` when present and otherwise returns the whole
    envelope as JSON text.
    """

    extractor = _EXTRACTORS.get((provider or GENERIC).lower())
    if extractor is not None and isinstance(envelope, dict):
        text = extractor(envelope)
        if text is not None:
            return text
    return _generic_text(envelope)
