"""
Tests for provider response envelope handling.

Run with: pytest tests/
"""

import json

from pr_reviewer.analyzers.envelope import (
    ANTHROPIC,
    GEMINI,
    GENERIC,
    OPENAI,
    extract_reply_text,
    provider_for_endpoint,
)


def test_provider_from_endpoint_host():
    """Known hosts map to their provider and anything else is generic."""
    assert provider_for_endpoint("https://api.openai.com/v1/chat/completions") == OPENAI
    assert provider_for_endpoint("https://api.deepseek.com/chat/completions") == OPENAI
    assert provider_for_endpoint("https://api.anthropic.com/v1/messages") == ANTHROPIC
    assert provider_for_endpoint(
        "https://generativelanguage.googleapis.com/v1beta/models/gemini:generateContent"
    ) == GEMINI
    assert provider_for_endpoint("http://localhost:8080/v1/chat") == GENERIC


def test_openai_envelope():
    """OpenAI replies live in choices[0].message.content."""
    envelope = {"choices": [{"message": {"role": "assistant", "content": "## Score: 80"}}]}
    assert extract_reply_text(envelope, OPENAI) == "## Score: 80"


def test_anthropic_envelope_joins_text_blocks():
    """Anthropic text blocks are concatenated."""
    envelope = {"content": [{"type": "text", "text": "Hello "}, {"type": "text", "text": "world"}]}
    assert extract_reply_text(envelope, ANTHROPIC) == "Hello world"


def test_gemini_envelope():
    """Gemini replies live in candidates[0].content.parts."""
    envelope = {"candidates": [{"content": {"parts": [{"text": "Looks fine"}]}}]}
    assert extract_reply_text(envelope, GEMINI) == "Looks fine"


def test_generic_reads_choices_when_present():
    """The generic case still understands chat completion envelopes."""
    envelope = {"choices": [{"message": {"content": "reply"}}]}
    assert extract_reply_text(envelope) == "reply"
    assert extract_reply_text({"choices": [{"text": "legacy"}]}) == "legacy"


def test_mismatched_provider_falls_back_to_generic():
    """A provider hint that does not fit the envelope falls through."""
    envelope = {"choices": [{"message": {"content": "reply"}}]}
    assert extract_reply_text(envelope, ANTHROPIC) == "reply"


def test_unknown_envelope_is_serialized():
    """Unrecognised envelopes are returned whole as JSON text."""
    envelope = {"output": {"value": 1}}
    assert json.loads(extract_reply_text(envelope)) == envelope


def test_plain_string_envelope_is_returned_as_is():
    """Endpoints that answer with a bare JSON string yield that string."""
    assert extract_reply_text("just text", OPENAI) == "just text"


def test_malformed_choices_do_not_raise():
    """Odd shapes inside choices are tolerated."""
    envelope = {"choices": ["not a dict"]}
    assert json.loads(extract_reply_text(envelope, OPENAI)) == envelope
