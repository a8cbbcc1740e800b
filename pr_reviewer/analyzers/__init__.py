"""Analyzer strategies sharing the ``analyze(diffs) -> ReviewResult`` capability."""

from .base import CodeAnalyzer
from .llm import LLMAnalyzer, LLMAPIError
from .mock import SAMPLE_DIFFS, MockAnalyzer

__all__ = ["CodeAnalyzer", "LLMAnalyzer", "LLMAPIError", "MockAnalyzer", "SAMPLE_DIFFS"]
