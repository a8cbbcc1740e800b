"""Error types shared across the review pipeline."""

from __future__ import annotations

from typing import Any


class ConfigurationError(RuntimeError):
    """Raised when a required setting or credential is missing or invalid."""


class TransportError(RuntimeError):
    """Raised when a remote service answers with a non-success response."""

    def __init__(self, message: str, status_code: int, response_body: Any | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
