"""Application configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Final, Literal

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, BaseModel, Field, ValidationError

from pr_reviewer.analyzers.envelope import provider_for_endpoint
from pr_reviewer.errors import ConfigurationError

DEFAULT_GITHUB_API_BASE_URL: Final[str] = "https://api.github.com"
DEFAULT_AI_API_ENDPOINT: Final[str] = "https://api.openai.com/v1/chat/completions"
DEFAULT_AI_MODEL: Final[str] = "gpt-4"

LogLevel = Literal["debug", "info", "warn", "error"]
AnalyzerName = Literal["ai", "mock"]


class SettingsError(ConfigurationError):
    """Raised when application configuration is invalid or incomplete."""


@dataclass(frozen=True)
class GitHubCredentials:
    token: str
    owner: str
    repo: str
    pr_number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class AICredentials:
    api_key: str
    endpoint: str
    model: str
    provider: str
    temperature: float
    timeout: float


class Settings(BaseModel):
    """Runtime settings loaded from environment variables."""

    github_token: str | None = None
    github_owner: str | None = None
    github_repo: str | None = None
    pr_number: int | None = None
    github_api_base_url: AnyHttpUrl = DEFAULT_GITHUB_API_BASE_URL
    github_timeout: float = Field(default=10.0, gt=0)

    ai_api_key: str | None = None
    ai_api_endpoint: AnyHttpUrl = DEFAULT_AI_API_ENDPOINT
    ai_model: str = DEFAULT_AI_MODEL
    ai_provider: str | None = None
    ai_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    ai_timeout: float = Field(default=60.0, gt=0)

    analyzer: AnalyzerName = "ai"
    dry_run: bool = False
    test_mode: bool = False
    log_level: LogLevel = "info"
    log_dir: str | None = None

    @property
    def normalized_github_api_base_url(self) -> str:
        """Return the GitHub API base URL without a trailing slash."""
        return str(self.github_api_base_url).rstrip("/")

    @property
    def normalized_ai_api_endpoint(self) -> str:
        return str(self.ai_api_endpoint).rstrip("/")

    @property
    def resolved_ai_provider(self) -> str:
        """Provider hint for reply envelope extraction; AI_PROVIDER wins over the endpoint host."""
        if self.ai_provider:
            return self.ai_provider.strip().lower()
        return provider_for_endpoint(self.normalized_ai_api_endpoint)

    def require_github_credentials(self) -> GitHubCredentials:
        """Ensure pull request coordinates and token are configured and return them."""

        missing = []
        if not self.github_token:
            missing.append("GITHUB_TOKEN")
        if not self.github_owner:
            missing.append("GITHUB_OWNER")
        if not self.github_repo:
            missing.append("GITHUB_REPO")
        if self.pr_number is None:
            missing.append("PR_NUMBER")

        if missing:
            missing_vars = ", ".join(missing)
            raise SettingsError(
                "GitHub access is not configured. Missing environment variables: "
                f"{missing_vars}."
            )

        return GitHubCredentials(
            token=self.github_token,
            owner=self.github_owner,
            repo=self.github_repo,
            pr_number=int(self.pr_number),
        )

    def require_ai_credentials(self) -> AICredentials:
        """Ensure the model endpoint credential is configured and return the endpoint settings."""

        if not self.ai_api_key:
            raise SettingsError("AI analysis is not configured. Missing environment variable: AI_API_KEY.")

        return AICredentials(
            api_key=self.ai_api_key,
            endpoint=self.normalized_ai_api_endpoint,
            model=self.ai_model,
            provider=self.resolved_ai_provider,
            temperature=self.ai_temperature,
            timeout=self.ai_timeout,
        )


_TRUE_VALUES: Final[set[str]] = {"1", "true", "yes", "on"}
_LOG_LEVELS: Final[set[str]] = {"debug", "info", "warn", "error"}


def _parse_bool_env(raw_value: str | None, *, default: bool = False) -> bool:
    """Convert an environment variable string to a boolean value."""

    if raw_value is None or not raw_value.strip():
        return default
    return raw_value.strip().lower() in _TRUE_VALUES


def _parse_int_env(name: str) -> int | None:
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return None
    try:
        return int(raw_value.strip())
    except ValueError as exc:
        raise SettingsError(f"Invalid value for {name}. It must be an integer.") from exc


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _split_repository(full_name: str | None) -> tuple[str | None, str | None]:
    if not full_name or "/" not in full_name:
        return None, None
    owner, repo = full_name.split("/", 1)
    return owner or None, repo or None


def _parse_log_level(raw_value: str | None) -> str:
    level = (raw_value or "info").strip().lower()
    if level == "warning":
        return "warn"
    return level if level in _LOG_LEVELS else "info"


def _build_settings(env_file: str | Path | None = None) -> Settings:
    env_path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)

    fallback_owner, fallback_repo = _split_repository(os.getenv("GITHUB_REPOSITORY"))

    values: dict[str, object] = {
        "github_token": _optional_env("GITHUB_TOKEN") or _optional_env("PERSONAL_TOKEN"),
        "github_owner": _optional_env("GITHUB_OWNER") or fallback_owner,
        "github_repo": _optional_env("GITHUB_REPO") or fallback_repo,
        "pr_number": _parse_int_env("PR_NUMBER"),
        "github_api_base_url": _optional_env("GITHUB_API_BASE_URL") or DEFAULT_GITHUB_API_BASE_URL,
        "ai_api_key": _optional_env("AI_API_KEY"),
        "ai_api_endpoint": _optional_env("AI_API_ENDPOINT") or DEFAULT_AI_API_ENDPOINT,
        "ai_model": _optional_env("AI_MODEL") or DEFAULT_AI_MODEL,
        "ai_provider": _optional_env("AI_PROVIDER"),
        "analyzer": (_optional_env("REVIEW_ANALYZER") or "ai").lower(),
        "dry_run": _parse_bool_env(os.getenv("DRY_RUN")),
        "test_mode": _parse_bool_env(os.getenv("TEST_MODE")),
        "log_level": _parse_log_level(os.getenv("LOG_LEVEL")),
        "log_dir": _optional_env("LOG_DIR"),
    }
    for key, env_name in (
        ("ai_temperature", "AI_TEMPERATURE"),
        ("ai_timeout", "AI_TIMEOUT"),
        ("github_timeout", "GITHUB_TIMEOUT"),
    ):
        if raw := _optional_env(env_name):
            values[key] = raw

    try:
        return Settings(**values)
    except ValidationError as exc:
        raise SettingsError(f"Invalid application configuration: {exc}") from exc


@lru_cache(maxsize=4)
def _cached_settings(env_file: str | None) -> Settings:
    return _build_settings(env_file)


def get_settings(env_file: str | Path | None = None) -> Settings:
    """Retrieve cached application settings."""
    return _cached_settings(str(env_file) if env_file is not None else None)


def reset_settings_cache() -> None:
    """Clear the cached settings (primarily for tests)."""
    _cached_settings.cache_clear()
