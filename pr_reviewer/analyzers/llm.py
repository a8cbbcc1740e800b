"""Model-backed analyzer talking to a chat completions endpoint."""

from __future__ import annotations

from typing import Any, Dict, List

import httpx

from pr_reviewer.analyzers.base import CodeAnalyzer
from pr_reviewer.analyzers.envelope import GENERIC, extract_reply_text
from pr_reviewer.errors import ConfigurationError, TransportError
from pr_reviewer.logger import get_logger, log_failure, log_timing, log_with_context
from pr_reviewer.models.review import DiffEntry, ReviewResult
from pr_reviewer.parser import parse_reply
from pr_reviewer.placement import place_problem_comments
from pr_reviewer.prompts import build_messages

logger = get_logger()


class LLMAPIError(TransportError):
    """Raised when the model endpoint responds with an error."""


class LLMAnalyzer(CodeAnalyzer):
    name = "ai"

    def __init__(
        self,
        api_key: str | None,
        *,
        endpoint: str,
        model: str,
        provider: str = GENERIC,
        temperature: float = 0.3,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("AI_API_KEY is not set; the AI analyzer cannot be used.")
        self._endpoint = endpoint
        self._model = model
        self._provider = provider
        self._temperature = temperature
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _analyze(self, diffs: list[DiffEntry]) -> ReviewResult:
        ctx_logger = log_with_context(logger, model=self._model, provider=self._provider)
        ctx_logger.debug(f"Building prompt ({len(diffs)} files)")

        with log_timing(ctx_logger, "build_prompt"):
            messages = build_messages(diffs)
        ctx_logger.debug(f"Prompt built: {sum(len(message['content']) for message in messages)} characters")

        try:
            with log_timing(ctx_logger, "call_model"):
                envelope = await self._complete(messages)
        except LLMAPIError as exc:
            log_failure(logger, f"Model request failed: {exc}", exc, model=self._model)
            raise

        reply = extract_reply_text(envelope, self._provider)
        if not reply.strip():
            ctx_logger.warning("Model returned an empty reply")

        ctx_logger.debug(f"Parsing model reply ({len(reply)} characters)")
        parsed = parse_reply(reply)
        comments = place_problem_comments(parsed.problems, diffs)

        ctx_logger.info(
            f"AI analysis parsed: {len(parsed.findings)} issue(s), {len(comments)} comment(s), "
            f"{sum(1 for comment in comments if comment.is_inline)} inline"
        )
        return ReviewResult(
            comments=comments,
            issues=parsed.findings,
            summary=parsed.summary,
            score=parsed.score,
        )

    async def _complete(self, messages: List[Dict[str, str]]) -> Any:
        request_body = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
        }
        try:
            response = await self._client.post(self._endpoint, json=request_body)
        except httpx.HTTPError as exc:
            raise LLMAPIError(f"Request to model endpoint failed: {exc}", 0, None) from exc
        _raise_for_status("complete chat", response)
        try:
            return response.json()
        except ValueError as exc:
            raise LLMAPIError(
                "Model endpoint returned invalid JSON.",
                response.status_code,
                response.text,
            ) from exc


def _raise_for_status(action: str, response: httpx.Response) -> None:
    if response.status_code < 400:
        return
    detail: Any | None
    try:
        detail = response.json()
    except ValueError:
        detail = response.text
    raise LLMAPIError(
        f"Failed to {action}: status={response.status_code}, detail={detail}",
        response.status_code,
        detail,
    )
