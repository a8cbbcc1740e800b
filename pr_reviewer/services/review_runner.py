"""One review run: fetch the pull request diff, analyze it, publish the result."""

from __future__ import annotations

from typing import List

from pr_reviewer.analyzers import SAMPLE_DIFFS, CodeAnalyzer, LLMAnalyzer, MockAnalyzer
from pr_reviewer.config import Settings
from pr_reviewer.errors import ConfigurationError, TransportError
from pr_reviewer.github_client import GitHubAPIError, GitHubClient
from pr_reviewer.logger import get_logger, log_failure, log_success, log_timing, log_with_context
from pr_reviewer.models.review import DiffEntry, ReviewResult
from pr_reviewer.services.diff_source import fetch_diff_entries
from pr_reviewer.services.reporter import ConsoleReporter, GitHubCommentReporter, Reporter

logger = get_logger()


class ReviewRunError(RuntimeError):
    """Raised when a review run fails."""

    def __init__(self, message: str, step: str, original_error: Exception | None = None):
        super().__init__(message)
        self.step = step
        self.original_error = original_error

    @property
    def is_configuration_error(self) -> bool:
        return isinstance(self.original_error, ConfigurationError)


def build_analyzer(settings: Settings) -> CodeAnalyzer:
    """Create the analyzer selected by the settings."""

    if settings.test_mode or settings.analyzer == "mock":
        return MockAnalyzer()
    credentials = settings.require_ai_credentials()
    return LLMAnalyzer(
        credentials.api_key,
        endpoint=credentials.endpoint,
        model=credentials.model,
        provider=credentials.provider,
        temperature=credentials.temperature,
        timeout=credentials.timeout,
    )


class ReviewRunner:
    def __init__(
        self,
        settings: Settings,
        *,
        github_client: GitHubClient | None = None,
        analyzer: CodeAnalyzer | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self._settings = settings
        self._github_client = github_client
        self._analyzer = analyzer
        self._reporter = reporter

    async def run(self) -> ReviewResult:
        settings = self._settings
        mode = "test" if settings.test_mode else ("dry run" if settings.dry_run else "normal")
        logger.info(f"=== RUNNER: Starting review ({mode} mode, analyzer={settings.analyzer}) ===")

        if settings.test_mode:
            return await self._run_test_mode()

        try:
            with log_timing(logger, "load_configuration"):
                credentials = settings.require_github_credentials()
                analyzer = self._analyzer or build_analyzer(settings)
        except ConfigurationError as exc:
            log_failure(logger, "Configuration missing", exc)
            raise ReviewRunError("Configuration incomplete", "load_configuration", exc) from exc

        ctx_logger = log_with_context(logger, repository=credentials.full_name, pull_number=credentials.pr_number)
        github_client = self._github_client or GitHubClient(
            token=credentials.token,
            base_url=settings.normalized_github_api_base_url,
            timeout=settings.github_timeout,
        )
        try:
            try:
                diffs = await fetch_diff_entries(
                    github_client,
                    owner=credentials.owner,
                    repo=credentials.repo,
                    pull_number=credentials.pr_number,
                )
            except GitHubAPIError as exc:
                log_failure(logger, f"Failed to fetch PR diff: {exc} (status={exc.status_code})", exc,
                            repository=credentials.full_name)
                raise ReviewRunError("Failed to fetch pull request diff", "fetch_diffs", exc) from exc

            result = await self._analyze(analyzer, diffs)

            reporter = self._reporter
            if reporter is None:
                if settings.dry_run:
                    reporter = ConsoleReporter()
                else:
                    reporter = GitHubCommentReporter(
                        github_client,
                        owner=credentials.owner,
                        repo=credentials.repo,
                        pull_number=credentials.pr_number,
                    )
            try:
                with log_timing(ctx_logger, "publish_results"):
                    await reporter.submit(result)
            except GitHubAPIError as exc:
                log_failure(logger, f"Failed to post review comments to GitHub: {exc}", exc,
                            repository=credentials.full_name)
                raise ReviewRunError("Failed to publish review", "publish_results", exc) from exc

            log_success(logger, f"Review completed for {credentials.full_name}#{credentials.pr_number}",
                        repository=credentials.full_name)
            return result
        finally:
            if self._github_client is None:
                await github_client.aclose()
            if self._analyzer is None:
                await analyzer.aclose()

    async def _run_test_mode(self) -> ReviewResult:
        logger.info("Test mode: skipping GitHub API calls and using sample diffs")
        analyzer = self._analyzer or MockAnalyzer()
        result = await self._analyze(analyzer, list(SAMPLE_DIFFS))
        reporter = self._reporter or ConsoleReporter()
        await reporter.submit(result)
        return result

    async def _analyze(self, analyzer: CodeAnalyzer, diffs: List[DiffEntry]) -> ReviewResult:
        try:
            with log_timing(logger, "analyze", analyzer=analyzer.name):
                result = await analyzer.analyze(diffs)
        except TransportError as exc:
            log_failure(logger, f"Analysis failed: {exc}", exc, analyzer=analyzer.name)
            raise ReviewRunError("Analysis failed", "analyze", exc) from exc
        logger.info(f"Analysis complete: {len(result.issues)} issue(s), {len(result.comments)} comment(s)")
        return result
