"""Publish review results to a pull request or to the console."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, TextIO

from pr_reviewer.github_client import GitHubClient
from pr_reviewer.logger import get_logger, log_with_context
from pr_reviewer.models.review import SEVERITIES, Comment, Finding, ReviewResult

logger = get_logger()

FOOTER = "---\n*This comment was generated by an automated code review tool.*"

_SEVERITY_TITLES = {
    "high": "High Severity Issues",
    "medium": "Medium Severity Issues",
    "low": "Low Severity Issues",
}


def format_issue_list(issues: Sequence[Finding]) -> str:
    lines: List[str] = []
    for index, issue in enumerate(issues, start=1):
        lines.append(f"{index}. **{issue.kind}**: {issue.message}")
        if issue.file:
            location = f"   File: `{issue.file}`"
            if issue.line:
                location += f" Line: {issue.line}"
            lines.append(location)
        if issue.suggestion:
            lines.append(f"   Suggestion: {issue.suggestion}")
        lines.append("")
    return "\n".join(lines)


def format_file_comments(comments: Sequence[Comment]) -> str:
    by_file: Dict[str, List[Comment]] = {}
    for comment in comments:
        by_file.setdefault(comment.path, []).append(comment)

    sections: List[str] = []
    for path, file_comments in by_file.items():
        entries = "\n\n".join(f"{index}. {comment.body}" for index, comment in enumerate(file_comments, start=1))
        sections.append(f"### {path}\n\n{entries}")
    return "\n\n".join(sections)


def format_summary_comment(result: ReviewResult) -> str:
    """Build the pull request summary comment: summary, grouped issues, file-level comments."""

    parts = [result.summary.strip()]
    if result.score is not None:
        parts.append(f"**Score:** {result.score}/100")

    if result.issues:
        issue_sections = ["## Issue Details"]
        for severity in SEVERITIES:
            issues = result.issues_by_severity(severity)
            if issues:
                issue_sections.append(f"### {_SEVERITY_TITLES[severity]}\n\n{format_issue_list(issues).rstrip()}")
        parts.append("\n\n".join(issue_sections))

    file_comments = result.file_comments
    if file_comments:
        parts.append(f"## File Comments\n\n{format_file_comments(file_comments)}")

    parts.append(FOOTER)
    return "\n\n".join(part for part in parts if part)


def _inline_payload(comment: Comment) -> Dict[str, Any]:
    return {"path": comment.review_path, "position": comment.position, "body": comment.body}


class Reporter(ABC):
    @abstractmethod
    async def submit(self, result: ReviewResult) -> None:
        """Publish a review result."""


class GitHubCommentReporter(Reporter):
    """Post the summary as an issue comment and positioned comments as one review."""

    def __init__(self, client: GitHubClient, *, owner: str, repo: str, pull_number: int) -> None:
        self._client = client
        self._owner = owner
        self._repo = repo
        self._pull_number = pull_number
        self._logger = log_with_context(logger, repository=f"{owner}/{repo}", pull_number=pull_number)

    async def post_summary_comment(self, body: str) -> None:
        self._logger.info(f"Posting summary comment on PR #{self._pull_number}")
        await self._client.create_issue_comment(
            owner=self._owner,
            repo=self._repo,
            issue_number=self._pull_number,
            body=body,
        )

    async def post_inline_comments(self, comments: Sequence[Comment]) -> int:
        positioned = [comment for comment in comments if comment.is_inline]
        if not positioned:
            self._logger.info("No positioned comments to submit inline")
            return 0

        pull_request = await self._client.get_pull_request(
            owner=self._owner, repo=self._repo, pull_number=self._pull_number
        )
        commit_id = (pull_request.get("head") or {}).get("sha")
        if not commit_id:
            self._logger.warning("Pull request has no head commit SHA; skipping inline comments")
            return 0

        self._logger.info(f"Submitting review with {len(positioned)} inline comment(s) on {commit_id[:8]}")
        await self._client.create_pull_request_review(
            owner=self._owner,
            repo=self._repo,
            pull_number=self._pull_number,
            commit_id=commit_id,
            comments=[_inline_payload(comment) for comment in positioned],
        )
        return len(positioned)

    async def submit(self, result: ReviewResult) -> None:
        await self.post_summary_comment(format_summary_comment(result))
        posted = await self.post_inline_comments(result.comments)
        self._logger.info(f"Review published: summary comment and {posted} inline comment(s)")


class ConsoleReporter(Reporter):
    """Print the review instead of posting it (dry run and test mode)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout

    async def submit(self, result: ReviewResult) -> None:
        out = self._stream
        print(result.summary, file=out)
        if result.score is not None:
            print(f"Score: {result.score}/100", file=out)
        print(f"Issues found: {len(result.issues)}", file=out)
        for index, issue in enumerate(result.issues, start=1):
            location = f" ({issue.file}:{issue.line})" if issue.line else f" ({issue.file})"
            print(f"[{index}] {issue.severity.upper()} - {issue.kind}: {issue.message}{location}", file=out)
        inline = result.inline_comments
        print(f"Comments: {len(result.comments)} ({len(inline)} inline)", file=out)
        for comment in inline:
            print(f"  {comment.path} @ position {comment.position}", file=out)
