"""Shared data structures for review processing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

IssueKind = Literal["style", "performance", "security", "bug", "improvement"]
Severity = Literal["low", "medium", "high"]

ISSUE_KINDS: tuple[str, ...] = ("style", "performance", "security", "bug", "improvement")
SEVERITIES: tuple[str, ...] = ("high", "medium", "low")


@dataclass(frozen=True, slots=True)
class DiffEntry:
    path: str
    status: str
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: str | None = None


@dataclass(frozen=True, slots=True)
class Finding:
    kind: IssueKind
    severity: Severity
    message: str
    file: str
    line: int | None = None
    suggestion: str | None = None

    @property
    def is_file_level(self) -> bool:
        return not self.line


@dataclass(frozen=True, slots=True)
class Comment:
    """A review remark. ``path`` is the file as cited; ``diff_path`` is the matched diff entry's path."""

    path: str
    body: str
    position: int | None = None
    diff_path: str | None = None

    @property
    def is_inline(self) -> bool:
        return self.position is not None

    @property
    def review_path(self) -> str:
        """Path to post an inline comment against."""
        return self.diff_path or self.path


@dataclass(frozen=True, slots=True)
class ReviewResult:
    comments: List[Comment] = field(default_factory=list)
    issues: List[Finding] = field(default_factory=list)
    summary: str = ""
    score: int | None = None

    @property
    def inline_comments(self) -> List[Comment]:
        return [comment for comment in self.comments if comment.is_inline]

    @property
    def file_comments(self) -> List[Comment]:
        return [comment for comment in self.comments if not comment.is_inline]

    def issues_by_severity(self, severity: str) -> List[Finding]:
        return [issue for issue in self.issues if issue.severity == severity]


EMPTY_DIFF_SUMMARY = "No changes to analyze."


def empty_diff_result() -> ReviewResult:
    """Result returned when a pull request has no changed files."""
    return ReviewResult(comments=[], issues=[], summary=EMPTY_DIFF_SUMMARY)
