"""Map cited ``file:line`` references onto pull request diff positions."""

from __future__ import annotations

from typing import List, Sequence

from pr_reviewer.diff_position import resolve_position
from pr_reviewer.logger import get_logger
from pr_reviewer.models.review import Comment, DiffEntry
from pr_reviewer.parser import ProblemItem

logger = get_logger()


def _normalize_cited_path(cited: str) -> str:
    cited = cited.strip().strip("`")
    while cited.startswith("./"):
        cited = cited[2:]
    return cited.lstrip("/")


def match_diff_entry(cited: str, diffs: Sequence[DiffEntry]) -> DiffEntry | None:
    """Find the diff entry a cited path refers to.

    An exact path match wins; otherwise the first entry whose path ends with
    ``/<cited>`` is used, since models often shorten paths.
    """

    target = _normalize_cited_path(cited)
    if not target:
        return None
    for diff in diffs:
        if diff.path == target:
            return diff
    suffix = f"/{target}"
    for diff in diffs:
        if diff.path.endswith(suffix):
            return diff
    return None


def format_problem_body(problem: ProblemItem) -> str:
    parts = [problem.description.strip()]
    label = f"**Kind:** {problem.kind.capitalize()}"
    if problem.severity:
        label = f"{label} | **Severity:** {problem.severity.capitalize()}"
    parts.append(label)
    return "\n\n".join(parts)


def place_comment(path: str, line: int | None, body: str, diffs: Sequence[DiffEntry]) -> Comment:
    """Build a comment for ``path:line``, inline when the line is part of the file's diff."""

    position: int | None = None
    diff_path: str | None = None
    entry = match_diff_entry(path, diffs)
    if entry is None:
        logger.debug(f"No diff entry matches cited path '{path}'; keeping comment file-level")
    else:
        diff_path = entry.path
        if line:
            position = resolve_position(entry.patch, line)
            if position is None:
                logger.debug(f"Line {line} of '{entry.path}' is not in the diff; keeping comment file-level")
    return Comment(path=path, body=body, position=position, diff_path=diff_path)


def place_problem_comments(problems: Sequence[ProblemItem], diffs: Sequence[DiffEntry]) -> List[Comment]:
    """Turn problem list items into comments, in reply order."""

    comments = [
        place_comment(problem.file, problem.line, format_problem_body(problem), diffs)
        for problem in problems
    ]
    inline = sum(1 for comment in comments if comment.is_inline)
    logger.debug(f"Placed {len(comments)} comment(s), {inline} inline")
    return comments
