"""Prompt construction for the model-backed analyzer."""

from __future__ import annotations

import re
from typing import Dict, List, Sequence

from pr_reviewer.models.review import DiffEntry

NO_DIFF_PLACEHOLDER = "[no diff available]"

_BACKTICK_RUN_RE = re.compile(r"`+")

SYSTEM_PROMPT = (
    "You are a senior code reviewer with years of experience reviewing production software. "
    "Review the submitted code changes thoroughly, professionally and constructively. "
    "You must answer strictly in the Markdown format you are given, keep every heading exactly as written, "
    "and make each point specific and actionable. Cover both the strengths and the problems of the change "
    "and give concrete suggestions for improvement."
)

OUTPUT_TEMPLATE = (
    "### Required review format\n\n"
    "You must follow this format exactly, keeping every heading:\n\n"
    "## Score: [0-100]\n\n"
    "## Strengths:\n"
    "1. [strength, describing specifically what the change does well]\n"
    "2. [strength]\n"
    "(list at least two strengths)\n\n"
    "## Problems:\n"
    "### High Severity\n"
    "1. [kind] [problem description] - in [file]:[line]\n"
    "### Medium Severity\n"
    "1. [kind] [problem description] - in [file]:[line]\n"
    "### Low Severity\n"
    "1. [kind] [problem description] - in [file]:[line]\n"
    "(kind is one of style, performance, security, bug, improvement; every problem must cite the file path "
    "and the line number in the new version of the file; write 0 as the line for file-wide problems; "
    "omit a severity subsection when it has no problems)\n\n"
    "## Suggestions:\n"
    "1. [suggestion addressing a specific problem, with a code example]\n\n"
    "## Revised Code:\n"
    "If there are important suggestions, show the revised code:\n\n"
    "```[language]\n"
    "[complete improved code snippet]\n"
    "```\n\n"
    "Follow this format strictly. Do not drop sections and do not add new ones."
)


def _format_file_overview(diffs: Sequence[DiffEntry]) -> str:
    lines = [
        f"- File {index}: `{diff.path}` ({diff.status}, +{diff.additions}/-{diff.deletions} lines)"
        for index, diff in enumerate(diffs, start=1)
    ]
    return "\n".join(lines)


def _fenced_patch(patch: str) -> str:
    # The fence must be longer than any backtick run inside the patch.
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(patch)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}diff\n{patch}\n{fence}"


def _format_file_details(diffs: Sequence[DiffEntry]) -> str:
    sections: List[str] = []
    total = len(diffs)
    for index, diff in enumerate(diffs, start=1):
        body = _fenced_patch(diff.patch) if diff.patch else NO_DIFF_PLACEHOLDER
        sections.append(
            f"#### File {index}/{total}: `{diff.path}`\n"
            f"- Status: {diff.status}\n"
            f"- Additions: {diff.additions}\n"
            f"- Deletions: {diff.deletions}\n"
            f"- Changes: {diff.changes}\n\n"
            f"{body}"
        )
    return "\n\n".join(sections)


def build_user_prompt(diffs: Sequence[DiffEntry]) -> str:
    """Describe the changed files, embed their patches and append the output template."""

    parts = [
        "## Code review request",
        "Please review the code changes of the following pull request.",
        f"### Change overview\n{len(diffs)} file(s) changed:",
    ]
    if diffs:
        parts.append(_format_file_overview(diffs))
        parts.append(f"### Detailed changes\n\n{_format_file_details(diffs)}")
    parts.append(OUTPUT_TEMPLATE)
    return "\n\n".join(parts)


def build_messages(diffs: Sequence[DiffEntry]) -> List[Dict[str, str]]:
    """Return the chat messages sent to the model endpoint."""

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(diffs)},
    ]


def build_prompt(diffs: Sequence[DiffEntry]) -> str:
    """Return the system and user instructions as one prompt text."""

    return "\n\n".join(message["content"] for message in build_messages(diffs))
