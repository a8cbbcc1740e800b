"""
Tests for prompt construction.

Run with: pytest tests/
"""

from pr_reviewer.models.review import DiffEntry
from pr_reviewer.prompts import (
    NO_DIFF_PLACEHOLDER,
    SYSTEM_PROMPT,
    build_messages,
    build_prompt,
    build_user_prompt,
)

DIFFS = [
    DiffEntry(path="src/app.py", status="modified", additions=2, deletions=1, changes=3,
              patch="@@ -1,2 +1,3 @@\n import os\n+import sys\n-import re\n+import json"),
    DiffEntry(path="assets/logo.png", status="added", additions=0, deletions=0, changes=0),
    DiffEntry(path="lib/util.js", status="renamed", additions=1, deletions=0, changes=1,
              patch="@@ -0,0 +1 @@\n+export const x = 1;"),
]


def test_one_patch_block_per_file_with_patch():
    """Each patch is embedded once in a diff fence, in input order."""
    prompt = build_user_prompt(DIFFS)
    assert prompt.count("```diff\n") == 2
    assert prompt.index(DIFFS[0].patch) < prompt.index(DIFFS[2].patch)


def test_placeholder_for_missing_patch():
    """Files without a patch get exactly one placeholder each."""
    prompt = build_user_prompt(DIFFS)
    assert prompt.count(NO_DIFF_PLACEHOLDER) == 1
    assert prompt.index("assets/logo.png") < prompt.index(NO_DIFF_PLACEHOLDER)


def test_overview_lists_count_status_and_line_counts():
    """The overview states the file count and each file's status and counts."""
    prompt = build_user_prompt(DIFFS)
    assert "3 file(s) changed" in prompt
    assert "`src/app.py` (modified, +2/-1 lines)" in prompt
    assert "`lib/util.js` (renamed, +1/-0 lines)" in prompt


def test_template_names_sections_and_citation_format():
    """The output template fixes headings and the file:line citation."""
    prompt = build_user_prompt(DIFFS)
    for heading in ("## Score:", "## Strengths:", "## Problems:", "### High Severity",
                    "### Medium Severity", "### Low Severity", "## Suggestions:", "## Revised Code:"):
        assert heading in prompt
    assert "- in [file]:[line]" in prompt


def test_empty_diff_set_still_builds_prompt():
    """An empty diff set yields a valid prompt with no patch blocks."""
    prompt = build_user_prompt([])
    assert "0 file(s) changed" in prompt
    assert "```diff" not in prompt
    assert NO_DIFF_PLACEHOLDER not in prompt


def test_messages_are_system_then_user():
    """Chat messages carry the system persona first and the request second."""
    messages = build_messages(DIFFS)
    assert [message["role"] for message in messages] == ["system", "user"]
    assert messages[0]["content"] == SYSTEM_PROMPT
    assert "src/app.py" in messages[1]["content"]


def test_single_prompt_joins_both_instructions():
    """The single-text prompt contains the system and user instructions."""
    prompt = build_prompt(DIFFS)
    assert prompt.startswith(SYSTEM_PROMPT)
    assert build_user_prompt(DIFFS) in prompt


def test_patch_containing_backtick_fence_stays_in_one_block():
    """A patch that contains a ``` line is wrapped in a longer fence."""
    patch = "@@ -1,2 +1,3 @@\n # Usage\n+```python\n+```"
    prompt = build_user_prompt([DiffEntry(path="README.md", status="modified", additions=2, patch=patch)])
    assert f"````diff\n{patch}\n````" in prompt
