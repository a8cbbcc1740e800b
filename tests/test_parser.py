"""
Tests for model reply parsing.

Run with: pytest tests/
"""

import pytest

from pr_reviewer.parser import parse_reply

FULL_REPLY = """## Score: 78

## Strengths:
1. Clear function names
2. Good test coverage

## Problems:
### High Severity
1. [security] SQL query built from user input - in src/db.py:42
2. Missing null check on response - in `src/api.py`:17
### Medium Severity
1. [performance] Loop re-reads the config file - in src/config.py:8
### Low Severity
1. [style] Inconsistent quotes - in src/api.py:3

## Suggestions:
1. Use parameterized queries.

## Revised Code:
```python
# High Severity
1. not an item - in src/fake.py:1
```
"""


def test_findings_grouped_by_severity_in_reply_order():
    """Each severity subsection yields findings with that severity, in order."""
    parsed = parse_reply(FULL_REPLY)
    assert [(f.severity, f.file, f.line) for f in parsed.findings] == [
        ("high", "src/db.py", 42),
        ("high", "src/api.py", 17),
        ("medium", "src/config.py", 8),
        ("low", "src/api.py", 3),
    ]


def test_kind_tag_is_extracted_and_defaults_to_bug():
    """A leading [kind] tag sets the kind; without one the kind is bug."""
    parsed = parse_reply(FULL_REPLY)
    assert parsed.findings[0].kind == "security"
    assert parsed.findings[0].message == "SQL query built from user input"
    assert parsed.findings[1].kind == "bug"
    assert parsed.findings[1].message == "Missing null check on response"


def test_problem_list_items_carry_severity():
    """The problem list section yields the same items with their enclosing severity."""
    parsed = parse_reply(FULL_REPLY)
    assert [(p.file, p.line, p.severity) for p in parsed.problems] == [
        ("src/db.py", 42, "high"),
        ("src/api.py", 17, "high"),
        ("src/config.py", 8, "medium"),
        ("src/api.py", 3, "low"),
    ]


def test_score_and_summary():
    """The score is read from its heading and the raw reply is the summary."""
    parsed = parse_reply(FULL_REPLY)
    assert parsed.score == 78
    assert parsed.summary == FULL_REPLY


def test_items_in_code_fences_are_ignored():
    """Headings and items inside fenced code do not count."""
    parsed = parse_reply(FULL_REPLY)
    assert all(f.file != "src/fake.py" for f in parsed.findings)


def test_only_high_severity_present():
    """Missing medium/low subsections simply produce no findings."""
    reply = "## Problems:\n### High Severity\n1. Crash on empty input - in app.py:9\n"
    parsed = parse_reply(reply)
    assert [f.severity for f in parsed.findings] == ["high"]
    assert parsed.summary == reply


def test_sections_in_any_order():
    """Section order does not matter."""
    reply = (
        "### Low Severity\n1. Typo in docstring - in a.py:2\n\n"
        "## Score: 90\n\n"
        "### High Severity\n1. Off by one - in b.py:5\n"
    )
    parsed = parse_reply(reply)
    assert [(f.severity, f.file) for f in parsed.findings] == [("low", "a.py"), ("high", "b.py")]
    assert parsed.score == 90


def test_whitespace_tolerance():
    """Extra spaces and tabs around markers are accepted."""
    reply = "###   High Severity  \n  1.   Leaks a handle   -  in   pkg/io.py :  12  \n"
    parsed = parse_reply(reply)
    assert len(parsed.findings) == 1
    assert parsed.findings[0].file == "pkg/io.py"
    assert parsed.findings[0].line == 12
    assert parsed.findings[0].message == "Leaks a handle"


def test_markers_are_case_sensitive():
    """Lower-case markers are not recognised."""
    reply = "### high severity\n1. Something - in a.py:1\n"
    parsed = parse_reply(reply)
    assert parsed.findings == []


def test_duplicates_are_retained():
    """Two identical items are both kept."""
    reply = "### Medium Severity\n1. Same thing - in a.py:4\n2. Same thing - in a.py:4\n"
    parsed = parse_reply(reply)
    assert len(parsed.findings) == 2


def test_unknown_kind_tag_stays_in_message():
    """Tags that are not an issue kind remain part of the description."""
    reply = "### Low Severity\n1. [nit] Trailing space - in a.py:1\n"
    parsed = parse_reply(reply)
    assert parsed.findings[0].kind == "bug"
    assert parsed.findings[0].message == "[nit] Trailing space"


def test_file_level_problem_uses_line_zero():
    """Line 0 is accepted and marks a file-level finding."""
    reply = "### Low Severity\n1. [improvement] Add a module docstring - in a.py:0\n"
    finding = parse_reply(reply).findings[0]
    assert finding.line == 0
    assert finding.is_file_level


def test_items_without_citation_are_skipped():
    """Numbered items that do not cite file:line are not findings."""
    reply = "### High Severity\n1. Something vague\n2. Real one - in a.py:3\n"
    parsed = parse_reply(reply)
    assert [f.line for f in parsed.findings] == [3]


@pytest.mark.parametrize("text", [
    "",
    "Looks good to me!",
    "# Title only",
    "1. item - in a.py:1",
    "### High Severity",
    "```\n### High Severity\n1. x - in a.py:1\n",
    "## Score: lots\n",
])
def test_never_raises_on_arbitrary_text(text):
    """Unstructured replies produce no findings and keep the text as summary."""
    parsed = parse_reply(text)
    assert parsed.summary == text
    assert parsed.findings == []
    assert parsed.problems == []


def test_score_is_clamped():
    """Scores above 100 are clamped."""
    assert parse_reply("## Score: 150\n").score == 100


def test_fenced_items_inside_severity_subsection_are_ignored():
    """Example items inside a code block under a severity heading are not findings."""
    reply = (
        "### High Severity\n"
        "1. Real problem - in a.py:3\n"
        "```text\n"
        "1. example only - in fake.py:1\n"
        "```\n"
    )
    parsed = parse_reply(reply)
    assert [f.file for f in parsed.findings] == ["a.py"]


def test_nested_severity_uses_innermost_heading():
    """A severity heading nested under another one labels its own items."""
    reply = (
        "## High Severity\n"
        "1. Crash on start - in a.py:1\n"
        "### Medium Severity\n"
        "1. Slow lookup - in b.py:2\n"
    )
    parsed = parse_reply(reply)
    assert [(f.severity, f.file) for f in parsed.findings] == [("high", "a.py"), ("medium", "b.py")]
