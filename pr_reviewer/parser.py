"""Parse a model's Markdown review reply into findings and problem items.

The reply is expected to follow the template in :mod:`pr_reviewer.prompts`,
but models drift: sections go missing, get reordered or renamed. Parsing is
therefore section based and best effort. Whatever cannot be recognised is
simply not extracted; the raw reply is always kept as the summary.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence, Tuple

from pr_reviewer.logger import get_logger
from pr_reviewer.models.review import ISSUE_KINDS, Finding

logger = get_logger()

DEFAULT_KIND = "bug"

SEVERITY_MARKERS: Tuple[Tuple[str, str], ...] = (
    ("High Severity", "high"),
    ("Medium Severity", "medium"),
    ("Low Severity", "low"),
)
PROBLEM_LIST_MARKERS: Tuple[str, ...] = ("Problems", "Problem List", "Issues")
SCORE_MARKER = "Score"

_HEADING_RE = re.compile(r"^(?P<hashes>#{1,6})[ \t]*(?P<title>.*?)[ \t]*$", re.MULTILINE)
# An unclosed fence runs to the end of the reply, as Markdown renders it.
_FENCE_RE = re.compile(r"^[ \t]*```.*?(?:^[ \t]*```[ \t]*$|\Z)", re.MULTILINE | re.DOTALL)
_ITEM_RE = re.compile(
    r"^[ \t]*(?P<number>\d+)\.[ \t]+(?P<description>.+?)"
    r"[ \t]+-[ \t]*in[ \t]+[`\[]?(?P<file>[^\s`\[\]:]+)[`\]]?"
    r"[ \t]*:[ \t]*\[?(?P<line>\d+)\]?[ \t]*[.;]?[ \t]*$",
    re.MULTILINE,
)
_KIND_TAG_RE = re.compile(r"^\[(?P<kind>[A-Za-z]+)\][ \t]*")
_NUMBER_RE = re.compile(r"\d{1,3}")


@dataclass(frozen=True, slots=True)
class ProblemItem:
    """One ``<N>. <description> - in <file>:<line>`` entry of the problem list."""

    description: str
    file: str
    line: int
    kind: str = DEFAULT_KIND
    severity: str | None = None


@dataclass(slots=True)
class ParsedReply:
    summary: str
    findings: List[Finding] = field(default_factory=list)
    problems: List[ProblemItem] = field(default_factory=list)
    score: int | None = None


@dataclass(frozen=True, slots=True)
class _Section:
    level: int
    title: str
    start: int
    end: int


def _fenced_spans(text: str) -> List[Tuple[int, int]]:
    return [match.span() for match in _FENCE_RE.finditer(text)]


def _in_fence(offset: int, fences: Sequence[Tuple[int, int]]) -> bool:
    return any(start <= offset < end for start, end in fences)


def _split_sections(text: str, fences: Sequence[Tuple[int, int]]) -> List[_Section]:
    """Return every heading's section; a section ends at the next heading of the same or higher level."""

    headings = [match for match in _HEADING_RE.finditer(text) if not _in_fence(match.start(), fences)]
    sections: List[_Section] = []
    for index, match in enumerate(headings):
        level = len(match.group("hashes"))
        end = len(text)
        for following in headings[index + 1:]:
            if len(following.group("hashes")) <= level:
                end = following.start()
                break
        sections.append(_Section(level=level, title=match.group("title"), start=match.end(), end=end))
    return sections


def _severity_for(title: str) -> str | None:
    for marker, severity in SEVERITY_MARKERS:
        if marker in title:
            return severity
    return None


def _is_problem_list(title: str) -> bool:
    return _severity_for(title) is None and any(marker in title for marker in PROBLEM_LIST_MARKERS)


def _split_kind(description: str) -> Tuple[str, str]:
    match = _KIND_TAG_RE.match(description)
    if match and match.group("kind").lower() in ISSUE_KINDS:
        return match.group("kind").lower(), description[match.end():].strip()
    return DEFAULT_KIND, description.strip()


def _iter_items(
    text: str,
    section: _Section,
    fences: Sequence[Tuple[int, int]],
) -> Iterator[Tuple[int, str, str, str, int]]:
    """Yield ``(offset, kind, description, file, line)`` for each numbered item outside code fences."""

    for match in _ITEM_RE.finditer(text, section.start, section.end):
        if _in_fence(match.start(), fences):
            continue
        kind, description = _split_kind(match.group("description"))
        yield match.start(), kind, description, match.group("file"), int(match.group("line"))


def _severity_at(offset: int, severity_sections: Sequence[Tuple[_Section, str]]) -> str | None:
    """Severity of the innermost severity section containing ``offset``."""

    enclosing = [
        (section.start, severity)
        for section, severity in severity_sections
        if section.start <= offset < section.end
    ]
    return max(enclosing)[1] if enclosing else None


def _collect_items(
    text: str,
    sections: Sequence[_Section],
    fences: Sequence[Tuple[int, int]],
    label: str,
) -> List[Tuple[int, str, str, str, int]]:
    """Items of all given sections, once each, in reply order."""

    items: Dict[int, Tuple[int, str, str, str, int]] = {}
    for section in sections:
        try:
            for item in _iter_items(text, section, fences):
                items.setdefault(item[0], item)
        except Exception as exc:
            logger.warning(f"Skipping unparsable '{section.title}' {label}: {exc}")
    return [items[offset] for offset in sorted(items)]


def _parse_score(text: str, section: _Section) -> int | None:
    match = _NUMBER_RE.search(section.title) or _NUMBER_RE.search(text, section.start, section.end)
    if match is None:
        return None
    return max(0, min(100, int(match.group())))


def _parse_sections(text: str) -> ParsedReply:
    parsed = ParsedReply(summary=text)
    fences = _fenced_spans(text)
    sections = _split_sections(text, fences)

    severity_sections = [
        (section, severity) for section in sections if (severity := _severity_for(section.title))
    ]

    severity_items = _collect_items(text, [section for section, _ in severity_sections], fences, "subsection")
    for offset, kind, description, file, line in severity_items:
        parsed.findings.append(
            Finding(
                kind=kind,
                severity=_severity_at(offset, severity_sections),
                message=description,
                file=file,
                line=line,
            )
        )

    problem_sections = [section for section in sections if _is_problem_list(section.title)]
    for offset, kind, description, file, line in _collect_items(text, problem_sections, fences, "section"):
        parsed.problems.append(
            ProblemItem(
                description=description,
                file=file,
                line=line,
                kind=kind,
                severity=_severity_at(offset, severity_sections),
            )
        )

    for section in sections:
        if SCORE_MARKER in section.title:
            try:
                parsed.score = _parse_score(text, section)
            except Exception as exc:
                logger.warning(f"Ignoring unparsable score: {exc}")
            break

    return parsed


def parse_reply(text: str) -> ParsedReply:
    """Extract findings, problem items and the score from a model reply.

    Never raises: a reply that cannot be parsed yields no findings and no
    problems, with the reply preserved as the summary.
    """

    if not isinstance(text, str):
        text = "" if text is None else str(text)
    try:
        parsed = _parse_sections(text)
    except Exception as exc:
        logger.warning(f"Model reply could not be parsed, keeping it as summary only: {exc}")
        return ParsedReply(summary=text)

    logger.debug(
        f"Parsed model reply: findings={len(parsed.findings)}, problems={len(parsed.problems)}, "
        f"score={parsed.score}"
    )
    return parsed
