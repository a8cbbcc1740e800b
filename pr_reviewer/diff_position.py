"""Unified diff helpers for GitHub pull request review comments.

GitHub's review API places a comment with ``position``: the 1-based index of a
line within a file's ``patch`` text. Every patch line counts, hunk headers
included. This module maps new-file line numbers to those positions.
"""

from __future__ import annotations

import re
from typing import Dict, Iterator, Tuple

_HUNK_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? \+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@"
)


class MalformedHunkHeader(ValueError):
    """Raised internally when a line starting with ``@@`` is not a valid hunk header."""


def parse_hunk_header(line: str) -> int:
    """Return the new-file start line of a hunk header."""

    match = _HUNK_RE.match(line)
    if match is None:
        raise MalformedHunkHeader(line)
    return int(match.group("new_start"))


def _iter_new_lines(patch: str) -> Iterator[Tuple[int, int]]:
    """Yield ``(new_line, position)`` for every context or added line of a patch."""

    new_line: int | None = None
    for position, raw in enumerate(patch.splitlines(), start=1):
        if raw.startswith("@@"):
            new_line = parse_hunk_header(raw) - 1
            continue
        if new_line is None:
            continue
        if raw.startswith("-") or raw.startswith("\\"):
            continue
        new_line += 1
        yield new_line, position


def resolve_position(patch: str | None, line: int | None) -> int | None:
    """Translate a new-file line number into a diff position.

    Returns ``None`` when the line is not part of any hunk, only exists as a
    deletion, the patch has no hunks, or a hunk header is malformed.
    """

    if not patch or not line or line < 1:
        return None
    try:
        for new_line, position in _iter_new_lines(patch):
            if new_line == line:
                return position
    except MalformedHunkHeader:
        return None
    return None


def build_line_position_map(patch: str | None) -> Dict[int, int]:
    """Return a map of new-file line number -> diff position for a whole patch.

    Only the first occurrence of a line number is kept, matching
    :func:`resolve_position`. A malformed hunk header yields an empty map.
    """

    mapping: Dict[int, int] = {}
    if not patch:
        return mapping
    try:
        for new_line, position in _iter_new_lines(patch):
            mapping.setdefault(new_line, position)
    except MalformedHunkHeader:
        return {}
    return mapping
