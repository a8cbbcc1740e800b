"""Deterministic analyzer with fixed per-extension rules.

Used for dry runs, test mode and wiring checks in CI. Line numbers are fixed;
a rule comment is only placed inline when that line is part of the file's
diff.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from pr_reviewer.analyzers.base import CodeAnalyzer
from pr_reviewer.logger import get_logger
from pr_reviewer.models.review import SEVERITIES, Comment, DiffEntry, Finding, ReviewResult
from pr_reviewer.placement import place_comment

logger = get_logger()


@dataclass(frozen=True)
class _Rule:
    extensions: Tuple[str, ...]
    kind: str
    severity: str
    message: str
    suggestion: str
    comment: str
    line: int | None = None


RULES: Tuple[_Rule, ...] = (
    _Rule(
        extensions=(".ts", ".tsx", ".js", ".jsx"),
        kind="style",
        severity="low",
        message="Variable names should use camelCase",
        suggestion="Rename the variable to follow the camelCase naming convention",
        comment="**Suggestion**: this variable name does not follow the project's camelCase convention.",
        line=10,
    ),
    _Rule(
        extensions=(".ts", ".tsx", ".js", ".jsx"),
        kind="performance",
        severity="medium",
        message="Possible performance problem: avoid expensive operations inside loops",
        suggestion="Move the operation out of the loop or use a cheaper approach",
        comment="**Performance**: running this operation inside a loop may slow things down.",
        line=25,
    ),
    _Rule(
        extensions=(".css", ".scss"),
        kind="style",
        severity="low",
        message="CSS selector is overly specific and hard to maintain",
        suggestion="Use a simpler selector or a class selector",
        comment="**CSS**: this selector is complex; consider simplifying it.",
        line=15,
    ),
    _Rule(
        extensions=(".md", ".txt"),
        kind="improvement",
        severity="low",
        message="Documentation could include more examples",
        suggestion="Add usage examples to improve the documentation",
        comment="**Docs**: this document would benefit from more usage examples.",
    ),
)

SAMPLE_DIFFS: Tuple[DiffEntry, ...] = (
    DiffEntry(
        path="src/example.ts",
        status="modified",
        additions=15,
        deletions=5,
        changes=20,
        patch=(
            "@@ -8,5 +8,7 @@ export function total(items: Item[]) {\n"
            "   let result = 0;\n"
            "-  let item_count = 0;\n"
            "+  let item_count = items.length;\n"
            "+  let Total_price = 0;\n"
            "   for (const item of items) {\n"
            "     result += item.price;\n"
            "   }\n"
            "+  return result;\n"
        ),
    ),
    DiffEntry(path="styles/main.css", status="modified", additions=10, deletions=2, changes=12),
    DiffEntry(path="README.md", status="modified", additions=8, deletions=0, changes=8),
)


def _matching_rules(path: str) -> List[_Rule]:
    lowered = path.lower()
    return [rule for rule in RULES if lowered.endswith(rule.extensions)]


def build_summary(diffs: List[DiffEntry], issues: List[Finding]) -> str:
    total_additions = sum(diff.additions for diff in diffs)
    total_deletions = sum(diff.deletions for diff in diffs)
    counts = {severity: sum(1 for issue in issues if issue.severity == severity) for severity in SEVERITIES}
    return (
        "# Code Review Summary\n\n"
        f"Reviewed {len(diffs)} file(s) with {total_additions} addition(s) and {total_deletions} deletion(s).\n\n"
        "## Findings\n\n"
        f"- High severity: {counts['high']}\n"
        f"- Medium severity: {counts['medium']}\n"
        f"- Low severity: {counts['low']}\n\n"
        "## Recommendations\n\n"
        "- Fix all high severity findings\n"
        "- Consider addressing medium severity findings\n"
        "- Low severity findings can wait for a later iteration\n"
    )


class MockAnalyzer(CodeAnalyzer):
    name = "mock"

    async def _analyze(self, diffs: list[DiffEntry]) -> ReviewResult:
        logger.info(f"Mock analyzer reviewing {len(diffs)} file(s)")
        issues: List[Finding] = []
        comments: List[Comment] = []

        for diff in diffs:
            logger.debug(f"Applying mock rules to {diff.path}")
            for rule in _matching_rules(diff.path):
                issues.append(
                    Finding(
                        kind=rule.kind,
                        severity=rule.severity,
                        message=rule.message,
                        suggestion=rule.suggestion,
                        file=diff.path,
                        line=rule.line,
                    )
                )
                comments.append(place_comment(diff.path, rule.line, rule.comment, [diff]))
            comments.append(
                Comment(
                    path=diff.path,
                    body=(
                        f"Reviewed `{diff.path}`: {diff.additions} addition(s) "
                        f"and {diff.deletions} deletion(s)."
                    ),
                )
            )

        logger.info(f"Mock analysis produced {len(issues)} issue(s) and {len(comments)} comment(s)")
        return ReviewResult(comments=comments, issues=issues, summary=build_summary(diffs, issues))
