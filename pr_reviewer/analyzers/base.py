from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from pr_reviewer.logger import get_logger
from pr_reviewer.models.review import DiffEntry, ReviewResult, empty_diff_result

logger = get_logger()


class CodeAnalyzer(ABC):
    """Analyze the changed files of a pull request and produce a review result."""

    name: str = "analyzer"

    async def analyze(self, diffs: Sequence[DiffEntry]) -> ReviewResult:
        if not diffs:
            logger.info(f"{self.name}: no changed files, nothing to analyze")
            return empty_diff_result()
        return await self._analyze(list(diffs))

    @abstractmethod
    async def _analyze(self, diffs: list[DiffEntry]) -> ReviewResult:
        """Analyze a non-empty diff set."""

    async def aclose(self) -> None:
        """Release resources held by the analyzer."""
