"""Helpers to build the diff set of a pull request from the GitHub file list."""

from __future__ import annotations

from typing import Any, Dict, List

from pr_reviewer.github_client import GitHubAPIError, GitHubClient
from pr_reviewer.logger import get_logger, log_timing, log_with_context
from pr_reviewer.models.review import DiffEntry

logger = get_logger()


def _as_count(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def serialize_files(files: List[Dict[str, Any]]) -> List[DiffEntry]:
    serialized: List[DiffEntry] = []
    skipped_count = 0
    for file in files:
        # GitHub API may return "filename" or "path" depending on endpoint
        path = file.get("filename") or file.get("path")
        if not path:
            logger.warning(f"Skipping file entry missing filename/path: {file}")
            skipped_count += 1
            continue
        additions = _as_count(file.get("additions"))
        deletions = _as_count(file.get("deletions"))
        serialized.append(
            DiffEntry(
                path=path,
                status=file.get("status", ""),
                additions=additions,
                deletions=deletions,
                changes=_as_count(file.get("changes", additions + deletions)),
                patch=file.get("patch"),
            )
        )
    if skipped_count > 0:
        logger.warning(f"Skipped {skipped_count} file(s) due to missing path/filename")
    logger.debug(f"Serialized {len(serialized)} file(s) from {len(files)} file entries")
    return serialized


async def fetch_diff_entries(
    client: GitHubClient,
    *,
    owner: str,
    repo: str,
    pull_number: int,
) -> List[DiffEntry]:
    """Fetch the changed files of a pull request as diff entries."""

    ctx_logger = log_with_context(logger, repository=f"{owner}/{repo}", pull_number=pull_number)
    ctx_logger.info(f"Fetching files of PR #{pull_number}")

    try:
        with log_timing(ctx_logger, "fetch_pr_files"):
            files = await client.list_pull_request_files(owner=owner, repo=repo, pull_number=pull_number)
    except GitHubAPIError as exc:
        if exc.status_code == 404:
            ctx_logger.error(f"PR or repository not found (404): {exc}")
        elif exc.status_code in (401, 403):
            ctx_logger.error(f"Access denied ({exc.status_code}): {exc}")
        else:
            ctx_logger.error(f"GitHub API error ({exc.status_code}): {exc}")
        raise

    diffs = serialize_files(files)
    if not diffs:
        ctx_logger.warning(f"No files changed in PR #{pull_number}")
    ctx_logger.info(f"Fetched {len(diffs)} changed file(s)")
    return diffs
