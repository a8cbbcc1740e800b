"""GitHub API client helpers."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import httpx

from pr_reviewer.errors import TransportError


class GitHubAPIError(TransportError):
    """Raised when a GitHub API request fails."""


DEFAULT_ACCEPT_HEADER = "application/vnd.github+json"
DEFAULT_API_VERSION = "2022-11-28"
FILES_PER_PAGE = 100


class GitHubClient:
    """Token-authenticated helper for the pull request endpoints the reviewer uses."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 10.0,
        user_agent: str = "PR-Reviewer/1.0",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "User-Agent": user_agent,
                "Accept": DEFAULT_ACCEPT_HEADER,
                "X-GitHub-Api-Version": DEFAULT_API_VERSION,
            },
        )
        self._owns_client = client is None

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        json: Any | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, url, params=params, json=json)
        except httpx.HTTPError as exc:
            raise GitHubAPIError(f"GitHub API request to {url} failed: {exc}", 0, None) from exc
        if response.status_code >= 400:
            detail: Any | None
            if response.content:
                try:
                    detail = response.json()
                except ValueError:
                    detail = response.text
            else:
                detail = None
            raise GitHubAPIError(
                f"GitHub API request to {url} failed with status {response.status_code}.",
                response.status_code,
                detail,
            )
        return response

    async def get_pull_request(self, *, owner: str, repo: str, pull_number: int) -> Dict[str, Any]:
        response = await self._request("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}")
        return response.json()

    async def list_pull_request_files(
        self,
        *,
        owner: str,
        repo: str,
        pull_number: int,
    ) -> List[Dict[str, Any]]:
        files: List[Dict[str, Any]] = []
        page = 1
        while True:
            response = await self._request(
                "GET",
                f"/repos/{owner}/{repo}/pulls/{pull_number}/files",
                params={"per_page": FILES_PER_PAGE, "page": page},
            )
            batch = response.json()
            if not isinstance(batch, list):
                raise GitHubAPIError(
                    "Unexpected response while listing pull request files.",
                    response.status_code,
                    batch,
                )
            files.extend(batch)
            if len(batch) < FILES_PER_PAGE:
                break
            page += 1
        return files

    async def create_issue_comment(
        self,
        *,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
    ) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )
        return response.json()

    async def create_pull_request_review(
        self,
        *,
        owner: str,
        repo: str,
        pull_number: int,
        commit_id: str,
        comments: Iterable[Dict[str, Any]],
        body: str | None = None,
        event: str = "COMMENT",
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "commit_id": commit_id,
            "event": event,
            "comments": list(comments),
        }
        if body:
            payload["body"] = body
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls/{pull_number}/reviews",
            json=payload,
        )
        return response.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
