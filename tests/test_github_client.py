"""
Tests for the GitHub client and pull request diff loading.

Run with: pytest tests/
"""

import asyncio
import json

import httpx
import pytest

from pr_reviewer.github_client import GitHubAPIError, GitHubClient
from pr_reviewer.services.diff_source import fetch_diff_entries, serialize_files

BASE_URL = "https://api.github.test"


def _client(handler):
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return GitHubClient(token="ghp_test", base_url=BASE_URL, client=http)


def _file(index):
    return {
        "filename": f"src/file_{index}.py",
        "status": "modified",
        "additions": 1,
        "deletions": 0,
        "changes": 1,
        "patch": "@@ -1 +1 @@\n-a\n+b",
    }


def test_file_listing_follows_pages():
    """A full page triggers a request for the next one."""
    pages = []

    def handler(request):
        page = int(request.url.params["page"])
        pages.append(page)
        assert request.url.path == "/repos/octo/widgets/pulls/7/files"
        assert request.url.params["per_page"] == "100"
        count = 100 if page == 1 else 3
        return httpx.Response(200, json=[_file((page - 1) * 100 + i) for i in range(count)])

    files = asyncio.run(_client(handler).list_pull_request_files(owner="octo", repo="widgets", pull_number=7))
    assert pages == [1, 2]
    assert len(files) == 103
    assert files[-1]["filename"] == "src/file_102.py"


def test_error_status_maps_to_api_error():
    """Non-success responses carry the status code and decoded body."""
    def handler(request):
        return httpx.Response(404, json={"message": "Not Found"})

    with pytest.raises(GitHubAPIError) as excinfo:
        asyncio.run(_client(handler).get_pull_request(owner="octo", repo="widgets", pull_number=1))
    assert excinfo.value.status_code == 404
    assert excinfo.value.response_body == {"message": "Not Found"}


def test_network_error_maps_to_api_error():
    """Transport failures are reported with status 0."""
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(GitHubAPIError) as excinfo:
        asyncio.run(_client(handler).get_pull_request(owner="octo", repo="widgets", pull_number=1))
    assert excinfo.value.status_code == 0


def test_review_payload():
    """Reviews are created with the commit, event and comment list."""
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": 1})

    comments = [{"path": "a.py", "position": 3, "body": "fix"}]
    asyncio.run(_client(handler).create_pull_request_review(
        owner="octo", repo="widgets", pull_number=7, commit_id="abc123", comments=comments,
    ))
    assert seen["path"] == "/repos/octo/widgets/pulls/7/reviews"
    assert seen["body"] == {"commit_id": "abc123", "event": "COMMENT", "comments": comments}


def test_serialize_files_maps_fields_and_skips_unnamed_entries():
    """GitHub file entries become diff entries; entries without a name are dropped."""
    diffs = serialize_files([
        {"filename": "a.py", "status": "added", "additions": 4, "deletions": 1, "patch": "@@ -0,0 +1 @@\n+x"},
        {"status": "removed"},
        {"path": "b.md", "status": "modified", "additions": "2", "deletions": None},
    ])
    assert [d.path for d in diffs] == ["a.py", "b.md"]
    assert diffs[0].changes == 5
    assert diffs[0].patch.startswith("@@")
    assert (diffs[1].additions, diffs[1].deletions, diffs[1].patch) == (2, 0, None)


def test_fetch_diff_entries_reraises_api_errors():
    """Fetch failures propagate to the caller."""
    def handler(request):
        return httpx.Response(403, json={"message": "Forbidden"})

    with pytest.raises(GitHubAPIError):
        asyncio.run(fetch_diff_entries(_client(handler), owner="octo", repo="widgets", pull_number=7))


def test_fetch_diff_entries_returns_entries():
    """The file list is turned into diff entries in order."""
    def handler(request):
        return httpx.Response(200, json=[_file(0), _file(1)])

    diffs = asyncio.run(fetch_diff_entries(_client(handler), owner="octo", repo="widgets", pull_number=7))
    assert [d.path for d in diffs] == ["src/file_0.py", "src/file_1.py"]
