"""Unit tests for the GitHub source browser.

Tests GitHubReadOperations with mocked HTTP responses to verify:
- Response parsing and normalization
- Error handling (404, 401, rate limits)
- Per-file failures inside batched fetches
- Caching behavior
"""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.services.github.cache import clear_all_caches
from app.services.github.exceptions import GitHubAPIError
from app.services.github.helpers import split_full_name
from app.services.github.read_operations import GitHubReadOperations

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

TOKEN = "ghp_test_token_12345"


def _make_response(
    status_code: int = 200,
    json_data: object = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    return httpx.Response(status_code=status_code, json=json_data, headers=headers or {})


def _repo_json(**overrides: object) -> dict:
    base = {
        "id": 12345,
        "name": "my-repo",
        "full_name": "owner/my-repo",
        "owner": {"login": "owner"},
        "description": "A test repo",
        "html_url": "https://github.com/owner/my-repo",
        "default_branch": "develop",
        "language": "Python",
        "stargazers_count": 42,
        "forks_count": 5,
    }
    base.update(overrides)
    return base


def _file_json(text: str, size: int | None = None) -> dict:
    return {
        "type": "file",
        "size": size if size is not None else len(text),
        "content": base64.b64encode(text.encode()).decode(),
    }


@pytest.fixture(autouse=True)
def _clear_caches():
    """Clear GitHub TTL caches before each test to prevent cross-test pollution."""
    clear_all_caches()
    yield
    clear_all_caches()


# ---------------------------------------------------------------------------
# Repository metadata
# ---------------------------------------------------------------------------


class TestGetRepository:
    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_normalizes_payload(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(json_data=_repo_json())

        repo = await GitHubReadOperations(TOKEN).get_repository("owner", "my-repo")

        assert repo.github_id == 12345
        assert repo.owner == "owner"
        assert repo.default_branch == "develop"
        assert repo.stars_count == 42
        headers = client.get.await_args.kwargs["headers"]
        assert headers["Authorization"] == f"Bearer {TOKEN}"

    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_no_token_sends_no_auth_header(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(json_data=_repo_json())

        await GitHubReadOperations().get_repository("owner", "my-repo")

        assert "Authorization" not in client.get.await_args.kwargs["headers"]

    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_not_found(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(status_code=404, json_data={"message": "Not Found"})

        with pytest.raises(GitHubAPIError) as exc_info:
            await GitHubReadOperations(TOKEN).get_repository("owner", "missing")

        assert exc_info.value.is_not_found

    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_rate_limited(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(
            status_code=403,
            json_data={"message": "rate limit"},
            headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1760000000"},
        )

        with pytest.raises(GitHubAPIError) as exc_info:
            await GitHubReadOperations(TOKEN).get_repository("owner", "my-repo")

        assert exc_info.value.is_rate_limited
        assert exc_info.value.rate_limit_reset == 1760000000

    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_result_is_cached(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(json_data=_repo_json())
        github = GitHubReadOperations(TOKEN)

        await github.get_repository("owner", "my-repo")
        await github.get_repository("owner", "my-repo")

        assert client.get.await_count == 1

    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_errors_are_not_cached(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.side_effect = [
            _make_response(status_code=500, json_data={}),
            _make_response(json_data=_repo_json()),
        ]
        github = GitHubReadOperations(TOKEN)

        with pytest.raises(GitHubAPIError):
            await github.get_repository("owner", "my-repo")
        repo = await github.get_repository("owner", "my-repo")

        assert repo.name == "my-repo"


# ---------------------------------------------------------------------------
# Tree and files
# ---------------------------------------------------------------------------


class TestListTree:
    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_keeps_github_order(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(
            json_data={
                "sha": "abc",
                "truncated": True,
                "tree": [
                    {"path": "src", "type": "tree"},
                    {"path": "src/main.py", "type": "blob", "size": 120},
                    {"path": "README.md", "type": "blob", "size": 40},
                ],
            }
        )

        tree = await GitHubReadOperations(TOKEN).list_tree("owner", "my-repo", "feature/x")

        assert [e.path for e in tree.entries] == ["src", "src/main.py", "README.md"]
        assert tree.truncated is True
        url = client.get.await_args.args[0]
        assert url.endswith("/git/trees/feature%2Fx")
        assert client.get.await_args.kwargs["params"] == {"recursive": "1"}


class TestGetFileContents:
    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_decodes_file(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(json_data=_file_json("print('hi')"))

        result = await GitHubReadOperations(TOKEN).get_file_content("owner", "repo", "main.py")

        assert result.content == "print('hi')"
        assert result.error is None

    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_oversized_file_has_no_content(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(json_data=_file_json("x", size=500_000))

        result = await GitHubReadOperations(TOKEN).get_file_content("owner", "repo", "big.json")

        assert result.content is None
        assert result.error == "too large"

    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_binary_file_has_no_content(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(
            json_data={"type": "file", "size": 4, "content": base64.b64encode(b"\xff\xfe\x00\x01").decode()}
        )

        result = await GitHubReadOperations(TOKEN).get_file_content("owner", "repo", "logo.png")

        assert result.content is None

    @patch("app.services.github.read_operations.asyncio.sleep", new_callable=AsyncMock)
    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_batches_keep_order_and_isolate_failures(self, mock_get_client, mock_sleep):
        client = AsyncMock()
        mock_get_client.return_value = client
        responses = {
            "a.py": _make_response(json_data=_file_json("a")),
            "b.py": _make_response(status_code=404, json_data={}),
            "c.py": _make_response(status_code=500, json_data={}),
            "d.py": _make_response(json_data=_file_json("d")),
        }

        async def fake_get(url, **kwargs):
            return responses[url.rsplit("/", 1)[-1]]

        client.get.side_effect = fake_get
        github = GitHubReadOperations(TOKEN, batch_size=2, batch_delay=0.5)

        results = await github.get_file_contents("owner", "repo", ["a.py", "b.py", "c.py", "d.py"])

        assert [r.path for r in results] == ["a.py", "b.py", "c.py", "d.py"]
        assert [r.content for r in results] == ["a", None, None, "d"]
        assert results[1].error == "not found"
        assert "500" in results[2].error
        mock_sleep.assert_awaited_once_with(0.5)


class TestReadmeAndLanguages:
    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_missing_readme_is_none(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(status_code=404, json_data={})

        assert await GitHubReadOperations(TOKEN).get_readme("owner", "repo") is None

    @patch("app.services.github.read_operations.get_github_client")
    @pytest.mark.asyncio
    async def test_language_stats(self, mock_get_client):
        client = AsyncMock()
        mock_get_client.return_value = client
        client.get.return_value = _make_response(json_data={"Python": 9000, "Shell": 100})

        stats = await GitHubReadOperations(TOKEN).get_language_stats("owner", "repo")

        assert stats == {"Python": 9000, "Shell": 100}


class TestSplitFullName:
    def test_valid(self):
        assert split_full_name("owner/repo") == ("owner", "repo")

    @pytest.mark.parametrize("value", ["owner", "owner/", "a/b/c", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            split_full_name(value)
