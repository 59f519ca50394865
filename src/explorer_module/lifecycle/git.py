"""Version-control client for the upstream block explorer repository."""

from __future__ import annotations

from pathlib import Path

import httpx

from ..errors import ReleaseLookupError
from ..shared.logging import get_logger
from .process import CommandRunner

logger = get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"


class GitClient:
    """Remote release queries and local git operations."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        api_url: str = GITHUB_API_URL,
        timeout_seconds: float = 10.0,
    ):
        """Initialize git client.

        Args:
            runner: Command runner used for local git invocations.
            api_url: Base URL of the GitHub REST API.
            timeout_seconds: Timeout for release API requests.
        """
        self.runner = runner or CommandRunner()
        self.api_url = api_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    async def clone_repo(self, url: str, dest: Path) -> None:
        """Clone a repository unless the destination already exists."""
        if dest.exists():
            logger.debug("repo_already_cloned", dest=str(dest))
            return
        dest.parent.mkdir(parents=True, exist_ok=True)
        await self.runner.run(["git", "clone", url, str(dest)])
        logger.info("repo_cloned", url=url, dest=str(dest))

    async def get_latest_release_version(self, repo_id: str) -> str:
        """Query the latest published release tag of a GitHub repository.

        Args:
            repo_id: Repository in owner/name form.

        Returns:
            The release tag name (e.g. "v2.4.1").

        Raises:
            ReleaseLookupError: If the API call fails or has no tag name.
        """
        url = f"{self.api_url}/repos/{repo_id}/releases/latest"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(
                    url, headers={"Accept": "application/vnd.github+json"}
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ReleaseLookupError(
                message=f"Failed to query latest release of {repo_id}: "
                f"HTTP {e.response.status_code}",
                data={"url": url, "http_status": e.response.status_code},
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ReleaseLookupError(
                message=f"Failed to query latest release of {repo_id}: {e}",
                data={"url": url},
            ) from e

        tag = data.get("tag_name") if isinstance(data, dict) else None
        if not tag:
            raise ReleaseLookupError(
                message=f"Latest release of {repo_id} has no tag name: {data}",
                data={"url": url, "payload": data},
            )
        return tag

    async def fetch_tags(self, repo_dir: Path) -> None:
        """Fetch remote tags into a local clone."""
        await self.runner.run(["git", "fetch", "--tags"], cwd=repo_dir)

    async def latest_tagged_commit(self, repo_dir: Path) -> str:
        """Hash of the most recent commit that carries a tag."""
        result = await self.runner.run(
            ["git", "rev-list", "--tags", "--max-count=1"], cwd=repo_dir
        )
        return result.stdout.strip()

    async def describe_tag(self, repo_dir: Path, commit: str) -> str:
        """Tag name pointing at a commit."""
        result = await self.runner.run(["git", "describe", "--tags", commit], cwd=repo_dir)
        return result.stdout.strip()

    async def checkout(self, repo_dir: Path, ref: str) -> None:
        """Check out a ref in a local clone."""
        await self.runner.run(["git", "checkout", ref], cwd=repo_dir)
