"""Release version resolution.

The deployed version comes from the latest upstream release tag, either
queried remotely or read from an existing local clone. The first resolved
value is kept for the lifetime of the resolver.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import CommandError, VersionResolutionError
from ..shared.logging import get_logger
from .git import GitClient

logger = get_logger(__name__)

REPO_ID = "matter-labs/block-explorer"
REPO_URL = f"https://github.com/{REPO_ID}.git"
VERSION_PREFIX = "v"


def compare_versions(version1: str, version2: str) -> int:
    """Compare two dotted version strings numerically.

    Missing trailing components count as 0, so "1.0" equals "1.0.0".
    A leading "v" is ignored.

    Returns:
        1 if version1 is greater, -1 if smaller, 0 if equal.
    """
    v1 = [int(part) for part in version1.lstrip(VERSION_PREFIX).split(".")]
    v2 = [int(part) for part in version2.lstrip(VERSION_PREFIX).split(".")]

    for i in range(max(len(v1), len(v2))):
        num1 = v1[i] if i < len(v1) else 0
        num2 = v2[i] if i < len(v2) else 0
        if num1 > num2:
            return 1
        if num1 < num2:
            return -1
    return 0


class VersionResolver:
    """Resolve and cache the release version to deploy."""

    def __init__(
        self,
        repo_dir: Path,
        git: GitClient | None = None,
        repo_id: str = REPO_ID,
        cached: str | None = None,
    ):
        """Initialize version resolver.

        Args:
            repo_dir: Location of the (optional) local clone.
            git: Git client used for remote and local queries.
            repo_id: Upstream repository in owner/name form.
            cached: Pre-resolved version; skips all queries when set.
        """
        self.repo_dir = repo_dir
        self.git = git or GitClient()
        self.repo_id = repo_id
        self._cached = cached

    @property
    def cached(self) -> str | None:
        """Version resolved so far, if any."""
        return self._cached

    def is_repo_cloned(self) -> bool:
        """Whether a local clone of the upstream repository exists."""
        return self.repo_dir.exists()

    async def get_latest_version(self) -> str:
        """Return the latest release tag, querying at most once."""
        if self._cached:
            return self._cached

        if not self.is_repo_cloned():
            version = await self.git.get_latest_release_version(self.repo_id)
        else:
            try:
                await self.git.fetch_tags(self.repo_dir)
            except CommandError as e:
                logger.warning(
                    "tag_fetch_failed",
                    error=str(e),
                    hint="Version may be outdated",
                )
            version = await self.get_latest_version_from_local_repo()

        logger.info("version_resolved", version=version)
        self._cached = version
        return version

    async def get_latest_version_from_local_repo(self) -> str:
        """Resolve the newest tag from the local clone.

        Raises:
            VersionResolutionError: If no tagged commit or valid tag is found.
        """
        commit = await self.git.latest_tagged_commit(self.repo_dir)
        if not commit:
            raise VersionResolutionError(
                message="Failed to parse latest version hash from the local "
                f"repository: {commit!r}",
                data={"payload": commit},
            )

        version = await self.git.describe_tag(self.repo_dir, commit)
        if not version or not version.startswith(VERSION_PREFIX):
            raise VersionResolutionError(
                message="Failed to parse latest version from the local "
                f"repository: {version!r}",
                data={"payload": version},
            )
        return version
