"""GitHub releases API models for generators that publish through GitHub."""

from __future__ import annotations

from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..net.client import HttpAccess

__all__ = ["GithubAsset", "GithubRelease", "fetch_github_releases", "releases_api_url"]

GITHUB_API_ROOT = "https://api.github.com/repos"


class GithubAsset(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore", frozen=True)

    name: str
    browser_download_url: str


class GithubRelease(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore", frozen=True)

    tag_name: str
    prerelease: bool = False
    body: Optional[str] = None
    assets: List[GithubAsset] = Field(default_factory=list)

    def asset(self, name: str) -> Optional[GithubAsset]:
        """Return the asset called ``name``, if attached to this release."""
        return next((a for a in self.assets if a.name == name), None)


def releases_api_url(repo: str) -> str:
    """Releases endpoint for ``owner/name``."""
    return f"{GITHUB_API_ROOT}/{repo.strip('/')}/releases"


async def fetch_github_releases(
    access: HttpAccess,
    repo: str,
    *,
    include_prereleases: bool = False,
) -> Optional[List[GithubRelease]]:
    """Fetch the releases of ``owner/name``, newest first as GitHub orders them."""
    releases = await access.fetch_json(releases_api_url(repo), List[GithubRelease])
    if releases is None:
        return None
    if include_prereleases:
        return releases
    return [release for release in releases if not release.prerelease]
