"""Remote downloads and GitHub release lookups."""

from __future__ import annotations

import json
import logging
import shutil
import ssl
import urllib.error
import urllib.request
from pathlib import Path

from wsl_bootstrap.errors import DownloadError

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"

DEFAULT_TIMEOUT = 60


class UrlDownloader:
    """Fetches URLs over HTTPS.

    Satisfies the Downloader protocol structurally.
    """

    def __init__(self, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self._context = ssl.create_default_context()

    def fetch(self, url: str, destination: Path) -> Path:
        """Download a URL to a local file.

        Args:
            url: Resource URL.
            destination: File to write.

        Returns:
            The destination path.

        Raises:
            DownloadError: If the request fails.
        """
        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Downloading %s -> %s", url, destination)
        try:
            request = urllib.request.Request(url, headers={"User-Agent": "wsl-bootstrap"})
            with urllib.request.urlopen(
                request, timeout=self.timeout, context=self._context
            ) as response, destination.open("wb") as handle:
                shutil.copyfileobj(response, handle)
        except (urllib.error.URLError, OSError) as e:
            if destination.exists():
                destination.unlink()
            raise DownloadError(
                f"Download failed: {url}: {e}", remediation=f"curl -fsSLo {destination} {url}"
            ) from e
        return destination

    def latest_release_tag(self, owner: str, repo: str) -> str | None:
        """Query GitHub API for the latest release tag of a repository.

        Args:
            owner: Repository owner.
            repo: Repository name.

        Returns:
            Tag name (e.g. "v14.1.0") if found, None otherwise.
        """
        api_url = f"{GITHUB_API}/repos/{owner}/{repo}/releases/latest"
        try:
            request = urllib.request.Request(
                api_url,
                headers={
                    "Accept": "application/vnd.github.v3+json",
                    "User-Agent": "wsl-bootstrap",
                },
            )
            with urllib.request.urlopen(
                request, timeout=10, context=self._context
            ) as response:
                data = json.loads(response.read().decode("utf-8"))
                tag = data.get("tag_name")
                if tag:
                    logger.debug("GitHub API returned latest release %s/%s: %s", owner, repo, tag)
                return tag
        except Exception as e:
            logger.debug("GitHub API query failed for %s/%s: %s", owner, repo, e)
            return None
