"""Tests for remote downloads."""

from __future__ import annotations

import io
import json
import urllib.error
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from wsl_bootstrap.downloads import UrlDownloader
from wsl_bootstrap.errors import DownloadError


def _response(body: bytes) -> MagicMock:
    response = MagicMock()
    stream = io.BytesIO(body)
    response.read.side_effect = stream.read
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


class TestFetch:
    """Tests for UrlDownloader.fetch."""

    @patch("wsl_bootstrap.downloads.urllib.request.urlopen")
    def test_writes_destination(self, mock_urlopen: MagicMock, tmp_path: Path) -> None:
        """Test that the body lands in the destination file."""
        mock_urlopen.return_value = _response(b"#!/bin/sh\necho install\n")
        destination = tmp_path / "nested" / "install.sh"

        result = UrlDownloader().fetch("https://example.com/install.sh", destination)

        assert result == destination
        assert destination.read_bytes() == b"#!/bin/sh\necho install\n"
        request = mock_urlopen.call_args.args[0]
        assert request.get_header("User-agent") == "wsl-bootstrap"

    @patch("wsl_bootstrap.downloads.urllib.request.urlopen")
    def test_failure_raises_download_error(self, mock_urlopen: MagicMock, tmp_path: Path) -> None:
        """Test that network errors carry a curl remediation."""
        mock_urlopen.side_effect = urllib.error.URLError("no route to host")
        destination = tmp_path / "go.tar.gz"

        with pytest.raises(DownloadError) as exc_info:
            UrlDownloader().fetch("https://go.dev/dl/go.tar.gz", destination)

        assert "no route to host" in str(exc_info.value)
        assert exc_info.value.remediation == f"curl -fsSLo {destination} https://go.dev/dl/go.tar.gz"
        assert not destination.exists()


class TestLatestReleaseTag:
    """Tests for GitHub release lookups."""

    @patch("wsl_bootstrap.downloads.urllib.request.urlopen")
    def test_returns_tag(self, mock_urlopen: MagicMock) -> None:
        """Test a successful lookup."""
        mock_urlopen.return_value = _response(json.dumps({"tag_name": "v2.27.0"}).encode())

        tag = UrlDownloader().latest_release_tag("docker", "compose")

        assert tag == "v2.27.0"
        request = mock_urlopen.call_args.args[0]
        assert request.full_url == "https://api.github.com/repos/docker/compose/releases/latest"

    @patch("wsl_bootstrap.downloads.urllib.request.urlopen")
    def test_error_returns_none(self, mock_urlopen: MagicMock) -> None:
        """Test that lookup failures are not fatal."""
        mock_urlopen.side_effect = urllib.error.URLError("rate limited")

        assert UrlDownloader().latest_release_tag("sharkdp", "fd") is None

    @patch("wsl_bootstrap.downloads.urllib.request.urlopen")
    def test_missing_tag_returns_none(self, mock_urlopen: MagicMock) -> None:
        """Test a response without a tag."""
        mock_urlopen.return_value = _response(b"{}")

        assert UrlDownloader().latest_release_tag("BurntSushi", "ripgrep") is None
