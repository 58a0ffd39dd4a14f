"""Client for the release API that hosts the CLI's builds."""

from __future__ import annotations

import platform
import socket
import sys
from dataclasses import dataclass
from urllib.parse import urlsplit

import requests

from .upgrade import Release, parse_release

GITHUB_API_ENDPOINT = "https://api.github.com/repos/openshift/backplane-cli"
ASSET_TEMPLATE = "ocm-backplane_{version}_{os}_{arch}.tar.gz"

_PLATFORM_TO_GOOS = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
}

_MACHINE_TO_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}


class RequestFailedError(Exception):
    """Raised when a request to the release API fails."""


class ArchiveNotFoundError(Exception):
    """Raised when a release has no archive for this platform."""


def map_arch(goarch: str) -> str:
    """Return the architecture name used in asset file names."""
    return {"amd64": "x86_64", "arm64": "arm64"}.get(goarch, goarch)


def map_os(goos: str) -> str:
    """Return the capitalised OS name used in asset file names, or ''."""
    return {"linux": "Linux", "darwin": "Darwin", "windows": "Windows"}.get(goos, "")


@dataclass(frozen=True)
class OSConfig:
    """Operating system and architecture, in Go naming."""

    os_type: str = ""
    os_arch: str = ""

    def find_asset_url(self, release: Release) -> str | None:
        """Return the download URL of the asset matching this platform."""
        wanted = ASSET_TEMPLATE.format(
            version=release.tag_name.removeprefix("v"),
            os=map_os(self.os_type),
            arch=map_arch(self.os_arch),
        )
        return next(
            (asset.download_url for asset in release.assets if asset.name == wanted),
            None,
        )


def current_os_config() -> OSConfig:
    """Describe the running platform in Go naming."""
    goos = _PLATFORM_TO_GOOS.get(sys.platform, sys.platform)
    machine = platform.machine().lower()
    return OSConfig(os_type=goos, os_arch=_MACHINE_TO_GOARCH.get(machine, machine))


class GitHubClient:
    """Fetches releases and release archives."""

    def __init__(
        self,
        base_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url or GITHUB_API_ENDPOINT
        self._session = session if session is not None else requests.Session()

    def get_latest_version(self) -> Release:
        """Return the latest published release."""
        return parse_release(self._get(f"{self.base_url}/releases/latest"))

    def get_release_archive(self, release: Release) -> bytes:
        """Download the archive of ``release`` for the running platform."""
        url = current_os_config().find_asset_url(release)
        if url is None:
            raise ArchiveNotFoundError("archive not found")
        try:
            return self._get(url)
        except RequestFailedError as exc:
            raise RequestFailedError(f"requesting release archive: {exc}") from exc

    def check_connection(self) -> None:
        """Raise ConnectionError if the API host cannot be resolved."""
        try:
            host = urlsplit(self.base_url).hostname
        except ValueError as exc:
            raise ValueError(f"parsing base url: {exc}") from exc
        if not host:
            raise ConnectionError(f"looking up host {host or ''!r}: no host in base url")
        try:
            socket.getaddrinfo(host, None)
        except (socket.gaierror, UnicodeError) as exc:
            raise ConnectionError(f"looking up host {host!r}: {exc}") from exc

    def _get(self, url: str) -> bytes:
        try:
            response = self._session.get(url)
        except requests.RequestException as exc:
            raise RequestFailedError(f"running request for {url!r}: {exc}") from exc
        with response:
            if response.status_code != 200:
                raise RequestFailedError("request failed")
            return response.content