"""Check for a newer release and replace the running binary with it."""

from __future__ import annotations

import gzip
import io
import json
import sys
import tarfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, TextIO

import semver

from .writer import SafeWriter

DEFAULT_BINARY_NAME = "ocm-backplane"
DEFAULT_ORG = "openshift"
DEFAULT_REPO = "backplane-cli"


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable file attached to a release."""

    name: str = ""
    download_url: str = ""


@dataclass(frozen=True)
class Release:
    """A release tag and its assets."""

    tag_name: str = ""
    assets: tuple[ReleaseAsset, ...] = ()


class GitServer(Protocol):
    """Source of releases and their archives."""

    def get_latest_version(self) -> Release: ...

    def get_release_archive(self, release: Release) -> bytes: ...


class BinaryWriter(Protocol):
    def write(self, path: str, data: bytes) -> None: ...


class UpgradeError(Exception):
    """Raised when an upgrade cannot be completed."""


def _string_field(obj: dict, key: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def parse_release(data: bytes | str) -> Release:
    """Parse a release description in the release API's JSON form."""
    payload = json.loads(data)
    if payload is None:
        return Release()
    if not isinstance(payload, dict):
        raise ValueError("release must be a JSON object")

    raw_assets = payload.get("assets") or []
    if not isinstance(raw_assets, list):
        raise ValueError("field 'assets' must be a list")

    assets = []
    for item in raw_assets:
        if item is None:
            assets.append(ReleaseAsset())
            continue
        if not isinstance(item, dict):
            raise ValueError("release asset must be a JSON object")
        assets.append(
            ReleaseAsset(
                name=_string_field(item, "name"),
                download_url=_string_field(item, "browser_download_url"),
            )
        )
    return Release(tag_name=_string_field(payload, "tag_name"), assets=tuple(assets))


def _parse_version(text: str) -> semver.Version:
    return semver.Version.parse(
        text[1:] if text.startswith("v") else text,
        optional_minor_and_patch=True,
    )


def should_update(current: str, latest: Release) -> bool:
    """Return True if ``latest`` is newer than the ``current`` version."""
    try:
        current_version = _parse_version(current)
    except (ValueError, TypeError) as exc:
        raise UpgradeError(f"parsing current version {current!r}: {exc}") from exc
    try:
        latest_version = _parse_version(latest.tag_name)
    except (ValueError, TypeError) as exc:
        raise UpgradeError(f"parsing latest version {latest.tag_name!r}: {exc}") from exc
    return current_version < latest_version


def extract_binary(archive: bytes, binary_name: str) -> bytes:
    """Return the contents of ``binary_name`` from a gzipped tar archive."""
    if not archive:
        raise UpgradeError("reading zipped archive: unexpected EOF")
    try:
        raw = gzip.decompress(archive)
    except (OSError, EOFError, zlib.error) as exc:
        raise UpgradeError(f"reading zipped archive: {exc}") from exc
    if not raw:
        raise UpgradeError("binary not found")

    try:
        with tarfile.open(fileobj=io.BytesIO(raw), mode="r:") as tar:
            for member in tar:
                if member.name == binary_name:
                    extracted = tar.extractfile(member)
                    return extracted.read() if extracted is not None else b""
    except tarfile.TarError as exc:
        raise UpgradeError(f"searching tar archive: {exc}") from exc
    raise UpgradeError("binary not found")


def _current_executable() -> str:
    if not sys.argv or not sys.argv[0]:
        raise UpgradeError("retrieving the current executable path: unknown")
    return str(Path(sys.argv[0]).resolve())


class Upgrader:
    """Upgrades the installed binary to the latest release."""

    def __init__(
        self,
        git: GitServer,
        *,
        out: TextIO | None = None,
        writer: BinaryWriter | None = None,
        reader: TextIO | None = None,
        binary_name: str | None = None,
        org: str | None = None,
        repo: str | None = None,
    ) -> None:
        self.git = git
        self.out = out if out is not None else sys.stdout
        self.writer = writer if writer is not None else SafeWriter()
        self.reader = reader if reader is not None else sys.stdin
        self.binary_name = binary_name or DEFAULT_BINARY_NAME
        self.org = org or DEFAULT_ORG
        self.repo = repo or DEFAULT_REPO

    def upgrade_plugin(self, current_version: str) -> bool:
        """Upgrade if a newer release exists and the user agrees.

        Returns True when the binary was replaced.
        """
        try:
            latest = self.git.get_latest_version()
        except Exception as exc:
            raise UpgradeError(
                f"getting latest version for project '{self.org}/{self.repo}': {exc}"
            ) from exc

        try:
            proceed = should_update(current_version, latest)
        except UpgradeError as exc:
            raise UpgradeError(f"comparing current version to latest: {exc}") from exc

        if not proceed:
            print("No upgrade available.", file=self.out)
            return False

        if not self._confirm(latest):
            print("Upgrade cancelled.", file=self.out)
            return False

        try:
            binary = self._latest_binary(latest)
        except UpgradeError as exc:
            raise UpgradeError(f"retrieving latest binary: {exc}") from exc

        path = _current_executable()
        try:
            self.writer.write(path, binary)
        except OSError as exc:
            raise UpgradeError(f"writing new binary: {exc}") from exc

        print(f"Backplane CLI has been upgraded to {latest.tag_name}", file=self.out)
        return True

    def _latest_binary(self, release: Release) -> bytes:
        try:
            archive = self.git.get_release_archive(release)
        except Exception as exc:
            raise UpgradeError(
                f"getting release archive for project '{self.org}/{self.repo}' "
                f"at version {release.tag_name!r}: {exc}"
            ) from exc
        return extract_binary(archive, self.binary_name)

    def _confirm(self, latest: Release) -> bool:
        print(
            f'A newer version "{latest.tag_name}" is available.\n'
            "Would you like to upgrade? (y/N)",
            file=self.out,
        )
        answer = self.reader.readline()
        return answer.strip().lower() == "y"