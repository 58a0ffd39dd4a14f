import json
import sys
from unittest import mock

import pytest
import responses

from backplane_upgrade.github import (
    GITHUB_API_ENDPOINT,
    ArchiveNotFoundError,
    GitHubClient,
    OSConfig,
    RequestFailedError,
    current_os_config,
    map_arch,
    map_os,
)
from backplane_upgrade.upgrade import Release, ReleaseAsset

BASE = "https://api.example.com/repos/tool"

DARWIN_ARM = ReleaseAsset(
    name="ocm-backplane_0.0.1_Darwin_arm64.tar.gz",
    download_url="https://downloads.example.com/v0.0.1/ocm-backplane_0.0.1_Darwin_arm64.tar.gz",
)
LINUX_ARM = ReleaseAsset(
    name="ocm-backplane_0.0.1_Linux_arm64.tar.gz",
    download_url="https://downloads.example.com/v0.0.1/ocm-backplane_0.0.1_Linux_arm64.tar.gz",
)
LINUX_AMD = ReleaseAsset(
    name="ocm-backplane_0.0.1_Linux_x86_64.tar.gz",
    download_url="https://downloads.example.com/v0.0.1/ocm-backplane_0.0.1_Linux_x86_64.tar.gz",
)


@pytest.fixture
def mocked_http():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.mark.parametrize("tag", ["", "v0.0.1"])
def test_get_latest_version(mocked_http, tag):
    mocked_http.add(
        responses.GET,
        f"{BASE}/releases/latest",
        body=json.dumps({"tag_name": tag, "assets": []}),
        status=200,
    )
    release = GitHubClient(base_url=BASE).get_latest_version()
    assert release.tag_name == tag
    assert release.assets == ()


def test_get_latest_version_non_200(mocked_http):
    mocked_http.add(responses.GET, f"{BASE}/releases/latest", status=404)
    with pytest.raises(RequestFailedError, match="request failed"):
        GitHubClient(base_url=BASE).get_latest_version()


def test_get_latest_version_connection_error(mocked_http):
    with pytest.raises(RequestFailedError, match="running request for"):
        GitHubClient(base_url=BASE).get_latest_version()


def test_default_base_url():
    assert GitHubClient().base_url == GITHUB_API_ENDPOINT
    assert GitHubClient(base_url="").base_url == GITHUB_API_ENDPOINT


@pytest.mark.parametrize(
    "release, config, expected",
    [
        (Release(tag_name="", assets=()), OSConfig(), None),
        (
            Release(tag_name="v0.0.1", assets=(DARWIN_ARM,)),
            OSConfig(os_type="darwin", os_arch="arm64"),
            DARWIN_ARM.download_url,
        ),
        (
            Release(tag_name="v0.0.1", assets=(LINUX_ARM,)),
            OSConfig(os_type="linux", os_arch="arm64"),
            LINUX_ARM.download_url,
        ),
        (
            Release(tag_name="v0.0.1", assets=(LINUX_ARM, DARWIN_ARM)),
            OSConfig(os_type="windows", os_arch="arm64"),
            None,
        ),
    ],
    ids=[
        "no matching asset",
        "matching asset for mac",
        "matching asset for linux",
        "unsupported os",
    ],
)
def test_find_asset_url(release, config, expected):
    assert config.find_asset_url(release) == expected


def test_find_asset_url_maps_amd64():
    release = Release(tag_name="v0.0.1", assets=(LINUX_ARM, LINUX_AMD))
    config = OSConfig(os_type="linux", os_arch="amd64")
    assert config.find_asset_url(release) == LINUX_AMD.download_url


@pytest.mark.parametrize(
    "goos, expected",
    [("linux", "Linux"), ("darwin", "Darwin"), ("windows", "Windows"), ("plan9", "")],
)
def test_map_os(goos, expected):
    assert map_os(goos) == expected


@pytest.mark.parametrize(
    "goarch, expected",
    [("amd64", "x86_64"), ("arm64", "arm64"), ("386", "386")],
)
def test_map_arch(goarch, expected):
    assert map_arch(goarch) == expected


def test_current_os_config_linux_x86_64():
    with mock.patch.object(sys, "platform", "linux"), mock.patch(
        "platform.machine", return_value="x86_64"
    ):
        assert current_os_config() == OSConfig(os_type="linux", os_arch="amd64")


def test_current_os_config_darwin_arm64():
    with mock.patch.object(sys, "platform", "darwin"), mock.patch(
        "platform.machine", return_value="arm64"
    ):
        assert current_os_config() == OSConfig(os_type="darwin", os_arch="arm64")


def test_get_release_archive_downloads_matching_asset(mocked_http):
    mocked_http.add(
        responses.GET, LINUX_AMD.download_url, body=b"archive-bytes", status=200
    )
    release = Release(tag_name="v0.0.1", assets=(LINUX_ARM, LINUX_AMD))

    with mock.patch.object(sys, "platform", "linux"), mock.patch(
        "platform.machine", return_value="x86_64"
    ):
        data = GitHubClient(base_url=BASE).get_release_archive(release)

    assert data == b"archive-bytes"


def test_get_release_archive_failed_download(mocked_http):
    mocked_http.add(responses.GET, LINUX_AMD.download_url, status=500)
    release = Release(tag_name="v0.0.1", assets=(LINUX_AMD,))

    with mock.patch.object(sys, "platform", "linux"), mock.patch(
        "platform.machine", return_value="x86_64"
    ):
        with pytest.raises(RequestFailedError, match="requesting release archive"):
            GitHubClient(base_url=BASE).get_release_archive(release)


def test_get_release_archive_not_found():
    with pytest.raises(ArchiveNotFoundError):
        GitHubClient(base_url=BASE).get_release_archive(Release(tag_name="v0.0.1"))


def test_check_connection_without_host():
    with pytest.raises(ConnectionError, match="looking up host"):
        GitHubClient(base_url="not a url").check_connection()