"""
Shared test fixtures and configuration.

No test touches the network: release archives are written under
``tmp_path`` and served through ``file://`` URLs.
"""

import io
import tarfile
from pathlib import Path

import pytest

from lullaby_shim import __version__
from lullaby_shim.core.config.loader import ShimSettings
from lullaby_shim.core.models.platform import HostPlatform

FAKE_BINARY = b"#!/bin/sh\necho \"forwarded: $*\"\nexit 3\n"


def write_archive(path: Path, members: dict[str, bytes]) -> Path:
    """Write a .tar.gz at ``path`` holding ``members`` (name → content)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:gz") as tar:
        for name, content in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(content))
    return path


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    """Keep user config, env overrides and the real cache out of every test."""
    for var in (
        "LULLABY_CONFIG",
        "LULLABY_CACHE_DIR",
        "LULLABY_RELEASES_URL",
        "LULLABY_DOWNLOAD_TIMEOUT",
        "LULLABY_LOG_LEVEL",
        "LULLABY_LOG_FILE",
        "LULLABY_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "lullaby_shim.core.config.loader.DEFAULT_CONFIG_DIR", tmp_path / "user-config",
    )


@pytest.fixture
def linux_host() -> HostPlatform:
    return HostPlatform(kernel="Linux", architecture="x64")


@pytest.fixture
def fake_binary() -> bytes:
    """Shell script standing in for the real binary: echoes args, exits 3."""
    return FAKE_BINARY


@pytest.fixture
def make_archive():
    """Return the archive writer: ``make_archive(path, {name: bytes})``."""
    return write_archive


@pytest.fixture
def releases_dir(tmp_path: Path) -> Path:
    """Local stand-in for the GitHub releases page."""
    path = tmp_path / "releases"
    path.mkdir()
    return path


@pytest.fixture
def linux_archive(releases_dir: Path) -> Path:
    """The Linux x64 archive for the current package version."""
    return write_archive(
        releases_dir / "download" / f"v{__version__}" / "lupinas-lullaby-linux.tar.gz",
        {"lupinas-lullaby-linux": FAKE_BINARY},
    )


@pytest.fixture
def settings(tmp_path: Path, releases_dir: Path) -> ShimSettings:
    """Settings pointing at the local releases dir and a temp cache."""
    return ShimSettings(
        cache_dir=tmp_path / "cache",
        releases_url=releases_dir.as_uri(),
        download_timeout=5,
    )
