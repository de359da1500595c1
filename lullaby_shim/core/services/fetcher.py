"""
Artifact fetcher — download, extract, cache and spawn the release binary.

A ``Fetcher`` is bound to one executable name and one archive URL. The
archive is a gzipped tarball holding the executable; it is extracted
into ``<cache_dir>/bin`` and run from there.

Every failure (HTTP, network, corrupt archive, missing member, spawn)
surfaces as ``FetchOrExecutionError``.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import subprocess
import tarfile
import tempfile
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Sequence

from lullaby_shim import __package_name__, __version__
from lullaby_shim.core.config.loader import DEFAULT_CACHE_DIR
from lullaby_shim.core.errors import FetchOrExecutionError

logger = logging.getLogger(__name__)

_CHUNK = 64 * 1024


class Fetcher:
    """Handle on one named executable published at one archive URL.

    ``member_names`` lists other file names the executable may carry
    inside the archive; whichever is found is installed as ``name``.
    """

    def __init__(
        self,
        name: str,
        url: str,
        *,
        cache_dir: Path | None = None,
        timeout: int = 60,
        member_names: Sequence[str] = (),
    ) -> None:
        self.name = name
        self.url = url
        self.cache_dir = cache_dir or DEFAULT_CACHE_DIR
        self.timeout = timeout
        self.member_names = tuple(member_names)

    def __repr__(self) -> str:
        return f"Fetcher(name={self.name!r}, url={self.url!r})"

    @property
    def install_dir(self) -> Path:
        return self.cache_dir / "bin"

    @property
    def executable_path(self) -> Path:
        return self.install_dir / self.name

    def is_installed(self) -> bool:
        return self.executable_path.is_file()

    # ── Install ─────────────────────────────────────────────────

    def install(self) -> Path:
        """Download the archive and place the executable in the cache.

        Repeated calls re-download and overwrite.

        Returns:
            Path to the installed executable.
        """
        try:
            self.install_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(suffix=".tar.gz", dir=self.cache_dir)
            os.close(fd)
        except OSError as e:
            raise FetchOrExecutionError(
                f"Cannot prepare cache directory {self.cache_dir}: {e}"
            ) from e

        archive = Path(tmp_name)
        try:
            self._download(archive)
            self._extract(archive)
        finally:
            archive.unlink(missing_ok=True)

        logger.info("Installed %s to %s", self.name, self.executable_path)
        return self.executable_path

    def uninstall(self) -> bool:
        """Remove this executable from the cache. Returns whether it existed."""
        if not self.is_installed():
            return False
        try:
            self.executable_path.unlink()
        except OSError as e:
            raise FetchOrExecutionError(f"Cannot remove {self.executable_path}: {e}") from e
        logger.info("Removed %s", self.executable_path)
        return True

    def _download(self, dest: Path) -> None:
        logger.info("Downloading %s", self.url)
        try:
            req = urllib.request.Request(
                self.url,
                headers={"User-Agent": f"{__package_name__}/{__version__}"},
            )
            with urllib.request.urlopen(req, timeout=self.timeout) as resp, \
                    open(dest, "wb") as out:
                shutil.copyfileobj(resp, out, _CHUNK)
        except urllib.error.HTTPError as e:
            raise FetchOrExecutionError(
                f"Download of {self.url} failed: HTTP {e.code} {e.reason}"
            ) from e
        except (urllib.error.URLError, ValueError, OSError) as e:
            raise FetchOrExecutionError(f"Download of {self.url} failed: {e}") from e

        logger.debug("Downloaded %d bytes to %s", dest.stat().st_size, dest)

    def _extract(self, archive: Path) -> None:
        """Copy the executable out of ``archive`` into ``install_dir``.

        Only the executable member is read; its archive path is
        discarded, so nothing can be written outside ``install_dir``.
        """
        staged = self.executable_path.with_name(self.name + ".part")
        try:
            with tarfile.open(archive, "r:gz") as tar:
                member = self._find_member(tar)
                src = tar.extractfile(member)
                if src is None:
                    raise FetchOrExecutionError(
                        f"Archive member {member.name} is not a regular file"
                    )
                with src, open(staged, "wb") as out:
                    shutil.copyfileobj(src, out, _CHUNK)
        except (tarfile.TarError, EOFError, OSError) as e:
            staged.unlink(missing_ok=True)
            raise FetchOrExecutionError(
                f"Cannot extract {self.name} from {self.url}: {e}"
            ) from e
        except FetchOrExecutionError:
            staged.unlink(missing_ok=True)
            raise

        try:
            mode = staged.stat().st_mode
            staged.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            os.replace(staged, self.executable_path)
        except OSError as e:
            staged.unlink(missing_ok=True)
            raise FetchOrExecutionError(
                f"Cannot install {self.name} to {self.executable_path}: {e}"
            ) from e

    def _find_member(self, tar: tarfile.TarFile) -> tarfile.TarInfo:
        """Pick the member named ``name``, else the first of ``member_names``."""
        by_basename: dict[str, tarfile.TarInfo] = {}
        for member in tar.getmembers():
            if member.isfile():
                by_basename.setdefault(member.name.rsplit("/", 1)[-1], member)

        for candidate in (self.name, *self.member_names):
            if candidate in by_basename:
                return by_basename[candidate]

        wanted = ", ".join((self.name, *self.member_names))
        raise FetchOrExecutionError(f"None of [{wanted}] found in archive {self.url}")

    # ── Run ─────────────────────────────────────────────────────

    def run(self, argv: Sequence[str]) -> int:
        """Run the executable with ``argv``, installing it first if absent.

        stdio is inherited. Returns the child's exit code.
        """
        if not self.is_installed():
            logger.info("%s not cached, installing", self.name)
            self.install()

        cmd = [str(self.executable_path), *argv]
        logger.debug("Spawning %s", cmd)
        try:
            proc = subprocess.run(cmd)
        except OSError as e:
            raise FetchOrExecutionError(f"Cannot run {self.executable_path}: {e}") from e
        return proc.returncode


def create_fetcher(
    name: str,
    url: str,
    *,
    cache_dir: Path | None = None,
    timeout: int = 60,
    member_names: Sequence[str] = (),
) -> Fetcher:
    """Build a ``Fetcher`` bound to ``name`` and ``url``."""
    return Fetcher(
        name, url, cache_dir=cache_dir, timeout=timeout, member_names=member_names,
    )


# ── Cache maintenance ───────────────────────────────────────────


def cache_status(cache_dir: Path | None = None) -> dict[str, Any]:
    """Summarise what is in the cache.

    Returns::

        {
            "cache_dir": "/home/user/.cache/lupinas-lullaby",
            "binaries": [{"name": "lupinas-lullaby-linux", "size_bytes": 123}],
            "total_size_mb": 0.1,
        }
    """
    cdir = cache_dir or DEFAULT_CACHE_DIR
    binaries: list[dict[str, Any]] = []
    total_bytes = 0

    bin_dir = cdir / "bin"
    if bin_dir.is_dir():
        for item in sorted(bin_dir.iterdir()):
            if item.is_file():
                size = item.stat().st_size
                binaries.append({"name": item.name, "size_bytes": size})
                total_bytes += size

    return {
        "cache_dir": str(cdir),
        "binaries": binaries,
        "total_size_mb": round(total_bytes / (1024 * 1024), 1),
    }


def clear_cache(cache_dir: Path | None = None) -> dict[str, Any]:
    """Delete everything in the cache directory.

    Returns:
        ``{"ok": True, "cleared": "/path/to/cache", "existed": bool}``.
    """
    cdir = cache_dir or DEFAULT_CACHE_DIR
    existed = cdir.exists()
    if existed:
        shutil.rmtree(cdir)
    logger.info("Cleared cache %s", cdir)
    return {"ok": True, "cleared": str(cdir), "existed": existed}
