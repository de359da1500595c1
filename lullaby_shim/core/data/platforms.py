"""
Static data — supported platforms and host-name normalisation.

Pure data plus the one import-time uniqueness check. The table is keyed by
the identifiers Node's ``os.type()`` / ``os.arch()`` report, because the
release archives were published against those names.
"""

from __future__ import annotations

from typing import Iterable

from lullaby_shim.core.errors import DuplicatePlatformError
from lullaby_shim.core.models.platform import PlatformDescriptor

RELEASES_URL = "https://github.com/hbina/lupinas-lullaby/releases"

# Names the executable is published under inside every release archive,
# tried after the per-platform name.
ARCHIVE_MEMBER_NAMES: tuple[str, ...] = ("lupinas-lullaby", "lupinas-lullaby.exe")

# platform.system() → kernel name used by the table.
_KERNEL_MAP: dict[str, str] = {
    "Windows": "Windows_NT",
    "Linux": "Linux",
    "Darwin": "Darwin",
}

# platform.machine() → architecture name used by the table.
# Lookups are case-insensitive (Windows reports AMD64).
_ARCH_MAP: dict[str, str] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
}


def check_unique(table: Iterable[PlatformDescriptor]) -> tuple[PlatformDescriptor, ...]:
    """Return ``table`` as a tuple, raising on a repeated (kernel, arch) pair."""
    rows = tuple(table)
    seen: dict[tuple[str, str], PlatformDescriptor] = {}
    for row in rows:
        if row.key in seen:
            raise DuplicatePlatformError(
                f"Platform {row.key[0]}/{row.key[1]} is declared twice: "
                f"{seen[row.key].remote_archive_base_name} and "
                f"{row.remote_archive_base_name}"
            )
        seen[row.key] = row
    return rows


# One Windows row only: x64. There is no 32-bit Windows build.
SUPPORTED_PLATFORMS: tuple[PlatformDescriptor, ...] = check_unique([
    PlatformDescriptor(
        os_kernel_name="Windows_NT",
        cpu_architecture="x64",
        rust_target="x86_64-pc-windows-msvc",
        remote_archive_base_name="lupinas-lullaby-win64",
        local_executable_name="lupinas-lullaby-win64.exe",
    ),
    PlatformDescriptor(
        os_kernel_name="Linux",
        cpu_architecture="x64",
        rust_target="x86_64-unknown-linux-musl",
        remote_archive_base_name="lupinas-lullaby-linux",
        local_executable_name="lupinas-lullaby-linux",
    ),
    PlatformDescriptor(
        os_kernel_name="Darwin",
        cpu_architecture="x64",
        rust_target="x86_64-apple-darwin",
        remote_archive_base_name="lupinas-lullaby-macos",
        local_executable_name="lupinas-lullaby-macos",
    ),
])
