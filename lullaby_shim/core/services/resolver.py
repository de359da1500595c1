"""
Platform resolver — host detection, table lookup, release URL.

Pure apart from ``detect_host()``, which reads ``platform``. No network.
"""

from __future__ import annotations

import logging
import platform
from typing import Sequence

from lullaby_shim import __package_name__
from lullaby_shim.core.data.platforms import (
    _ARCH_MAP,
    _KERNEL_MAP,
    RELEASES_URL,
    SUPPORTED_PLATFORMS,
)
from lullaby_shim.core.errors import HostDetectionError, UnsupportedPlatformError
from lullaby_shim.core.models.platform import (
    HostPlatform,
    PlatformDescriptor,
    ReleaseTarget,
)

logger = logging.getLogger(__name__)

_TABLE_COLUMNS = ("TYPE", "ARCHITECTURE", "RUST_TARGET", "BINARY_NAME")


def normalize_kernel(system: str) -> str:
    """Map a ``platform.system()`` value to the table's kernel name."""
    return _KERNEL_MAP.get(system, system)


def normalize_arch(machine: str) -> str:
    """Map a ``platform.machine()`` value to the table's architecture name.

    Unknown values pass through so they fail the lookup with their
    real name in the error message.
    """
    return _ARCH_MAP.get(machine.lower(), machine)


def detect_host() -> HostPlatform:
    """Read the running host's kernel name and CPU architecture.

    Raises:
        HostDetectionError: If either value is empty.
    """
    system = platform.system()
    machine = platform.machine()
    if not system or not machine:
        raise HostDetectionError(
            f"Cannot determine host platform (system={system!r}, machine={machine!r})"
        )
    host = HostPlatform(
        kernel=normalize_kernel(system),
        architecture=normalize_arch(machine),
    )
    logger.debug("Host %s/%s detected as %s/%s", system, machine, *host.key)
    return host


def resolve_platform(
    host: HostPlatform | None = None,
    table: Sequence[PlatformDescriptor] = SUPPORTED_PLATFORMS,
) -> PlatformDescriptor:
    """Find the table row for ``host`` (the running host by default).

    First exact match on (kernel, architecture) wins; the table is
    unique so there is at most one.

    Raises:
        UnsupportedPlatformError: No row matches. Carries the full table.
    """
    if host is None:
        host = detect_host()

    for descriptor in table:
        if descriptor.key == host.key:
            logger.info(
                "Resolved %s/%s → %s", host.kernel, host.architecture,
                descriptor.remote_archive_base_name,
            )
            return descriptor

    raise UnsupportedPlatformError(
        host.kernel, host.architecture, table, package_name=__package_name__,
    )


def build_release_target(
    descriptor: PlatformDescriptor,
    version: str,
    releases_url: str = RELEASES_URL,
) -> ReleaseTarget:
    """Build the download URL for ``descriptor`` at ``version``.

    ``<releases_url>/download/v<version>/<archive base name>.tar.gz``
    """
    base = releases_url.rstrip("/")
    return ReleaseTarget(
        download_url=f"{base}/download/v{version}/{descriptor.archive_name}",
        local_executable_name=descriptor.local_executable_name,
    )


def render_platform_table(
    table: Sequence[PlatformDescriptor],
    highlight: HostPlatform | None = None,
) -> str:
    """Render ``table`` as fixed-width text, one row per platform.

    With ``highlight``, the matching row is prefixed by ``*``.
    """
    rows = [d.to_row() for d in table]
    widths = {
        col: max([len(col)] + [len(r[col]) for r in rows])
        for col in _TABLE_COLUMNS
    }
    marker_width = 2 if highlight is not None else 0

    def _line(values: dict[str, str], marker: str = "") -> str:
        cells = "  ".join(values[col].ljust(widths[col]) for col in _TABLE_COLUMNS)
        return (marker.ljust(marker_width) + cells).rstrip()

    lines = [
        _line({col: col for col in _TABLE_COLUMNS}),
        _line({col: "-" * widths[col] for col in _TABLE_COLUMNS}),
    ]
    for descriptor, row in zip(table, rows):
        hit = highlight is not None and descriptor.key == highlight.key
        lines.append(_line(row, "*" if hit else ""))
    return "\n".join(lines)
