"""
Shim errors.

Everything the shim raises on purpose derives from ``ShimError`` so the
CLI layer can turn it into a one-line diagnostic and exit 1.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from lullaby_shim.core.models.platform import PlatformDescriptor


class ShimError(Exception):
    """Base class for shim failures."""


class ConfigError(ShimError):
    """Raised when the settings file or an env override is invalid."""


class HostDetectionError(ShimError):
    """Raised when the host cannot report its kernel name or architecture."""


class DuplicatePlatformError(ShimError):
    """Raised when the platform table lists a (kernel, architecture) pair twice."""


class UnsupportedPlatformError(ShimError):
    """No table entry matches the host's (kernel, architecture) pair."""

    def __init__(
        self,
        kernel: str,
        architecture: str,
        supported: Sequence[PlatformDescriptor],
        package_name: str = "",
    ) -> None:
        from lullaby_shim.core.services.resolver import render_platform_table

        self.kernel = kernel
        self.architecture = architecture
        self.supported = tuple(supported)
        who = f" by {package_name}" if package_name else ""
        super().__init__(
            f'Platform with type "{kernel}" and architecture "{architecture}" '
            f"is not supported{who}.\n"
            "Your system must be one of the following:\n\n"
            f"{render_platform_table(self.supported)}"
        )


class FetchOrExecutionError(ShimError):
    """Download, extraction or spawn of the release artifact failed."""
