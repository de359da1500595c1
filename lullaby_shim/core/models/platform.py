"""
Platform models — what the host is, what we ship for it, and where to get it.

``PlatformDescriptor`` rows are compiled into the package (see
``lullaby_shim.core.data.platforms``). ``ReleaseTarget`` is derived from a
descriptor and a version on every call and handed to the fetcher.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class HostPlatform(BaseModel):
    """The (kernel, architecture) pair reported by the running host.

    Both values use the identifiers the platform table is keyed on
    (``Windows_NT`` / ``Linux`` / ``Darwin`` and ``x64`` / ``ia32`` / ...).
    """

    model_config = ConfigDict(frozen=True)

    kernel: str
    architecture: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.kernel, self.architecture)


class PlatformDescriptor(BaseModel):
    """One supported platform and the release archive built for it."""

    model_config = ConfigDict(frozen=True)

    os_kernel_name: str
    cpu_architecture: str
    rust_target: str             # bookkeeping only, never part of the URL
    remote_archive_base_name: str
    local_executable_name: str

    @property
    def key(self) -> tuple[str, str]:
        """Lookup key: (kernel name, CPU architecture)."""
        return (self.os_kernel_name, self.cpu_architecture)

    @property
    def archive_name(self) -> str:
        return f"{self.remote_archive_base_name}.tar.gz"

    def to_row(self) -> dict[str, str]:
        """Column view used for the supported-platforms table."""
        return {
            "TYPE": self.os_kernel_name,
            "ARCHITECTURE": self.cpu_architecture,
            "RUST_TARGET": self.rust_target,
            "BINARY_NAME": self.local_executable_name,
        }


class ReleaseTarget(BaseModel):
    """Download URL + executable name for a single resolve/fetch cycle."""

    model_config = ConfigDict(frozen=True)

    download_url: str
    local_executable_name: str
