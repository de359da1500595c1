"""
Domain models — Pydantic types for the shim.

    from lullaby_shim.core.models import HostPlatform, PlatformDescriptor, ReleaseTarget
"""

from lullaby_shim.core.models.platform import (
    HostPlatform,
    PlatformDescriptor,
    ReleaseTarget,
)

__all__ = [
    "HostPlatform",
    "PlatformDescriptor",
    "ReleaseTarget",
]
