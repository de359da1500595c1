"""
Static data compiled into the shim.

Usage::

    from lullaby_shim.core.data import SUPPORTED_PLATFORMS

    for row in SUPPORTED_PLATFORMS:
        print(row.key, row.archive_name)
"""

from lullaby_shim.core.data.platforms import RELEASES_URL, SUPPORTED_PLATFORMS

__all__ = ["RELEASES_URL", "SUPPORTED_PLATFORMS"]
