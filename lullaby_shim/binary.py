"""
Install / run facade — the ``lupinas-lullaby`` console script.

Usage:
    lupinas-lullaby --help           (forwarded to the binary)
    lupinas-lullaby spec.yaml -o out

``install()`` and ``run()`` both go through ``get_binary()``: resolve the
host platform, build the release URL for this package's version, and
hand both to a fetcher.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Sequence

from lullaby_shim import __version__
from lullaby_shim.core.config.loader import ShimSettings, load_settings
from lullaby_shim.core.data.platforms import ARCHIVE_MEMBER_NAMES
from lullaby_shim.core.models.platform import HostPlatform
from lullaby_shim.core.observability.logging_config import setup_logging
from lullaby_shim.core.services.fetcher import Fetcher, create_fetcher
from lullaby_shim.core.services.resolver import build_release_target, resolve_platform

logger = logging.getLogger(__name__)


def get_binary(
    settings: ShimSettings | None = None,
    host: HostPlatform | None = None,
) -> Fetcher:
    """Resolve the platform and return a fetcher for its release archive.

    Raises:
        UnsupportedPlatformError: The host has no table entry.
    """
    if settings is None:
        settings = load_settings()

    descriptor = resolve_platform(host)
    target = build_release_target(descriptor, __version__, settings.releases_url)
    logger.debug("Release target: %s", target.download_url)
    return create_fetcher(
        target.local_executable_name,
        target.download_url,
        cache_dir=settings.cache_dir,
        timeout=settings.download_timeout,
        member_names=ARCHIVE_MEMBER_NAMES,
    )


def install(
    settings: ShimSettings | None = None,
    host: HostPlatform | None = None,
) -> None:
    """Download and cache the binary. Failures propagate."""
    get_binary(settings, host).install()


def run(
    argv: Sequence[str],
    settings: ShimSettings | None = None,
    host: HostPlatform | None = None,
) -> int:
    """Run the binary with ``argv[1:]`` and return its exit code.

    ``argv[0]`` is the shim's own invocation path. Any failure is
    printed to stderr as JSON and reported as exit code 1.
    """
    try:
        binary = get_binary(settings, host)
        return binary.run(list(argv[1:]))
    except Exception as e:
        logger.debug("run failed", exc_info=True)
        print(_serialize_error(e), file=sys.stderr)
        return 1


def _serialize_error(exc: BaseException) -> str:
    return json.dumps({"error": type(exc).__name__, "message": str(exc)})


def main() -> None:
    """Console entry point: pass every argument through to the binary."""
    setup_logging(
        level=os.environ.get("LULLABY_LOG_LEVEL", "WARNING"),
        log_file=os.environ.get("LULLABY_LOG_FILE"),
        log_file_level=os.environ.get("LULLABY_LOG_FILE_LEVEL"),
    )
    sys.exit(run(sys.argv))


if __name__ == "__main__":
    main()
