"""
Logging for the shim — set up once per process by the two entrypoints.

The shim shares a terminal with the binary it spawns, so its own records
go to the ``lullaby_shim`` logger only, never to stdout, and every console
line carries a ``[lupinas-lullaby-shim]`` tag to tell it apart from the
child's stderr. The root logger is left alone.

Levels are resolved in precedence order:
    CLI flag  >  LULLABY_LOG_LEVEL env var  >  WARNING (default)

LULLABY_LOG_FILE adds a file handler at LULLABY_LOG_FILE_LEVEL (or the
console level).
"""

from __future__ import annotations

import logging
import sys

SHIM_LOGGER = "lullaby_shim"
CONSOLE_TAG = "[lupinas-lullaby-shim]"

_FMT_CONSOLE = {
    logging.DEBUG: (f"{CONSOLE_TAG} %(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: (f"{CONSOLE_TAG} %(asctime)s %(message)s", "%H:%M:%S"),
}
_FMT_CONSOLE_DEFAULT = (f"{CONSOLE_TAG} %(message)s", None)

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# marks handlers we own, so a second call replaces them
_OWNED = "_lullaby_shim_handler"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """Configure the ``lullaby_shim`` logger and return it.

    Calling this again replaces the handlers installed by the previous
    call; handlers added by anyone else are kept.
    """
    numeric_level = _parse_level(level)
    shim = logging.getLogger(SHIM_LOGGER)

    for handler in [h for h in shim.handlers if getattr(h, _OWNED, False)]:
        shim.removeHandler(handler)
        handler.close()

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_CONSOLE[logging.DEBUG]
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_CONSOLE[logging.INFO]
    else:
        fmt, datefmt = _FMT_CONSOLE_DEFAULT
    # stderr is looked up per call so test runners that swap it are honoured
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    setattr(console, _OWNED, True)
    shim.addHandler(console)

    effective_level = numeric_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        setattr(fh, _OWNED, True)
        shim.addHandler(fh)

    shim.setLevel(effective_level)
    shim.propagate = False
    return shim


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
