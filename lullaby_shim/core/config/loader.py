"""
Configuration loader — reads the optional shim.yml into ``ShimSettings``.

Nothing here is required: with no file and no env vars the shim uses the
defaults below. Values are resolved in precedence order:

    env var  >  settings file  >  default

The settings file is found via ``--config``, then ``LULLABY_CONFIG``, then
``~/.config/lupinas-lullaby/shim.yml``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from lullaby_shim.core.data.platforms import RELEASES_URL
from lullaby_shim.core.errors import ConfigError

logger = logging.getLogger(__name__)

SETTINGS_FILE = "shim.yml"
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "lupinas-lullaby"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "lupinas-lullaby"

# env var → settings field
_ENV_OVERRIDES = {
    "LULLABY_CACHE_DIR": "cache_dir",
    "LULLABY_RELEASES_URL": "releases_url",
    "LULLABY_DOWNLOAD_TIMEOUT": "download_timeout",
}


class ShimSettings(BaseModel):
    """Runtime knobs for downloading and caching the binary."""

    cache_dir: Path = DEFAULT_CACHE_DIR
    releases_url: str = RELEASES_URL
    download_timeout: int = Field(default=60, gt=0)  # seconds

    @field_validator("releases_url")
    @classmethod
    def releases_url_has_scheme(cls, value: str) -> str:
        scheme = urlsplit(value).scheme
        if scheme not in ("https", "http", "file"):
            raise ValueError(f"releases_url must be an http(s) or file URL, got {value!r}")
        return value


def find_settings_file(explicit: Path | None = None) -> Path | None:
    """Locate the settings file, or None when the defaults apply."""
    if explicit is not None:
        return explicit

    env_path = os.environ.get("LULLABY_CONFIG")
    if env_path:
        return Path(env_path)

    candidate = DEFAULT_CONFIG_DIR / SETTINGS_FILE
    return candidate if candidate.is_file() else None


def load_settings(path: Path | None = None) -> ShimSettings:
    """Load and validate shim settings.

    Args:
        path: Explicit settings file. If None, searched as described above.

    Returns:
        Validated ShimSettings.

    Raises:
        ConfigError: If an explicit file is missing, or the file or an env
            override is invalid.
    """
    path = find_settings_file(path)
    data: dict = {}

    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")

        logger.debug("Loading shim settings from %s", path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}, got {type(loaded).__name__}")
        data.update(loaded)

    for env_var, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[field_name] = value

    try:
        settings = ShimSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid shim settings: {e}") from e

    settings.cache_dir = settings.cache_dir.expanduser()
    return settings
