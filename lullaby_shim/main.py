"""
lupinas-lullaby shim — CLI entrypoint.

Usage:
    lupinas-lullaby-shim --help
    lupinas-lullaby-shim install
    lupinas-lullaby-shim uninstall
    lupinas-lullaby-shim run -- --help
    lupinas-lullaby-shim platforms
    lupinas-lullaby-shim cache status
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from lullaby_shim import __package_name__, __version__
from lullaby_shim.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name=__package_name__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to shim.yml (default: LULLABY_CONFIG or ~/.config/lupinas-lullaby/shim.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """lupinas-lullaby shim — install and run the prebuilt binary."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("LULLABY_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("LULLABY_LOG_FILE"),
        log_file_level=os.environ.get("LULLABY_LOG_FILE_LEVEL"),
    )


def _load_settings_or_exit(ctx: click.Context):
    from lullaby_shim.core.config.loader import load_settings
    from lullaby_shim.core.errors import ConfigError

    try:
        return load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """Download the binary for this platform into the cache."""
    from lullaby_shim.binary import get_binary
    from lullaby_shim.core.errors import ShimError

    settings = _load_settings_or_exit(ctx)

    try:
        binary = get_binary(settings)
        path = binary.install()
    except ShimError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if not ctx.obj.get("quiet"):
        click.secho(f"✅ Installed {binary.name}", fg="green", bold=True)
        click.echo(f"   {path}")


@cli.command()
@click.pass_context
def uninstall(ctx: click.Context) -> None:
    """Remove this platform's binary from the cache."""
    from lullaby_shim.binary import get_binary
    from lullaby_shim.core.errors import ShimError

    settings = _load_settings_or_exit(ctx)

    try:
        binary = get_binary(settings)
        removed = binary.uninstall()
    except ShimError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if ctx.obj.get("quiet"):
        return
    if removed:
        click.secho(f"✅ Removed {binary.name}", fg="green")
    else:
        click.echo(f"   {binary.name} is not installed")


@cli.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_extra_args": True,
        "help_option_names": [],
    },
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, args: tuple[str, ...]) -> None:
    """Run the binary, passing every argument through unchanged.

    Examples:

        lupinas-lullaby-shim run --help

        lupinas-lullaby-shim run openapi.yaml
    """
    from lullaby_shim.binary import run as run_binary

    settings = _load_settings_or_exit(ctx)
    sys.exit(run_binary([ctx.command_path, *args], settings=settings))


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def platforms(as_json: bool) -> None:
    """List supported platforms and mark this host."""
    from lullaby_shim.core.data.platforms import SUPPORTED_PLATFORMS
    from lullaby_shim.core.errors import HostDetectionError
    from lullaby_shim.core.services.resolver import detect_host, render_platform_table

    try:
        host = detect_host()
    except HostDetectionError:
        host = None

    supported = host is not None and any(d.key == host.key for d in SUPPORTED_PLATFORMS)

    if as_json:
        click.echo(json.dumps({
            "host": host.model_dump() if host is not None else None,
            "supported": supported,
            "platforms": [d.model_dump() for d in SUPPORTED_PLATFORMS],
        }, indent=2))
        return

    click.secho("\n📦 Supported platforms:", fg="cyan", bold=True)
    click.echo(render_platform_table(SUPPORTED_PLATFORMS, highlight=host))
    click.echo()
    if host is None:
        click.secho("⚠️  Could not detect this host's platform", fg="yellow")
    elif supported:
        click.secho(f"   ✓ This host: {host.kernel}/{host.architecture}", fg="green")
    else:
        click.secho(f"   ✗ This host: {host.kernel}/{host.architecture} (unsupported)", fg="red")
    click.echo()


# ── Register sub-command groups from lullaby_shim/ui/cli/ ─────────

from lullaby_shim.ui.cli.cache import cache

cli.add_command(cache)


if __name__ == "__main__":
    cli()
