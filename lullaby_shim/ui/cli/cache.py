"""
CLI commands for the binary cache.

Thin wrappers over ``lullaby_shim.core.services.fetcher``.
"""

from __future__ import annotations

import json
import sys

import click


def _cache_dir(ctx: click.Context):
    from lullaby_shim.core.config.loader import load_settings
    from lullaby_shim.core.errors import ConfigError

    try:
        return load_settings(ctx.obj.get("config_path")).cache_dir
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@click.group()
def cache() -> None:
    """Cache — inspect or clear downloaded binaries."""


@cache.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show cached binaries and their sizes."""
    from lullaby_shim.core.services.fetcher import cache_status

    result = cache_status(_cache_dir(ctx))

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    click.secho(f"🗂️  Cache: {result['cache_dir']}", fg="cyan", bold=True)
    if not result["binaries"]:
        click.echo("   (empty)")
        return
    for b in result["binaries"]:
        click.echo(f"   {b['name']:<30} {b['size_bytes']:>12} B")
    click.echo(f"   Total: {result['total_size_mb']} MB")


@cache.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation.")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Delete every cached binary."""
    from lullaby_shim.core.services.fetcher import clear_cache

    cache_dir = _cache_dir(ctx)
    if not yes:
        click.confirm(f"Delete {cache_dir}?", abort=True)

    result = clear_cache(cache_dir)
    if result["existed"]:
        click.secho(f"✅ Cleared {result['cleared']}", fg="green")
    else:
        click.echo(f"   Nothing to clear at {result['cleared']}")
