"""
Tests for CLI commands — install, run, platforms, cache, and global options.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from lullaby_shim import __version__
from lullaby_shim.core.data.platforms import SUPPORTED_PLATFORMS
from lullaby_shim.core.models.platform import HostPlatform
from lullaby_shim.core.services.fetcher import Fetcher
from lullaby_shim.main import cli

_DETECT = "lullaby_shim.core.services.resolver.detect_host"


@pytest.fixture
def env_settings(tmp_path: Path, monkeypatch, releases_dir: Path) -> Path:
    """Point the CLI at the local releases dir; return the cache dir."""
    cache_dir = tmp_path / "cli-cache"
    monkeypatch.setenv("LULLABY_CACHE_DIR", str(cache_dir))
    monkeypatch.setenv("LULLABY_RELEASES_URL", releases_dir.as_uri())
    return cache_dir


class TestCLIGlobal:
    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "lupinas-lullaby shim" in result.output
        for command in ("install", "uninstall", "run", "platforms", "cache"):
            assert command in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_bad_config(self, tmp_path: Path):
        bad = tmp_path / "shim.yml"
        bad.write_text("download_timeout: -1\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(bad), "install"])
        assert result.exit_code == 1
        assert "Invalid shim settings" in result.output

    def test_releases_url_without_scheme(self, monkeypatch, linux_host):
        monkeypatch.setenv("LULLABY_RELEASES_URL", "github.com/hbina/lupinas-lullaby/releases")
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            result = runner.invoke(cli, ["install"])
        assert result.exit_code == 1
        assert "Invalid shim settings" in result.output
        assert "Traceback" not in result.output


class TestInstallCommand:
    def test_install(self, env_settings: Path, linux_archive, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            result = runner.invoke(cli, ["install"])
        assert result.exit_code == 0, result.output
        assert "Installed lupinas-lullaby-linux" in result.output
        assert (env_settings / "bin" / "lupinas-lullaby-linux").is_file()

    def test_install_quiet(self, env_settings: Path, linux_archive, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            result = runner.invoke(cli, ["--quiet", "install"])
        assert result.exit_code == 0
        assert "Installed" not in result.output

    def test_unsupported_platform_lists_table(self, env_settings: Path):
        runner = CliRunner()
        host = HostPlatform(kernel="Windows_NT", architecture="x32")
        with patch(_DETECT, return_value=host):
            result = runner.invoke(cli, ["install"])
        assert result.exit_code == 1
        assert "is not supported" in result.output
        for d in SUPPORTED_PLATFORMS:
            assert d.local_executable_name in result.output

    def test_download_failure(self, env_settings: Path, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            result = runner.invoke(cli, ["install"])
        assert result.exit_code == 1
        assert "Download of" in result.output

    def test_cache_dir_is_a_file(
        self, tmp_path: Path, monkeypatch, releases_dir, linux_archive, linux_host,
    ):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        monkeypatch.setenv("LULLABY_CACHE_DIR", str(blocker))
        monkeypatch.setenv("LULLABY_RELEASES_URL", releases_dir.as_uri())
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            result = runner.invoke(cli, ["install"])
        assert result.exit_code == 1
        assert "Cannot prepare cache directory" in result.output


class TestUninstallCommand:
    def test_removes_installed_binary(self, env_settings: Path, linux_archive, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            runner.invoke(cli, ["install"])
            result = runner.invoke(cli, ["uninstall"])
        assert result.exit_code == 0, result.output
        assert "Removed lupinas-lullaby-linux" in result.output
        assert not (env_settings / "bin" / "lupinas-lullaby-linux").exists()

    def test_not_installed(self, env_settings: Path, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            result = runner.invoke(cli, ["uninstall"])
        assert result.exit_code == 0
        assert "lupinas-lullaby-linux is not installed" in result.output

    def test_quiet(self, env_settings: Path, linux_archive, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            runner.invoke(cli, ["install"])
            result = runner.invoke(cli, ["-q", "uninstall"])
        assert result.exit_code == 0
        assert result.output == ""

    def test_unsupported_platform(self, env_settings: Path):
        runner = CliRunner()
        host = HostPlatform(kernel="FreeBSD", architecture="x64")
        with patch(_DETECT, return_value=host):
            result = runner.invoke(cli, ["uninstall"])
        assert result.exit_code == 1
        assert "is not supported" in result.output


class TestRunCommand:
    def test_help_is_forwarded(self, env_settings: Path, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host), \
                patch.object(Fetcher, "run", return_value=0) as mock_run:
            result = runner.invoke(cli, ["run", "--help"])
        assert result.exit_code == 0
        mock_run.assert_called_once_with(["--help"])

    def test_args_verbatim_and_exit_code(self, env_settings: Path, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host), \
                patch.object(Fetcher, "run", return_value=4) as mock_run:
            result = runner.invoke(cli, ["run", "spec.yaml", "-o", "out.ts", "--strict"])
        assert result.exit_code == 4
        mock_run.assert_called_once_with(["spec.yaml", "-o", "out.ts", "--strict"])

    def test_unsupported_platform(self, env_settings: Path):
        runner = CliRunner()
        host = HostPlatform(kernel="FreeBSD", architecture="x64")
        with patch(_DETECT, return_value=host):
            result = runner.invoke(cli, ["run", "x"])
        assert result.exit_code == 1
        assert "UnsupportedPlatformError" in result.output


class TestPlatformsCommand:
    def test_table(self, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            result = runner.invoke(cli, ["platforms"])
        assert result.exit_code == 0
        assert "RUST_TARGET" in result.output
        assert "This host: Linux/x64" in result.output

    def test_unsupported_host(self):
        runner = CliRunner()
        host = HostPlatform(kernel="Linux", architecture="arm64")
        with patch(_DETECT, return_value=host):
            result = runner.invoke(cli, ["platforms"])
        assert result.exit_code == 0
        assert "unsupported" in result.output

    def test_json(self, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            result = runner.invoke(cli, ["platforms", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["supported"] is True
        assert data["host"] == {"kernel": "Linux", "architecture": "x64"}
        assert len(data["platforms"]) == len(SUPPORTED_PLATFORMS)
        assert data["platforms"][1]["remote_archive_base_name"] == "lupinas-lullaby-linux"


class TestCacheCommands:
    def test_status_empty(self, env_settings: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["cache", "status"])
        assert result.exit_code == 0
        assert "(empty)" in result.output

    def test_status_json_after_install(self, env_settings: Path, linux_archive, linux_host):
        runner = CliRunner()
        with patch(_DETECT, return_value=linux_host):
            runner.invoke(cli, ["install"])
        result = runner.invoke(cli, ["cache", "status", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["cache_dir"] == str(env_settings)
        assert [b["name"] for b in data["binaries"]] == ["lupinas-lullaby-linux"]

    def test_clear(self, env_settings: Path):
        (env_settings / "bin").mkdir(parents=True)
        runner = CliRunner()
        result = runner.invoke(cli, ["cache", "clear", "--yes"])
        assert result.exit_code == 0
        assert "Cleared" in result.output
        assert not env_settings.exists()

    def test_clear_aborted(self, env_settings: Path):
        (env_settings / "bin").mkdir(parents=True)
        runner = CliRunner()
        result = runner.invoke(cli, ["cache", "clear"], input="n\n")
        assert result.exit_code == 1
        assert env_settings.exists()
