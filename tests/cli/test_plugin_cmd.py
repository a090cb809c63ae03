"""Tests for CLI plugin commands."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from shipmate.cli.app import app
from shipmate.cli.plugin_cmd import list_plugins, print_batch, run_plugin_batch, search_plugins
from shipmate.plugins.errors import ConstraintViolation, PluginDirectoryError
from shipmate.plugins.models import (
    AuthorizedPlugin,
    BatchResult,
    PluginIdentifier,
    PluginOutcome,
    ResolvedPlugin,
)

runner = CliRunner()


def _installed(name: str, version: str) -> PluginOutcome:
    return PluginOutcome(
        identifier=PluginIdentifier(name),
        operation="install",
        success=True,
        resolved=ResolvedPlugin(f"containership.plugin.{name}", version),
        package=f"containership.plugin.{name}@{version}",
    )


def _failed(name: str, error: str, operation: str = "install") -> PluginOutcome:
    return PluginOutcome(
        identifier=PluginIdentifier(name),
        operation=operation,
        success=False,
        error=error,
    )


def _mock_installer(method: str, outcome) -> AsyncMock:
    """create_installer replacement whose installer returns or raises outcome."""
    installer = MagicMock()
    if isinstance(outcome, Exception):
        setattr(installer, method, AsyncMock(side_effect=outcome))
    else:
        setattr(installer, method, AsyncMock(return_value=outcome))
    return AsyncMock(return_value=installer)


class TestRunPluginBatch:
    def test_add_prints_each_outcome(self, config_file):
        result = BatchResult(
            operation="install",
            outcomes=[_installed("navigator", "1.10.0"), _failed("v2only", "no valid version")],
        )
        factory = _mock_installer("install", result)

        with patch("shipmate.cli.plugin_cmd.create_installer", factory):
            cli = runner.invoke(
                app, ["plugin", "add", "navigator", "v2only", "--config", str(config_file)]
            )

        assert cli.exit_code == 0
        assert "Installing plugin(s): navigator, v2only" in cli.output
        assert "Installed navigator@1.10.0" in cli.output
        assert "Failed to install v2only" in cli.output
        assert "1 succeeded, 1 failed" in cli.output

    def test_options_forwarded_to_installer(self, config_file):
        factory = _mock_installer("update", BatchResult(operation="update"))

        with patch("shipmate.cli.plugin_cmd.create_installer", factory):
            run_plugin_batch("update", ["navigator"], version="1.4.2", config_path=str(config_file))

        installer = factory.return_value
        options = installer.update.call_args[0][0]
        assert options.plugin == ["navigator"]
        assert options.version == "1.4.2"

        plugins_config = factory.call_args[0][0]
        assert plugins_config.directory.url == "http://directory.test"

    def test_remove_uses_uninstall(self, config_file):
        result = BatchResult(
            operation="uninstall",
            outcomes=[
                PluginOutcome(
                    identifier=PluginIdentifier("cloud"),
                    operation="uninstall",
                    success=True,
                    package="containership.plugin.cloud",
                )
            ],
        )
        factory = _mock_installer("uninstall", result)

        with patch("shipmate.cli.plugin_cmd.create_installer", factory):
            cli = runner.invoke(app, ["plugin", "remove", "cloud", "--config", str(config_file)])

        assert cli.exit_code == 0
        assert "Uninstalling plugin(s): cloud" in cli.output
        assert "Uninstalled cloud" in cli.output

    def test_constraint_violation_exits_nonzero(self, config_file):
        factory = _mock_installer("install", ConstraintViolation("2.1.0", "2.0.0"))

        with patch("shipmate.cli.plugin_cmd.create_installer", factory):
            cli = runner.invoke(
                app, ["plugin", "add", "foo@1.5.0", "foo@2.1.0", "--config", str(config_file)]
            )

        assert cli.exit_code == 1
        assert "2.0.0" in cli.output

    def test_plugin_directory_error_exits_nonzero(self, config_file):
        factory = AsyncMock(side_effect=PluginDirectoryError("Cannot create plugin directory"))

        with patch("shipmate.cli.plugin_cmd.create_installer", factory):
            with pytest.raises(typer.Exit) as exc_info:
                run_plugin_batch("install", ["navigator"], config_path=str(config_file))

        assert exc_info.value.exit_code == 1

    def test_invalid_config_exits_nonzero(self, tmp_config_path):
        tmp_config_path.write_text("plugins: [unclosed")

        cli = runner.invoke(app, ["plugin", "add", "navigator", "--config", str(tmp_config_path)])

        assert cli.exit_code == 1


class TestPrintBatch:
    def test_prefix_stripped_in_output(self, capsys):
        print_batch(
            BatchResult(operation="update", outcomes=[_installed("navigator", "1.4.2")]),
            prefix="containership.plugin.",
        )
        out = capsys.readouterr().out
        assert "Updated navigator@1.4.2" in out

    def test_failures_go_to_stderr(self, capsys):
        print_batch(
            BatchResult(operation="install", outcomes=[_failed("logs", "npm exploded")]),
        )
        captured = capsys.readouterr()
        assert "Failed to install logs" in captured.err
        assert "0 succeeded, 1 failed" in captured.out


class TestListPlugins:
    def test_lists_installed(self, config_file, capsys):
        with patch(
            "shipmate.cli.plugin_cmd.NpmPackageManager.list_installed",
            AsyncMock(return_value={"containership.plugin.navigator": "1.4.2"}),
        ):
            list_plugins(config_path=str(config_file))

        out = capsys.readouterr().out
        assert "navigator" in out
        assert "containership.plugin.navigator" not in out
        assert "1.4.2" in out

    def test_nothing_installed(self, config_file, capsys):
        with patch(
            "shipmate.cli.plugin_cmd.NpmPackageManager.list_installed",
            AsyncMock(return_value={}),
        ):
            list_plugins(config_path=str(config_file))

        assert "No plugins installed!" in capsys.readouterr().out


class TestSearchPlugins:
    @pytest.fixture
    def directory(self):
        return {
            "navigator": AuthorizedPlugin("containership.plugin.navigator", "Web UI"),
            "logs": AuthorizedPlugin("containership.plugin.logs", "Log shipping"),
        }

    def test_search_all(self, config_file, directory, capsys):
        with patch(
            "shipmate.cli.plugin_cmd.AuthorizedDirectoryClient.fetch",
            AsyncMock(return_value=directory),
        ):
            search_plugins(config_path=str(config_file))

        out = capsys.readouterr().out
        assert out.index("logs") < out.index("navigator")
        assert "Web UI" in out

    def test_search_pattern(self, config_file, directory, capsys):
        with patch(
            "shipmate.cli.plugin_cmd.AuthorizedDirectoryClient.fetch",
            AsyncMock(return_value=directory),
        ):
            search_plugins("^nav", config_path=str(config_file))

        out = capsys.readouterr().out
        assert "navigator" in out
        assert "Log shipping" not in out

    def test_search_no_match(self, config_file, directory, capsys):
        with patch(
            "shipmate.cli.plugin_cmd.AuthorizedDirectoryClient.fetch",
            AsyncMock(return_value=directory),
        ):
            search_plugins("zzz", config_path=str(config_file))

        assert "No matching plugins found." in capsys.readouterr().out

    def test_search_invalid_pattern(self, config_file, directory):
        with patch(
            "shipmate.cli.plugin_cmd.AuthorizedDirectoryClient.fetch",
            AsyncMock(return_value=directory),
        ):
            with pytest.raises(typer.Exit):
                search_plugins("(", config_path=str(config_file))
