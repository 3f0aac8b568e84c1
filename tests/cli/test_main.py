"""Tests for the chouten command."""

import logging
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from chouten_cli import __version__
from chouten_cli.cli.exit_codes import ExitCode
from chouten_cli.cli.output import UNRESOLVED_MESSAGE
from chouten_cli.main import _setup_logging, app


runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to CliRunner streams after each test."""
    yield
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


class TestSetupLogging:
    """Tests for _setup_logging function."""

    def test_setup_logging_verbose(self):
        _setup_logging(verbose=True)

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_default_level(self):
        _setup_logging(default_level="error")

        assert logging.getLogger().level == logging.ERROR

    def test_setup_logging_unknown_level_falls_back(self):
        _setup_logging(default_level="chatty")

        assert logging.getLogger().level == logging.WARNING

    def test_setup_logging_creates_log_directory(self, tmp_path):
        log_file = tmp_path / "subdir" / "test.log"

        _setup_logging(log_file=log_file)

        assert log_file.parent.exists()
        assert logging.getLogger().level == logging.DEBUG


class TestRunVerbs:
    """Tests for successful runs."""

    def test_discover(self, write_plugin):
        path = write_plugin("async discover() { return { a: 1 }; }")

        result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout == '{"a":1}\n'

    def test_search(self, write_plugin):
        path = write_plugin("async search(url) { return ['x', 'y']; }")

        result = runner.invoke(app, [str(path), "--search", "https://example.com/q"])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout == '["x","y"]\n'

    def test_option_before_filename(self, write_plugin):
        path = write_plugin("async info(url) { return url; }")

        result = runner.invoke(app, ["--info", str(path), "https://example.com/1"])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout == '"https://example.com/1"\n'

    def test_discover_ignores_url(self, write_plugin):
        path = write_plugin("async discover(url) { return url === undefined; }")

        result = runner.invoke(app, [str(path), "--discover", "https://example.com"])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout == "true\n"

    def test_console_output_goes_to_stderr(self, write_plugin):
        path = write_plugin("async discover() { console.log('hello', 42); return 1; }")

        result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout == "1\n"
        assert "JavaScript console.log: hello 42" in result.stderr

    def test_quiet_suppresses_console_output(self, write_plugin):
        path = write_plugin("async discover() { console.log('hello'); return 1; }")

        result = runner.invoke(app, [str(path), "--discover", "-q"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "hello" not in result.stderr

    def test_unresolved_result(self, write_plugin):
        path = write_plugin("async discover() { throw new Error('nothing'); }")

        result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout == f"{UNRESOLVED_MESSAGE}\n"


class TestArgumentErrors:
    """Tests for usage errors (exit code 1)."""

    def test_no_arguments(self):
        result = runner.invoke(app, [])

        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "usage: chouten <filename> <option> <url?>" in result.stderr
        assert result.stdout == ""

    def test_no_option(self, write_plugin):
        path = write_plugin("async discover() { return 1; }")

        result = runner.invoke(app, [str(path)])

        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "No option found." in result.stderr

    def test_url_required(self, tmp_path):
        """The URL check happens before the plugin file is touched."""
        with patch("chouten_cli.main.run_plugin") as run_plugin:
            result = runner.invoke(app, [str(tmp_path / "absent.js"), "--info"])

        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "URL is required for --info option." in result.stderr
        run_plugin.assert_not_called()

    def test_unknown_option(self, write_plugin):
        path = write_plugin("async discover() { return 1; }")

        result = runner.invoke(app, [str(path), "--bogus"])

        assert result.exit_code == ExitCode.USAGE_ERROR

    def test_unknown_option_after_verb(self, write_plugin):
        path = write_plugin("async discover() { return 1; }")

        result = runner.invoke(app, [str(path), "--discover", "--bogus"])

        assert result.exit_code == ExitCode.USAGE_ERROR
        assert result.stdout == ""

    def test_two_options(self, write_plugin):
        path = write_plugin("async discover() { return 1; }")

        result = runner.invoke(app, [str(path), "--discover", "--search", "https://x"])

        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "Only one option" in result.stderr

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, [str(tmp_path / "absent.js"), "--discover"])

        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "File could not be read." in result.stderr

    def test_quiet_and_verbose(self, write_plugin):
        path = write_plugin("async discover() { return 1; }")

        result = runner.invoke(app, [str(path), "--discover", "-q", "-V"])

        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "mutually exclusive" in result.stderr


class TestFailures:
    """Tests for plugin, host and configuration failures."""

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "broken.js"
        path.write_text("var source = { default: class {", encoding="utf-8")

        result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.PLUGIN_ERROR
        assert "Plugin failed to compile" in result.stderr
        assert result.stdout == ""

    def test_constructor_throws(self, write_plugin):
        path = write_plugin("constructor() { throw new Error('nope'); }")

        result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.PLUGIN_ERROR

    def test_unsupported_request_method(self, write_plugin):
        path = write_plugin(
            "async discover() {"
            "  try { request('https://example.com/', 'DELETE'); } catch (e) {}"
            "  return 1;"
            "}"
        )

        result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.HOST_ERROR
        assert "Unsupported method: DELETE" in result.stderr
        assert result.stdout == ""

    def test_invalid_config_file(self, write_plugin, isolated_config):
        isolated_config.mkdir()
        (isolated_config / "config.toml").write_text("[http\n", encoding="utf-8")
        path = write_plugin("async discover() { return 1; }")

        result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.CONFIGURATION_ERROR

    def test_invalid_config_value(self, write_plugin, tmp_path):
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[http]\ntimeout = -1\n", encoding="utf-8")
        path = write_plugin("async discover() { return 1; }")

        result = runner.invoke(
            app, [str(path), "--discover", "--config", str(config_file)]
        )

        assert result.exit_code == ExitCode.CONFIGURATION_ERROR
        assert "http.timeout" in result.stderr

    def test_string_boolean_in_config(self, write_plugin, isolated_config):
        isolated_config.mkdir()
        (isolated_config / "config.toml").write_text(
            '[http]\nverify = "false"\n', encoding="utf-8"
        )
        path = write_plugin("async discover() { return 1; }")

        result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.CONFIGURATION_ERROR
        assert "http.verify" in result.stderr

    def test_unexpected_error(self, write_plugin):
        path = write_plugin("async discover() { return 1; }")

        with patch("chouten_cli.main.run_plugin", side_effect=RuntimeError("kaboom")):
            result = runner.invoke(app, [str(path), "--discover"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "kaboom" in result.stderr


class TestVersion:
    """Tests for --version."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == ExitCode.SUCCESS
        assert __version__ in result.stdout
