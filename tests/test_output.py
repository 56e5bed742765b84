"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbosity levels and secret masking
- print_table in all three modes
- Token masking helper
- Log record forwarding
- Global instance management
"""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import SecretStr

from twcred import output as output_module
from twcred.models import AccessToken
from twcred.output import (
    OutputFormat,
    OutputLogHandler,
    OutputManager,
    _should_disable_color,
    get_output,
    mask_token,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("twcred.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("twcred.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    """Test that AUTO format resolves correctly based on environment."""

    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty):
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON)
        assert mgr.format == OutputFormat.JSON


# ------------------------------------------------------------------ #
# NO_COLOR / TERM=dumb detection
# ------------------------------------------------------------------ #


class TestColorDisabling:
    """Test that NO_COLOR and TERM=dumb are respected."""

    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data goes to stdout, diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_data("https://twitter.com/i/oauth2/authorize?x=1")
        captured = capfd.readouterr()
        assert captured.out == "https://twitter.com/i/oauth2/authorize?x=1\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("diagnostic text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic text" in captured.err

    def test_prefixes_in_no_color(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.warning("careful")
        mgr.error("broken")
        mgr.suggest("twcred refresh creds.json")
        err = capfd.readouterr().err
        assert "Warning: careful" in err
        assert "Error: broken" in err
        assert "→ twcred refresh creds.json" in err

    def test_print_json_is_indented(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_json({"access_token": "AT"})
        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"access_token": "AT"}
        assert '\n  "access_token"' in captured.out


# ------------------------------------------------------------------ #
# Quiet mode
# ------------------------------------------------------------------ #


class TestQuietMode:
    """Quiet hides informational chatter but never errors or data."""

    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("hidden")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_does_not_suppress(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("shown")
        assert "shown" in capfd.readouterr().err

    def test_quiet_does_not_suppress_stdout_data(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.print_data("data")
        assert capfd.readouterr().out == "data\n"


# ------------------------------------------------------------------ #
# Verbosity and secrets
# ------------------------------------------------------------------ #


class TestVerbosity:
    def test_debug_hidden_by_default(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.debug("hidden")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbosity=1)
        mgr.debug("details")
        assert "[debug] details" in capfd.readouterr().err

    def test_levels(self, non_tty):
        assert not OutputManager(verbosity=0).is_verbose
        assert OutputManager(verbosity=1).is_verbose
        assert not OutputManager(verbosity=1).reveals_secrets
        assert OutputManager(verbosity=2).reveals_secrets

    def test_secret_masked_below_vv(self, non_tty):
        mgr = OutputManager(verbosity=1)
        assert mgr.secret(AccessToken("AT-raw")) == "**********"

    def test_secret_revealed_at_vv(self, non_tty):
        mgr = OutputManager(verbosity=2)
        assert mgr.secret(SecretStr("RT-raw")) == "RT-raw"

    def test_secret_none(self, non_tty):
        assert OutputManager(verbosity=2).secret(None) == "None"


class TestMaskToken:
    def test_long_token_keeps_prefix(self):
        assert mask_token("abcdefghijkl") == "abcdef..."

    def test_short_token_fully_masked(self):
        assert mask_token("abc") == "**********"

    def test_custom_visible(self):
        assert mask_token("abcdefghijkl", visible=2) == "ab..."


# ------------------------------------------------------------------ #
# Tables
# ------------------------------------------------------------------ #


class TestPrintTable:
    """Test print_table in all three output modes."""

    def test_table_json_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["Path", "Refreshable"], [["creds.json", "yes"]])
        parsed = json.loads(capfd.readouterr().out)
        assert parsed == [{"Path": "creds.json", "Refreshable": "yes"}]

    def test_table_plain_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["Path", "Refreshable"], [["creds.json", "yes"]])
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["Path\tRefreshable", "creds.json\tyes"]

    def test_table_rich_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(["Path"], [["creds.json"]], title="Credentials")
        out = capfd.readouterr().out
        assert "Path" in out
        assert "creds.json" in out
        assert "Credentials" in out


# ------------------------------------------------------------------ #
# Logging bridge
# ------------------------------------------------------------------ #


class TestOutputLogHandler:
    def _logger(self) -> logging.Logger:
        logger = logging.getLogger("twcred.tests.output")
        logger.handlers = [OutputLogHandler()]
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        return logger

    def test_debug_records_need_verbose(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        self._logger().debug("quiet record")
        assert capfd.readouterr().err == ""

    def test_debug_records_shown_with_verbose(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbosity=1))
        self._logger().debug("POST %s", "https://api.twitter.com/2/oauth2/token")
        err = capfd.readouterr().err
        assert "[debug] twcred.tests.output: POST https://api.twitter.com/2/oauth2/token" in err

    def test_warning_records(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        self._logger().warning("heads up")
        assert "Warning: twcred.tests.output: heads up" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_installs_instance(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr

    def test_reset_output_clears_instance(self):
        mgr = OutputManager()
        set_output(mgr)
        reset_output()
        assert get_output() is not mgr

    def test_module_helpers_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbosity=1))
        output_module.info("i")
        output_module.success("s")
        output_module.debug("d")
        err = capfd.readouterr().err
        assert "i\n" in err
        assert "s\n" in err
        assert "[debug] d" in err
