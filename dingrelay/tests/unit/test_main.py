"""
Unit tests for the RelayApp entry point and SystemReporter.

Usage:
    pytest dingrelay/tests/unit
"""

import importlib
import logging
from unittest.mock import MagicMock, patch

import pytest

from dingrelay import PLUGIN_INFO, __version__
from dingrelay.infrastructure.reporting import SystemReporter

# dingrelay.main is shadowed by the re-exported main() on the package
relay_main = importlib.import_module("dingrelay.main")


class TestMain:
    """Unit tests for main()."""

    def test_plugin_info(self):
        assert PLUGIN_INFO["id"] == "message-ding-relay"
        assert PLUGIN_INFO["name"] == "Message Ding Relay"
        assert __version__ == "0.1.0"

    def test_port_argument_overrides_config(self, settings):
        """Test the first CLI argument sets the port."""
        with patch.object(relay_main, "load_config", return_value=settings), patch.object(
            relay_main, "RelayApp"
        ) as app_cls:
            relay_main.main(["6123"])

        assert settings.port == 6123
        app_cls.assert_called_once_with(settings)
        app_cls.return_value.start.assert_called_once()

    @pytest.mark.parametrize("arg", ["abc", "0", "70000"])
    def test_invalid_port_argument_exits(self, settings, arg):
        """Test a bad port argument exits with status 1."""
        with patch.object(relay_main, "load_config", return_value=settings), patch.object(
            relay_main, "RelayApp"
        ) as app_cls:
            with pytest.raises(SystemExit) as exc_info:
                relay_main.main([arg])

        assert exc_info.value.code == 1
        app_cls.assert_not_called()

    def test_keyboard_interrupt_exits_cleanly(self, settings):
        """Test Ctrl+C during start exits with status 0."""
        app = MagicMock()
        app.start.side_effect = KeyboardInterrupt
        with patch.object(relay_main, "load_config", return_value=settings), patch.object(
            relay_main, "RelayApp", return_value=app
        ):
            with pytest.raises(SystemExit) as exc_info:
                relay_main.main([])

        assert exc_info.value.code == 0


class TestSystemReporter:
    """Unit tests for SystemReporter verbosity filtering."""

    def test_from_level_name(self):
        reporter = SystemReporter.from_level_name("dingrelay.test", "WARNING")

        assert reporter.logger.level == logging.WARNING

    def test_verbose_filter(self, caplog):
        """Test messages above the verbosity level are suppressed."""
        reporter = SystemReporter(name="dingrelay.verbose", verbose=1)
        reporter.logger.propagate = True

        with caplog.at_level(logging.INFO, logger="dingrelay.verbose"):
            reporter.info("shown", context="Test", verbose_level=1)
            reporter.info("hidden", context="Test", verbose_level=2)

        assert "[Test] shown" in caplog.text
        assert "hidden" not in caplog.text

    def test_verbose_is_clamped(self):
        assert SystemReporter(name="dingrelay.clamp", verbose=9).verbose == 3
