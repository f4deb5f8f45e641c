"""Tests for timeout_bot/cli.py"""

from unittest.mock import MagicMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from timeout_bot.cli import app, setup_logging
from timeout_bot.storage import ConfigStore


@pytest.fixture
def mock_settings(config_path):
    with patch("timeout_bot.cli.settings") as settings:
        settings.discord_token = "test_token"
        settings.config_path = str(config_path)
        settings.log_level = "INFO"
        yield settings


class TestSetupLogging:
    """Test logging setup functionality."""

    @patch("timeout_bot.cli.logging.basicConfig")
    def test_setup_logging_default_level(self, mock_basic_config):
        setup_logging()

        mock_basic_config.assert_called_once()
        assert mock_basic_config.call_args[1]["level"] == 20  # logging.INFO

    @patch("timeout_bot.cli.logging.basicConfig")
    def test_setup_logging_custom_level(self, mock_basic_config):
        setup_logging("debug")

        assert mock_basic_config.call_args[1]["level"] == 10  # logging.DEBUG


class TestRunCommand:
    """Test the run command."""

    def setup_method(self):
        self.runner = CliRunner()

    @patch("timeout_bot.cli.TimeoutBot")
    @patch("timeout_bot.cli.setup_logging")
    def test_run_command_default(
        self, mock_setup_logging, mock_timeout_bot, mock_settings, config_path
    ):
        """A first run creates the configuration and starts the bot."""
        mock_bot_instance = MagicMock()
        mock_timeout_bot.return_value = mock_bot_instance

        result = self.runner.invoke(app, ["run"])

        assert result.exit_code == 0
        mock_setup_logging.assert_called_once_with("INFO")
        store, token = mock_timeout_bot.call_args.args
        assert isinstance(store, ConfigStore)
        assert token == "test_token"
        mock_bot_instance.run.assert_called_once()
        assert config_path.exists()

    @patch("timeout_bot.cli.TimeoutBot")
    @patch("timeout_bot.cli.setup_logging")
    def test_run_command_custom_options(
        self, mock_setup_logging, mock_timeout_bot, mock_settings, tmp_path
    ):
        other = tmp_path / "other.yml"

        args = ["run", "--log-level", "DEBUG", "--config", str(other)]
        result = self.runner.invoke(app, args)

        assert result.exit_code == 0
        mock_setup_logging.assert_called_once_with("DEBUG")
        assert mock_timeout_bot.call_args.args[0].path == other

    @patch("timeout_bot.cli.TimeoutBot")
    @patch("timeout_bot.cli.setup_logging")
    def test_corrupt_configuration_is_fatal(
        self, mock_setup_logging, mock_timeout_bot, mock_settings, config_path
    ):
        """The gateway is never opened with an unreadable configuration."""
        config_path.write_text("bot: [unclosed")

        result = self.runner.invoke(app, ["run"])

        assert result.exit_code == 1
        mock_timeout_bot.assert_not_called()

    @patch("timeout_bot.cli.TimeoutBot")
    @patch("timeout_bot.cli.setup_logging")
    def test_missing_token_is_fatal(
        self, mock_setup_logging, mock_timeout_bot, mock_settings
    ):
        mock_settings.discord_token = None

        result = self.runner.invoke(app, ["run"])

        assert result.exit_code == 1
        mock_timeout_bot.assert_not_called()

    @patch("timeout_bot.cli.TimeoutBot")
    @patch("timeout_bot.cli.setup_logging")
    def test_legacy_token_from_file(
        self, mock_setup_logging, mock_timeout_bot, mock_settings, config_path
    ):
        mock_settings.discord_token = None
        config_path.write_text("bot:\n  token: file-token\n")

        result = self.runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert mock_timeout_bot.call_args.args[1] == "file-token"


class TestInitCommand:
    """Test the init command."""

    def setup_method(self):
        self.runner = CliRunner()

    def test_init_creates_files(self, mock_settings, tmp_path):
        target = tmp_path / "new_bot"

        result = self.runner.invoke(app, ["init", "--directory", str(target)])

        assert result.exit_code == 0
        assert "DISCORD_TOKEN=" in (target / ".env").read_text()
        document = yaml.safe_load((target / "config.yml").read_text())
        assert document["bot"]["permissionDenyForAllChannels"] == 34816

    def test_init_keeps_existing_files(self, mock_settings, tmp_path):
        (tmp_path / ".env").write_text("DISCORD_TOKEN=keep\n")
        (tmp_path / "config.yml").write_text("bot:\n  modRole: '1'\n")

        result = self.runner.invoke(app, ["init", "--directory", str(tmp_path)])

        assert result.exit_code == 0
        assert (tmp_path / ".env").read_text() == "DISCORD_TOKEN=keep\n"
        assert (tmp_path / "config.yml").read_text() == "bot:\n  modRole: '1'\n"


class TestShowConfigCommand:
    """Test the show-config command."""

    def setup_method(self):
        self.runner = CliRunner()

    def test_show_config_hides_token(self, mock_settings, config_path):
        config_path.write_text("bot:\n  token: secret\n  timeoutRole: '333333333'\n")

        result = self.runner.invoke(app, ["show-config"])

        assert result.exit_code == 0
        assert "secret" not in result.output
        assert yaml.safe_load(result.output)["bot"]["timeoutRole"] == "333333333"

    def test_show_config_corrupt_file(self, mock_settings, config_path):
        config_path.write_text("- not\n- a mapping\n")

        result = self.runner.invoke(app, ["show-config"])

        assert result.exit_code == 1
