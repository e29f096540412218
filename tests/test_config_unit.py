"""Unit tests for configuration management."""

import pytest

from conftest import CHAT_ID, FEED_URL, TABLE_NAME
from rss2telegram.config import (
    DEFAULT_DYNAMODB_TABLE,
    Config,
    ConfigurationError,
    TelegramConfig,
)


class TestConfigUnit:
    """Unit tests for Config class."""

    def test_reads_environment(self, pipeline_env):
        config = Config()

        assert config.feed_url == FEED_URL
        assert config.bot_token == "123456:test-token"
        assert config.chat_id == CHAT_ID
        assert config.dynamodb_table == TABLE_NAME
        config.validate()

    def test_defaults(self, monkeypatch, pipeline_env):
        monkeypatch.delenv("DYNAMODB_TABLE")
        monkeypatch.delenv("AWS_DEFAULT_REGION")
        monkeypatch.delenv("CURRENT_AWS_REGION", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        config = Config()

        assert config.dynamodb_table == DEFAULT_DYNAMODB_TABLE
        assert config.aws_region == "us-east-1"
        assert config.log_level == "INFO"

    def test_current_region_takes_precedence(self, monkeypatch, pipeline_env):
        monkeypatch.setenv("CURRENT_AWS_REGION", "eu-west-1")

        assert Config().aws_region == "eu-west-1"

    @pytest.mark.parametrize(
        "variable",
        ["RSS_FEED_URL", "TELEGRAM_BOT_API_TOKEN", "TELEGRAM_CHAT_ID"],
    )
    def test_missing_required_variable_named(self, monkeypatch, pipeline_env, variable):
        monkeypatch.delenv(variable)

        with pytest.raises(ConfigurationError) as excinfo:
            Config().validate()

        assert str(excinfo.value) == f"environment variable {variable} not set"

    def test_blank_value_counts_as_missing(self, monkeypatch, pipeline_env):
        monkeypatch.setenv("TELEGRAM_BOT_API_TOKEN", "   ")

        with pytest.raises(ConfigurationError, match="TELEGRAM_BOT_API_TOKEN"):
            Config().validate()

    def test_first_missing_variable_reported(self, monkeypatch):
        for variable in ("RSS_FEED_URL", "TELEGRAM_BOT_API_TOKEN", "TELEGRAM_CHAT_ID"):
            monkeypatch.delenv(variable, raising=False)

        with pytest.raises(ConfigurationError, match="RSS_FEED_URL"):
            Config().validate()

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)

    def test_telegram_config(self, pipeline_env):
        telegram_config = Config().get_telegram_config()

        assert telegram_config == TelegramConfig(
            bot_token="123456:test-token", chat_id=CHAT_ID
        )
        assert telegram_config.parse_mode == "markdown"
        assert telegram_config.disable_web_page_preview is True
