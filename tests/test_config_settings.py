"""Tests for runtime settings loading and logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from stock_tracker.config import (
    AppSettings,
    SettingsLoadError,
    config_load_database_url,
    config_load_settings,
    logging_configure,
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("DATABASE_URL", "LOG_LEVEL", "SSL_KEYFILE", "SSL_CERTFILE", "API_MAX_BODY_ITEMS"):
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults() -> None:
    settings = config_load_settings()

    assert settings.application_port == 8000
    assert settings.whitelisted_origin == "http://localhost:3000"
    assert settings.api_max_body_items == 1000
    assert settings.ssl_keyfile is None


def test_settings_read_environment_and_normalize_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    monkeypatch.setenv("API_MAX_BODY_ITEMS", "25")

    settings = config_load_settings()

    assert settings.log_level == "DEBUG"
    assert settings.api_max_body_items == 25


def test_settings_read_dotenv_file(tmp_path) -> None:
    (tmp_path / ".env").write_text("WHITELISTED_ORIGIN=https://tracker.example\n", encoding="utf-8")

    assert config_load_settings().whitelisted_origin == "https://tracker.example"


def test_invalid_log_level_fails_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "VERBOSE")

    with pytest.raises(SettingsLoadError, match="log_level"):
        config_load_settings()


def test_ssl_files_must_be_configured_together(monkeypatch: pytest.MonkeyPatch) -> None:
    """A key without a certificate is rejected at load time.

    Returns:
        None: Assertions validate the failure.

    Raises:
        AssertionError: Raised when loading unexpectedly succeeds.
    """

    monkeypatch.setenv("SSL_KEYFILE", "/etc/tracker/key.pem")

    with pytest.raises(SettingsLoadError, match="ssl_keyfile and ssl_certfile"):
        config_load_settings()

    monkeypatch.setenv("SSL_CERTFILE", "/etc/tracker/cert.pem")
    assert config_load_settings().ssl_certfile == "/etc/tracker/cert.pem"


def test_database_url_loader_strips_and_rejects_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "  postgresql+psycopg://tracker@db/tracker  ")
    assert config_load_database_url() == "postgresql+psycopg://tracker@db/tracker"

    monkeypatch.setenv("DATABASE_URL", "   ")
    with pytest.raises(SettingsLoadError, match="must not be blank"):
        config_load_database_url()


def test_explicit_settings_bypass_environment() -> None:
    assert AppSettings(api_max_body_items=2).api_max_body_items == 2


@pytest.fixture
def _restored_root_logger() -> Iterator[logging.Logger]:
    root_logger = logging.getLogger()
    previous_level = root_logger.level
    previous_handlers = list(root_logger.handlers)
    try:
        yield root_logger
    finally:
        for handler in list(root_logger.handlers):
            if handler not in previous_handlers:
                root_logger.removeHandler(handler)
        for handler in previous_handlers:
            if handler not in root_logger.handlers:
                root_logger.addHandler(handler)
        root_logger.setLevel(previous_level)


def test_logging_configure_sets_root_level(_restored_root_logger: logging.Logger) -> None:
    logging_configure("warning")
    logging_configure("warning")

    assert _restored_root_logger.level == logging.WARNING
    assert len(_restored_root_logger.handlers) == 1


def test_logging_configure_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="unknown log level"):
        logging_configure("chatty")
