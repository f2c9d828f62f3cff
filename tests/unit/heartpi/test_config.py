"""
Tests for configuration management in `heartpi/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level coercion to the expected Literal
- Boolean flag parsing for the vitals and error logs
- Mail credentials from the environment
- get_config cache behavior and reset
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from heartpi.config import (
    AppConfig,
    AssessmentConfig,
    MailConfig,
    StorageConfig,
    get_config,
    load_config_from_env,
    reset_config_cache,
)

_HEARTPI_VARS = (
    "HEARTPI_RECORD_STORE_PATH",
    "HEARTPI_VITALS_LOG_PATH",
    "HEARTPI_ENABLE_VITALS_LOG",
    "HEARTPI_FOLLOW_UP_SAMPLES",
    "HEARTPI_FOLLOW_UP_JITTER_BPM",
    "HEARTPI_EMAIL",
    "HEARTPI_APP_PASSWORD",
    "HEARTPI_SMTP_HOST",
    "HEARTPI_SMTP_PORT",
    "HEARTPI_ENABLE_ERROR_LOG",
    "HEARTPI_ERROR_LOG_PATH",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test from an empty HeartPi environment and a cold cache."""
    for name in _HEARTPI_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


def test_load_config_dev_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"
    assert config.logging.level == "INFO"
    assert config.storage.record_store_path == "userdata.csv"
    assert config.storage.vitals_log_path == "vitals_log.csv"
    assert config.storage.enable_vitals_log is True
    assert config.assessment.follow_up_samples == 19
    assert config.assessment.follow_up_jitter_bpm == 5.0
    assert config.logging.log_file_path == "Error_log.txt"


def test_production_uses_json_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")

    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.logging.format == "json"


def test_boolean_flag_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    monkeypatch.setenv("HEARTPI_ENABLE_VITALS_LOG", "false")
    monkeypatch.setenv("HEARTPI_ENABLE_ERROR_LOG", "no")
    config = load_config_from_env()
    assert config.storage.enable_vitals_log is False
    assert config.logging.enable_file_logging is False

    monkeypatch.setenv("HEARTPI_ENABLE_VITALS_LOG", "1")
    monkeypatch.setenv("HEARTPI_ENABLE_ERROR_LOG", "ON")
    config = load_config_from_env()
    assert config.storage.enable_vitals_log is True
    assert config.logging.enable_file_logging is True


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "unknown")
    config = load_config_from_env()
    assert config.logging.level == "INFO"

    monkeypatch.setenv("LOG_LEVEL", "error")
    config = load_config_from_env()
    assert config.logging.level == "ERROR"


def test_storage_and_assessment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HEARTPI_RECORD_STORE_PATH", "/data/users.csv")
    monkeypatch.setenv("HEARTPI_FOLLOW_UP_SAMPLES", "4")
    monkeypatch.setenv("HEARTPI_FOLLOW_UP_JITTER_BPM", "2.5")

    config = load_config_from_env()

    assert config.storage.record_store_path == "/data/users.csv"
    assert config.assessment.follow_up_samples == 4
    assert config.assessment.follow_up_jitter_bpm == 2.5


def test_mail_credentials_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    assert load_config_from_env().mail.has_credentials is False

    monkeypatch.setenv("HEARTPI_EMAIL", "pi@example.com")
    monkeypatch.setenv("HEARTPI_APP_PASSWORD", "app-pass")
    monkeypatch.setenv("HEARTPI_SMTP_PORT", "2465")

    mail = load_config_from_env().mail

    assert mail.has_credentials is True
    assert mail.sender_email == "pi@example.com"
    assert mail.smtp_host == "smtp.gmail.com"
    assert mail.smtp_port == 2465


def test_blank_mail_variables_count_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HEARTPI_EMAIL", "")
    monkeypatch.setenv("HEARTPI_APP_PASSWORD", "")

    assert load_config_from_env().mail.sender_email is None


def test_get_config_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HEARTPI_RECORD_STORE_PATH", "first.csv")

    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache

    monkeypatch.setenv("HEARTPI_RECORD_STORE_PATH", "second.csv")
    assert get_config().storage.record_store_path == "first.csv"

    reset_config_cache()
    assert get_config().storage.record_store_path == "second.csv"


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(environment="production", debug=True)


def test_invalid_values_rejected() -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        StorageConfig(record_store_path="  ")
    with pytest.raises(ValueError):
        AssessmentConfig(follow_up_samples=-1)
    with pytest.raises(ValueError):
        MailConfig(smtp_port=0)
