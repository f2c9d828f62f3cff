"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Secure defaults (no mail credentials in code)
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()


class StorageConfig(BaseModel):
    """Locations of the flat record store and the vitals log."""

    record_store_path: str = Field(
        default="userdata.csv", description="Shared username/credential/heart-rate table"
    )
    vitals_log_path: str = Field(
        default="vitals_log.csv", description="Per-submission log of all five readings"
    )
    enable_vitals_log: bool = Field(default=True, description="Append readings to the vitals log")

    @field_validator("record_store_path", "vitals_log_path")
    def validate_path(cls, v):
        if not v.strip():
            raise ValueError("storage path must not be empty")
        return v


class AssessmentConfig(BaseModel):
    """How many synthetic follow-up readings a submission writes, and how far they wander."""

    follow_up_samples: int = Field(
        default=19, ge=0, description="Heart-rate rows written after the actual reading"
    )
    follow_up_jitter_bpm: float = Field(
        default=5.0, ge=0.0, description="Half-width of the follow-up heart-rate window"
    )


class MailConfig(BaseModel):
    """SMTP settings for caregiver alerts."""

    sender_email: str | None = Field(None, description="Account alerts are sent from")
    app_password: str | None = Field(None, description="App password for the sender account")
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP server (implicit TLS)")
    smtp_port: int = Field(default=465, gt=0, lt=65536, description="SMTP server port")
    timeout_seconds: float = Field(default=5.0, gt=0.0, description="Connect timeout")

    @property
    def has_credentials(self) -> bool:
        return bool(self.sender_email and self.app_password)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")

    # Errors are also appended here when enabled
    enable_file_logging: bool = Field(default=True, description="Enable error file logging")
    log_file_path: str = Field(default="Error_log.txt", description="Path to error log file")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    assessment: AssessmentConfig = Field(default_factory=AssessmentConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _parse_bool(val: str | None, default: bool) -> bool:
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "on"}

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    storage_config = StorageConfig(
        record_store_path=os.getenv("HEARTPI_RECORD_STORE_PATH", "userdata.csv"),
        vitals_log_path=os.getenv("HEARTPI_VITALS_LOG_PATH", "vitals_log.csv"),
        enable_vitals_log=_parse_bool(os.getenv("HEARTPI_ENABLE_VITALS_LOG"), True),
    )

    assessment_config = AssessmentConfig(
        follow_up_samples=int(os.getenv("HEARTPI_FOLLOW_UP_SAMPLES", "19")),
        follow_up_jitter_bpm=float(os.getenv("HEARTPI_FOLLOW_UP_JITTER_BPM", "5.0")),
    )

    # Variable names shared with the device image
    mail_config = MailConfig(
        sender_email=os.getenv("HEARTPI_EMAIL") or None,
        app_password=os.getenv("HEARTPI_APP_PASSWORD") or None,
        smtp_host=os.getenv("HEARTPI_SMTP_HOST", "smtp.gmail.com"),
        smtp_port=int(os.getenv("HEARTPI_SMTP_PORT", "465")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
        enable_file_logging=_parse_bool(os.getenv("HEARTPI_ENABLE_ERROR_LOG"), True),
        log_file_path=os.getenv("HEARTPI_ERROR_LOG_PATH", "Error_log.txt"),
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        storage=storage_config,
        assessment=assessment_config,
        mail=mail_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def reset_config_cache() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    get_config.cache_clear()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"Configuration loaded for {config.environment} environment")

        if config.mail.has_credentials:
            print("Caregiver alert mail account configured")
        else:
            print("Caregiver alerts disabled: HEARTPI_EMAIL / HEARTPI_APP_PASSWORD not set")

    except Exception as e:
        print(f"Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\nSTORAGE")
    print(f"Record Store: {config.storage.record_store_path}")
    vitals = config.storage.vitals_log_path if config.storage.enable_vitals_log else "disabled"
    print(f"Vitals Log: {vitals}")

    print("\nASSESSMENT")
    print(f"Follow-up Samples: {config.assessment.follow_up_samples}")
    print(f"Follow-up Jitter: +/-{config.assessment.follow_up_jitter_bpm} bpm")

    print("\nMAIL")
    print(f"SMTP: {config.mail.smtp_host}:{config.mail.smtp_port}")
    print(f"Sender: {config.mail.sender_email or 'not configured'}")


if __name__ == "__main__":
    validate_config()
    print_config_summary()
