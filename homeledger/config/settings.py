"""
Configuration Management for Household Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Limits, reserved category names and the translator credentials live in
one place and are validated when first read.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Pagination
    default_page_size: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Page size used when the caller does not give one"
    )
    max_page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Largest page a caller may request"
    )

    # Homes
    default_currency: str = Field(
        default="TRY",
        description="Currency assigned to new homes"
    )
    home_code_length: int = Field(
        default=6,
        ge=4,
        le=12,
        description="Length of the join code handed out for a home"
    )
    home_code_chars: str = Field(
        default="ABCDEFGHJKLMNPQRSTUVWXYZ23456789",
        description="Alphabet for home codes (no 0, O, I, 1)"
    )
    default_card_suffix: str = Field(
        default="Kredi Kartı",
        description="Suffix of the card created for every new member"
    )

    # Reports
    unknown_category_label: str = Field(
        default="Unknown category",
        description="Label of the bucket holding entries whose category was deleted"
    )

    # Reserved categories
    transfer_category_name_tr: str = Field(default="Transfer")
    transfer_category_name_en: str = Field(default="Transfer")
    transfer_category_icon: str = Field(default="swap-horizontal")
    transfer_category_color: str = Field(default="#607D8B")

    loan_payment_category_name_tr: str = Field(default="Kredi Ödemesi")
    loan_payment_category_name_en: str = Field(default="Loan Payment")
    loan_payment_category_icon: str = Field(default="bank")
    loan_payment_category_color: str = Field(default="#795548")

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Only the currencies a home can be created with."""
        v = v.upper()
        if v not in {"TRY", "USD", "EUR"}:
            raise ValueError(f"Unsupported currency: {v}")
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration (used for category name translation)."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=64,
        ge=16,
        le=1024,
        description="Maximum tokens in a translation response"
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level written by the audit logger"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    "<name>_error" entries for the ones that failed.
    """
    results: dict = {}
    settings = get_settings()

    for name in ("ledger", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results


def get_ledger_settings(override: Optional[LedgerSettings] = None) -> LedgerSettings:
    """Return the given ledger settings or the configured ones."""
    return override or get_settings().ledger
