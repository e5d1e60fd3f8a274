"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Bank ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Business rules configuration
    min_transaction_amount: str = "0.01"
    max_transaction_amount: str = "1000000.00"
    minimum_customer_age: int = 18
    default_currency: str = "USD"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8090

    @property
    def min_amount(self) -> Decimal:
        return Decimal(self.min_transaction_amount)

    @property
    def max_amount(self) -> Decimal:
        return Decimal(self.max_transaction_amount)


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
