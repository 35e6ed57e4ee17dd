"""Finance engine configuration."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Display-only exchange rates, base EUR = 1
DEFAULT_EXCHANGE_RATES = {
    "EUR": 1.0,
    "USD": 1.08,
    "GBP": 0.86,
    "CHF": 0.95,
    "CAD": 1.47,
    "MAD": 10.85,
}


class FinanceConfig(BaseModel):
    """
    Finance engine configuration.

    Every studio shares one ledger currency; exchange rates only ever feed
    display conversion and are never written back into records.
    """

    # Invoicing
    default_tax_rate_bps: int = Field(
        default=2000,  # 20% TVA
        description="Tax rate applied to new invoices that don't specify one",
        ge=0,
        le=10000,
    )
    payment_term_days: int = Field(
        default=30,
        description="Days between issue date and default due date",
        ge=0,
        le=365,
    )
    invoice_number_prefix: str = Field(
        default="INV",
        description="Prefix of generated invoice numbers (INV-YYYY-NNNNN)",
        min_length=1,
        max_length=10,
    )
    timezone: str = Field(
        default="Europe/Paris",
        description="IANA zone used to resolve today's calendar date",
    )

    # Currency
    ledger_currency: str = Field(default="EUR", min_length=3, max_length=3)
    display_currency: str = Field(default="EUR", min_length=3, max_length=3)
    exchange_rates: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_EXCHANGE_RATES),
        description="Units of each currency per one EUR",
    )

    # Export
    export_delimiter: str = Field(default=";", min_length=1, max_length=1)
    export_bom: bool = Field(
        default=True,
        description="Prefix CSV exports with a UTF-8 byte-order mark for spreadsheet tools",
    )

    # Infrastructure
    database_url: str | None = Field(default=None, description="PostgreSQL DSN")
    log_level: str = Field(default="INFO")

    @field_validator("exchange_rates")
    @classmethod
    def _rates_positive(cls, rates: dict[str, float]) -> dict[str, float]:
        for code, rate in rates.items():
            if rate <= 0:
                raise ValueError(f"Exchange rate for {code} must be positive")
        return rates

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, level: str) -> str:
        level = level.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {level}")
        return level


def load_config(env_file: Path | None = None) -> FinanceConfig:
    """
    Build configuration from environment variables.

    A .env file (if present) is loaded first without overriding variables
    already set in the shell.
    """
    load_dotenv(env_file or Path.cwd() / ".env", override=False)

    env_map = {
        "default_tax_rate_bps": "FINANCE_DEFAULT_TAX_RATE_BPS",
        "payment_term_days": "FINANCE_PAYMENT_TERM_DAYS",
        "invoice_number_prefix": "FINANCE_INVOICE_PREFIX",
        "timezone": "FINANCE_TIMEZONE",
        "ledger_currency": "FINANCE_LEDGER_CURRENCY",
        "display_currency": "FINANCE_DISPLAY_CURRENCY",
        "export_delimiter": "FINANCE_EXPORT_DELIMITER",
        "export_bom": "FINANCE_EXPORT_BOM",
        "database_url": "DATABASE_URL",
        "log_level": "LOG_LEVEL",
    }

    values = {}
    for field_name, env_name in env_map.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[field_name] = raw

    config = FinanceConfig.model_validate(values)
    logger.info(
        "Finance config loaded: currency=%s, tax=%sbps, term=%sd",
        config.ledger_currency,
        config.default_tax_rate_bps,
        config.payment_term_days,
    )
    return config


def configure_logging(level: str = "INFO") -> None:
    """Set root logging once at application start."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
