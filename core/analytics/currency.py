"""Display-only currency conversion.

The ledger holds one currency. Conversions here feed rendering and are
never written back into invoice or payment records.
"""

from typing import Mapping

from core.config import FinanceConfig
from core.exceptions import UnsupportedCurrency
from utils.money import round_half_up


def _rate(code: str, rates: Mapping[str, float]) -> float:
    try:
        return rates[code]
    except KeyError:
        raise UnsupportedCurrency(code) from None


def convert(amount: float, source: str, target: str, rates: Mapping[str, float]) -> float:
    """
    Convert an amount between two currencies of a base-relative rate table.

    Rates are expressed as units per one base currency, so the amount is
    first brought back to base and then out to the target.

    Raises:
        UnsupportedCurrency: Either code is missing from the table
    """
    source_rate = _rate(source, rates)
    target_rate = _rate(target, rates)
    if source == target:
        return amount
    return amount / source_rate * target_rate


def convert_cents(amount_cents: int, source: str, target: str, rates: Mapping[str, float]) -> int:
    """Convert cents and round to the nearest minor unit of the target."""
    converted = convert(amount_cents, source, target, rates)
    return round_half_up(converted)


def convert_for_display(amount_cents: int, config: FinanceConfig) -> int:
    """Ledger cents rendered in the configured display currency."""
    return convert_cents(
        amount_cents,
        config.ledger_currency,
        config.display_currency,
        config.exchange_rates,
    )
