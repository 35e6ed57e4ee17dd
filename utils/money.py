"""Integer-cents money helpers.

Amounts live as integer minor units everywhere. Conversion to text happens
only at display and export boundaries.
"""

from decimal import Decimal, ROUND_HALF_UP


def format_cents(cents: int, decimal_separator: str = ".") -> str:
    """
    Render cents as a two-decimal string.

    >>> format_cents(123450)
    '1234.50'
    >>> format_cents(-5, ",")
    '-0,05'
    """
    sign = "-" if cents < 0 else ""
    units, minor = divmod(abs(cents), 100)
    return f"{sign}{units}{decimal_separator}{minor:02d}"


def round_half_up(value: float | Decimal, places: int = 0) -> float | int:
    """
    Round half away from zero, the way spreadsheet users expect.

    Python's round() uses banker's rounding, so round(2.5) == 2; a share of
    2.5% must display as 3%.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def percent_of(part: int, whole: int, places: int = 0) -> float | int:
    """Share of part in whole as a rounded percentage. Zero whole gives 0."""
    if whole == 0:
        return 0
    return round_half_up(Decimal(part) * 100 / Decimal(whole), places)
