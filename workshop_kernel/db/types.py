"""
Module: workshop_kernel.db.types
Responsibility: Annotated type aliases and helpers for monetary columns and
    wall-clock date inputs, so every model and service uses identical
    definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    CRITICAL: No floats anywhere in the ledger.  All monetary amounts use
    Decimal; round_money() is the ONLY sanctioned rounding function and is
    applied to display values only, never to stored line totals.
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated

from sqlalchemy import Numeric, String

from workshop_kernel.exceptions import InvalidDateError

# 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

ShortCode = Annotated[str, String(50)]

LongText = Annotated[str, String(4000)]

MONEY_DISPLAY_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def to_money(value: Decimal | int | str) -> Decimal:
    """
    Coerce a catalog price into a Decimal without passing through float.

    Raises:
        TypeError: If value is a float.
        InvalidOperation: If value is not a number.
    """
    if isinstance(value, float):
        raise TypeError("Monetary values must not be floats")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DISPLAY_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to specified decimal places.

    This is the ONLY sanctioned rounding function for monetary values.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "0"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def safe_unit_price(total: Decimal, quantity: int, decimal_places: int = MONEY_DISPLAY_PLACES) -> Decimal:
    """Average unit price for display; zero when nothing was sold."""
    if quantity <= 0:
        return round_money(ZERO, decimal_places)
    try:
        return round_money(total / Decimal(quantity), decimal_places)
    except InvalidOperation:
        return round_money(ZERO, decimal_places)


def parse_wall_clock(value: str | datetime) -> datetime:
    """
    Parse a date/time input as a literal wall-clock instant.

    The value is taken exactly as entered: any offset in the input is
    discarded, not converted, and the result is tagged UTC.  "2025-12-01T10:00"
    and "2025-12-01T10:00+03:00" both become 2025-12-01 10:00 UTC.

    Raises:
        InvalidDateError: If the string is not ISO-8601.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=UTC)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidDateError(value) from exc
    return parsed.replace(tzinfo=UTC)


def parse_instant(value: str | datetime) -> datetime:
    """
    Parse an ISO-8601 instant, honouring its offset; naive input is UTC.

    Raises:
        InvalidDateError: If the string is not ISO-8601.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateError(value) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def display_money(value: Decimal, decimal_places: int = MONEY_DISPLAY_PLACES) -> Decimal:
    """
    Trim storage scale for display without losing value.

    Numeric(38, 9) columns read back as e.g. Decimal("250.000000000"); this
    returns Decimal("250.00").  A value with more significant places than
    ``decimal_places`` keeps them.
    """
    rounded = round_money(value, decimal_places)
    if rounded == value:
        return rounded
    return value.normalize()


def iso_instant(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
