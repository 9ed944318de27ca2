"""
Unit and timestamp conversion.

Amounts are converted with Decimal so that native -> display -> native
round-trips exactly. Timestamps always come out as aware UTC datetimes.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Any, Optional, Union

from wallet_history.models import TimestampUnit


# Seconds between 1970-01-01 and 2000-01-01 (the XRP Ledger epoch)
RIPPLE_EPOCH_OFFSET = 946684800

# Numeric timestamps at or above this are taken to be milliseconds
# (1e11 seconds is the year 5138)
MILLISECONDS_THRESHOLD = 100_000_000_000

Number = Union[int, float, str, Decimal]


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a provider amount to Decimal.

    Missing, empty and unparseable values become Decimal(0); hex strings
    ("0x...") are read as integers.
    """
    if value is None or value == "":
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not an amount")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    text = str(value).strip()
    if text.lower().startswith("0x"):
        return Decimal(int(text, 16))
    try:
        return Decimal(text)
    except InvalidOperation:
        return Decimal(0)


def to_display_units(native_amount: Any, decimals: int) -> Decimal:
    """Convert smallest-unit amount (wei, satoshi, lamports...) to display units."""
    amount = to_decimal(native_amount)
    if not amount:
        return Decimal(0)
    return amount.scaleb(-decimals)


def to_native_units(display_amount: Any, decimals: int) -> int:
    """Convert a display amount back to an integer count of smallest units."""
    amount = to_decimal(display_amount).scaleb(decimals)
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


def normalize_timestamp(
    value: Any,
    unit: TimestampUnit = TimestampUnit.AUTO,
) -> datetime:
    """
    Convert a provider timestamp to an aware UTC datetime.

    Raises ValueError/TypeError when the value cannot be interpreted.
    """
    if value is None or value == "":
        raise ValueError("Missing timestamp")

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if unit == TimestampUnit.ISO8601:
        return _parse_iso(str(value))

    if unit == TimestampUnit.AUTO and isinstance(value, str) and not _is_number(value):
        return _parse_iso(value)

    seconds = float(value)
    if unit == TimestampUnit.MILLISECONDS:
        seconds /= 1000.0
    elif unit == TimestampUnit.RIPPLE_EPOCH:
        seconds += RIPPLE_EPOCH_OFFSET
    elif unit == TimestampUnit.AUTO and abs(seconds) >= MILLISECONDS_THRESHOLD:
        seconds /= 1000.0

    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def _parse_iso(text: str) -> datetime:
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # Blockchair style "2021-01-01 10:00:00"
    parsed = datetime.fromisoformat(text.replace(" ", "T", 1))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def lower_or_none(address: Optional[str]) -> Optional[str]:
    if not address:
        return None
    return address.strip().lower()
