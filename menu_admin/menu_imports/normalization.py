"""
Normalization of free-text cells from the bulk menu upload.

Operators type these files by hand (or export them from spreadsheets), so every
helper here is lenient: it returns a sensible default instead of raising.
"""
import re
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

TRUTHY_VALUES = frozenset({"yes", "true", "1"})
FALSY_VALUES = frozenset({"no", "false", "0"})

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")
_LEADING_DECIMAL = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_LEADING_INTEGER = re.compile(r"\s*(\d+)")

_CENT = Decimal("0.01")


def normalize_name(value: Optional[str]) -> str:
    """
    Lookup key for restaurant, category and item names: trimmed and case-folded.

    Examples:
        >>> normalize_name("  Burger King ")
        'burger king'
        >>> normalize_name(None)
        ''
    """
    if not value:
        return ""
    return value.strip().lower()


def parse_price(raw: Optional[str]) -> Optional[Decimal]:
    """
    Parses a price cell such as "₹250", "1,250.50" or "99".

    Everything except digits and dots is dropped, then the leading decimal
    number is read ("1.2.3" -> 1.2). Returns None when no number is left.

    Examples:
        >>> parse_price("₹250")
        Decimal('250.00')
        >>> parse_price("abc") is None
        True
    """
    if not raw:
        return None

    cleaned = _NON_PRICE_CHARS.sub("", raw)
    match = _LEADING_DECIMAL.match(cleaned)
    if not match:
        return None

    digits = match.group(0)
    try:
        # Precision wide enough for any digit count; range is checked on insert
        return Decimal(digits).quantize(_CENT, rounding=ROUND_HALF_UP, context=Context(prec=len(digits) + 3))
    except InvalidOperation:
        return None


def parse_flag(raw: Optional[str]) -> bool:
    """True only for yes/true/1 (case-insensitive). Blank means False."""
    return normalize_name(raw) in TRUTHY_VALUES


def parse_availability(raw: Optional[str]) -> bool:
    """Available unless explicitly no/false/0. Blank means available."""
    return normalize_name(raw) not in FALSY_VALUES


def parse_preparation_time(raw: Optional[str], default: int) -> int:
    """
    Reads the leading integer of the cell ("20 min" -> 20).
    Falls back to `default` for blank or unparseable values.
    """
    if not raw:
        return default

    match = _LEADING_INTEGER.match(raw)
    if not match:
        return default

    return int(match.group(1))
