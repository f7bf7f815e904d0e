"""Decimal utilities for Turkish-formatted statement amounts.

All monetary calculations must use Decimal to avoid floating-point precision issues.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from statement_ledger.exceptions import ParseError

# Minus variants that show up in extracted PDF text
MINUS_SIGNS = ("-", "−", "–")

# tr-TR numeric literal: optional sign, integer part either grouped with "."
# every three digits or ungrouped, optional "," decimal part.
TR_NUMBER_PATTERN = re.compile(
    r"^(?P<sign>-)?\s*(?P<int>\d{1,3}(?:\.\d{3})+|\d+)(?:,(?P<frac>\d+))?$"
)

TWO_PLACES = Decimal("0.01")

# Integer digits that fit the ledger's Numeric(20, 8) amount column
MAX_INTEGER_DIGITS = 12


def parse_decimal(raw_value: str) -> tuple[Decimal, bool]:
    """Parse a tr-TR numeric literal into a signed Decimal.

    Handles:
    - Grouped: 1.234,56
    - Ungrouped: 1234,56
    - Integers: 100, 1.500
    - Leading minus: -89,10

    Args:
        raw_value: The literal as it appears in the statement text.

    Returns:
        Tuple of (signed amount as Decimal, is_negative flag).

    Raises:
        ParseError: If the literal is empty, malformed, or has more than
            MAX_INTEGER_DIGITS integer digits.
    """
    if raw_value is None or not raw_value.strip():
        raise ParseError("Empty amount string")

    value = raw_value.strip()
    for minus in MINUS_SIGNS[1:]:
        value = value.replace(minus, "-")

    match = TR_NUMBER_PATTERN.match(value)
    if not match:
        raise ParseError(f"Cannot parse amount '{raw_value}'")

    is_negative = match.group("sign") is not None
    normalized = match.group("int").replace(".", "")
    if len(normalized.lstrip("0")) > MAX_INTEGER_DIGITS:
        raise ParseError(f"Amount '{raw_value}' out of range (max {MAX_INTEGER_DIGITS} integer digits)")
    if match.group("frac"):
        normalized = f"{normalized}.{match.group('frac')}"

    try:
        amount = Decimal(normalized)
    except InvalidOperation as e:
        raise ParseError(f"Cannot parse amount '{raw_value}': {e}") from e

    return (-amount if is_negative else amount), is_negative


def parse_amount(raw_amount: str) -> tuple[Decimal, bool]:
    """Parse a monetary tr-TR literal, keeping at least two decimal places.

    "1.234,56" -> (Decimal("1234.56"), False)
    "-89,10"   -> (Decimal("-89.10"), True)
    "100"      -> (Decimal("100.00"), False)

    Args:
        raw_amount: The raw amount string to parse.

    Returns:
        Tuple of (signed amount as Decimal, is_negative flag).

    Raises:
        ParseError: If the amount cannot be parsed.
    """
    amount, is_negative = parse_decimal(raw_amount)
    exponent = amount.as_tuple().exponent
    if isinstance(exponent, int) and exponent > -2:
        amount = amount.quantize(TWO_PLACES)
    return amount, is_negative


def format_tr(
    value: Decimal,
    min_fraction_digits: int = 0,
    max_fraction_digits: int = 3,
) -> str:
    """Format a Decimal the way the tr-TR locale renders numbers.

    Uses "." for thousands grouping and "," as decimal separator. Rounds
    half-up at max_fraction_digits and trims trailing zeros down to
    min_fraction_digits.

    Args:
        value: Amount to format.
        min_fraction_digits: Minimum number of fraction digits to keep.
        max_fraction_digits: Maximum number of fraction digits.

    Returns:
        Formatted string like "1.234,5" or "12,34".
    """
    quantum = Decimal(1).scaleb(-max_fraction_digits)
    rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if rounded < 0 else ""
    text = f"{abs(rounded):f}"
    int_part, _, frac_part = text.partition(".")

    frac_part = frac_part.rstrip("0")
    if len(frac_part) < min_fraction_digits:
        frac_part = frac_part.ljust(min_fraction_digits, "0")

    grouped = f"{int(int_part):,}".replace(",", ".")
    if frac_part:
        return f"{sign}{grouped},{frac_part}"
    return f"{sign}{grouped}"


def format_fixed(amount: Decimal, decimal_places: int = 2) -> str:
    """Format a Decimal with a fixed number of decimal places, "." separator.

    Args:
        amount: The amount to format.
        decimal_places: Number of decimal places.

    Returns:
        Formatted string like "1234.56000000".
    """
    quantum = Decimal(1).scaleb(-decimal_places)
    rounded = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)  # Normalize -0
    return f"{rounded:f}"


def sum_amounts(amounts: list[Decimal]) -> Decimal:
    """Sum a list of Decimal amounts.

    Args:
        amounts: List of Decimal amounts.

    Returns:
        Sum as Decimal.
    """
    total = Decimal("0")
    for amount in amounts:
        total += amount
    return total
