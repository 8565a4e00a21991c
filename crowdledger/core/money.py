"""Money — exact decimal amounts in a single unit of account.

Invariants:
    - Amounts are Decimal, never float, once past normalize_amount()
    - MINOR_UNIT (0.01) is the smallest representable amount
    - Persistence uses integer minor units; conversion is lossless for normalized amounts

Design Decisions:
    - Floats accepted at the boundary but converted through str(): 0.1 stays 0.1
    - Booleans rejected explicitly (bool is an int subclass)
"""

from decimal import Decimal, InvalidOperation


MINOR_UNIT: Decimal = Decimal("0.01")
MINOR_UNITS_PER_UNIT: int = 100
# BigInteger-safe ceiling for any single amount or goal
MAX_AMOUNT: Decimal = Decimal("1000000000000.00")


def normalize_amount(value: object) -> Decimal | None:
    """Convert a raw amount to Decimal. Returns None when not a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        value = str(value)
    if not isinstance(value, (Decimal, int, str)):
        return None
    try:
        amount = Decimal(value)
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def is_valid_amount(amount: Decimal | None) -> bool:
    """Positive, within MAX_AMOUNT, and a whole number of minor units."""
    if amount is None or amount <= 0 or amount > MAX_AMOUNT:
        return False
    return amount % MINOR_UNIT == 0


def to_minor_units(amount: Decimal) -> int:
    return int(amount * MINOR_UNITS_PER_UNIT)


def from_minor_units(minor: int) -> Decimal:
    return (Decimal(minor) / MINOR_UNITS_PER_UNIT).quantize(MINOR_UNIT)
