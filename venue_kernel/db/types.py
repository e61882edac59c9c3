"""
Module: venue_kernel.db.types
Responsibility: Annotated type aliases and the rounding helper for money
    columns.  Every model and service uses identical precision definitions.
Architecture position: Kernel > DB.  May be imported by models, domain,
    services and selectors.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats for money.  Amounts are Decimal stored as Numeric(38, 9).
    - round_money() is the only rounding function for reported amounts
      (KPI aggregates, derived subtotals, inventory total value).
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from sqlalchemy import Numeric, String

# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Quantities (stock on hand, hours, line quantity)
Quantity = Annotated[Decimal, Numeric(38, 9)]

# SHA-256 hash as hex string (64 characters)
ContentHash = Annotated[str, String(64)]

# Short identifier strings
ShortCode = Annotated[str, String(50)]

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized using ``rounding`` (half-up).
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)
