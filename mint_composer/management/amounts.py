"""UI amount -> raw base units."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from mint_composer.errors import ValidationError

Amount = int | float | str | Decimal

MAX_DECIMALS = 9
_DIGITS = re.compile(r"^\d+$")


def decimal_amount_to_raw(amount: Amount, decimals: int) -> int:
    """Convert a human amount (``1.5``) to base units for a mint with ``decimals``.

    Fraction digits beyond ``decimals`` are truncated, never rounded.
    Floats go through ``str()`` so ``0.1`` stays ``0.1``.
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= MAX_DECIMALS:
        raise ValidationError(f"Decimals must be between 0 and {MAX_DECIMALS}, got {decimals!r}")
    if isinstance(amount, bool):
        raise ValidationError("Amount must be a number")

    try:
        text = format(Decimal(str(amount)), "f")
    except InvalidOperation as e:
        raise ValidationError(f"Invalid amount {amount!r}") from e

    if text.startswith("-"):
        raise ValidationError(f"Amount must be positive, got {amount!r}")

    integer_part, _, fraction = text.partition(".")
    fraction = fraction[:decimals].ljust(decimals, "0")
    raw = integer_part + fraction
    if not _DIGITS.match(raw):
        raise ValidationError(f"Invalid amount {amount!r}")
    return int(raw)
