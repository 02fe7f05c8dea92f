from __future__ import annotations

from decimal import Decimal

from backoffice.services.money import to_decimal

ONE = Decimal("1")
HUNDRED = Decimal("100")


def normalize_percent(value) -> Decimal:
    """Return a percentage as a fraction, whichever convention it was stored in.

    Values with magnitude above 1 are whole-number percents (25 -> 0.25); anything
    else is already a fraction. Exactly 1 is therefore read as 100 %, even when it was
    typed as a whole-number 1 %. Non-finite input yields 0.
    """
    d = to_decimal(value)
    if abs(d) > ONE:
        return d / HUNDRED
    return d
