from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Q2 = Decimal("0.01")
ZERO = Decimal("0")
# 10**16 and up is not a money amount; it only overflows sums and quantize.
MAX_ADJUSTED_EXPONENT = 15


def d2(x: Decimal) -> Decimal:
    return x.quantize(Q2, rounding=ROUND_HALF_UP)


def to_decimal(v) -> Decimal:
    """Coerce a stored/incoming numeric value to a finite Decimal.

    None, booleans, garbage strings, NaN, infinities and magnitudes of 10**16 or
    more all become 0 so a bad field never poisons a monthly sum.
    """
    if v is None or isinstance(v, bool):
        return ZERO
    if isinstance(v, Decimal):
        d = v
    else:
        try:
            d = Decimal(str(v).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not d.is_finite():
        return ZERO
    if d and d.adjusted() > MAX_ADJUSTED_EXPONENT:
        return ZERO
    return d


def money_out(x: Decimal) -> float:
    return float(d2(to_decimal(x)))
