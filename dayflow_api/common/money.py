# dayflow_api/common/money.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def dec(x, default: Optional[Decimal] = ZERO) -> Optional[Decimal]:
    if x is None or x == "":
        return default
    try:
        return Decimal(str(x))
    except (InvalidOperation, ValueError):
        return default


def q2(x) -> Decimal:
    return dec(x).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amounts(rows: Iterable[dict] | None) -> Decimal:
    """Sum the 'amount' of [{name, amount}] lists."""
    total = ZERO
    for r in rows or []:
        total += dec((r or {}).get("amount"))
    return total


def as_float(x):
    return float(x) if x is not None else None
