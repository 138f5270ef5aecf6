from decimal import Decimal, InvalidOperation
from typing import Union

Amount = Union[Decimal, str, int, float]

EPSILON = Decimal("0.00001")


def to_decimal(value: Amount | None) -> Decimal | None:
    """Convert gateway or model amounts to Decimal, going through str for floats."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {value!r}") from exc


def compare(a: Amount, b: Amount) -> int:
    """
    Compare two amounts with a small tolerance.

    Returns 0 when the amounts are within EPSILON of each other, -1 when
    ``a`` is smaller and 1 when ``a`` is larger.
    """
    left = to_decimal(a)
    right = to_decimal(b)
    if left is None or right is None:
        raise ValueError("cannot compare a missing amount")

    if abs(left - right) < EPSILON:
        return 0
    return -1 if left < right else 1
