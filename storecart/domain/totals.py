# storecart/domain/totals.py
# cart totals are always derived from the line items, never stored
from decimal import Decimal
from typing import Iterable, List

ZERO = Decimal("0.00")


def active_items(items: Iterable) -> List:
    return [i for i in items if i.deleted_at is None]


def line_subtotal(item) -> Decimal:
    return Decimal(item.price) * item.quantity


def total_items(items: Iterable) -> int:
    return sum(i.quantity for i in active_items(items))


def subtotal(items: Iterable) -> Decimal:
    return sum((line_subtotal(i) for i in active_items(items)), ZERO)
