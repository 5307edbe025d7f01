from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from storecart.domain import totals


@dataclass
class Line:
    quantity: int
    price: Decimal
    deleted_at: datetime | None = None


class TestTotals:
    def test_empty_cart_is_zero(self):
        assert totals.total_items([]) == 0
        assert totals.subtotal([]) == Decimal("0.00")

    def test_sums_quantities_and_prices(self):
        lines = [Line(2, Decimal("10.10")), Line(1, Decimal("0.20"))]

        assert totals.total_items(lines) == 3
        assert totals.subtotal(lines) == Decimal("20.40")

    def test_no_float_drift(self):
        lines = [Line(1, Decimal("0.10")) for _ in range(10)]
        assert totals.subtotal(lines) == Decimal("1.00")

    def test_soft_deleted_lines_are_ignored(self):
        gone = datetime.now(timezone.utc)
        lines = [Line(2, Decimal("5.00")), Line(9, Decimal("100.00"), deleted_at=gone)]

        assert totals.total_items(lines) == 2
        assert totals.subtotal(lines) == Decimal("10.00")

    def test_line_subtotal(self):
        assert totals.line_subtotal(Line(3, Decimal("199.99"))) == Decimal("599.97")
