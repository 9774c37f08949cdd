import re

from ordering.order.pricing import compute_totals, generate_order_number, line_total, to_money


class TestMoney:
    def test_rounds_half_up(self):
        assert to_money(0.125) == 0.13
        assert to_money(2.675) == 2.68
        assert to_money(10) == 10.0

    def test_line_total(self):
        assert line_total(40.0, 3) == 120.0
        assert line_total(19.99, 3) == 59.97


class TestTotals:
    def test_single_line(self):
        totals = compute_totals([120.0], delivery_fee=50, tax_rate=0.05)
        assert totals.subtotal == 120.0
        assert totals.tax == 6.0
        assert totals.delivery_fee == 50.0
        assert totals.total == 176.0

    def test_several_lines(self):
        totals = compute_totals([59.97, 25.5], delivery_fee=50, tax_rate=0.05)
        assert totals.subtotal == 85.47
        assert totals.tax == 4.27
        assert totals.total == 139.74

    def test_fee_applies_to_every_order(self):
        assert compute_totals([0.0], delivery_fee=50, tax_rate=0.05).total == 50.0


class TestOrderNumber:
    def test_format(self):
        number = generate_order_number(now_ms=1760870400000)
        assert re.fullmatch(r"ORD1760870400000[0-9A-Z]{5}", number)

    def test_suffix_varies(self):
        numbers = {generate_order_number(now_ms=1) for _ in range(20)}
        assert len(numbers) > 1
