"""Tests for server-side order pricing."""

from decimal import Decimal

import pytest

from apps.core.exceptions import (
    InsufficientStockException,
    InvalidProductPriceException,
    ProductNotFoundException,
    ValidationException,
)
from apps.orders.pricing import OrderItem, PriceCalculator, prices_match

pytestmark = pytest.mark.django_db


@pytest.fixture
def calculator():
    return PriceCalculator()


class TestTotals:
    def test_totals_come_from_catalog(self, calculator, product):
        result = calculator.calculate([{"product_id": product.pk, "quantity": 3}])

        assert result.subtotal == Decimal("30.00")
        assert result.tax == Decimal("2.40")
        assert result.shipping_cost == Decimal("0.00")
        assert result.total == Decimal("32.40")

    def test_client_prices_are_ignored(self, calculator, product):
        items = [{"product_id": str(product.pk), "quantity": 1, "price": "0.01", "total": "0.01"}]

        result = calculator.calculate(items)

        assert result.items[0].price == Decimal("10.00")
        assert result.total == Decimal("10.80")

    def test_camel_case_item_keys(self, calculator, product):
        result = calculator.calculate([{"productId": str(product.pk), "quantity": 2}])
        assert result.subtotal == Decimal("20.00")

    def test_sale_price_wins(self, calculator, make_product):
        product = make_product(price_regular=Decimal("100.00"), price_sale=Decimal("80.00"))

        result = calculator.calculate([OrderItem(product.pk, 1)])

        assert result.items[0].price == Decimal("80.00")
        assert result.subtotal == Decimal("80.00")

    def test_zero_sale_price_is_respected(self, calculator, make_product):
        product = make_product(price_regular=Decimal("25.00"), price_sale=Decimal("0.00"))

        result = calculator.calculate([OrderItem(product.pk, 2)])

        assert result.items[0].price == Decimal("0.00")
        assert result.total == Decimal("0.00")

    def test_tax_rounds_half_up(self, calculator, make_product):
        product = make_product(price_regular=Decimal("0.25"))

        result = calculator.calculate([OrderItem(product.pk, 1)], tax_rate="0.1")

        # 0.025 rounds to 0.03, not to the even 0.02
        assert result.tax == Decimal("0.03")
        assert result.total == Decimal("0.28")

    def test_shipping_added_to_total(self, calculator, product):
        result = calculator.calculate([OrderItem(product.pk, 1)], shipping_cost="5")

        assert result.shipping_cost == Decimal("5.00")
        assert result.total == Decimal("15.80")

    def test_total_is_sum_of_rounded_parts(self, calculator, make_product):
        a = make_product(name="Cable", price_regular=Decimal("3.33"))
        b = make_product(name="Plug", price_regular=Decimal("1.17"))

        result = calculator.calculate([OrderItem(a.pk, 3), OrderItem(b.pk, 7)])

        assert result.subtotal == sum((line.total for line in result.items), Decimal("0"))
        assert result.total == result.subtotal + result.tax + result.shipping_cost

    def test_line_items_snapshot_product(self, calculator, product):
        result = calculator.calculate([OrderItem(product.pk, 2)])

        line = result.items[0]
        assert line.product_id == str(product.pk)
        assert line.product_name == "Mechanical Keyboard"
        assert line.product_image == "https://img.example.com/keyboard.png"
        assert line.quantity == 2
        assert line.total == Decimal("20.00")

    def test_does_not_touch_stock(self, calculator, product):
        calculator.calculate([OrderItem(product.pk, 4)])

        product.refresh_from_db()
        assert product.stock_quantity == 10


class TestValidation:
    def test_empty_order_rejected(self, calculator):
        with pytest.raises(ValidationException, match="at least one item"):
            calculator.calculate([])

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2", None])
    def test_bad_quantity_rejected(self, calculator, product, quantity):
        with pytest.raises(ValidationException, match="Invalid item"):
            calculator.calculate([{"product_id": product.pk, "quantity": quantity}])

    def test_missing_product_id_rejected(self, calculator):
        with pytest.raises(ValidationException):
            calculator.calculate([{"quantity": 1}])

    def test_non_dict_item_rejected(self, calculator):
        with pytest.raises(ValidationException):
            calculator.calculate(["not-an-item"])

    def test_unknown_product(self, calculator, product):
        missing = "00000000-0000-0000-0000-000000000001"
        with pytest.raises(ProductNotFoundException) as exc_info:
            calculator.calculate([OrderItem(product.pk, 1), OrderItem(missing, 1)])

        assert exc_info.value.status_code == 400

    def test_malformed_product_id_is_not_found(self, calculator):
        with pytest.raises(ProductNotFoundException):
            calculator.calculate([OrderItem("not-a-uuid", 1)])

    def test_negative_price_rejected(self, calculator, make_product):
        product = make_product(price_regular=Decimal("-1.00"))

        with pytest.raises(InvalidProductPriceException):
            calculator.calculate([OrderItem(product.pk, 1)])


class TestStockCheck:
    def test_insufficient_stock(self, calculator, make_product):
        product = make_product(stock_quantity=2)

        with pytest.raises(InsufficientStockException) as exc_info:
            calculator.calculate([OrderItem(product.pk, 3)])

        assert exc_info.value.details == {
            "productName": "Mechanical Keyboard",
            "requested": 3,
            "available": 2,
        }

    def test_exact_stock_is_enough(self, calculator, make_product):
        product = make_product(stock_quantity=3)
        result = calculator.calculate([OrderItem(product.pk, 3)])
        assert result.items[0].quantity == 3

    def test_repeated_lines_share_stock(self, calculator, make_product):
        product = make_product(stock_quantity=3)

        with pytest.raises(InsufficientStockException) as exc_info:
            calculator.calculate([OrderItem(product.pk, 2), OrderItem(product.pk, 2)])

        assert exc_info.value.details["requested"] == 4

    def test_untracked_product_ignores_stock(self, calculator, make_product):
        product = make_product(stock_quantity=0, track_inventory=False)

        result = calculator.calculate([OrderItem(product.pk, 50)])

        assert result.subtotal == Decimal("500.00")


class TestPricesMatch:
    def test_within_tolerance(self, calculator, product):
        result = calculator.calculate([OrderItem(product.pk, 1)])
        assert prices_match("10.79", result)
        assert prices_match(Decimal("10.80"), result)

    def test_outside_tolerance(self, calculator, product):
        result = calculator.calculate([OrderItem(product.pk, 1)])
        assert not prices_match("1.00", result)

    def test_non_numeric_never_matches(self, calculator, product):
        result = calculator.calculate([OrderItem(product.pk, 1)])
        assert not prices_match("abc", result)
