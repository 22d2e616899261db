from decimal import Decimal

import pytest
from pydantic import ValidationError

from orders_analytics.domain.price import CurrencyMismatch, Price


@pytest.mark.parametrize("raw, expected", [
    ("10", "10.00"),
    ("10.005", "10.01"),
    ("10.004", "10.00"),
    (0.1, "0.10"),
    (7, "7.00"),
    (Decimal("19.999"), "20.00"),
])
def test_amount_rounded_to_cents(raw, expected):
    price = Price(amount=raw, currency_code="usd")
    assert price.amount == Decimal(expected)
    assert str(price.amount) == expected
    assert price.currency_code == "USD"


@pytest.mark.parametrize("code", ["US", "USDX", "12A", ""])
def test_invalid_currency_rejected(code):
    with pytest.raises(ValidationError):
        Price(amount="1", currency_code=code)


def test_invalid_amount_rejected():
    with pytest.raises(ValidationError):
        Price(amount="abc", currency_code="USD")


def test_add_same_currency():
    total = Price(amount="10.10", currency_code="EUR").add(Price(amount="0.20", currency_code="EUR"))
    assert total == Price(amount="10.30", currency_code="EUR")


def test_add_different_currency_raises():
    with pytest.raises(CurrencyMismatch) as exc:
        Price(amount="1", currency_code="USD").add(Price(amount="1", currency_code="EUR"))
    assert exc.value.left == "USD"
    assert exc.value.right == "EUR"


def test_subtract_and_multiply():
    price = Price(amount="5.25", currency_code="USD")
    assert price.multiply(3).amount == Decimal("15.75")
    assert price.subtract(Price(amount="0.25", currency_code="USD")).amount == Decimal("5.00")


def test_divide_rounds_half_up():
    assert Price(amount="10.00", currency_code="USD").divide(3).amount == Decimal("3.33")
    assert Price(amount="0.05", currency_code="USD").divide(2).amount == Decimal("0.03")


def test_divide_by_zero():
    with pytest.raises(ZeroDivisionError):
        Price(amount="1", currency_code="USD").divide(0)


def test_no_float_drift():
    total = Price.zero("USD")
    for _ in range(10):
        total = total.add(Price(amount="0.10", currency_code="USD"))
    assert total.amount == Decimal("1.00")


def test_minor_units():
    price = Price.from_minor_units(1999, "USD")
    assert price.amount == Decimal("19.99")
    assert price.minor_units == 1999


def test_zero_and_dict():
    zero = Price.zero("GBP")
    assert zero.is_zero()
    assert zero.to_dict() == {"number": "0.00", "currency_code": "GBP"}
    assert Price.from_dict({"number": "4.5", "currency_code": "gbp"}) == Price(amount="4.50", currency_code="GBP")


def test_price_is_immutable():
    price = Price(amount="1", currency_code="USD")
    with pytest.raises(ValidationError):
        price.amount = Decimal("2")
