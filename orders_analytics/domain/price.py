# orders_analytics/domain/price.py
"""
Monetary value type.

A Price is an amount with exactly two fractional digits plus an ISO 4217
currency code. All arithmetic is done on Decimal so that sums of order totals
never drift; division rounds half-up back to cents.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, field_validator

CENT = Decimal("0.01")


class CurrencyMismatch(ValueError):
    """Raised when two prices with different currencies are combined"""

    def __init__(self, left: str, right: str):
        super().__init__(f"Currency mismatch: {left} vs {right}")
        self.left = left
        self.right = right


def round_amount(value: Any) -> Decimal:
    """Coerce a number (str/int/float/Decimal) to a 2-decimal Decimal."""
    if isinstance(value, float):
        # go through str so 0.1 stays 0.1
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class Price(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    currency_code: str

    @field_validator("amount", mode="before")
    @classmethod
    def _round_amount(cls, v):
        return round_amount(v)

    @field_validator("currency_code")
    @classmethod
    def _check_currency(cls, v: str) -> str:
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"Invalid currency code: {v!r}")
        return code

    # ------------- Constructors ------------- #

    @classmethod
    def zero(cls, currency_code: str) -> "Price":
        return cls(amount=0, currency_code=currency_code)

    @classmethod
    def from_minor_units(cls, minor_units: int, currency_code: str) -> "Price":
        return cls(amount=Decimal(minor_units) * CENT, currency_code=currency_code)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Price":
        return cls(amount=data["number"], currency_code=data["currency_code"])

    # ------------- Accessors ------------- #

    @property
    def minor_units(self) -> int:
        return int(self.amount / CENT)

    def is_zero(self) -> bool:
        return self.amount == 0

    def to_dict(self) -> Dict[str, str]:
        return {"number": str(self.amount), "currency_code": self.currency_code}

    # ------------- Arithmetic ------------- #

    def _check_same_currency(self, other: "Price") -> None:
        if other.currency_code != self.currency_code:
            raise CurrencyMismatch(self.currency_code, other.currency_code)

    def add(self, other: "Price") -> "Price":
        self._check_same_currency(other)
        return Price(amount=self.amount + other.amount, currency_code=self.currency_code)

    def subtract(self, other: "Price") -> "Price":
        self._check_same_currency(other)
        return Price(amount=self.amount - other.amount, currency_code=self.currency_code)

    def multiply(self, factor: int | Decimal | str) -> "Price":
        return Price(amount=self.amount * Decimal(factor), currency_code=self.currency_code)

    def divide(self, count: int | Decimal | str) -> "Price":
        divisor = Decimal(count)
        if divisor == 0:
            raise ZeroDivisionError("Cannot divide a price by zero")
        return Price(amount=self.amount / divisor, currency_code=self.currency_code)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency_code}"
