"""
Money value type: exact decimal amount with two fraction digits.
Rounding (half-up) happens only when a value is constructed.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from functools import total_ordering
from typing import Any, Union

from pydantic_core import core_schema

from .errors import InvalidArgumentError, NegativeResultError

CENTS = Decimal("0.01")

MoneyLike = Union["Money", Decimal, str, int]


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidArgumentError(f"Money cannot be built from {type(value).__name__}: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        text = value.strip().lstrip("$")
        try:
            return Decimal(text)
        except InvalidOperation:
            raise InvalidArgumentError(f"Invalid money amount: {value!r}")
    raise InvalidArgumentError(f"Money cannot be built from {type(value).__name__}: {value!r}")


@total_ordering
class Money:
    """Non-negative monetary amount in cents precision"""

    __slots__ = ("_amount",)

    def __init__(self, value: MoneyLike = 0):
        if isinstance(value, Money):
            amount = value._amount
        else:
            amount = _to_decimal(value)
            if not amount.is_finite():
                raise InvalidArgumentError(f"Invalid money amount: {value!r}")
            try:
                amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
            except InvalidOperation as e:
                raise InvalidArgumentError(f"Money amount out of range: {value!r}") from e
        if amount < 0:
            raise InvalidArgumentError(f"Money cannot be negative: {amount}")
        self._amount = amount

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        if isinstance(cents, bool) or not isinstance(cents, int):
            raise InvalidArgumentError(f"Cents must be an integer, got {cents!r}")
        return cls(Decimal(cents).scaleb(-2))

    @classmethod
    def coerce(cls, value: MoneyLike) -> "Money":
        """Return value unchanged if it is already Money, otherwise build one"""
        if isinstance(value, Money):
            return value
        return cls(value)

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def cents(self) -> int:
        return int(self._amount.scaleb(2))

    def is_zero(self) -> bool:
        return self._amount == 0

    def is_positive(self) -> bool:
        return self._amount > 0

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self._amount + other._amount)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        result = self._amount - other._amount
        if result < 0:
            raise NegativeResultError(f"{self} - {other} would be negative")
        return Money(result)

    def __mul__(self, factor: int) -> "Money":
        if isinstance(factor, bool) or not isinstance(factor, int):
            return NotImplemented
        if factor < 0:
            raise NegativeResultError(f"{self} * {factor} would be negative")
        return Money(self._amount * factor)

    __rmul__ = __mul__

    def min(self, other: "Money") -> "Money":
        return self if self <= other else other

    def max(self, other: "Money") -> "Money":
        return self if self >= other else other

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self._amount == other._amount

    def __lt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self._amount < other._amount

    def __hash__(self) -> int:
        return hash(self._amount)

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __str__(self) -> str:
        return str(self._amount)

    def __repr__(self) -> str:
        return f"Money('{self._amount}')"

    def format(self) -> str:
        return f"${self._amount}"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


ZERO = Money(0)
