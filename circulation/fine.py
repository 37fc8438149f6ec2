"""
Fine ledger entry.

A Fine is an immutable snapshot of one overdue assessment plus its payment
and waiver history. Every transition (with_payment, with_waiver,
reassessed) validates and builds a complete new Fine; the original is never
touched, so a failed transition leaves the stored value as it was.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from common.time_utils import Clock, SYSTEM_CLOCK
from .errors import (
    FineAlreadyPaidError,
    FineAlreadyWaivedError,
    InvalidArgumentError,
    PaymentExceedsDueError,
)
from .money import Money, MoneyLike, ZERO


class Fine(BaseModel):
    """Immutable fine for a single overdue spell"""

    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    borrower_name: str
    due_date: date
    days_overdue: int
    amount_due: Money
    amount_paid: Money = ZERO
    created_at: datetime
    paid_at: Optional[datetime] = None
    waived: bool = False
    waive_reason: Optional[str] = None

    @field_validator("key", "title", "borrower_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("days_overdue")
    @classmethod
    def positive_days(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("days overdue must be positive")
        return value

    @model_validator(mode="after")
    def check_balances(self) -> "Fine":
        if self.amount_paid > self.amount_due:
            raise ValueError("amount paid cannot exceed amount due")
        if self.waived and not (self.waive_reason and self.waive_reason.strip()):
            raise ValueError("a waived fine needs a reason")
        if not self.waived and self.waive_reason is not None:
            raise ValueError("waive reason given for a fine that is not waived")
        return self

    @classmethod
    def create(cls, **fields: Any) -> "Fine":
        """Build a Fine, reporting field problems as InvalidArgumentError"""
        try:
            return cls(**fields)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid fine: {e}") from e

    # Derived state

    @property
    def amount_remaining(self) -> Money:
        return self.amount_due - self.amount_paid

    @property
    def is_fully_paid(self) -> bool:
        return self.amount_paid == self.amount_due

    @property
    def is_settled(self) -> bool:
        return self.waived or self.is_fully_paid

    @property
    def is_partially_paid(self) -> bool:
        return self.amount_paid.is_positive() and self.amount_paid < self.amount_due

    def same_spell(self, key: str, borrower_name: str, due_date: date) -> bool:
        """True if this fine was assessed for the given holder and due date"""
        return (self.key, self.borrower_name, self.due_date) == (key, borrower_name, due_date)

    # Transitions

    def with_payment(self, amount: MoneyLike, clock: Clock = SYSTEM_CLOCK) -> "Fine":
        """
        Return a new Fine with the payment applied.

        Raises:
            InvalidArgumentError: amount is not a positive money value
            FineAlreadyWaivedError: the fine was waived
            FineAlreadyPaidError: nothing is left to pay
            PaymentExceedsDueError: the payment is larger than the balance
        """
        payment = Money.coerce(amount)
        if not payment.is_positive():
            raise InvalidArgumentError("Payment must be positive")
        if self.waived:
            raise FineAlreadyWaivedError(f"Cannot pay a waived fine for '{self.title}'")
        if self.is_fully_paid:
            raise FineAlreadyPaidError(f"Fine for '{self.title}' is already paid")

        new_paid = self.amount_paid + payment
        if new_paid > self.amount_due:
            raise PaymentExceedsDueError(
                f"Payment {payment.format()} exceeds remaining {self.amount_remaining.format()}"
            )

        paid_at = clock.now() if new_paid == self.amount_due else self.paid_at
        return Fine.create(**{**dict(self), "amount_paid": new_paid, "paid_at": paid_at})

    def with_waiver(self, reason: str, clock: Clock = SYSTEM_CLOCK) -> "Fine":
        """
        Return a new, waived Fine.

        Raises:
            InvalidArgumentError: reason is blank
            FineAlreadyWaivedError: the fine was already waived
            FineAlreadyPaidError: the fine is fully paid
        """
        if reason is None or not reason.strip():
            raise InvalidArgumentError("Waiver reason required")
        if self.waived:
            raise FineAlreadyWaivedError(f"Fine for '{self.title}' was already waived")
        if self.is_fully_paid:
            raise FineAlreadyPaidError(f"Cannot waive a paid fine for '{self.title}'")

        return Fine.create(**{
            **dict(self),
            "paid_at": clock.now(),
            "waived": True,
            "waive_reason": reason.strip(),
        })

    def reassessed(self, days_overdue: int, amount_due: Money, clock: Clock = SYSTEM_CLOCK) -> "Fine":
        """New assessment for the same spell, keeping what was already paid"""
        fields = {
            **dict(self),
            "days_overdue": days_overdue,
            "amount_due": amount_due.max(self.amount_paid),
            "created_at": clock.now(),
        }
        if fields["amount_due"] > self.amount_paid:
            fields["paid_at"] = None
        return Fine.create(**fields)

    def describe(self) -> str:
        if self.waived:
            return (f"Fine for '{self.title}' ({self.borrower_name}) - "
                    f"{self.amount_due.format()} WAIVED ({self.waive_reason})")
        if self.is_fully_paid:
            return f"Fine for '{self.title}' ({self.borrower_name}) - {self.amount_due.format()} PAID"
        if self.is_partially_paid:
            return (f"Fine for '{self.title}' ({self.borrower_name}) - {self.amount_due.format()} due "
                    f"({self.amount_paid.format()} paid, {self.amount_remaining.format()} remaining)")
        return (f"Fine for '{self.title}' ({self.borrower_name}) - {self.amount_due.format()} due "
                f"({self.days_overdue} days overdue)")
