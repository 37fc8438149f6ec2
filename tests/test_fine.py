"""
Tests for the immutable Fine ledger entry
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from circulation.errors import (
    FineAlreadyPaidError,
    FineAlreadyWaivedError,
    FineSettledError,
    InvalidArgumentError,
    PaymentExceedsDueError,
)
from circulation.fine import Fine
from circulation.money import Money, ZERO
from tests.test_utils import START, TestUtils


class TestFineConstruction:
    """Field validation"""

    def test_valid_fine(self):
        fine = TestUtils.fine()
        assert fine.amount_due == Money("2.50")
        assert fine.amount_paid == ZERO
        assert fine.amount_remaining == Money("2.50")
        assert fine.paid_at is None
        assert not fine.waived
        assert not fine.is_settled

    @pytest.mark.parametrize("field,value", [
        ("key", " "),
        ("title", ""),
        ("borrower_name", "   "),
        ("days_overdue", 0),
        ("amount_paid", Money("3.00")),
    ])
    def test_invalid_fields(self, field, value):
        fields = dict(TestUtils.fine())
        fields[field] = value
        with pytest.raises(InvalidArgumentError):
            Fine.create(**fields)

    def test_waive_reason_present_iff_waived(self):
        fields = dict(TestUtils.fine())
        with pytest.raises(InvalidArgumentError):
            Fine.create(**{**fields, "waived": True})
        with pytest.raises(InvalidArgumentError):
            Fine.create(**{**fields, "waive_reason": "lost mail"})

    def test_fine_is_frozen(self):
        fine = TestUtils.fine()
        with pytest.raises(ValidationError):
            fine.amount_paid = Money("1.00")


class TestFinePayments:
    """with_payment transitions"""

    def setup_method(self):
        self.clock = TestUtils.clock()
        self.fine = TestUtils.fine("2.50")

    def test_partial_payment_returns_new_fine(self):
        paid = self.fine.with_payment(Money("1.50"), self.clock)
        assert paid is not self.fine
        assert paid.amount_paid == Money("1.50")
        assert paid.amount_remaining == Money("1.00")
        assert paid.is_partially_paid
        assert paid.paid_at is None
        assert self.fine.amount_paid == ZERO

    def test_full_payment_settles_and_stamps_paid_at(self):
        self.clock.advance(hours=2)
        paid = self.fine.with_payment(Money("1.50"), self.clock).with_payment(Money("1.00"), self.clock)
        assert paid.is_settled
        assert paid.is_fully_paid
        assert paid.paid_at == self.clock.now()
        assert paid.created_at == self.fine.created_at

    def test_payments_are_associative(self):
        for a, b in [("0.01", "2.49"), ("1.00", "1.00"), ("1.25", "0.75"), ("2.00", "0.50")]:
            split = self.fine.with_payment(Money(a), self.clock).with_payment(Money(b), self.clock)
            once = self.fine.with_payment(Money(a) + Money(b), self.clock)
            assert split.amount_paid == once.amount_paid
            assert split.amount_remaining == once.amount_remaining

    def test_overpayment_rejected(self):
        with pytest.raises(PaymentExceedsDueError):
            self.fine.with_payment(Money("100.00"), self.clock)
        partial = self.fine.with_payment(Money("2.00"), self.clock)
        with pytest.raises(PaymentExceedsDueError):
            partial.with_payment(Money("0.51"), self.clock)
        assert partial.amount_paid == Money("2.00")

    def test_payment_on_paid_fine_rejected(self):
        paid = self.fine.with_payment(Money("2.50"), self.clock)
        with pytest.raises(FineAlreadyPaidError):
            paid.with_payment(Money("0.01"), self.clock)

    def test_payment_on_waived_fine_rejected(self):
        waived = self.fine.with_waiver("Hardship", self.clock)
        with pytest.raises(FineAlreadyWaivedError):
            waived.with_payment(Money("1.00"), self.clock)

    def test_non_positive_payment_rejected(self):
        with pytest.raises(InvalidArgumentError):
            self.fine.with_payment(ZERO, self.clock)
        with pytest.raises(InvalidArgumentError):
            self.fine.with_payment("-1", self.clock)


class TestFineWaivers:
    """with_waiver transitions"""

    def setup_method(self):
        self.clock = TestUtils.clock()
        self.fine = TestUtils.fine("2.50")

    def test_waiver_settles(self):
        waived = self.fine.with_waiver("  Library closed  ", self.clock)
        assert waived.waived
        assert waived.waive_reason == "Library closed"
        assert waived.is_settled
        assert waived.paid_at == self.clock.now()
        assert not self.fine.waived

    def test_partially_paid_fine_can_be_waived(self):
        partial = self.fine.with_payment(Money("1.00"), self.clock)
        waived = partial.with_waiver("Goodwill", self.clock)
        assert waived.amount_paid == Money("1.00")
        assert waived.is_settled

    def test_waiver_of_paid_fine_rejected(self):
        paid = self.fine.with_payment(Money("2.50"), self.clock)
        with pytest.raises(FineAlreadyPaidError):
            paid.with_waiver("Too late", self.clock)

    def test_second_waiver_rejected(self):
        waived = self.fine.with_waiver("Hardship", self.clock)
        with pytest.raises(FineSettledError):
            waived.with_waiver("Again", self.clock)

    def test_blank_reason_rejected(self):
        with pytest.raises(InvalidArgumentError):
            self.fine.with_waiver("   ", self.clock)


class TestFineReassessment:
    """Reassessing a spell keeps the payments"""

    def test_reassessed_keeps_amount_paid(self):
        clock = TestUtils.clock()
        partial = TestUtils.fine("2.50").with_payment(Money("1.00"), clock)
        clock.advance(days=2)
        later = partial.reassessed(7, Money("3.50"), clock)
        assert later.days_overdue == 7
        assert later.amount_due == Money("3.50")
        assert later.amount_paid == Money("1.00")
        assert later.created_at == clock.now()

    def test_reassessing_paid_fine_with_more_days_reopens_it(self):
        clock = TestUtils.clock()
        paid = TestUtils.fine("2.50").with_payment(Money("2.50"), clock)
        reopened = paid.reassessed(6, Money("3.00"), clock)
        assert not reopened.is_settled
        assert reopened.paid_at is None
        assert reopened.amount_remaining == Money("0.50")

    def test_describe(self):
        clock = TestUtils.clock()
        fine = TestUtils.fine("2.50", created_at=datetime(2024, 1, 15))
        assert fine.describe() == "Fine for '1984' (Alice) - $2.50 due (5 days overdue)"
        partial = fine.with_payment(Money("1.50"), clock)
        assert "($1.50 paid, $1.00 remaining)" in partial.describe()
        assert partial.with_payment(Money("1.00"), clock).describe().endswith("PAID")
        assert fine.with_waiver("Storm", clock).describe().endswith("WAIVED (Storm)")
        assert fine.same_spell("978-0451524935", "Alice", START.date())
