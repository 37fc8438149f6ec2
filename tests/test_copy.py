"""
Tests for the Copy circulation state machine
"""

from datetime import timedelta

import pytest

from circulation.category import Category
from circulation.copy import Copy
from circulation.errors import InvalidArgumentError
from tests.test_utils import TestUtils


class TestCopyCreation:
    """Descriptive attributes are validated once"""

    def setup_method(self):
        self.clock = TestUtils.clock()

    def test_new_copy_is_available(self):
        copy = TestUtils.copy(self.clock)
        assert copy.available
        assert copy.holder is None
        assert copy.due_date is None
        assert copy.read_count == 0
        assert copy.rating == 0.0
        assert copy.reservations == ()
        assert copy.current_fine is None
        assert not copy.has_fine()

    @pytest.mark.parametrize("kwargs", [
        {"key": " "},
        {"title": ""},
        {"author": "  "},
        {"year": 0},
        {"year": 2100},
        {"default_days": 0},
    ])
    def test_invalid_attributes(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            TestUtils.copy(self.clock, **kwargs)

    def test_category_must_be_enum_member(self):
        with pytest.raises(InvalidArgumentError):
            Copy("k-1", "Dune", "Frank Herbert", 1965, "SCIENCE_FICTION", clock=self.clock)

    def test_category_metadata(self):
        assert str(Category.SCIENCE_FICTION) == "Science Fiction"
        assert Category.CLASSIC.description == "Timeless literary works"
        assert Category.parse("non-fiction") is Category.NON_FICTION
        assert Category.parse("science_fiction") is Category.SCIENCE_FICTION
        with pytest.raises(InvalidArgumentError):
            Category.parse("cookbooks")

    def test_rating_ignores_out_of_range_values(self):
        copy = TestUtils.copy(self.clock)
        copy.rating = 4.5
        copy.rating = 7.0
        assert copy.rating == 4.5
        copy.rating = -1
        assert copy.rating == 4.5
        copy.rating = 0
        assert copy.rating == 0.0


class TestCopyCirculation:
    """Borrow / return cycle and hand-off"""

    def setup_method(self):
        self.clock = TestUtils.clock()
        self.copy = TestUtils.copy(self.clock, default_days=14)

    def test_borrow_sets_holder_and_due_date(self):
        assert self.copy.borrow("Alice", 7)
        assert not self.copy.available
        assert self.copy.holder == "Alice"
        assert self.copy.due_date == self.clock.today() + timedelta(days=7)
        assert self.copy.read_count == 1

    def test_borrow_held_copy_returns_false(self):
        self.copy.borrow("Alice", 7)
        assert not self.copy.borrow("Bob", 7)
        assert self.copy.holder == "Alice"
        assert self.copy.read_count == 1

    @pytest.mark.parametrize("person,days", [("", 7), ("  ", 7), (None, 7), ("Alice", 0), ("Alice", -3)])
    def test_borrow_validation(self, person, days):
        with pytest.raises(InvalidArgumentError):
            self.copy.borrow(person, days)
        assert self.copy.available

    def test_borrow_return_is_a_closed_cycle(self):
        self.copy.borrow("Alice", 7)
        assert self.copy.return_copy()
        assert self.copy.available
        assert self.copy.holder is None
        assert self.copy.due_date is None
        assert self.copy.read_count == 1

    def test_return_available_copy_returns_false(self):
        assert not self.copy.return_copy()

    def test_overdue(self):
        self.copy.borrow("Alice", 1)
        assert not self.copy.is_overdue()
        self.clock.advance(days=1)
        assert not self.copy.is_overdue()
        assert self.copy.days_overdue() == 0
        self.clock.advance(days=5)
        assert self.copy.is_overdue()
        assert self.copy.days_overdue() == 5

    def test_available_copy_is_never_overdue(self):
        self.clock.advance(days=100)
        assert not self.copy.is_overdue()
        assert self.copy.days_overdue() == 0


class TestCopyReservations:
    """FIFO reservation queue"""

    def setup_method(self):
        self.clock = TestUtils.clock()
        self.copy = TestUtils.copy(self.clock, default_days=14)

    def test_reserve_requires_held_copy(self):
        assert not self.copy.reserve("Bob")
        assert self.copy.reservations == ()

    def test_holder_cannot_reserve(self):
        self.copy.borrow("Alice", 7)
        assert not self.copy.reserve("Alice")

    def test_no_duplicate_reservations(self):
        self.copy.borrow("Alice", 7)
        assert self.copy.reserve("Bob")
        assert not self.copy.reserve("Bob")
        assert self.copy.reservations == ("Bob",)

    def test_return_hands_off_to_queue_head(self):
        self.copy.borrow("Alice", 7)
        self.copy.reserve("Bob")
        self.copy.reserve("Carol")
        self.clock.advance(days=3)

        assert self.copy.return_copy()
        assert self.copy.holder == "Bob"
        assert self.copy.due_date == self.clock.today() + timedelta(days=14)
        assert self.copy.read_count == 2
        assert self.copy.reservations == ("Carol",)

        assert self.copy.return_copy()
        assert self.copy.holder == "Carol"
        assert self.copy.read_count == 3

        assert self.copy.return_copy()
        assert self.copy.available
        assert self.copy.due_date is None
        assert self.copy.read_count == 3

    def test_cancel_moves_next_in_line_forward(self):
        self.copy.borrow("Alice", 7)
        self.copy.reserve("Bob")
        self.copy.reserve("Carol")
        assert self.copy.cancel_reservation("Bob")
        assert not self.copy.cancel_reservation("Bob")
        self.copy.return_copy()
        assert self.copy.holder == "Carol"

    def test_name_can_queue_again_after_hand_off(self):
        self.copy.borrow("Alice", 7)
        self.copy.reserve("Bob")
        self.copy.return_copy()
        assert self.copy.holder == "Bob"
        assert self.copy.reserve("Alice")
        assert self.copy.reservation_count == 1
