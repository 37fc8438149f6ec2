"""
Copy: one circulation unit of a title.

State machine:
    Available --borrow--> Held(holder, due_date)
    Held --return (queue empty)--> Available
    Held --return (queue non-empty)--> Held(next in queue, today + default days)

The due date is set exactly while the copy is held. Reservations are only
accepted while the copy is held and a name is never queued twice.
"""

from collections import deque
from datetime import date
from typing import Deque, Optional, Tuple

from common import env
from common.time_utils import Clock, SYSTEM_CLOCK
from .category import Category
from .errors import InvalidArgumentError
from .fine import Fine

MIN_RATING = 0.0
MAX_RATING = 5.0


def _required(value: Optional[str], what: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{what} cannot be empty")
    return str(value).strip()


class Copy:
    """Circulation record for a single lendable copy"""

    def __init__(
        self,
        key: str,
        title: str,
        author: str,
        year: int,
        category: Category,
        clock: Clock = SYSTEM_CLOCK,
        default_days: int = env.DEFAULT_BORROW_DAYS,
    ):
        self._key = _required(key, "Catalog key")
        self._title = _required(title, "Title")
        self._author = _required(author, "Author")

        if isinstance(year, bool) or not isinstance(year, int):
            raise InvalidArgumentError(f"Year must be an integer, got {year!r}")
        if year < 1 or year > clock.today().year + 1:
            raise InvalidArgumentError(f"Year out of range: {year}")
        if not isinstance(category, Category):
            raise InvalidArgumentError(f"Unknown category: {category!r}")
        if default_days <= 0:
            raise InvalidArgumentError("Default borrow days must be positive")

        self._year = year
        self._category = category
        self.clock = clock
        self.default_days = default_days

        self._holder: Optional[str] = None
        self._due_date: Optional[date] = None
        self._reservations: Deque[str] = deque()
        self._rating = 0.0
        self._read_count = 0
        self._current_fine: Optional[Fine] = None

    # Descriptive attributes

    @property
    def key(self) -> str:
        return self._key

    @property
    def title(self) -> str:
        return self._title

    @property
    def author(self) -> str:
        return self._author

    @property
    def year(self) -> int:
        return self._year

    @property
    def category(self) -> Category:
        return self._category

    @property
    def rating(self) -> float:
        return self._rating

    @rating.setter
    def rating(self, value: float) -> None:
        # out-of-range values are ignored
        if MIN_RATING <= value <= MAX_RATING:
            self._rating = float(value)

    @property
    def read_count(self) -> int:
        return self._read_count

    # Circulation state

    @property
    def available(self) -> bool:
        return self._holder is None

    @property
    def holder(self) -> Optional[str]:
        return self._holder

    @property
    def due_date(self) -> Optional[date]:
        return self._due_date

    @property
    def reservations(self) -> Tuple[str, ...]:
        return tuple(self._reservations)

    @property
    def reservation_count(self) -> int:
        return len(self._reservations)

    def _hand_off(self, person: str, days: int) -> None:
        self._holder = person
        self._due_date = self.clock.today_plus_days(days)
        self._read_count += 1

    def borrow(self, person_name: str, days: int) -> bool:
        """Lend an available copy. Returns False if it is already held."""
        person = _required(person_name, "Person name")
        if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
            raise InvalidArgumentError(f"Borrow days must be a positive integer, got {days!r}")

        if not self.available:
            return False

        self._hand_off(person, days)
        return True

    def return_copy(self) -> bool:
        """
        Take the copy back. The head of the reservation queue, if any,
        becomes the new holder for the default borrow period.
        """
        if self.available:
            return False

        if self._reservations:
            self._hand_off(self._reservations.popleft(), self.default_days)
        else:
            self._holder = None
            self._due_date = None
        return True

    def reserve(self, person_name: str) -> bool:
        person = _required(person_name, "Person name")
        if self.available or person == self._holder or person in self._reservations:
            return False
        self._reservations.append(person)
        return True

    def cancel_reservation(self, person_name: str) -> bool:
        person = _required(person_name, "Person name")
        try:
            self._reservations.remove(person)
        except ValueError:
            return False
        return True

    def is_overdue(self) -> bool:
        return self._due_date is not None and self.clock.today() > self._due_date

    def days_overdue(self) -> int:
        if not self.is_overdue():
            return 0
        return (self.clock.today() - self._due_date).days

    # Fines

    @property
    def current_fine(self) -> Optional[Fine]:
        return self._current_fine

    def set_current_fine(self, fine: Optional[Fine]) -> None:
        if fine is not None and fine.key != self._key:
            raise InvalidArgumentError(f"Fine for {fine.key} cannot be stored on {self._key}")
        self._current_fine = fine

    def has_fine(self) -> bool:
        """True if an unsettled fine is stored"""
        return self._current_fine is not None and not self._current_fine.is_settled

    def describe(self) -> str:
        status = f" [Borrowed by {self._holder}]" if self._holder else " [Available]"
        rating = f" *{self._rating}" if self._rating > 0 else ""
        overdue = " OVERDUE!" if self.is_overdue() else ""
        return (f"'{self._title}' by {self._author} ({self._year}) - "
                f"{self._category}{rating}{status}{overdue}")

    def __repr__(self) -> str:
        return f"Copy({self._key!r}, {self._title!r})"
