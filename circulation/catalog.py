"""
Catalog - owns the copies and coordinates borrow, return, reserve and fine
operations. Every operation resolves a title to a copy and delegates to it
while holding the catalog lock.
"""

import threading
from typing import Dict, List, Optional

from common import env
from common.logging_utils import log_message
from common.time_utils import Clock, SYSTEM_CLOCK
from .category import Category
from .copy import Copy, MAX_RATING, MIN_RATING
from .errors import CirculationError, InvalidArgumentError
from .fine import Fine
from .money import Money, MoneyLike, ZERO
from .policy import FinePolicy


def _required(value: Optional[str], what: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{what} cannot be empty")
    return str(value).strip()


class Catalog:
    """Thread-safe aggregate of copies keyed by catalog key"""

    def __init__(
        self,
        name: str = env.CATALOG_NAME,
        policy: Optional[FinePolicy] = None,
        clock: Clock = SYSTEM_CLOCK,
        default_days: int = env.DEFAULT_BORROW_DAYS,
        pretty: bool = False,
    ):
        self.name = _required(name, "Catalog name")
        if default_days <= 0:
            raise InvalidArgumentError("Default borrow days must be positive")

        self.policy = policy or FinePolicy()
        self.clock = clock
        self.default_days = default_days
        self.pretty = pretty
        self._copies: Dict[str, Copy] = {}
        self._lock = threading.RLock()

    def _log(self, key: Optional[str], op: str, stage: str, detail: str) -> None:
        log_message("CAT", key, op, stage, detail, self.pretty)

    def _resolve(self, title: str, op: str) -> Optional[Copy]:
        copy = self.find_by_title(title)
        if copy is None:
            self._log(None, op, "rejected", f"Title '{title}' not found")
        return copy

    # Membership

    def new_copy(self, key: str, title: str, author: str, year: int, category: Category) -> Copy:
        """Build a copy sharing this catalog's clock and borrow period"""
        return Copy(key, title, author, year, category,
                    clock=self.clock, default_days=self.default_days)

    def add(self, copy: Copy) -> bool:
        if copy is None:
            raise InvalidArgumentError("Copy cannot be None")
        key = _required(copy.key, "Catalog key")

        with self._lock:
            if key in self._copies:
                self._log(key, "ADD", "rejected", f"Duplicate key for '{copy.title}'")
                return False
            self._copies[key] = copy
            self._log(key, "ADD", "applied", f"Added '{copy.title}'")
            return True

    def remove(self, key: str) -> bool:
        key = _required(key, "Catalog key")
        with self._lock:
            copy = self._copies.pop(key, None)
            if copy is None:
                self._log(key, "REMOVE", "rejected", "Key not found")
                return False
            self._log(key, "REMOVE", "applied", f"Removed '{copy.title}'")
            return True

    def get(self, key: str) -> Optional[Copy]:
        with self._lock:
            return self._copies.get(key)

    def find_by_title(self, title: str) -> Optional[Copy]:
        """Case-insensitive exact title match; first copy in insertion order"""
        wanted = _required(title, "Title").casefold()
        with self._lock:
            for copy in self._copies.values():
                if copy.title.casefold() == wanted:
                    return copy
            return None

    # Circulation

    def borrow(self, title: str, person: str, days: Optional[int] = None) -> bool:
        person = _required(person, "Person name")
        days = self.default_days if days is None else days
        if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
            raise InvalidArgumentError(f"Borrow days must be a positive integer, got {days!r}")
        with self._lock:
            copy = self._resolve(title, "BORROW")
            if copy is None:
                return False
            if not copy.borrow(person, days):
                self._log(copy.key, "BORROW", "rejected", f"'{copy.title}' is held by {copy.holder}")
                return False
            self._log(copy.key, "BORROW", "applied",
                      f"{copy.holder} borrowed '{copy.title}', due {copy.due_date.isoformat()}")
            return True

    def return_copy(self, title: str) -> bool:
        with self._lock:
            copy = self._resolve(title, "RETURN")
            if copy is None:
                return False
            previous = copy.holder
            if not copy.return_copy():
                self._log(copy.key, "RETURN", "rejected", f"'{copy.title}' is not borrowed")
                return False
            if copy.holder:
                detail = f"{previous} returned '{copy.title}', handed to {copy.holder} until {copy.due_date.isoformat()}"
            else:
                detail = f"{previous} returned '{copy.title}', now available"
            self._log(copy.key, "RETURN", "applied", detail)
            return True

    def reserve(self, title: str, person: str) -> bool:
        person = _required(person, "Person name")
        with self._lock:
            copy = self._resolve(title, "RESERVE")
            if copy is None:
                return False
            if not copy.reserve(person):
                self._log(copy.key, "RESERVE", "rejected", f"{person} cannot reserve '{copy.title}'")
                return False
            self._log(copy.key, "RESERVE", "applied",
                      f"{person} queued for '{copy.title}' at position {copy.reservation_count}")
            return True

    def cancel_reservation(self, title: str, person: str) -> bool:
        person = _required(person, "Person name")
        with self._lock:
            copy = self._resolve(title, "CANCEL")
            if copy is None:
                return False
            if not copy.cancel_reservation(person):
                self._log(copy.key, "CANCEL", "rejected", f"{person} has no reservation for '{copy.title}'")
                return False
            self._log(copy.key, "CANCEL", "applied", f"{person} left the queue for '{copy.title}'")
            return True

    def rate(self, title: str, rating: float) -> bool:
        if (isinstance(rating, bool) or not isinstance(rating, (int, float))
                or not MIN_RATING <= rating <= MAX_RATING):
            raise InvalidArgumentError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        with self._lock:
            copy = self._resolve(title, "RATE")
            if copy is None:
                return False
            copy.rating = rating
            self._log(copy.key, "RATE", "applied", f"'{copy.title}' rated {rating}")
            return True

    # Fines

    def _assess(self, copy: Copy) -> Fine:
        fresh = self.policy.assess(copy)
        current = copy.current_fine
        if current is not None and current.same_spell(fresh.key, fresh.borrower_name, fresh.due_date):
            if current.waived:
                return current
            if current.amount_paid.is_positive():
                return current.reassessed(fresh.days_overdue, fresh.amount_due, self.clock)
        return fresh

    def assess_fine(self, title: str) -> bool:
        with self._lock:
            copy = self._resolve(title, "ASSESS")
            if copy is None:
                return False
            if not copy.is_overdue():
                self._log(copy.key, "ASSESS", "rejected", f"'{copy.title}' is not overdue")
                return False
            fine = self._assess(copy)
            copy.set_current_fine(fine)
            self._log(copy.key, "ASSESS", "applied", fine.describe())
            return True

    def assess_all_fines(self) -> int:
        """Assess every overdue copy; returns how many fines were stored"""
        with self._lock:
            count = 0
            for copy in self._copies.values():
                if copy.is_overdue():
                    copy.set_current_fine(self._assess(copy))
                    count += 1
            self._log(None, "ASSESS_ALL", "applied", f"{count} overdue copies assessed")
            return count

    def pay_fine(self, title: str, amount: MoneyLike) -> bool:
        payment = Money.coerce(amount)
        if not payment.is_positive():
            raise InvalidArgumentError("Payment amount must be positive")

        with self._lock:
            copy = self._resolve(title, "PAY")
            if copy is None:
                return False
            if not copy.has_fine():
                self._log(copy.key, "PAY", "rejected", f"No open fine for '{copy.title}'")
                return False
            try:
                updated = copy.current_fine.with_payment(payment, self.clock)
            except CirculationError as e:
                self._log(copy.key, "PAY", "error", f"{type(e).__name__}: {e}")
                raise
            copy.set_current_fine(updated)
            self._log(copy.key, "PAY", "applied", updated.describe())
            return True

    def waive_fine(self, title: str, reason: str) -> bool:
        reason = _required(reason, "Waiver reason")
        with self._lock:
            copy = self._resolve(title, "WAIVE")
            if copy is None:
                return False
            if not copy.has_fine():
                self._log(copy.key, "WAIVE", "rejected", f"No open fine for '{copy.title}'")
                return False
            try:
                updated = copy.current_fine.with_waiver(reason, self.clock)
            except CirculationError as e:
                self._log(copy.key, "WAIVE", "error", f"{type(e).__name__}: {e}")
                raise
            copy.set_current_fine(updated)
            self._log(copy.key, "WAIVE", "applied", updated.describe())
            return True

    # Queries

    def copies(self) -> List[Copy]:
        with self._lock:
            return list(self._copies.values())

    def _select(self, predicate) -> List[Copy]:
        with self._lock:
            return [copy for copy in self._copies.values() if predicate(copy)]

    def available(self) -> List[Copy]:
        return self._select(lambda c: c.available)

    def borrowed(self) -> List[Copy]:
        return self._select(lambda c: not c.available)

    def overdue(self) -> List[Copy]:
        return self._select(lambda c: c.is_overdue())

    def with_fines(self) -> List[Copy]:
        return self._select(lambda c: c.has_fine())

    def total_unpaid_fines(self) -> Money:
        with self._lock:
            total = ZERO
            for copy in self.with_fines():
                total = total + copy.current_fine.amount_remaining
            return total

    def find_by_author(self, author: str) -> List[Copy]:
        wanted = _required(author, "Author").casefold()
        return self._select(lambda c: c.author.casefold() == wanted)

    def find_by_category(self, category: Category) -> List[Copy]:
        if not isinstance(category, Category):
            raise InvalidArgumentError(f"Unknown category: {category!r}")
        return self._select(lambda c: c.category is category)

    def find_by_year_range(self, min_year: int, max_year: int) -> List[Copy]:
        if min_year > max_year:
            raise InvalidArgumentError("min_year cannot be greater than max_year")
        return self._select(lambda c: min_year <= c.year <= max_year)

    def find_by_minimum_rating(self, min_rating: float) -> List[Copy]:
        if not MIN_RATING <= min_rating <= MAX_RATING:
            raise InvalidArgumentError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        return self._select(lambda c: c.rating >= min_rating)

    def most_popular(self, count: int) -> List[Copy]:
        if count <= 0:
            raise InvalidArgumentError("Count must be positive")
        read = self._select(lambda c: c.read_count > 0)
        return sorted(read, key=lambda c: c.read_count, reverse=True)[:count]

    def reservations(self, title: str) -> Optional[List[str]]:
        copy = self.find_by_title(title)
        if copy is None:
            return None
        return list(copy.reservations)

    def stats(self) -> Dict[str, object]:
        with self._lock:
            return {
                "total": len(self._copies),
                "available": len(self.available()),
                "borrowed": len(self.borrowed()),
                "overdue": len(self.overdue()),
                "with_fines": len(self.with_fines()),
                "unpaid_fines": str(self.total_unpaid_fines()),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._copies)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._copies
