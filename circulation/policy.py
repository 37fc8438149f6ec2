"""
Fine policy: linear per-day rate with a maximum cap.
"""

from typing import TYPE_CHECKING

from common import env
from .errors import InvalidArgumentError, InvalidPolicyError, NotOverdueError
from .fine import Fine
from .money import Money, MoneyLike, ZERO

if TYPE_CHECKING:
    from .copy import Copy

DEFAULT_RATE_PER_DAY = Money("0.50")
DEFAULT_MAX_FINE = Money("25.00")


class FinePolicy:
    """Pure function from days overdue to a capped fine amount"""

    __slots__ = ("_rate_per_day", "_max_fine")

    def __init__(self, rate_per_day: MoneyLike = DEFAULT_RATE_PER_DAY,
                 max_fine: MoneyLike = DEFAULT_MAX_FINE):
        try:
            rate = Money.coerce(rate_per_day)
            cap = Money.coerce(max_fine)
        except InvalidArgumentError as e:
            raise InvalidPolicyError(f"Invalid fine policy: {e}") from e

        if not rate.is_positive():
            raise InvalidPolicyError("Rate per day must be positive")
        if not cap.is_positive():
            raise InvalidPolicyError("Max fine must be positive")
        if rate > cap:
            raise InvalidPolicyError("Rate per day cannot exceed max fine")

        self._rate_per_day = rate
        self._max_fine = cap

    @classmethod
    def from_env(cls) -> "FinePolicy":
        """Build the policy from FINE_RATE_PER_DAY and FINE_MAX"""
        return cls(env.FINE_RATE_PER_DAY, env.FINE_MAX)

    @property
    def rate_per_day(self) -> Money:
        return self._rate_per_day

    @property
    def max_fine(self) -> Money:
        return self._max_fine

    def amount_for(self, days_overdue: int) -> Money:
        """Fine for the given number of overdue days, capped at max_fine"""
        if days_overdue <= 0:
            return ZERO
        if days_overdue >= self.days_until_cap():
            return self._max_fine
        return (self._rate_per_day * days_overdue).min(self._max_fine)

    def days_until_cap(self) -> int:
        """Smallest number of days whose fine reaches the cap"""
        return -(-self._max_fine.cents // self._rate_per_day.cents)

    def is_at_cap(self, amount: Money) -> bool:
        return amount is not None and amount >= self._max_fine

    def assess(self, copy: "Copy") -> Fine:
        """
        Build a fresh Fine snapshot for an overdue copy.

        Raises:
            NotOverdueError: the copy is not held past its due date
        """
        if not copy.is_overdue():
            raise NotOverdueError(f"'{copy.title}' is not overdue")

        days = copy.days_overdue()
        return Fine.create(
            key=copy.key,
            title=copy.title,
            borrower_name=copy.holder,
            due_date=copy.due_date,
            days_overdue=days,
            amount_due=self.amount_for(days),
            created_at=copy.clock.now(),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FinePolicy):
            return NotImplemented
        return (self._rate_per_day, self._max_fine) == (other._rate_per_day, other._max_fine)

    def __hash__(self) -> int:
        return hash((self._rate_per_day, self._max_fine))

    def __repr__(self) -> str:
        return (f"FinePolicy({self._rate_per_day.format()}/day, max {self._max_fine.format()}, "
                f"cap at {self.days_until_cap()} days)")
