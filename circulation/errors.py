"""
Error taxonomy for the circulation core.

Two tiers:
- validation errors: the caller passed malformed input (blank names,
  non-positive counts or amounts, out-of-range values).
- rule violations: the input is well formed but applying it would break a
  Fine or policy invariant (overpayment, paying a waived fine, ...).

Operations that simply do not apply (title not found, copy already in the
requested state) return False instead of raising.
"""


class CirculationError(Exception):
    """Base exception for circulation errors."""


# Validation tier

class InvalidArgumentError(CirculationError, ValueError):
    """Malformed input rejected at the call that received it."""


class NegativeResultError(InvalidArgumentError):
    """Money arithmetic would produce a negative amount."""


class InvalidPolicyError(InvalidArgumentError):
    """Fine policy parameters are not positive or the rate exceeds the cap."""


# Rule tier

class NotOverdueError(CirculationError):
    """A fine was requested for a copy that is not overdue."""


class FineStateError(CirculationError):
    """Base class for fine transitions that would violate an invariant."""


class PaymentExceedsDueError(FineStateError):
    """Cumulative payment would exceed the amount due."""


class FineSettledError(FineStateError):
    """The fine is already settled and accepts no further transitions."""


class FineAlreadyPaidError(FineSettledError):
    """The fine is fully paid."""


class FineAlreadyWaivedError(FineSettledError):
    """The fine was waived."""
