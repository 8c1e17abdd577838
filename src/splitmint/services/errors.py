from __future__ import annotations

from decimal import Decimal


class InvalidArgumentError(ValueError):
    pass


class SplitValidationError(ValueError):
    def __init__(self, message: str, expected: Decimal, actual: Decimal) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class SplitMismatchError(SplitValidationError):
    pass


class PercentMismatchError(SplitValidationError):
    pass


class BalanceConservationWarning(UserWarning):
    pass
