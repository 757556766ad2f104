from decimal import Decimal

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConflictError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class SerialAllocationError(ServiceError):
    """A receipt serial could not be persisted even after retrying."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


def _signed(value: Decimal) -> str:
    """Two decimals with an explicit + for positive values."""
    return f"{'+' if value > 0 else ''}{value:.2f}"


class InvalidDistributionError(ServiceError):
    """Entered category amounts do not add up to the transaction amount."""

    def __init__(self, expected: Decimal, entered: Decimal, difference: Decimal) -> None:
        super().__init__(
            f"Amounts must sum to {expected:.2f}. Difference: {_signed(difference)}",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
        self.expected = expected
        self.entered = entered
        self.difference = difference

    def detail(self) -> dict:
        return {
            "message": self.message,
            "expected": f"{self.expected:.2f}",
            "entered": f"{self.entered:.2f}",
            "difference": _signed(self.difference),
        }
