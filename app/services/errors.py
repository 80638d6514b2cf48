"""Domain errors raised by the service layer."""


class CanteenError(Exception):
    """Base class for expected, user-reportable failures."""


class ValidationError(CanteenError):
    """Bad user input; reported inline and never retried."""

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or code)


class AllocationError(CanteenError):
    """Token allocator could not issue a token."""


class PersistenceError(CanteenError):
    """Store read/write failed."""


class OrderNotFoundError(PersistenceError):
    """Order row does not exist or is not visible to the caller."""


class MenuItemNotFoundError(PersistenceError):
    """Menu item row does not exist."""


class InvalidTransitionError(CanteenError):
    """Requested status is not the fixed successor of the current one."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from {current} to {target}")


class OrderBusyError(CanteenError):
    """Another status update for the same order is still in flight."""


class EstimationError(CanteenError):
    """Wait-time estimator failed; callers proceed without an estimate."""
