"""Error types for the carbon tracker."""


class CarbonTrackerError(Exception):
    """Base class for carbon tracker errors."""


class ValidationError(CarbonTrackerError):
    """Raised when an entry payload or setting is malformed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.field, self.message) == (other.field, other.message)

    def __hash__(self) -> int:
        return hash((self.field, self.message))


class StoreError(CarbonTrackerError):
    """Raised when a persistence adapter fails."""


class ConfigurationError(CarbonTrackerError):
    """Describes a target that cannot be used as a denominator.

    The accounting engine returns this as a flag instead of raising it.
    """

    def __init__(self, setting: str, value: float) -> None:
        super().__init__(f"{setting} must be positive, got {value}")
        self.setting = setting
        self.value = value


class UnknownUserError(ValidationError):
    """Raised when a user id does not reference an existing ledger."""

    def __init__(self, user_id: str) -> None:
        super().__init__("userId", "must reference an existing ledger")
        self.user_id = user_id
