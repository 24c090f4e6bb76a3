"""Error taxonomy shared by services, adapters and the HTTP layer."""


class MealLoggerError(Exception):
    """Base class for expected application failures."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None, details: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class ValidationError(MealLoggerError):
    """Caller input is missing or malformed."""

    status_code = 400

    @classmethod
    def for_field(cls, field: str) -> "ValidationError":
        """Build the error for a missing or invalid field."""
        return cls(f"Missing or invalid '{field}' field")


class InvalidTimezone(MealLoggerError):
    """The timezone identifier is not a known IANA zone."""

    status_code = 400
    message = "Invalid timezone"

    def __init__(self, timezone_name: str):
        super().__init__(details=f"Unknown timezone: {timezone_name}")
        self.timezone_name = timezone_name


class NotFound(MealLoggerError):
    """A referenced meal log does not exist."""

    status_code = 404
    message = "Meal not found"


class AIParseError(MealLoggerError):
    """The model output could not be parsed after the retry."""

    status_code = 502
    message = "Failed to parse meal with AI"


class AITransportError(MealLoggerError):
    """The completion call itself failed."""

    status_code = 502
    message = "Failed to parse meal with AI"


class StoreError(MealLoggerError):
    """A record store operation failed."""

    status_code = 500
    message = "Record store operation failed"


class ConfigurationError(MealLoggerError):
    """Required external credentials are absent."""

    status_code = 500
