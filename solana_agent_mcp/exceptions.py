"""Error taxonomy shared by the validator, the adapters and the dispatcher."""

import math
from typing import Any, Optional


class AgentKitError(Exception):
    """Base class for every error raised by this package."""


class ParseError(AgentKitError):
    """The raw tool input could not be decoded into a JSON object."""


class ValidationError(AgentKitError):
    """A decoded input violates its schema."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class MissingFieldError(ValidationError):
    def __init__(self, field: str):
        super().__init__(field, f"Missing required field: {field}")


class WrongTypeError(ValidationError):
    def __init__(self, field: str, expected: str, value: Any):
        super().__init__(
            field,
            f"Invalid type for field '{field}': expected {expected}, got {type(value).__name__}",
        )
        self.expected = expected


class OutOfRangeError(ValidationError):
    def __init__(self, field: str, value: Any, minimum: Optional[float] = None, maximum: Optional[float] = None):
        if isinstance(value, float) and not math.isfinite(value):
            message = f"Field '{field}' must be a finite number, got {value}"
        elif minimum is not None and value < minimum:
            message = f"Field '{field}' must be >= {minimum}, got {value}"
        else:
            message = f"Field '{field}' must be <= {maximum}, got {value}"
        super().__init__(field, message)
        self.minimum = minimum
        self.maximum = maximum


class UpstreamError(AgentKitError):
    """An RPC or HTTP call to an external service failed."""


class AgentContextError(AgentKitError):
    """The agent context is missing something an operation needs."""


class RegistryError(AgentKitError):
    """The action registry was configured inconsistently at startup."""


class UnknownActionError(AgentKitError):
    def __init__(self, name: str):
        super().__init__(f"Unknown action: {name}")
        self.name = name
