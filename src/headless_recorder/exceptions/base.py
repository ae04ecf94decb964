"""
Base exceptions for Headless Recorder.
"""


class HeadlessRecorderError(Exception):
    """
    Base exception for all Headless Recorder errors.

    All custom exceptions inherit from this class, making it easy
    to catch any error raised by the recorder's collaborators.

    Attributes:
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(HeadlessRecorderError):
    """
    Error in configuration.

    Raised when a config file cannot be parsed or holds invalid values.
    """
    pass


class CodeGenerationError(HeadlessRecorderError):
    """Raised when recorded events cannot be turned into code."""

    def __init__(self, message: str, action: str | None = None):
        super().__init__(message, {"action": action} if action else None)
        self.action = action
