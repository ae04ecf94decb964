"""
State store exceptions.
"""

from headless_recorder.exceptions.base import HeadlessRecorderError


class StateStoreError(HeadlessRecorderError):
    """
    Error reading from or writing to the state store.

    Raised when the backing file cannot be read, written or replaced.
    """
    pass


class StateStoreCorruptedError(StateStoreError):
    """
    The persisted state could not be decoded.

    Raised when the state file exists but does not hold a JSON object.
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message, {"path": path})
        self.path = path
