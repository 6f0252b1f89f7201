"""Error types raised by the study-session core."""

from typing import Any


class StudyError(Exception):
    """Base class for study-session errors."""


class InvalidArgumentError(StudyError, ValueError):
    """A caller passed an argument the operation cannot work with."""


class InsufficientDataError(StudyError, ValueError):
    """The deck is too small for the requested operation."""


class PersistenceError(StudyError):
    """Saving answers to the backing store failed."""

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.detail = detail
