"""
Exception hierarchy for Forward Countdown.

Store backends wrap their own failures (OSError, bad JSON) in FetchError
or CommitError so callers only need to know about these classes.
"""


class ForwardError(Exception):
    """Base class for all application-level errors."""


class PersistenceError(ForwardError):
    """The event store could not complete an operation."""


class FetchError(PersistenceError):
    """Reading events from the store failed."""


class CommitError(PersistenceError):
    """Saving staged changes failed; nothing was written."""


class ValidationError(ForwardError):
    """User input was rejected before touching the store."""

    def __init__(self, message: str, problems: list[str] = None):
        super().__init__(message)
        self.problems = problems or []
