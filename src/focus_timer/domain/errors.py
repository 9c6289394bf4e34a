"""Errors raised by timer services and adapters."""


class TimerError(Exception):
    """Base class for timer errors."""


class ValidationError(TimerError):
    """Input was rejected before any mutation."""


class NotFoundError(TimerError):
    """No matching session exists for the owner."""


class StateConflictError(TimerError):
    """The session is not in the state the operation requires."""


class PersistenceError(TimerError):
    """The session store failed or returned no data."""
