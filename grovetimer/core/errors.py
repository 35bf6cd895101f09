"""Exceptions raised by GroveTimer components."""


class InvalidDuration(ValueError):
    """A timer run was requested with a non-positive duration."""

    def __init__(self, duration: int) -> None:
        super().__init__(f"Duration must be greater than 0 (got {duration!r})")
        self.duration = duration


class PersistenceError(RuntimeError):
    """The state store could not be read or written."""


class SessionStateError(RuntimeError):
    """A ledger operation violated the single-draft session contract."""
