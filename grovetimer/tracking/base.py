"""Abstract base class for coding activity feeds."""

from abc import ABC, abstractmethod

from grovetimer.core.models import SessionCodingStats


class CodingActivityFeed(ABC):
    """Common interface for collecting code-editing telemetry.

    A tracking window is opened with :meth:`start_tracking` and closed with
    :meth:`stop_tracking`, which returns the aggregate for the window.
    Editor integrations provide concrete implementations.
    """

    @abstractmethod
    def start_tracking(self) -> None:
        """Open a tracking window.  No-op if one is already open."""
        pass

    @abstractmethod
    def stop_tracking(self) -> SessionCodingStats:
        """Close the tracking window and return its aggregate."""
        pass

    @abstractmethod
    def get_current_stats(self) -> SessionCodingStats:
        """Return a live aggregate of the open window."""
        pass

    @property
    @abstractmethod
    def is_tracking(self) -> bool:
        """Whether a tracking window is open."""
        pass
