"""
Session and state provider protocols.

The bridge never owns the bot connection. The host hands it a session
provider (is the bot ready, and which handle to pass to actions) and a
state provider (snapshots and recent events from the observation
subsystem).
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SessionProviderProtocol(Protocol):
    """
    Protocol for access to the single shared session.

    get_session() returns None while the bot is disconnected or still
    spawning; callers must treat that as "service unavailable".
    """

    def get_session(self) -> Any | None:
        """Return the live session handle, or None if not ready."""
        ...

    def is_ready(self) -> bool:
        """Return True if the session can accept actions."""
        ...


@runtime_checkable
class StateProviderProtocol(Protocol):
    """
    Protocol for the event/state observation subsystem.

    Example event shape:
        {"type": "chat", "timestamp": 1760000000000, "data": {...}}
    """

    def get_game_state(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot of the bot's state."""
        ...

    def list_events(
        self,
        event_type: str | None = None,
        since_ms: int | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """
        Return recent events, newest last.

        Args:
            event_type: Only return events of this type
            since_ms: Only return events with timestamp >= since_ms
            limit: Maximum number of events to return
        """
        ...
