"""
Factory for wiring the registry, discovery, scheduler and bridge.

The CLI has no bot session of its own. A host process embedding the bridge
supplies real session and state providers; the CLI uses detached ones, so
action tools report service_unavailable until a host connects a session.
"""

import logging
from pathlib import Path
from typing import Any, Sequence

from mcbridge_core.actions.audit import InvocationAuditor
from mcbridge_core.actions.discovery import ActionDiscovery
from mcbridge_core.actions.registry import ActionRegistry
from mcbridge_core.actions.scheduler import ActionScheduler
from mcbridge_core.config import Settings
from mcbridge_core.mcp.bridge import ToolBridge
from mcbridge_protocols import SessionProviderProtocol, StateProviderProtocol

logger = logging.getLogger(__name__)


class DetachedSessionProvider:
    """Session provider for a process with no connected bot."""

    def get_session(self) -> Any | None:
        return None

    def is_ready(self) -> bool:
        return False


class EmptyStateProvider:
    """State provider with no game state and no recorded events."""

    def get_game_state(self) -> dict[str, Any]:
        return {}

    def list_events(
        self,
        event_type: str | None = None,
        since_ms: int | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        return []


def discover_actions(
    locations: Sequence[str | Path],
) -> tuple[ActionRegistry, ActionDiscovery]:
    """
    Build a registry populated from the given discovery locations.

    Args:
        locations: Ordered package names or plugin directories

    Returns:
        Tuple of (registry, discovery) after discovery has run
    """
    registry = ActionRegistry()
    discovery = ActionDiscovery(registry, locations)
    discovery.discover()
    logger.info(
        f"Registered {len(registry)} action(s), "
        f"{len(discovery.discovered_tools)} tool spec(s)"
    )
    return registry, discovery


def create_bridge(
    settings: Settings,
    locations: Sequence[str | Path] | None = None,
    sessions: SessionProviderProtocol | None = None,
    state: StateProviderProtocol | None = None,
) -> tuple[ToolBridge, ActionScheduler]:
    """
    Create a fully wired tool bridge.

    Args:
        settings: Server configuration
        locations: Discovery locations (default: settings.discovery_locations)
        sessions: Session provider (default: DetachedSessionProvider)
        state: State provider (default: EmptyStateProvider)

    Returns:
        Tuple of (bridge, scheduler); the caller owns scheduler shutdown
    """
    registry, discovery = discover_actions(locations or settings.discovery_locations)
    scheduler = ActionScheduler(registry, default_timeout_ms=settings.default_timeout_ms)

    auditor = None
    if settings.audit_db_path is not None:
        auditor = InvocationAuditor(settings.audit_db_path)

    bridge = ToolBridge(
        scheduler=scheduler,
        sessions=sessions or DetachedSessionProvider(),
        state=state or EmptyStateProvider(),
        tools=discovery.discovered_tools,
        settings=settings.bridge_settings(),
        auditor=auditor,
    )
    return bridge, scheduler
