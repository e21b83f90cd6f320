"""
MCBridge Core Library

Action execution core for a game-bot tool server. This package provides:

- Action Registry and Discovery: name-indexed action units loaded from
  packages or plugin directories
- Priority Scheduler: serialized, prioritized execution against the shared
  bot session with timeouts and cancellation
- Tool Bridge: maps tool-protocol calls onto actions and encodes a uniform
  response envelope
- CLI infrastructure: Typer-based command structure
"""

__version__ = "0.1.0"

from mcbridge_core.actions import (
    ActionDiscovery,
    ActionErrorCode,
    ActionRegistry,
    ActionResult,
    ActionScheduler,
    BaseAction,
    ToolSpec,
)
from mcbridge_core.mcp import BridgeSettings, ToolBridge, ToolEnvelope, ToolErrorCode

__all__ = [
    "__version__",
    # Actions
    "ActionDiscovery",
    "ActionErrorCode",
    "ActionRegistry",
    "ActionResult",
    "ActionScheduler",
    "BaseAction",
    "ToolSpec",
    # Tool bridge
    "BridgeSettings",
    "ToolBridge",
    "ToolEnvelope",
    "ToolErrorCode",
]
