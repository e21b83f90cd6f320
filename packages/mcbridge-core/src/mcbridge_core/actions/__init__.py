"""
Actions module for the action execution core.

This module provides the building blocks for running actions against the
shared bot session:
- ActionResult: Outcome of an action execution
- ActionErrorCode: Failure codes synthesized by the core
- ToolSpec: Externally callable wrapper around an action
- BaseAction: Base class marking a class for automatic discovery
- ActionRegistry: Name to action-unit mapping
- ActionDiscovery: Loads action units and tool specs from locations
- ActionScheduler: Single-consumer priority scheduler with timeouts
- ActionCancelledError: Raised on handles of tasks discarded by cancellation
- ToolAccessPolicy: Allow/deny list for tool exposure
- AuthorizationError: Exception for rejected tool calls
- SecretRedactor: Redacts credentials from logged parameters
- InvocationAuditor: SQLite audit trail of tool invocations
"""

from mcbridge_core.actions.audit import InvocationAuditor, InvocationRecord
from mcbridge_core.actions.authorization import (
    AuthorizationError,
    DefaultTokenChecker,
    StaticTokenChecker,
    ToolAccessPolicy,
    check_tool_authorization,
)
from mcbridge_core.actions.base import BaseAction
from mcbridge_core.actions.discovery import ActionDiscovery
from mcbridge_core.actions.registry import ActionInfo, ActionRegistry
from mcbridge_core.actions.scheduler import (
    ActionCancelledError,
    ActionScheduler,
    QueueStatus,
)
from mcbridge_core.actions.secrets import SecretRedactor
from mcbridge_core.actions.types import (
    ActionErrorCode,
    ActionResult,
    TaskStatus,
    ToolContext,
    ToolSpec,
)

__all__ = [
    "ActionCancelledError",
    "ActionDiscovery",
    "ActionErrorCode",
    "ActionInfo",
    "ActionRegistry",
    "ActionResult",
    "ActionScheduler",
    "AuthorizationError",
    "BaseAction",
    "DefaultTokenChecker",
    "InvocationAuditor",
    "InvocationRecord",
    "QueueStatus",
    "SecretRedactor",
    "StaticTokenChecker",
    "TaskStatus",
    "ToolAccessPolicy",
    "ToolContext",
    "ToolSpec",
    "check_tool_authorization",
]
