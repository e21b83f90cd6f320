"""
Action types for the action execution core.

This module defines the core data structures for action management:
- ActionErrorCode: Enum of internal failure codes carried on results
- TaskStatus: Enum for queued task lifecycle states
- ActionResult: Outcome of a single action execution
- ToolContext: Context handed to tool input mappers
- ToolSpec: Externally callable wrapper around an action

Per project patterns:
- Use str enum for JSON serialization compatibility
- Pydantic BaseModel for validation and serialization
- Field() with descriptions for documentation
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from mcbridge_protocols import StateProviderProtocol


class ActionErrorCode(str, Enum):
    """
    Failure codes produced by the core or by action units.

    Units may return other strings in ActionResult.error; these are the
    codes the core itself synthesizes.
    """

    ACTION_NOT_FOUND = "ACTION_NOT_FOUND"
    """Requested name has no registered action."""

    INVALID_PARAMS = "INVALID_PARAMS"
    """validate_params() returned False."""

    TIMEOUT = "TIMEOUT"
    """Execution did not finish before the task timeout."""

    EXECUTION_ERROR = "EXECUTION_ERROR"
    """The action raised during execution."""

    CANCELLED = "CANCELLED"
    """The scheduler was cancelled before the task started."""


class TaskStatus(str, Enum):
    """
    Lifecycle states for queued tasks.

    Tasks flow through these states:
        queued -> running -> resolved/rejected
    """

    QUEUED = "queued"
    """Waiting in the priority queue."""

    RUNNING = "running"
    """Currently executing against the session."""

    RESOLVED = "resolved"
    """Completed with an ActionResult."""

    REJECTED = "rejected"
    """Discarded by cancellation before it started."""


class ActionResult(BaseModel):
    """
    Outcome of an action execution.

    Results are always returned as values; the scheduler converts faults
    and timeouts into failure results instead of raising.

    Attributes:
        success: Whether the action succeeded
        message: Human-readable outcome description
        data: Optional payload (action output, or diagnostics on failure)
        error: Error code on failure (see ActionErrorCode)
    """

    success: bool = Field(..., description="Whether the action succeeded")
    message: str = Field(default="", description="Human-readable outcome")
    data: Any = Field(default=None, description="Optional result payload")
    error: str | None = Field(default=None, description="Error code on failure")

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ActionResult":
        """Build a success result."""
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(
        cls,
        message: str,
        error: ActionErrorCode | str,
        data: Any = None,
    ) -> "ActionResult":
        """Build a failure result."""
        code = error.value if isinstance(error, ActionErrorCode) else error
        return cls(success=False, message=message, error=code, data=data)


@dataclass(frozen=True)
class ToolContext:
    """
    Context passed to tool input mappers.

    Attributes:
        state: State provider for mappers that need defaults from game state
               (e.g., the nearest player when none is named)
    """

    state: "StateProviderProtocol | None" = None


InputMapper = Callable[[dict[str, Any], ToolContext], dict[str, Any]]


@dataclass(frozen=True)
class ToolSpec:
    """
    Externally callable wrapper around an action.

    Several tool specs may target the same action. Specs produced by an
    action's get_mcp_tools() without an action_name are bound to that
    action's name during discovery.

    Attributes:
        tool_name: Name exposed to tool-protocol clients (e.g., "mine_block")
        description: Human-readable description for clients
        input_model: Optional pydantic model describing structured input
        action_name: Target action name (None to resolve at call time)
        map_input_to_params: Optional mapper from tool input to action params

    Example:
        ```python
        ToolSpec(
            tool_name="mine_block",
            description="Mine blocks by name nearby.",
            input_model=MineBlockInput,
            action_name="mineBlock",
            map_input_to_params=lambda data, ctx: {
                "name": data.get("blockName") or data.get("name"),
                "count": data.get("count", 1),
            },
        )
        ```
    """

    tool_name: str
    description: str
    input_model: type[BaseModel] | None = None
    action_name: str | None = None
    map_input_to_params: InputMapper | None = None
