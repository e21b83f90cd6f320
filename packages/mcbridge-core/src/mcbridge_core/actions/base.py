"""
Base class for action units.

Discovery instantiates every non-abstract subclass of BaseAction found in a
discovery location, so subclassing is the explicit marker that opts a class
into automatic registration. Units that need constructor arguments should
instead be exported as ready-made instances.

Example:
    ```python
    class ChatAction(BaseAction):
        name = "chat"
        description = "Send a chat message"

        def get_params_schema(self) -> dict[str, str]:
            return {"message": "Text to send"}

        def validate_params(self, params: dict[str, Any]) -> bool:
            return self.validate_string_params(params, ["message"])

        async def execute(self, session, params) -> ActionResult:
            session.chat(params["message"])
            return self.create_success_result("sent")
    ```
"""

import math
from abc import ABC, abstractmethod
from typing import Any

from mcbridge_core.actions.types import ActionResult, ToolSpec


class BaseAction(ABC):
    """
    Common base for action units with result and validation helpers.

    Attributes:
        name: Unique action name (class attribute on subclasses)
        description: Human-readable description (class attribute on subclasses)
    """

    name: str
    description: str

    @abstractmethod
    async def execute(self, session: Any, params: dict[str, Any]) -> ActionResult:
        """Run the action against the session."""

    @abstractmethod
    def validate_params(self, params: dict[str, Any]) -> bool:
        """Return True if params are acceptable."""

    @abstractmethod
    def get_params_schema(self) -> dict[str, str]:
        """Return parameter name -> description."""

    def get_mcp_tools(self) -> list[ToolSpec]:
        """
        Tool specs exposing this action to tool-protocol clients.

        Returns:
            Empty list by default; override to publish tools
        """
        return []

    def create_success_result(self, message: str, data: Any = None) -> ActionResult:
        return ActionResult.ok(message, data)

    def create_error_result(self, message: str, error: str) -> ActionResult:
        return ActionResult.fail(message, error)

    def create_exception_result(
        self,
        error: BaseException,
        default_message: str,
        error_code: str,
    ) -> ActionResult:
        """Build a failure result from a caught exception."""
        return self.create_error_result(f"{default_message}: {error}", error_code)

    # Note: Python's bool is subclass of int, so we exclude bool from number checks

    def validate_required_params(self, params: dict[str, Any], keys: list[str]) -> bool:
        """True if every key is present and not None or empty string."""
        return all(params.get(key) not in (None, "") for key in keys)

    def validate_number_params(self, params: dict[str, Any], keys: list[str]) -> bool:
        """True if every key holds a real, non-NaN number."""
        for key in keys:
            value = params.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return False
            if isinstance(value, float) and math.isnan(value):
                return False
        return True

    def validate_string_params(self, params: dict[str, Any], keys: list[str]) -> bool:
        """True if every key holds a non-empty string."""
        return all(
            isinstance(params.get(key), str) and len(params[key]) > 0 for key in keys
        )
