"""
Tool exposure and caller authorization for the tool bridge.

This module implements two independent gates:
1. Exposure: Which tools are published at all (allow/deny lists)
2. Authorization: Whether a given call may proceed (token check)

Per project patterns:
- Raise specific exceptions for authorization failures
- Support pluggable checker implementations
- Default checkers allow all (permissive by default, restrict via config)
"""

import hmac
from dataclasses import dataclass
from typing import Any, Protocol


class AuthorizationError(Exception):
    """
    Raised when a tool call fails authorization checks.

    Attributes:
        tool_name: The tool that was called
    """

    def __init__(self, tool_name: str, reason: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Call to tool '{tool_name}' denied: {reason}")


@dataclass(frozen=True)
class ToolAccessPolicy:
    """
    Allow/deny policy for tool exposure.

    The deny list always wins. When no allow list is configured, every
    tool not denied is allowed.

    Attributes:
        enabled: Allow list (None = allow all)
        disabled: Deny list

    Example:
        policy = ToolAccessPolicy(enabled=None, disabled=frozenset({"craft_item"}))
        policy.allows("mine_block")  # True
        policy.allows("craft_item")  # False
    """

    enabled: frozenset[str] | None = None
    disabled: frozenset[str] = frozenset()

    @classmethod
    def from_lists(
        cls,
        enabled: list[str] | None = None,
        disabled: list[str] | None = None,
    ) -> "ToolAccessPolicy":
        return cls(
            enabled=frozenset(enabled) if enabled is not None else None,
            disabled=frozenset(disabled or ()),
        )

    def allows(self, tool_name: str) -> bool:
        if tool_name in self.disabled:
            return False
        return self.enabled is None or tool_name in self.enabled


class TokenChecker(Protocol):
    """
    Protocol for verifying a caller's credentials.

    Implementations receive the raw tool input so they can read whichever
    credential field their deployment uses.
    """

    def is_authorized(self, tool_name: str, tool_input: dict[str, Any]) -> bool:
        """
        Check whether this call may proceed.

        Args:
            tool_name: Name of the tool being called
            tool_input: Raw input of the call

        Returns:
            True if the call is authorized, False otherwise
        """
        ...


class DefaultTokenChecker:
    """
    Default checker that allows every call.

    Used whenever authentication is disabled.
    """

    def is_authorized(self, tool_name: str, tool_input: dict[str, Any]) -> bool:
        """Allow all calls by default."""
        return True


class StaticTokenChecker:
    """
    Checker comparing an ``auth_token`` input field against a shared secret.

    Attributes:
        token: The expected token
        field: Input field carrying the token
    """

    def __init__(self, token: str, field: str = "auth_token") -> None:
        self.token = token
        self.field = field

    def is_authorized(self, tool_name: str, tool_input: dict[str, Any]) -> bool:
        supplied = tool_input.get(self.field)
        if not isinstance(supplied, str):
            return False
        return hmac.compare_digest(supplied.encode(), self.token.encode())


def check_tool_authorization(
    tool_name: str,
    tool_input: dict[str, Any],
    checker: TokenChecker | None = None,
) -> None:
    """
    Verify a tool call is authorized.

    Args:
        tool_name: Name of the tool being called
        tool_input: Raw input of the call
        checker: Optional custom checker (default allows all)

    Raises:
        AuthorizationError: If the checker rejects the call
    """
    if checker is None:
        checker = DefaultTokenChecker()

    if not checker.is_authorized(tool_name, tool_input):
        raise AuthorizationError(tool_name, "invalid or missing credentials")
