"""
Action registry for runtime action lookup.

This module provides:
- ActionInfo: Description of a registered action for listings
- ActionRegistry: Name to action-unit mapping

The registry is the single owner of action units. Units are stored as
given; their internal consistency is not checked at registration time, so
a malformed unit only surfaces errors when it is invoked.

Example:
    ```python
    registry = ActionRegistry()
    registry.register(ChatAction())

    action = registry.get("chat")
    names = registry.list_action_names()  # ["chat"]
    ```
"""

import logging
from typing import Iterator

from pydantic import BaseModel, Field

from mcbridge_protocols import GameActionProtocol

logger = logging.getLogger(__name__)


class ActionInfo(BaseModel):
    """
    Listing entry for a registered action.

    Attributes:
        description: Human-readable description
        params: Parameter name -> description, from get_params_schema()
    """

    description: str = Field(..., description="Human-readable description")
    params: dict[str, str] = Field(
        default_factory=dict, description="Parameter descriptions keyed by name"
    )


class ActionRegistry:
    """
    Registry mapping action names to action units.

    register() overwrites any previous unit with the same name (last
    explicit registration wins). Discovery uses register_if_absent() so
    that it never replaces a name that is already present.
    """

    def __init__(self) -> None:
        self._actions: dict[str, GameActionProtocol] = {}

    def register(self, action: GameActionProtocol) -> None:
        """
        Register an action under its name, replacing any previous entry.

        Args:
            action: The action unit to register
        """
        if action.name in self._actions:
            logger.info(f"Replacing registered action '{action.name}'")
        self._actions[action.name] = action
        logger.info(f"Registered action: {action.name} - {action.description}")

    def register_if_absent(self, action: GameActionProtocol) -> bool:
        """
        Register an action only if its name is not taken.

        Args:
            action: The action unit to register

        Returns:
            True if registered, False if the name was already present
        """
        if action.name in self._actions:
            return False
        self.register(action)
        return True

    def get(self, name: str) -> GameActionProtocol | None:
        """
        Find an action by name.

        Args:
            name: The action name

        Returns:
            The action unit if registered, None otherwise
        """
        return self._actions.get(name)

    def list_action_names(self) -> list[str]:
        """Get registered action names in registration order."""
        return list(self._actions.keys())

    def describe(self, name: str) -> ActionInfo | None:
        """
        Describe a registered action.

        Args:
            name: The action name

        Returns:
            ActionInfo if registered, None otherwise
        """
        action = self._actions.get(name)
        if action is None:
            return None
        return ActionInfo(
            description=action.description,
            params=action.get_params_schema(),
        )

    def describe_all(self) -> dict[str, ActionInfo]:
        """Describe every registered action, keyed by name."""
        return {name: self.describe(name) for name in self._actions}

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[GameActionProtocol]:
        return iter(list(self._actions.values()))
