"""
Action unit protocol definition.

An action unit is a named operation that can be executed against the
shared bot session. The core never inherits from or inspects concrete
units; any object providing the members below is accepted.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GameActionProtocol(Protocol):
    """
    Protocol for pluggable action units.

    Attributes:
        name: Unique action name used as the registry key (e.g., "mineBlock")
        description: Human-readable description for tool listings

    Units may additionally provide ``get_mcp_tools()`` returning tool specs
    that expose the unit over the tool protocol. It is optional and
    therefore not part of the protocol's required members.

    Example:
        ```python
        class EchoAction:
            name = "echo"
            description = "Echo the given text back"

            def get_params_schema(self) -> dict[str, str]:
                return {"text": "Text to echo"}

            def validate_params(self, params: dict[str, Any]) -> bool:
                return isinstance(params.get("text"), str)

            async def execute(self, session, params):
                return ActionResult.ok(params["text"])
        ```
    """

    name: str
    description: str

    def get_params_schema(self) -> dict[str, str]:
        """
        Describe accepted parameters.

        Returns:
            Mapping of parameter name to a human-readable description
        """
        ...

    def validate_params(self, params: dict[str, Any]) -> bool:
        """
        Check whether params are acceptable for execute().

        Args:
            params: Parameters supplied by the caller

        Returns:
            True if params are valid, False otherwise
        """
        ...

    async def execute(self, session: Any, params: dict[str, Any]) -> Any:
        """
        Run the action against the session.

        Args:
            session: Opaque handle to the live bot session
            params: Validated parameters

        Returns:
            An ActionResult describing success or failure
        """
        ...
