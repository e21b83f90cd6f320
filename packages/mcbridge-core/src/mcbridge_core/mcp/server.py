"""
FastMCP server exposing the tool bridge.

Each BridgeTool becomes one MCP tool. Tools with an input model publish the
model's fields as their parameters; tools without one accept a free-form
``arguments`` object. Every handler returns the bridge's envelope payload.
"""

import inspect
import logging
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field

from mcbridge_core.mcp.bridge import BridgeTool, ToolBridge

logger = logging.getLogger(__name__)


def create_mcp_server(bridge: ToolBridge) -> FastMCP:
    """
    Create a FastMCP server with every tool published by the bridge.

    Args:
        bridge: The tool bridge handling calls

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(bridge.settings.server_name)

    for tool in bridge.list_tools():
        handler = _build_handler(bridge, tool)
        mcp.tool(name=tool.name, description=tool.description)(handler)
        logger.debug(f"Registered MCP tool: {tool.name}")

    logger.info(f"MCP server '{bridge.settings.server_name}' has {len(bridge.list_tools())} tools")
    return mcp


def _build_handler(bridge: ToolBridge, tool: BridgeTool):
    """Build the function FastMCP introspects for a tool's parameters."""
    name = tool.name

    if tool.input_model is None:

        async def call_tool(
            arguments: Annotated[
                dict[str, Any] | None, Field(description="Tool input object")
            ] = None,
        ) -> dict[str, Any]:
            return await bridge.invoke_tool(name, arguments or {})

        call_tool.__name__ = name
        return call_tool

    async def call_structured_tool(**kwargs: Any) -> dict[str, Any]:
        # FastMCP passes every declared parameter; unset optionals arrive as None
        arguments = {key: value for key, value in kwargs.items() if value is not None}
        return await bridge.invoke_tool(name, arguments)

    parameters = []
    annotations: dict[str, Any] = {}
    fields = dict(tool.input_model.model_fields)

    for field_name, info in fields.items():
        annotation = Annotated[info.annotation, Field(description=info.description)]
        default = inspect.Parameter.empty if info.is_required() else info.get_default()
        parameters.append(
            inspect.Parameter(
                field_name,
                inspect.Parameter.KEYWORD_ONLY,
                default=default,
                annotation=annotation,
            )
        )
        annotations[field_name] = annotation

    if bridge.settings.auth_enabled and "auth_token" not in fields:
        annotation = Annotated[str | None, Field(description="Shared auth token")]
        parameters.append(
            inspect.Parameter(
                "auth_token", inspect.Parameter.KEYWORD_ONLY, default=None, annotation=annotation
            )
        )
        annotations["auth_token"] = annotation

    annotations["return"] = dict[str, Any]
    call_structured_tool.__signature__ = inspect.Signature(
        parameters, return_annotation=dict[str, Any]
    )
    call_structured_tool.__annotations__ = annotations
    call_structured_tool.__name__ = name
    return call_structured_tool
