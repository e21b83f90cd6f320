"""
Tool-protocol surface for the action core.

This module provides:
- ToolBridge: Maps tool calls to scheduled actions and encodes envelopes
- BridgeSettings: Tool exposure, auth and timeout configuration
- ToolEnvelope / ToolErrorCode: Uniform response shape and error taxonomy
- create_mcp_server: Publishes bridge tools on a FastMCP server
"""

from mcbridge_core.mcp.bridge import BridgeSettings, BridgeTool, ToolBridge
from mcbridge_core.mcp.builtin import FALLBACK_TOOL_SPECS, default_input_mapper
from mcbridge_core.mcp.envelope import ToolEnvelope, ToolErrorCode, map_error_code
from mcbridge_core.mcp.server import create_mcp_server

__all__ = [
    "BridgeSettings",
    "BridgeTool",
    "FALLBACK_TOOL_SPECS",
    "ToolBridge",
    "ToolEnvelope",
    "ToolErrorCode",
    "create_mcp_server",
    "default_input_mapper",
    "map_error_code",
]
