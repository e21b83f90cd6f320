"""Environment-based configuration for the bridge server."""

from pathlib import Path

from pydantic_settings import BaseSettings

from mcbridge_core.actions.scheduler import DEFAULT_TIMEOUT_MS
from mcbridge_core.mcp.bridge import BridgeSettings


class Settings(BaseSettings):
    """Bridge server configuration.

    All settings can be overridden via environment variables with
    MCBRIDGE_ prefix. List values are given as JSON. For example:
        MCBRIDGE_CALL_TIMEOUT_MS=10000
        MCBRIDGE_TOOLS_DISABLED='["craft_item"]'
    """

    # Identity reported to clients
    server_name: str = "mcbridge"
    server_version: str = "0.1.0"

    # Timeouts
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    call_timeout_ms: int = DEFAULT_TIMEOUT_MS

    # Tool exposure (deny wins; None allows every tool)
    tools_enabled: list[str] | None = None
    tools_disabled: list[str] = []

    # Authorization
    auth_enabled: bool = False
    auth_token: str | None = None

    # Discovery locations, scanned in order
    discovery_locations: list[str] = ["mcbridge_core.actions.library"]

    # Audit trail (None disables it)
    audit_db_path: Path | None = None

    log_level: str = "INFO"

    model_config = {"env_prefix": "MCBRIDGE_"}

    def bridge_settings(self) -> BridgeSettings:
        """Build the subset of settings consumed by ToolBridge."""
        return BridgeSettings(
            server_name=self.server_name,
            server_version=self.server_version,
            tools_enabled=self.tools_enabled,
            tools_disabled=list(self.tools_disabled),
            auth_enabled=self.auth_enabled,
            auth_token=self.auth_token,
            call_timeout_ms=self.call_timeout_ms,
        )
