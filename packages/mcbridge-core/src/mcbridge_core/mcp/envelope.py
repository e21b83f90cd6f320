"""
Response envelope for tool calls.

Every tool call returns the same shape, success or failure:

    {"ok": true, "data": {...}, "request_id": "...", "elapsed_ms": 12}
    {"ok": false, "error_code": "execution_timeout", "error_message": "...",
     "request_id": "...", "elapsed_ms": 30001}

Absent fields are omitted rather than sent as null.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mcbridge_core.actions.types import ActionErrorCode


class ToolErrorCode(str, Enum):
    """Error codes exposed to tool-protocol clients."""

    SERVICE_UNAVAILABLE = "service_unavailable"
    """The bot session is not ready."""

    PERMISSION_DENIED = "permission_denied"
    """The call failed authorization."""

    EXECUTION_ERROR = "execution_error"
    """The action failed or could not be run."""

    EXECUTION_TIMEOUT = "execution_timeout"
    """The action did not finish in time."""

    PARAMETER_ERROR = "parameter_error"
    """The call input was structurally invalid."""


class ToolEnvelope(BaseModel):
    """
    Wire-level response for a tool call.

    Attributes:
        ok: Whether the call succeeded
        data: Result payload on success
        error_code: Taxonomy code on failure
        error_message: Human-readable failure description
        request_id: Id generated for this call
        elapsed_ms: Time spent handling the call
    """

    model_config = ConfigDict(use_enum_values=True)

    ok: bool = Field(..., description="Whether the call succeeded")
    data: Any = Field(default=None, description="Result payload on success")
    error_code: ToolErrorCode | None = Field(default=None, description="Failure code")
    error_message: str | None = Field(default=None, description="Failure description")
    request_id: str = Field(..., description="Request id for log correlation")
    elapsed_ms: int = Field(..., description="Elapsed time in milliseconds")

    @classmethod
    def failure(
        cls,
        error_code: ToolErrorCode,
        message: str,
        request_id: str,
        elapsed_ms: int,
    ) -> "ToolEnvelope":
        return cls(
            ok=False,
            error_code=error_code,
            error_message=message,
            request_id=request_id,
            elapsed_ms=elapsed_ms,
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire, omitting unset fields."""
        return {key: value for key, value in self.model_dump().items() if value is not None}


_TAXONOMY = {code.value for code in ToolErrorCode}


def map_error_code(error: str | None) -> ToolErrorCode:
    """
    Map an ActionResult error code onto the client taxonomy.

    TIMEOUT becomes execution_timeout, values already in the taxonomy pass
    through and everything else is reported as execution_error.
    """
    if error == ActionErrorCode.TIMEOUT.value:
        return ToolErrorCode.EXECUTION_TIMEOUT
    if error in _TAXONOMY:
        return ToolErrorCode(error)
    return ToolErrorCode.EXECUTION_ERROR
