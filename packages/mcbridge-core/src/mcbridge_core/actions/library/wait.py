"""
Wait action.

Pauses the action queue for a number of seconds. Useful for controllers
pacing a sequence of actions or waiting for the world to settle.
"""

import asyncio
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from mcbridge_core.actions.base import BaseAction
from mcbridge_core.actions.types import ActionResult, ToolSpec

# Stays under the default call timeout (30s) so a bridged wait completes
MAX_WAIT_SECONDS = 25


class WaitInput(BaseModel):
    seconds: float = Field(..., gt=0, le=MAX_WAIT_SECONDS, description="Seconds to wait")
    reason: str | None = Field(default=None, description="Why we're waiting")


class WaitAction(BaseAction):
    name = "wait"
    description = "Wait for a specified duration before continuing."

    def get_params_schema(self) -> dict[str, str]:
        return {
            "seconds": f"Number of seconds to wait (0-{MAX_WAIT_SECONDS})",
            "reason": "Why we're waiting (optional)",
        }

    def validate_params(self, params: dict[str, Any]) -> bool:
        return self.validate_number_params(params, ["seconds"]) and params["seconds"] > 0

    async def execute(self, session: Any, params: dict[str, Any]) -> ActionResult:
        # Direct scheduler callers skip input validation
        seconds = min(params["seconds"], MAX_WAIT_SECONDS)
        start = datetime.now()

        await asyncio.sleep(seconds)

        return self.create_success_result(
            f"Waited {seconds}s",
            {
                "waited_seconds": seconds,
                "reason": params.get("reason"),
                "started_at": start.isoformat(),
                "completed_at": datetime.now().isoformat(),
            },
        )

    def get_mcp_tools(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                tool_name="wait",
                description=(
                    "Wait for a specified duration. Blocks the action queue, "
                    "so queued actions run afterwards."
                ),
                input_model=WaitInput,
            )
        ]
