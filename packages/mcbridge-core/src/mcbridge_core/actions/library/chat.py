"""Chat action: send a message to the in-game chat."""

import inspect
from typing import Any

from pydantic import BaseModel, Field

from mcbridge_core.actions.base import BaseAction
from mcbridge_core.actions.types import ActionResult, ToolSpec


class ChatInput(BaseModel):
    message: str = Field(..., min_length=1, description="Chat message to send")


class ChatAction(BaseAction):
    name = "chat"
    description = "Send a chat message"

    def get_params_schema(self) -> dict[str, str]:
        return {"message": "Chat message to send (string)"}

    def validate_params(self, params: dict[str, Any]) -> bool:
        return self.validate_string_params(params, ["message"])

    async def execute(self, session: Any, params: dict[str, Any]) -> ActionResult:
        message = params["message"]
        try:
            sent = session.chat(message)
            if inspect.isawaitable(sent):
                await sent
        except Exception as e:
            return self.create_exception_result(e, "Failed to send chat message", "CHAT_FAILED")
        return self.create_success_result(f"Sent chat message: {message}", {"message": message})

    def get_mcp_tools(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                tool_name="chat",
                description="Send a chat message in game.",
                input_model=ChatInput,
            )
        ]
