"""Tests for the bundled action library (wait, chat)."""

import pytest
from pydantic import ValidationError

from mcbridge_core.actions.library.chat import ChatAction, ChatInput
from mcbridge_core.actions.library.wait import MAX_WAIT_SECONDS, WaitAction, WaitInput
from mcbridge_core.config import Settings
from mcbridge_protocols import GameActionProtocol


class SyncBot:
    def __init__(self) -> None:
        self.sent: list[str] = []

    def chat(self, message: str) -> None:
        self.sent.append(message)


class AsyncBot(SyncBot):
    async def chat(self, message: str) -> None:
        self.sent.append(message)


class MutedBot:
    def chat(self, message: str) -> None:
        raise RuntimeError("not connected")


class TestWaitAction:
    def test_satisfies_protocol(self):
        assert isinstance(WaitAction(), GameActionProtocol)

    @pytest.mark.parametrize(
        "params,valid",
        [
            ({"seconds": 1}, True),
            ({"seconds": 0.5}, True),
            ({"seconds": 0}, False),
            ({"seconds": -1}, False),
            ({"seconds": "1"}, False),
            ({"seconds": True}, False),
            ({"seconds": float("nan")}, False),
            ({}, False),
        ],
    )
    def test_validate_params(self, params, valid):
        assert WaitAction().validate_params(params) is valid

    @pytest.mark.asyncio
    async def test_execute(self):
        result = await WaitAction().execute(None, {"seconds": 0.01, "reason": "settle"})

        assert result.success
        assert result.data["waited_seconds"] == 0.01
        assert result.data["reason"] == "settle"

    def test_tool_spec(self):
        (spec,) = WaitAction().get_mcp_tools()

        assert spec.tool_name == "wait"
        assert spec.input_model is WaitInput
        assert spec.action_name is None

    def test_longest_wait_fits_default_call_timeout(self, monkeypatch):
        monkeypatch.delenv("MCBRIDGE_CALL_TIMEOUT_MS", raising=False)

        assert MAX_WAIT_SECONDS * 1000 < Settings().call_timeout_ms
        WaitInput(seconds=MAX_WAIT_SECONDS)
        with pytest.raises(ValidationError):
            WaitInput(seconds=MAX_WAIT_SECONDS + 1)


class TestChatAction:
    def test_validate_params(self):
        action = ChatAction()

        assert action.validate_params({"message": "hi"})
        assert not action.validate_params({"message": ""})
        assert not action.validate_params({"message": 5})
        assert not action.validate_params({})

    @pytest.mark.asyncio
    async def test_execute_with_sync_session(self):
        bot = SyncBot()

        result = await ChatAction().execute(bot, {"message": "hello"})

        assert result.success
        assert bot.sent == ["hello"]

    @pytest.mark.asyncio
    async def test_execute_with_async_session(self):
        bot = AsyncBot()

        result = await ChatAction().execute(bot, {"message": "hello"})

        assert result.success
        assert bot.sent == ["hello"]

    @pytest.mark.asyncio
    async def test_chat_failure(self):
        result = await ChatAction().execute(MutedBot(), {"message": "hello"})

        assert not result.success
        assert result.error == "CHAT_FAILED"
        assert "not connected" in result.message

    def test_tool_spec(self):
        (spec,) = ChatAction().get_mcp_tools()

        assert spec.tool_name == "chat"
        assert spec.input_model is ChatInput
