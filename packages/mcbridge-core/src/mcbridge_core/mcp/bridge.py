"""
Tool invocation bridge between tool-protocol clients and the scheduler.

This module provides ToolBridge, which:
- Publishes built-in query tools (ping, query_state, query_events)
- Publishes discovered tool specs, then fallback action tools, filtered by
  the allow/deny policy
- Maps each call's input to action parameters and runs it through the
  ActionScheduler with a bounded timeout
- Encodes every outcome as a ToolEnvelope and logs the invocation

ToolBridge.invoke_tool() never raises: every path returns an envelope.

Example:
    ```python
    bridge = ToolBridge(
        scheduler=scheduler,
        sessions=bot_client,
        state=state_manager,
        tools=discovery.discovered_tools,
        settings=BridgeSettings(tools_disabled=["craft_item"]),
    )
    payload = await bridge.invoke_tool("mine_block", {"blockName": "dirt"})
    ```
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from mcbridge_core.actions.audit import InvocationAuditor, InvocationRecord
from mcbridge_core.actions.authorization import (
    AuthorizationError,
    DefaultTokenChecker,
    StaticTokenChecker,
    TokenChecker,
    ToolAccessPolicy,
    check_tool_authorization,
)
from mcbridge_core.actions.scheduler import ActionCancelledError, ActionScheduler
from mcbridge_core.actions.secrets import SecretRedactor
from mcbridge_core.actions.types import ActionResult, ToolContext, ToolSpec
from mcbridge_core.mcp.builtin import (
    DEFAULT_EVENTS_LIMIT,
    FALLBACK_TOOL_SPECS,
    QueryEventsInput,
    default_input_mapper,
)
from mcbridge_core.mcp.envelope import ToolEnvelope, ToolErrorCode, map_error_code
from mcbridge_protocols import SessionProviderProtocol, StateProviderProtocol

logger = logging.getLogger(__name__)

PARAMS_SUMMARY_MAX_CHARS = 512


@dataclass(frozen=True)
class BridgeSettings:
    """
    Configuration consumed by the bridge.

    Attributes:
        server_name: Name reported to clients
        server_version: Version reported by ping
        tools_enabled: Allow list of action tools (None = all)
        tools_disabled: Deny list of action tools (wins over the allow list)
        auth_enabled: Whether calls are authorized at all
        auth_token: Shared token required when auth is enabled
        call_timeout_ms: Timeout for each action call
    """

    server_name: str = "mcbridge"
    server_version: str = "0.1.0"
    tools_enabled: list[str] | None = None
    tools_disabled: list[str] = field(default_factory=list)
    auth_enabled: bool = False
    auth_token: str | None = None
    call_timeout_ms: int = 30_000


ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolEnvelope]]


@dataclass(frozen=True)
class BridgeTool:
    """
    A tool published by the bridge.

    Attributes:
        name: Tool name
        description: Human-readable description
        input_model: Structured input schema, if any
        action_name: Target action (None for built-ins or call-time resolution)
        builtin: True for the always-available query tools
    """

    name: str
    description: str
    handler: ToolHandler = field(repr=False)
    input_model: type[BaseModel] | None = None
    action_name: str | None = None
    builtin: bool = False


class ToolBridge:
    """
    Bridge exposing actions as externally callable tools.

    Tool registration order decides name collisions: built-ins first, then
    discovered specs, then fallback specs; the first tool with a name wins.
    """

    def __init__(
        self,
        scheduler: ActionScheduler,
        sessions: SessionProviderProtocol,
        state: StateProviderProtocol | None = None,
        tools: Sequence[ToolSpec] = (),
        settings: BridgeSettings | None = None,
        auditor: InvocationAuditor | None = None,
        token_checker: TokenChecker | None = None,
    ) -> None:
        """
        Initialize the bridge.

        Args:
            scheduler: Scheduler running actions against the session
            sessions: Provider of the shared session handle
            state: Optional state/event provider for query tools
            tools: Discovered tool specs snapshot
            settings: Bridge configuration (defaults if None)
            auditor: Optional audit trail for invocations
            token_checker: Custom checker used when auth is enabled
        """
        self._scheduler = scheduler
        self._sessions = sessions
        self._state = state
        self.settings = settings or BridgeSettings()
        self._auditor = auditor
        self._redactor = SecretRedactor()
        self._policy = ToolAccessPolicy.from_lists(
            self.settings.tools_enabled, self.settings.tools_disabled
        )
        self._checker = self._resolve_checker(token_checker)
        self._tools: dict[str, BridgeTool] = {}

        self._register_builtin_tools()
        for spec in list(tools) + list(FALLBACK_TOOL_SPECS):
            self._register_action_tool(spec)

    @property
    def policy(self) -> ToolAccessPolicy:
        return self._policy

    def list_tools(self) -> list[BridgeTool]:
        """Get published tools in registration order."""
        return list(self._tools.values())

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def get_tool(self, name: str) -> BridgeTool | None:
        return self._tools.get(name)

    async def invoke_tool(self, name: str, tool_input: Any = None) -> dict[str, Any]:
        """
        Handle a tool call and return the envelope payload.

        Args:
            name: Tool name
            tool_input: Call input (a JSON object, or None)

        Returns:
            Envelope payload dict (see ToolEnvelope)
        """
        tool = self._tools.get(name)
        if tool is None:
            envelope = ToolEnvelope.failure(
                ToolErrorCode.PARAMETER_ERROR, f"Unknown tool: {name}", _request_id(), 0
            )
            await self._log_invocation(name, envelope, tool_input)
            return envelope.to_payload()

        if tool_input is None:
            tool_input = {}
        if not isinstance(tool_input, dict):
            envelope = ToolEnvelope.failure(
                ToolErrorCode.PARAMETER_ERROR,
                f"Tool input must be an object, got {type(tool_input).__name__}",
                _request_id(),
                0,
            )
            await self._log_invocation(name, envelope, tool_input)
            return envelope.to_payload()

        try:
            envelope = await tool.handler(tool_input)
        except Exception as e:
            # Handlers build their own envelopes; this only guards against bugs
            logger.exception(f"Unhandled error in tool {name}")
            envelope = ToolEnvelope.failure(
                ToolErrorCode.EXECUTION_ERROR, str(e), _request_id(), 0
            )
            await self._log_invocation(name, envelope, tool_input)
        return envelope.to_payload()

    def _resolve_checker(self, token_checker: TokenChecker | None) -> TokenChecker:
        if not self.settings.auth_enabled:
            return DefaultTokenChecker()
        if token_checker is not None:
            return token_checker
        if self.settings.auth_token:
            return StaticTokenChecker(self.settings.auth_token)
        logger.warning("Auth enabled without a token or checker; calls are not restricted")
        return DefaultTokenChecker()

    def _register_builtin_tools(self) -> None:
        self._tools["ping"] = BridgeTool(
            name="ping",
            description="Health check. Returns pong and service version.",
            handler=self._ping,
            builtin=True,
        )
        self._tools["query_state"] = BridgeTool(
            name="query_state",
            description="Return a minimal snapshot of bot state.",
            handler=self._query_state,
            builtin=True,
        )
        self._tools["query_events"] = BridgeTool(
            name="query_events",
            description="Return recent events with optional filters.",
            handler=self._query_events,
            input_model=QueryEventsInput,
            builtin=True,
        )

    def _register_action_tool(self, spec: ToolSpec) -> None:
        if spec.tool_name in self._tools:
            logger.debug(f"Tool '{spec.tool_name}' already registered, skipping")
            return
        if not self._policy.allows(spec.tool_name):
            logger.info(f"Tool '{spec.tool_name}' disabled by configuration")
            return

        async def handler(tool_input: dict[str, Any]) -> ToolEnvelope:
            return await self._invoke_action_tool(spec, tool_input)

        self._tools[spec.tool_name] = BridgeTool(
            name=spec.tool_name,
            description=spec.description,
            handler=handler,
            input_model=spec.input_model,
            action_name=spec.action_name,
        )

    async def _ping(self, tool_input: dict[str, Any]) -> ToolEnvelope:
        request_id = _request_id()
        start = time.monotonic()

        if not self._sessions.is_ready():
            return await self._fail(
                "ping", ToolErrorCode.SERVICE_UNAVAILABLE, "Bot session is not ready",
                request_id, start, tool_input,
            )

        data = {
            "pong": True,
            "version": self.settings.server_version,
            "ready": True,
            "echo": "pong",
        }
        return await self._succeed("ping", data, request_id, start, tool_input)

    async def _query_state(self, tool_input: dict[str, Any]) -> ToolEnvelope:
        request_id = _request_id()
        start = time.monotonic()

        denied = await self._authorize("query_state", tool_input, request_id, start)
        if denied is not None:
            return denied

        if not self._sessions.is_ready() or self._state is None:
            return await self._fail(
                "query_state", ToolErrorCode.SERVICE_UNAVAILABLE, "Bot session is not ready",
                request_id, start, tool_input,
            )

        try:
            state = self._state.get_game_state()
        except Exception as e:
            logger.error(f"query_state failed: {e}")
            return await self._fail(
                "query_state", ToolErrorCode.EXECUTION_ERROR, str(e),
                request_id, start, tool_input,
            )
        return await self._succeed("query_state", state, request_id, start, tool_input)

    async def _query_events(self, tool_input: dict[str, Any]) -> ToolEnvelope:
        request_id = _request_id()
        start = time.monotonic()

        denied = await self._authorize("query_events", tool_input, request_id, start)
        if denied is not None:
            return denied

        try:
            query = QueryEventsInput.model_validate(tool_input)
        except PydanticValidationError as e:
            return await self._fail(
                "query_events", ToolErrorCode.PARAMETER_ERROR, _validation_summary(e),
                request_id, start, tool_input,
            )

        if self._state is None:
            return await self._fail(
                "query_events", ToolErrorCode.SERVICE_UNAVAILABLE, "Event source is not available",
                request_id, start, tool_input,
            )

        limit = query.limit if query.limit is not None else DEFAULT_EVENTS_LIMIT
        params = {"type": query.type, "since_ms": query.since_ms, "limit": limit}
        try:
            events = self._state.list_events(query.type, query.since_ms, limit)
        except Exception as e:
            logger.error(f"query_events failed: {e}")
            return await self._fail(
                "query_events", ToolErrorCode.EXECUTION_ERROR, str(e), request_id, start, params
            )
        return await self._succeed("query_events", events, request_id, start, params)

    async def _invoke_action_tool(self, spec: ToolSpec, tool_input: dict[str, Any]) -> ToolEnvelope:
        tool_name = spec.tool_name
        request_id = _request_id()
        start = time.monotonic()

        denied = await self._authorize(tool_name, tool_input, request_id, start)
        if denied is not None:
            return denied

        if spec.input_model is not None:
            try:
                spec.input_model.model_validate(tool_input)
            except PydanticValidationError as e:
                return await self._fail(
                    tool_name, ToolErrorCode.PARAMETER_ERROR, _validation_summary(e),
                    request_id, start, tool_input,
                )

        mapper = spec.map_input_to_params or default_input_mapper
        try:
            params = mapper(tool_input, ToolContext(state=self._state))
        except Exception as e:
            return await self._fail(
                tool_name, ToolErrorCode.PARAMETER_ERROR, f"Invalid input: {e}",
                request_id, start, tool_input,
            )
        if not isinstance(params, dict):
            return await self._fail(
                tool_name, ToolErrorCode.PARAMETER_ERROR,
                "Input mapping did not produce an object", request_id, start, tool_input,
            )

        action_name = spec.action_name or tool_input.get("actionName") or tool_name

        session = self._sessions.get_session()
        if session is None:
            return await self._fail(
                tool_name, ToolErrorCode.SERVICE_UNAVAILABLE, "Bot session is not ready",
                request_id, start, params, action_name,
            )

        try:
            result = await self._scheduler.execute(
                action_name, session, params, timeout_ms=self.settings.call_timeout_ms
            )
        except ActionCancelledError as e:
            return await self._fail(
                tool_name, ToolErrorCode.EXECUTION_ERROR, str(e),
                request_id, start, params, action_name,
            )
        except Exception as e:
            logger.error(f"Scheduler error for tool {tool_name}: {e}")
            return await self._fail(
                tool_name, ToolErrorCode.EXECUTION_ERROR, str(e),
                request_id, start, params, action_name,
            )

        return await self._from_result(tool_name, action_name, result, request_id, start, params)

    async def _authorize(
        self,
        tool_name: str,
        tool_input: dict[str, Any],
        request_id: str,
        start: float,
    ) -> ToolEnvelope | None:
        try:
            check_tool_authorization(tool_name, tool_input, self._checker)
        except AuthorizationError as e:
            return await self._fail(
                tool_name, ToolErrorCode.PERMISSION_DENIED, str(e), request_id, start, tool_input
            )
        return None

    async def _from_result(
        self,
        tool_name: str,
        action_name: str,
        result: ActionResult,
        request_id: str,
        start: float,
        params: dict[str, Any],
    ) -> ToolEnvelope:
        if result.success:
            data = result.data if result.data is not None else {"message": result.message}
            return await self._succeed(tool_name, data, request_id, start, params, action_name)

        return await self._fail(
            tool_name, map_error_code(result.error), result.message,
            request_id, start, params, action_name,
        )

    async def _succeed(
        self,
        tool_name: str,
        data: Any,
        request_id: str,
        start: float,
        params: Any,
        action_name: str | None = None,
    ) -> ToolEnvelope:
        envelope = ToolEnvelope(
            ok=True, data=data, request_id=request_id, elapsed_ms=_elapsed_ms(start)
        )
        await self._log_invocation(tool_name, envelope, params, action_name)
        return envelope

    async def _fail(
        self,
        tool_name: str,
        code: ToolErrorCode,
        message: str,
        request_id: str,
        start: float,
        params: Any,
        action_name: str | None = None,
    ) -> ToolEnvelope:
        envelope = ToolEnvelope.failure(code, message, request_id, _elapsed_ms(start))
        await self._log_invocation(tool_name, envelope, params, action_name)
        return envelope

    async def _log_invocation(
        self,
        tool_name: str,
        envelope: ToolEnvelope,
        params: Any,
        action_name: str | None = None,
    ) -> None:
        summary = self.summarize_params(params)
        logger.info(
            json.dumps(
                {
                    "request_id": envelope.request_id,
                    "tool": tool_name,
                    "ok": envelope.ok,
                    "error_code": envelope.error_code,
                    "elapsed_ms": envelope.elapsed_ms,
                    "params_summary": summary,
                }
            )
        )

        if self._auditor is None:
            return

        record = InvocationRecord(
            request_id=envelope.request_id,
            tool_name=tool_name,
            action_name=action_name,
            ok=envelope.ok,
            error_code=envelope.error_code,
            elapsed_ms=envelope.elapsed_ms,
            params_summary=self._redactor.redact(params),
        )
        try:
            await self._auditor.log_invocation(record)
        except Exception as e:
            # Audit trail is best-effort; the caller still gets its envelope
            logger.warning(f"Failed to audit invocation {envelope.request_id}: {e}")

    def summarize_params(self, params: Any) -> str:
        """Redacted, size-bounded JSON rendering of call parameters."""
        try:
            text = json.dumps(self._redactor.redact(params), default=str, sort_keys=True)
        except (TypeError, ValueError):
            return "[unserializable]"
        if len(text) > PARAMS_SUMMARY_MAX_CHARS:
            return text[: PARAMS_SUMMARY_MAX_CHARS - 3] + "..."
        return text


def _request_id() -> str:
    return str(uuid.uuid4())


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _validation_summary(error: PydanticValidationError) -> str:
    problems = [
        f"{'.'.join(str(part) for part in item['loc']) or 'input'}: {item['msg']}"
        for item in error.errors()
    ]
    return "Invalid input: " + "; ".join(problems)
