"""
Priority scheduler for serialized action execution.

This module provides ActionScheduler, the single consumer of the shared bot
session:
- Enqueue execution requests with a priority and optional timeout
- Run exactly one action at a time, highest priority first
- Race each execution against its timeout
- Cancel everything still queued when the session goes away

Every enqueued request settles exactly once. Faults inside the scheduler
(unknown action, bad parameters, exceptions, timeouts) are converted to
failure ActionResults; the only exception a caller can observe on a task handle
is ActionCancelledError, raised for tasks discarded by cancel_all().
Tasks whose caller already gave up are skipped without running.

Example:
    ```python
    scheduler = ActionScheduler(registry, default_timeout_ms=30_000)

    result = await scheduler.execute("chat", bot, {"message": "hi"})

    urgent = scheduler.enqueue("swimToLand", bot, {}, priority=10)
    scheduler.cancel_all()  # rejects queued tasks, running one finishes
    ```
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from mcbridge_core.actions.registry import ActionRegistry
from mcbridge_core.actions.types import ActionErrorCode, ActionResult, TaskStatus

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000


class ActionCancelledError(Exception):
    """
    Raised on a queued task's handle when the scheduler is cancelled.

    Attributes:
        task_id: The discarded task
        action_name: The action the task would have run
    """

    def __init__(self, task_id: str, action_name: str) -> None:
        self.task_id = task_id
        self.action_name = action_name
        super().__init__(
            f"Action '{action_name}' (task {task_id}) was cancelled before it started"
        )


class QueueStatus(BaseModel):
    """Snapshot of the scheduler queue."""

    length: int = Field(..., description="Number of tasks waiting to run")
    is_processing: bool = Field(..., description="Whether the run loop is active")


@dataclass
class QueuedTask:
    """
    A pending request to execute an action.

    Attributes:
        action_name: Registered action to run
        session: Session handle passed through to the action
        params: Parameters for the action
        priority: Higher runs first; equal priorities run in arrival order
        timeout_ms: Per-task timeout (None = scheduler default)
        future: Completion handle returned to the caller
        id: Unique task identifier
        enqueued_at: When the task was queued
        status: Current lifecycle state
    """

    action_name: str
    session: Any
    params: dict[str, Any]
    priority: float
    timeout_ms: int | None
    future: "asyncio.Future[ActionResult]"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    enqueued_at: datetime = field(default_factory=datetime.now)
    status: TaskStatus = TaskStatus.QUEUED


class ActionScheduler:
    """
    Single-consumer priority scheduler for action execution.

    A boolean processing guard ensures only one run loop drains the queue,
    so at most one action executes against the session at any instant.
    Execution is not preemptible: a running action always runs to
    completion (or is abandoned on timeout). Only cancelling the run loop
    itself interrupts it.
    """

    def __init__(
        self,
        registry: ActionRegistry,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            registry: ActionRegistry used to resolve action names
            default_timeout_ms: Timeout for tasks that do not supply one
        """
        self._registry = registry
        self._queue: list[QueuedTask] = []
        self._processing = False
        self._cancelled = False
        self._runner: asyncio.Task | None = None
        self._abandoned: set[asyncio.Future] = set()
        self.default_timeout_ms = default_timeout_ms

    @property
    def default_timeout_ms(self) -> int:
        """Timeout applied to tasks enqueued without one."""
        return self._default_timeout_ms

    @default_timeout_ms.setter
    def default_timeout_ms(self, value: int) -> None:
        if value <= 0:
            raise ValueError(f"default timeout must be positive, got {value}")
        self._default_timeout_ms = value

    @property
    def is_cancelled(self) -> bool:
        """True after cancel_all() until reset_cancellation()."""
        return self._cancelled

    def get_queue_status(self) -> QueueStatus:
        return QueueStatus(length=len(self._queue), is_processing=self._processing)

    def enqueue(
        self,
        name: str,
        session: Any,
        params: dict[str, Any],
        priority: float = 0,
        timeout_ms: int | None = None,
    ) -> "asyncio.Future[ActionResult]":
        """
        Queue an action for execution.

        Must be called from within a running event loop.

        Args:
            name: Registered action name
            session: Session handle passed to the action
            params: Action parameters
            priority: Higher runs first (default 0)
            timeout_ms: Task timeout (default: scheduler default)

        Returns:
            Future resolving to the ActionResult. It raises
            ActionCancelledError if the task is discarded by cancel_all().

        Raises:
            ValueError: If timeout_ms is given and not positive
        """
        if timeout_ms is not None and timeout_ms <= 0:
            raise ValueError(f"timeout must be positive, got {timeout_ms}")

        loop = asyncio.get_running_loop()
        future: asyncio.Future[ActionResult] = loop.create_future()

        if self._cancelled:
            future.set_result(
                ActionResult.fail(
                    f"Scheduler is cancelled; action '{name}' was not queued",
                    ActionErrorCode.CANCELLED,
                )
            )
            return future

        if name not in self._registry:
            future.set_result(_not_found(name))
            return future

        task = QueuedTask(
            action_name=name,
            session=session,
            params=params,
            priority=priority,
            timeout_ms=timeout_ms,
            future=future,
        )
        self._insert(task)
        logger.debug(
            f"Queued action {name} (task {task.id}, priority {priority}, "
            f"queue length {len(self._queue)})"
        )

        if not self._processing:
            self._processing = True
            self._runner = loop.create_task(self._run())

        return future

    async def execute(
        self,
        name: str,
        session: Any,
        params: dict[str, Any],
        timeout_ms: int | None = None,
        priority: float = 0,
    ) -> ActionResult:
        """
        Queue an action and wait for its result.

        Raises:
            ActionCancelledError: If cancel_all() discards the task
        """
        return await self.enqueue(name, session, params, priority, timeout_ms)

    def cancel_all(self) -> int:
        """
        Reject every queued task and refuse new ones.

        The task currently running (if any) is allowed to finish and
        resolves its own caller normally.

        Returns:
            Number of queued tasks that were rejected
        """
        self._cancelled = True
        pending, self._queue = self._queue, []

        for task in pending:
            task.status = TaskStatus.REJECTED
            if not task.future.done():
                task.future.set_exception(ActionCancelledError(task.id, task.action_name))

        if pending:
            logger.warning(f"Cancelled {len(pending)} queued action(s)")
        return len(pending)

    def reset_cancellation(self) -> None:
        """Accept new tasks again, e.g. after the session reconnects."""
        self._cancelled = False

    async def aclose(self) -> None:
        """Cancel queued tasks and wait for the running one to finish."""
        self.cancel_all()
        runner = self._runner
        if runner is not None and not runner.done():
            await asyncio.gather(runner, return_exceptions=True)

    def _insert(self, task: QueuedTask) -> None:
        # Before the first strictly lower priority entry; ties keep arrival order
        for index, queued in enumerate(self._queue):
            if task.priority > queued.priority:
                self._queue.insert(index, task)
                return
        self._queue.append(task)

    async def _run(self) -> None:
        current: QueuedTask | None = None
        try:
            while self._queue:
                current = self._queue.pop(0)
                if current.future.done():
                    # Caller gave up while the task was queued
                    logger.debug(
                        f"Skipping action {current.action_name} (task {current.id}): caller is gone"
                    )
                    current.status = TaskStatus.REJECTED
                    current = None
                    continue
                current.status = TaskStatus.RUNNING
                result = await self._execute_task(current)
                current.status = TaskStatus.RESOLVED
                if not current.future.done():
                    current.future.set_result(result)
                current = None
        except asyncio.CancelledError:
            pending, self._queue = self._queue, []
            if current is not None:
                pending.insert(0, current)
            for task in pending:
                task.status = TaskStatus.REJECTED
                if not task.future.done():
                    task.future.set_result(
                        ActionResult.fail(
                            f"Action '{task.action_name}' was interrupted by scheduler shutdown",
                            ActionErrorCode.CANCELLED,
                        )
                    )
            raise
        finally:
            self._processing = False
            self._runner = None

    async def _execute_task(self, task: QueuedTask) -> ActionResult:
        name = task.action_name
        action = self._registry.get(name)
        if action is None:
            return _not_found(name)

        try:
            if not action.validate_params(task.params):
                return ActionResult.fail(
                    f"Parameter validation failed for action {name}",
                    ActionErrorCode.INVALID_PARAMS,
                    data=action.get_params_schema(),
                )
            execution = asyncio.ensure_future(action.execute(task.session, task.params))
        except Exception as e:
            logger.error(f"Error preparing action {name}: {e}")
            return _execution_error(name, e)

        timeout_ms = task.timeout_ms if task.timeout_ms is not None else self._default_timeout_ms
        logger.info(f"Executing action: {name} (task {task.id}, timeout {timeout_ms}ms)")
        logger.debug(f"Action {name} params: {task.params}")

        try:
            done, _ = await asyncio.wait({execution}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            # Run loop is shutting down; do not leave the action running
            execution.cancel()
            raise
        if execution not in done:
            self._abandon(execution, name)
            logger.warning(f"Action {name} timed out after {timeout_ms}ms")
            return ActionResult.fail(
                f"Action {name} timed out after {timeout_ms}ms",
                ActionErrorCode.TIMEOUT,
            )

        try:
            outcome = execution.result()
        except (Exception, asyncio.CancelledError) as e:
            logger.error(f"Error executing action {name}: {e!r}")
            return _execution_error(name, e)

        result = _coerce_result(name, outcome)
        logger.info(f"Action {name} finished: success={result.success}")
        return result

    def _abandon(self, execution: asyncio.Future, name: str) -> None:
        """Leave a timed-out execution running and log how it ends."""
        self._abandoned.add(execution)

        def _finished(fut: asyncio.Future) -> None:
            self._abandoned.discard(fut)
            if fut.cancelled():
                return
            error = fut.exception()
            if error is not None:
                logger.warning(f"Abandoned action {name} failed after timeout: {error!r}")
            else:
                logger.info(f"Abandoned action {name} finished after timeout")

        execution.add_done_callback(_finished)


def _not_found(name: str) -> ActionResult:
    return ActionResult.fail(f"Action not found: {name}", ActionErrorCode.ACTION_NOT_FOUND)


def _execution_error(name: str, error: BaseException) -> ActionResult:
    return ActionResult.fail(
        f"Error executing action {name}: {error}",
        ActionErrorCode.EXECUTION_ERROR,
    )


def _coerce_result(name: str, outcome: Any) -> ActionResult:
    if isinstance(outcome, ActionResult):
        return outcome
    try:
        return ActionResult.model_validate(outcome)
    except PydanticValidationError:
        return ActionResult.fail(
            f"Action {name} returned an invalid result: {outcome!r}",
            ActionErrorCode.EXECUTION_ERROR,
        )
