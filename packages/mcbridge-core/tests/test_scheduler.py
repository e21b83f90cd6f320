"""
Tests for the priority scheduler.

Covers ordering (priority, FIFO tie-break), the timeout race, fault
conversion to ActionResults, and cancellation semantics.
"""

import asyncio
from typing import Any

import pytest

from mcbridge_core.actions.registry import ActionRegistry
from mcbridge_core.actions.scheduler import ActionCancelledError, ActionScheduler
from mcbridge_core.actions.types import ActionErrorCode, ActionResult


class RecordingAction:
    """Action that sleeps, then appends its name to a shared log."""

    def __init__(self, name: str, log: list[str], delay: float = 0.01) -> None:
        self.name = name
        self.description = f"Test action {name}"
        self.log = log
        self.delay = delay

    def get_params_schema(self) -> dict[str, str]:
        return {"value": "Any value"}

    def validate_params(self, params: dict[str, Any]) -> bool:
        return True

    async def execute(self, session: Any, params: dict[str, Any]) -> ActionResult:
        await asyncio.sleep(self.delay)
        self.log.append(self.name)
        return ActionResult.ok(f"{self.name} done", {"session": session})


class GatedAction:
    """Action that blocks until its gate is opened."""

    def __init__(self, name: str, gate: asyncio.Event) -> None:
        self.name = name
        self.description = "Blocks until released"
        self.gate = gate
        self.started = asyncio.Event()
        self.interrupted = False

    def get_params_schema(self) -> dict[str, str]:
        return {}

    def validate_params(self, params: dict[str, Any]) -> bool:
        return True

    async def execute(self, session: Any, params: dict[str, Any]) -> ActionResult:
        self.started.set()
        try:
            await self.gate.wait()
        except asyncio.CancelledError:
            self.interrupted = True
            raise
        return ActionResult.ok(f"{self.name} released")


class StrictAction:
    """Action that rejects every parameter set."""

    name = "strict"
    description = "Never accepts params"

    def get_params_schema(self) -> dict[str, str]:
        return {"x": "X coordinate (number)", "y": "Y coordinate (number)"}

    def validate_params(self, params: dict[str, Any]) -> bool:
        return False

    async def execute(self, session: Any, params: dict[str, Any]) -> ActionResult:
        raise AssertionError("execute must not run when validation fails")


class FailingAction:
    name = "explode"
    description = "Raises during execution"

    def get_params_schema(self) -> dict[str, str]:
        return {}

    def validate_params(self, params: dict[str, Any]) -> bool:
        return True

    async def execute(self, session: Any, params: dict[str, Any]) -> ActionResult:
        raise RuntimeError("pathfinder crashed")


class RawResultAction:
    """Action returning a non-ActionResult value."""

    def __init__(self, name: str, outcome: Any) -> None:
        self.name = name
        self.description = "Returns a raw value"
        self.outcome = outcome

    def get_params_schema(self) -> dict[str, str]:
        return {}

    def validate_params(self, params: dict[str, Any]) -> bool:
        return True

    async def execute(self, session: Any, params: dict[str, Any]) -> Any:
        return self.outcome


@pytest.fixture
def log() -> list[str]:
    return []


@pytest.fixture
def registry(log) -> ActionRegistry:
    registry = ActionRegistry()
    for name in ("a", "b", "c", "low", "high"):
        registry.register(RecordingAction(name, log))
    return registry


@pytest.fixture
def scheduler(registry) -> ActionScheduler:
    return ActionScheduler(registry, default_timeout_ms=1000)


class TestOrdering:
    """Tests for priority ordering and FIFO tie-break."""

    @pytest.mark.asyncio
    async def test_equal_priority_completes_in_enqueue_order(self, scheduler, log):
        """Two equal-priority tasks complete in the order they were queued."""
        first = scheduler.enqueue("a", None, {})
        second = scheduler.enqueue("b", None, {})

        results = await asyncio.gather(first, second)

        assert log == ["a", "b"]
        assert all(r.success for r in results)

    @pytest.mark.asyncio
    async def test_fifo_among_many_equal_priorities(self, scheduler, log):
        futures = [scheduler.enqueue(name, None, {}, priority=3) for name in ("c", "a", "b")]

        await asyncio.gather(*futures)

        assert log == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_higher_priority_runs_before_earlier_lower_priority(self, registry, log):
        """A later, higher-priority task overtakes queued lower-priority ones."""
        gate = asyncio.Event()
        registry.register(GatedAction("blocker", gate))
        scheduler = ActionScheduler(registry)

        running = scheduler.enqueue("blocker", None, {})
        await asyncio.sleep(0)  # let the run loop take the blocker

        low = scheduler.enqueue("low", None, {}, priority=0)
        high = scheduler.enqueue("high", None, {}, priority=5)
        gate.set()

        await asyncio.gather(running, low, high)

        assert log == ["high", "low"]

    @pytest.mark.asyncio
    async def test_mixed_priorities_keep_fifo_within_each_level(self, registry, log):
        gate = asyncio.Event()
        registry.register(GatedAction("blocker", gate))
        scheduler = ActionScheduler(registry)

        running = scheduler.enqueue("blocker", None, {})
        await asyncio.sleep(0)

        futures = [
            scheduler.enqueue("a", None, {}, priority=1),
            scheduler.enqueue("low", None, {}, priority=0),
            scheduler.enqueue("b", None, {}, priority=1),
            scheduler.enqueue("high", None, {}, priority=9),
        ]
        gate.set()
        await asyncio.gather(running, *futures)

        assert log == ["high", "a", "b", "low"]

    @pytest.mark.asyncio
    async def test_only_one_action_runs_at_a_time(self, registry):
        active = 0
        peak = 0

        class CountingAction:
            description = "Tracks concurrency"

            def __init__(self, name: str) -> None:
                self.name = name

            def get_params_schema(self):
                return {}

            def validate_params(self, params):
                return True

            async def execute(self, session, params):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.005)
                active -= 1
                return ActionResult.ok("counted")

        for i in range(5):
            registry.register(CountingAction(f"count{i}"))
        scheduler = ActionScheduler(registry)

        await asyncio.gather(*(scheduler.enqueue(f"count{i}", None, {}) for i in range(5)))

        assert peak == 1


class TestResults:
    """Tests for fault conversion to ActionResults."""

    @pytest.mark.asyncio
    async def test_unknown_action_resolves_without_queueing(self, scheduler):
        future = scheduler.enqueue("doesNotExist", None, {})

        assert future.done()
        assert scheduler.get_queue_status().length == 0

        result = await future
        assert not result.success
        assert result.error == ActionErrorCode.ACTION_NOT_FOUND.value
        assert "doesNotExist" in result.message

    @pytest.mark.asyncio
    async def test_invalid_params_returns_schema(self, registry, scheduler):
        registry.register(StrictAction())

        result = await scheduler.execute("strict", None, {"x": "nope"})

        assert not result.success
        assert result.error == ActionErrorCode.INVALID_PARAMS.value
        assert result.data == StrictAction().get_params_schema()

    @pytest.mark.asyncio
    async def test_exception_becomes_execution_error(self, registry, scheduler):
        registry.register(FailingAction())

        result = await scheduler.execute("explode", None, {})

        assert not result.success
        assert result.error == ActionErrorCode.EXECUTION_ERROR.value
        assert "pathfinder crashed" in result.message

    @pytest.mark.asyncio
    async def test_session_and_params_are_passed_through(self, scheduler):
        session = object()

        result = await scheduler.execute("a", session, {"value": 1})

        assert result.data == {"session": session}

    @pytest.mark.asyncio
    async def test_dict_outcome_is_coerced(self, registry, scheduler):
        registry.register(RawResultAction("raw", {"success": True, "message": "fine"}))

        result = await scheduler.execute("raw", None, {})

        assert result.success
        assert result.message == "fine"

    @pytest.mark.asyncio
    async def test_garbage_outcome_is_execution_error(self, registry, scheduler):
        registry.register(RawResultAction("garbage", "not a result"))

        result = await scheduler.execute("garbage", None, {})

        assert not result.success
        assert result.error == ActionErrorCode.EXECUTION_ERROR.value


class TestTimeouts:
    """Tests for the execution/timeout race."""

    @pytest.mark.asyncio
    async def test_timeout_returns_timeout_result(self, registry, scheduler):
        gate = asyncio.Event()
        registry.register(GatedAction("stuck", gate))

        result = await scheduler.execute("stuck", None, {}, timeout_ms=20)

        assert not result.success
        assert result.error == ActionErrorCode.TIMEOUT.value
        assert "20ms" in result.message
        gate.set()
        await asyncio.sleep(0.01)

    @pytest.mark.asyncio
    async def test_scheduler_usable_after_timeout(self, registry, scheduler, log):
        gate = asyncio.Event()
        registry.register(GatedAction("stuck", gate))

        timed_out = scheduler.enqueue("stuck", None, {}, timeout_ms=20)
        after = scheduler.enqueue("a", None, {})

        assert (await timed_out).error == ActionErrorCode.TIMEOUT.value
        assert (await after).success
        assert log == ["a"]
        assert not scheduler.get_queue_status().is_processing
        gate.set()
        await asyncio.sleep(0.01)

    @pytest.mark.asyncio
    async def test_default_timeout_applies(self, registry):
        gate = asyncio.Event()
        registry.register(GatedAction("stuck", gate))
        scheduler = ActionScheduler(registry, default_timeout_ms=15)

        result = await scheduler.execute("stuck", None, {})

        assert result.error == ActionErrorCode.TIMEOUT.value
        gate.set()
        await asyncio.sleep(0.01)

    def test_default_timeout_must_be_positive(self, registry):
        with pytest.raises(ValueError):
            ActionScheduler(registry, default_timeout_ms=0)

        scheduler = ActionScheduler(registry)
        scheduler.default_timeout_ms = 500
        assert scheduler.default_timeout_ms == 500
        with pytest.raises(ValueError):
            scheduler.default_timeout_ms = -1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("timeout_ms", [0, -10])
    async def test_task_timeout_must_be_positive(self, scheduler, timeout_ms):
        with pytest.raises(ValueError):
            scheduler.enqueue("a", None, {}, timeout_ms=timeout_ms)

        assert scheduler.get_queue_status().length == 0


class TestCancellation:
    """Tests for cancel_all() and reset_cancellation()."""

    @pytest.mark.asyncio
    async def test_cancel_rejects_queued_and_lets_running_finish(self, registry, scheduler):
        gate = asyncio.Event()
        blocker = GatedAction("blocker", gate)
        registry.register(blocker)

        running = scheduler.enqueue("blocker", None, {})
        await blocker.started.wait()
        queued = [scheduler.enqueue("a", None, {}), scheduler.enqueue("b", None, {})]

        assert scheduler.cancel_all() == 2
        assert scheduler.get_queue_status().length == 0
        assert scheduler.is_cancelled

        for future in queued:
            with pytest.raises(ActionCancelledError) as exc_info:
                await future
            assert exc_info.value.action_name in ("a", "b")

        gate.set()
        result = await running
        assert result.success
        assert result.message == "blocker released"

    @pytest.mark.asyncio
    async def test_cancelled_caller_skips_queued_action(self, registry, scheduler, log):
        """A caller that gives up while queued never reaches the session."""
        gate = asyncio.Event()
        blocker = GatedAction("blocker", gate)
        registry.register(blocker)

        running = scheduler.enqueue("blocker", None, {})
        await blocker.started.wait()
        caller = asyncio.ensure_future(scheduler.execute("a", None, {}))
        await asyncio.sleep(0)
        caller.cancel()
        after = scheduler.enqueue("b", None, {})

        gate.set()
        await running
        assert (await after).success

        assert caller.cancelled()
        assert log == ["b"]

    @pytest.mark.asyncio
    async def test_stopped_run_loop_settles_every_task(self, registry, scheduler, log):
        gate = asyncio.Event()
        blocker = GatedAction("blocker", gate)
        registry.register(blocker)

        running = scheduler.enqueue("blocker", None, {})
        queued = scheduler.enqueue("a", None, {})
        await blocker.started.wait()

        runner = scheduler._runner
        runner.cancel()
        await asyncio.gather(runner, return_exceptions=True)
        await asyncio.sleep(0.01)

        assert (await running).error == ActionErrorCode.CANCELLED.value
        assert (await queued).error == ActionErrorCode.CANCELLED.value
        assert blocker.interrupted
        assert log == []
        assert not scheduler.get_queue_status().is_processing

    @pytest.mark.asyncio
    async def test_enqueue_after_cancel_resolves_cancelled(self, scheduler, log):
        scheduler.cancel_all()

        result = await scheduler.execute("a", None, {})

        assert not result.success
        assert result.error == ActionErrorCode.CANCELLED.value
        assert log == []

    @pytest.mark.asyncio
    async def test_reset_cancellation_accepts_new_tasks(self, scheduler, log):
        scheduler.cancel_all()
        scheduler.reset_cancellation()

        result = await scheduler.execute("a", None, {})

        assert result.success
        assert log == ["a"]
        assert not scheduler.is_cancelled

    @pytest.mark.asyncio
    async def test_cancel_with_empty_queue_returns_zero(self, scheduler):
        assert scheduler.cancel_all() == 0

    @pytest.mark.asyncio
    async def test_aclose_waits_for_running_task(self, registry, scheduler):
        gate = asyncio.Event()
        registry.register(GatedAction("blocker", gate))

        running = scheduler.enqueue("blocker", None, {})
        queued = scheduler.enqueue("a", None, {})
        await asyncio.sleep(0)

        closing = asyncio.ensure_future(scheduler.aclose())
        await asyncio.sleep(0)
        gate.set()
        await closing

        assert (await running).success
        with pytest.raises(ActionCancelledError):
            await queued
        assert not scheduler.get_queue_status().is_processing


class TestQueueStatus:
    @pytest.mark.asyncio
    async def test_status_reflects_queue(self, registry, scheduler):
        gate = asyncio.Event()
        registry.register(GatedAction("blocker", gate))

        assert scheduler.get_queue_status().length == 0
        assert not scheduler.get_queue_status().is_processing

        running = scheduler.enqueue("blocker", None, {})
        await asyncio.sleep(0)
        waiting = scheduler.enqueue("a", None, {})

        status = scheduler.get_queue_status()
        assert status.length == 1
        assert status.is_processing

        gate.set()
        await asyncio.gather(running, waiting)
        assert scheduler.get_queue_status().length == 0
