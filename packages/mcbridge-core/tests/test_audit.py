"""Tests for the tool invocation audit trail."""

import pytest

from mcbridge_core.actions.audit import InvocationAuditor, InvocationRecord


def make_record(tool_name: str = "mine_block", ok: bool = True, **overrides) -> InvocationRecord:
    values = {
        "request_id": f"req-{tool_name}",
        "tool_name": tool_name,
        "action_name": "mineBlock",
        "ok": ok,
        "error_code": None if ok else "execution_error",
        "elapsed_ms": 42,
        "params_summary": {"name": "dirt", "count": 1},
    }
    values.update(overrides)
    return InvocationRecord(**values)


class TestInvocationAuditor:
    @pytest.mark.asyncio
    async def test_log_and_read_back(self, tmp_path):
        auditor = InvocationAuditor(tmp_path / "audit.db")

        await auditor.log_invocation(make_record())

        (record,) = await auditor.get_invocations()
        assert record.id is not None
        assert record.tool_name == "mine_block"
        assert record.action_name == "mineBlock"
        assert record.ok is True
        assert record.elapsed_ms == 42
        assert record.params_summary == {"name": "dirt", "count": 1}

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path):
        auditor = InvocationAuditor(tmp_path / "nested" / "dir" / "audit.db")

        await auditor.log_invocation(make_record())

        assert (tmp_path / "nested" / "dir" / "audit.db").exists()

    @pytest.mark.asyncio
    async def test_secrets_are_redacted_before_write(self, tmp_path):
        auditor = InvocationAuditor(tmp_path / "audit.db")

        await auditor.log_invocation(
            make_record(params_summary={"auth_token": "s3cret", "message": "TOKEN=abc123"})
        )

        (record,) = await auditor.get_invocations()
        assert record.params_summary["auth_token"] == "[REDACTED]"
        assert "abc123" not in record.params_summary["message"]

    @pytest.mark.asyncio
    async def test_filters_and_ordering(self, tmp_path):
        auditor = InvocationAuditor(tmp_path / "audit.db")
        await auditor.log_invocation(make_record("mine_block"))
        await auditor.log_invocation(make_record("craft_item", ok=False))
        await auditor.log_invocation(make_record("mine_block", ok=False))

        everything = await auditor.get_invocations()
        mining = await auditor.get_invocations(tool_name="mine_block")
        failures = await auditor.get_invocations(ok=False)
        latest = await auditor.get_invocations(limit=1)

        assert [r.tool_name for r in everything] == ["mine_block", "craft_item", "mine_block"]
        assert [r.ok for r in mining] == [False, True]
        assert {r.tool_name for r in failures} == {"craft_item", "mine_block"}
        assert all(r.error_code == "execution_error" for r in failures)
        assert len(latest) == 1 and latest[0].ok is False

    @pytest.mark.asyncio
    async def test_empty_summary(self, tmp_path):
        auditor = InvocationAuditor(tmp_path / "audit.db")

        await auditor.log_invocation(make_record("ping", action_name=None, params_summary=None))

        (record,) = await auditor.get_invocations()
        assert record.params_summary is None
        assert record.action_name is None
