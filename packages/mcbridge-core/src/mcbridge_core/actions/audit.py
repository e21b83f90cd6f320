"""
Audit trail for tool invocations.

Every call through the tool bridge can be recorded for debugging and
post-hoc review of what the external controller asked the bot to do:
- Tool name and request id
- Outcome (ok, error code) and elapsed time
- Redacted summary of the call's parameters

Per project patterns:
- Pydantic BaseModel for record data structures
- Async methods for database operations
- JSON serialization for the params blob
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite
from pydantic import BaseModel, Field

from mcbridge_core.actions.secrets import SecretRedactor

INVOCATIONS_SCHEMA_SQL = """
-- One row per tool call handled by the bridge
CREATE TABLE IF NOT EXISTS tool_invocations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    request_id TEXT NOT NULL,
    tool_name TEXT NOT NULL,
    action_name TEXT,                      -- NULL for built-in tools
    ok BOOLEAN NOT NULL,
    error_code TEXT,
    elapsed_ms INTEGER NOT NULL,
    params_summary TEXT,                   -- Redacted JSON
    timestamp TEXT NOT NULL                -- ISO8601 timestamp
);

CREATE INDEX IF NOT EXISTS idx_tool_invocations_tool
ON tool_invocations(tool_name, timestamp);
"""


class InvocationRecord(BaseModel):
    """
    Audit record for a single tool call.

    Attributes:
        id: Database ID (None before insert)
        request_id: Bridge-generated request id
        tool_name: Tool that was called
        action_name: Action the call was routed to (None for built-ins)
        ok: Whether the envelope reported success
        error_code: Envelope error code on failure
        elapsed_ms: Time spent handling the call
        params_summary: Parameters as passed to the action
        timestamp: When the call completed
    """

    id: int | None = Field(default=None, description="Database ID (None before insert)")
    request_id: str = Field(..., description="Bridge request id")
    tool_name: str = Field(..., description="Tool that was called")
    action_name: str | None = Field(default=None, description="Routed action name")
    ok: bool = Field(..., description="Envelope outcome")
    error_code: str | None = Field(default=None, description="Envelope error code")
    elapsed_ms: int = Field(..., description="Elapsed time in milliseconds")
    params_summary: Any = Field(default=None, description="Call parameters")
    timestamp: datetime = Field(default_factory=datetime.now, description="Completion time")


class InvocationAuditor:
    """
    SQLite-backed audit logger for tool invocations.

    Example:
        auditor = InvocationAuditor(Path("mcbridge.db"))
        await auditor.log_invocation(record)
        recent = await auditor.get_invocations(tool_name="mine_block")
    """

    def __init__(self, db_path: Path) -> None:
        """
        Initialize the auditor.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._redactor = SecretRedactor()

    async def _ensure_schema(self, conn: aiosqlite.Connection) -> None:
        """Create tables and indexes if they don't exist."""
        await conn.executescript(INVOCATIONS_SCHEMA_SQL)
        await conn.commit()

    async def log_invocation(self, record: InvocationRecord) -> None:
        """
        Write an invocation record to the database.

        Args:
            record: The invocation to log
        """
        # Redact secrets BEFORE serialization and database write
        summary = self._redactor.redact(record.params_summary)
        summary_json = json.dumps(summary, default=str) if summary is not None else None

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as conn:
            await self._ensure_schema(conn)
            await conn.execute(
                """
                INSERT INTO tool_invocations (
                    request_id, tool_name, action_name, ok, error_code,
                    elapsed_ms, params_summary, timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.request_id,
                    record.tool_name,
                    record.action_name,
                    record.ok,
                    record.error_code,
                    record.elapsed_ms,
                    summary_json,
                    record.timestamp.isoformat(),
                ),
            )
            await conn.commit()

    async def get_invocations(
        self,
        tool_name: str | None = None,
        ok: bool | None = None,
        limit: int = 100,
    ) -> list[InvocationRecord]:
        """
        Query invocation records with optional filters.

        Args:
            tool_name: Filter by tool name
            ok: Filter by outcome
            limit: Maximum number of records to return

        Returns:
            List of matching records, newest first
        """
        conditions = []
        params: list[Any] = []

        if tool_name is not None:
            conditions.append("tool_name = ?")
            params.append(tool_name)

        if ok is not None:
            conditions.append("ok = ?")
            params.append(ok)

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " AND ".join(conditions)

        query = f"""
            SELECT id, request_id, tool_name, action_name, ok, error_code,
                   elapsed_ms, params_summary, timestamp
            FROM tool_invocations
            {where_clause}
            ORDER BY timestamp DESC, id DESC
            LIMIT ?
        """
        params.append(limit)

        async with aiosqlite.connect(self.db_path) as conn:
            await self._ensure_schema(conn)
            conn.row_factory = aiosqlite.Row
            async with conn.execute(query, params) as cursor:
                rows = await cursor.fetchall()

        return [
            InvocationRecord(
                id=row["id"],
                request_id=row["request_id"],
                tool_name=row["tool_name"],
                action_name=row["action_name"],
                ok=bool(row["ok"]),
                error_code=row["error_code"],
                elapsed_ms=row["elapsed_ms"],
                params_summary=(
                    json.loads(row["params_summary"]) if row["params_summary"] else None
                ),
                timestamp=datetime.fromisoformat(row["timestamp"]),
            )
            for row in rows
        ]
