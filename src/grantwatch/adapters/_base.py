"""Database adapter protocol — the boundary between the monitor and the driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class ConnectionConfig:
    host: str
    port: int
    user: str
    password: str
    dbname: str
    sslmode: str = "disable"
    dsn: str | None = None  # replaces the individual fields when set

    def describe(self) -> str:
        """Human-readable target without the password."""
        if self.dsn:
            return "dsn"
        return f"{self.user}@{self.host}:{self.port}/{self.dbname}"


@dataclass
class ExecutionResult:
    """Query execution result."""

    columns: list[str]
    rows: list[dict[str, object]]
    row_count: int
    duration_ms: float | None = None


class AdapterError(Exception):
    """Raised by adapters for connection/execution failures."""


@runtime_checkable
class DatabaseAdapter(Protocol):
    async def connect(self, config: ConnectionConfig) -> None: ...
    async def close(self) -> None: ...
    async def ping(self) -> None: ...
    async def execute(
        self,
        sql: str,
        params: tuple[object, ...] | None = None,
        *,
        labels: dict[str, str] | None = None,
    ) -> ExecutionResult: ...
