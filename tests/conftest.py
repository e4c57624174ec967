"""Root conftest — shared fixtures and markers."""

from __future__ import annotations

import os

import pytest

from grantwatch.adapters._base import AdapterError, ExecutionResult
from grantwatch.collector import DATABASE_CONNECT_SQL, SCHEMA_USAGE_SQL, TABLE_GRANTS_SQL


def pytest_configure(config):
    config.addinivalue_line("markers", "postgres: requires running PostgreSQL container")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("GRANTWATCH_TEST_POSTGRES"):
        return

    skip_pg = pytest.mark.skip(reason="Postgres not available (set GRANTWATCH_TEST_POSTGRES=1)")
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_pg)


class FakeAdapter:
    """In-memory stand-in for PostgresAdapter, answering the three catalog queries."""

    def __init__(
        self,
        tables: list[dict[str, object]] | None = None,
        schemas: list[dict[str, object]] | None = None,
        databases: list[dict[str, object]] | None = None,
    ) -> None:
        self.rows = {
            TABLE_GRANTS_SQL: tables or [],
            SCHEMA_USAGE_SQL: schemas or [],
            DATABASE_CONNECT_SQL: databases or [],
        }
        self.failures: dict[str, Exception] = {}
        self.connect_error: Exception | None = None
        self.calls: list[tuple[str, tuple[object, ...] | None]] = []
        self.connected = False
        self.closed = False

    @staticmethod
    def table_row(table: str, privilege: str = "SELECT", schema: str = "public",
                  grantee: str = "monitorado") -> dict[str, object]:
        return {
            "grantee": grantee,
            "privilege_type": privilege,
            "table_schema": schema,
            "table_name": table,
        }

    @staticmethod
    def schema_row(schema: str, privilege: str = "USAGE",
                   grantee: str = "monitorado") -> dict[str, object]:
        return {"grantee": grantee, "privilege_type": privilege, "object_schema": schema}

    @staticmethod
    def database_row(database: str, role: str = "monitorado") -> dict[str, object]:
        return {"rolname": role, "datname": database}

    def fail(self, sql: str, message: str = "relation does not exist") -> None:
        self.failures[sql] = AdapterError(f"PostgreSQL execution failed: {message}")

    async def connect(self, config) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def close(self) -> None:
        self.closed = True

    async def ping(self) -> None:
        return None

    async def execute(self, sql, params=None, *, labels=None) -> ExecutionResult:
        self.calls.append((sql, params))
        if sql in self.failures:
            raise self.failures[sql]
        rows = list(self.rows[sql])
        columns = list(rows[0]) if rows else []
        return ExecutionResult(columns=columns, rows=rows, row_count=len(rows), duration_ms=0.1)


@pytest.fixture
def adapter_cls():
    return FakeAdapter


@pytest.fixture
def fake_adapter():
    return FakeAdapter(
        tables=[FakeAdapter.table_row("users")],
        schemas=[FakeAdapter.schema_row("public")],
        databases=[FakeAdapter.database_row("testdb")],
    )
