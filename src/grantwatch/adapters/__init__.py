"""Database adapters — implementations of the DatabaseAdapter protocol."""

from grantwatch.adapters._base import (
    AdapterError,
    ConnectionConfig,
    DatabaseAdapter,
    ExecutionResult,
)

__all__ = [
    "AdapterError",
    "ConnectionConfig",
    "DatabaseAdapter",
    "ExecutionResult",
]
