"""Privilege facts and their canonical keys.

A key is the privilege kind followed by the fact's fields, joined with ``:``.
Fields are escaped first (``\\`` -> ``\\\\``, ``:`` -> ``\\:``) so that an
identifier containing the separator cannot make two facts share a key.
Identifiers without either character encode to the plain join, e.g.
``TABLE:monitorado:SELECT:public:users``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

SEPARATOR = ":"
ESCAPE = "\\"

CONNECT = "CONNECT"

Snapshot = frozenset[str]
"""Canonical keys of every privilege fact held at one observation instant."""


class PrivilegeKind(enum.Enum):
    TABLE = "TABLE"
    SCHEMA = "SCHEMA"
    DATABASE = "DATABASE"


@dataclass(frozen=True)
class PrivilegeFact:
    kind: PrivilegeKind
    grantee: str
    privilege_type: str
    schema: str | None = None
    table: str | None = None
    database: str | None = None

    @classmethod
    def table_grant(
        cls, grantee: str, privilege_type: str, schema: str, table: str
    ) -> PrivilegeFact:
        return cls(PrivilegeKind.TABLE, grantee, privilege_type, schema=schema, table=table)

    @classmethod
    def schema_usage(cls, grantee: str, privilege_type: str, schema: str) -> PrivilegeFact:
        return cls(PrivilegeKind.SCHEMA, grantee, privilege_type, schema=schema)

    @classmethod
    def database_connect(cls, role: str, database: str) -> PrivilegeFact:
        return cls(PrivilegeKind.DATABASE, role, CONNECT, database=database)

    def fields(self) -> tuple[str, ...]:
        """Kind-specific fields in key order."""
        if self.kind == PrivilegeKind.TABLE:
            return (self.grantee, self.privilege_type, self.schema or "", self.table or "")
        if self.kind == PrivilegeKind.SCHEMA:
            return (self.grantee, self.privilege_type, self.schema or "")
        return (self.grantee, self.privilege_type, self.database or "")

    @property
    def key(self) -> str:
        return encode_key(self)


_FIELD_COUNTS = {
    PrivilegeKind.TABLE: 4,
    PrivilegeKind.SCHEMA: 3,
    PrivilegeKind.DATABASE: 3,
}


def _escape(value: str) -> str:
    return value.replace(ESCAPE, ESCAPE * 2).replace(SEPARATOR, ESCAPE + SEPARATOR)


def _split(key: str) -> list[str]:
    """Split on unescaped separators, unescaping each part."""
    parts: list[str] = []
    current: list[str] = []
    chars = iter(key)
    for ch in chars:
        if ch == ESCAPE:
            nxt = next(chars, None)
            if nxt is None:
                raise ValueError(f"dangling escape in key {key!r}")
            current.append(nxt)
        elif ch == SEPARATOR:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def encode_key(fact: PrivilegeFact) -> str:
    """Return the canonical key for a privilege fact."""
    return SEPARATOR.join([fact.kind.value, *(_escape(f) for f in fact.fields())])


def decode_key(key: str) -> PrivilegeFact:
    """Parse a canonical key back into a PrivilegeFact. Raises ValueError."""
    kind_str, *fields = _split(key)
    try:
        kind = PrivilegeKind(kind_str)
    except ValueError as e:
        raise ValueError(f"unknown privilege kind in key {key!r}") from e

    if len(fields) != _FIELD_COUNTS[kind]:
        raise ValueError(
            f"{kind.value} key needs {_FIELD_COUNTS[kind]} fields, got {len(fields)}: {key!r}"
        )

    if kind == PrivilegeKind.TABLE:
        return PrivilegeFact.table_grant(*fields)
    if kind == PrivilegeKind.SCHEMA:
        return PrivilegeFact.schema_usage(*fields)
    role, privilege, database = fields
    if privilege != CONNECT:
        raise ValueError(f"DATABASE key must carry {CONNECT}, got {privilege!r}")
    return PrivilegeFact.database_connect(role, database)
