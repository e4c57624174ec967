"""Privilege collector — reads the catalogs for one role and builds a snapshot.

Three privilege domains are queried in order: table grants, schema/object
usage grants, and database CONNECT. The CONNECT domain is derived with
``has_database_privilege`` against every database rather than a grant scan,
so it also reflects privileges inherited through PUBLIC.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from grantwatch.adapters._base import AdapterError, DatabaseAdapter
from grantwatch.privileges import PrivilegeFact, Snapshot

logger = logging.getLogger(__name__)

TABLE_GRANTS_SQL = (
    "SELECT grantee, privilege_type, table_schema, table_name "
    "FROM information_schema.role_table_grants "
    "WHERE grantee = %s"
)

SCHEMA_USAGE_SQL = (
    "SELECT grantee, privilege_type, object_schema "
    "FROM information_schema.usage_privileges "
    "WHERE grantee = %s"
)

DATABASE_CONNECT_SQL = (
    "SELECT rolname, datname "
    "FROM pg_roles, pg_database "
    "WHERE rolname = %s AND has_database_privilege(rolname, datname, 'CONNECT')"
)


class CollectionError(Exception):
    """A catalog query or row decode failed; the whole collection is void."""

    def __init__(self, domain: str, message: str) -> None:
        super().__init__(f"{domain}: {message}")
        self.domain = domain


@dataclass(frozen=True)
class CatalogQuery:
    domain: str
    sql: str
    columns: tuple[str, ...]
    build: Callable[..., PrivilegeFact]


CATALOG_QUERIES: tuple[CatalogQuery, ...] = (
    CatalogQuery(
        domain="tables",
        sql=TABLE_GRANTS_SQL,
        columns=("grantee", "privilege_type", "table_schema", "table_name"),
        build=PrivilegeFact.table_grant,
    ),
    CatalogQuery(
        domain="schemas",
        sql=SCHEMA_USAGE_SQL,
        columns=("grantee", "privilege_type", "object_schema"),
        build=PrivilegeFact.schema_usage,
    ),
    CatalogQuery(
        domain="databases",
        sql=DATABASE_CONNECT_SQL,
        columns=("rolname", "datname"),
        build=PrivilegeFact.database_connect,
    ),
)


def _decode_row(query: CatalogQuery, row: dict[str, object]) -> PrivilegeFact:
    values: list[str] = []
    for column in query.columns:
        value = row.get(column)
        if not isinstance(value, str):
            raise CollectionError(
                query.domain, f"cannot decode column {column!r}: got {value!r}"
            )
        values.append(value)
    return query.build(*values)


async def collect(adapter: DatabaseAdapter, role: str) -> Snapshot:
    """Return the current snapshot of ``role``'s privileges.

    Raises CollectionError if any query or row fails; no partial snapshot
    is ever returned.
    """
    keys: set[str] = set()
    for query in CATALOG_QUERIES:
        try:
            result = await adapter.execute(query.sql, (role,), labels={"domain": query.domain})
        except AdapterError as e:
            raise CollectionError(query.domain, str(e)) from e

        for row in result.rows:
            keys.add(_decode_row(query, row).key)
        logger.debug("%s: %d privilege rows for %s", query.domain, result.row_count, role)

    return frozenset(keys)
