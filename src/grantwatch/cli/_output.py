"""Shared output formatting for CLI commands."""

from __future__ import annotations

import json
from collections.abc import Set
from pathlib import Path

from grantwatch.monitor import CycleResult
from grantwatch.privileges import PrivilegeKind, decode_key


def format_cycle_result(result: CycleResult, role: str, *, output_format: str = "json") -> str:
    added = sorted(result.delta.added) if result.delta else []
    removed = sorted(result.delta.removed) if result.delta else []

    if output_format == "json":
        doc: dict[str, object] = {
            "role": role,
            "status": result.status.value,
            "added": added,
            "removed": removed,
            "changes": result.delta.tags() if result.delta else [],
        }
        if result.snapshot is not None:
            doc["privileges"] = len(result.snapshot)
            doc["persisted"] = result.persisted
        if result.error:
            doc["error"] = result.error
        return json.dumps(doc, indent=2)

    lines = [f"{role}: {result.status.value}"]
    if result.error:
        lines.append(f"error: {result.error}")
    if result.snapshot is not None:
        lines.append(f"  privileges: {len(result.snapshot)}")
    lines.extend(f"  + {k}" for k in added)
    lines.extend(f"  - {k}" for k in removed)
    if result.snapshot is not None and not result.persisted:
        lines.append("  warning: state file not updated")
    return "\n".join(lines)


def _group_by_kind(snapshot: Set[str]) -> tuple[dict[str, list[dict[str, str]]], list[str]]:
    groups: dict[str, list[dict[str, str]]] = {kind.value: [] for kind in PrivilegeKind}
    unparsed: list[str] = []
    for key in sorted(snapshot):
        try:
            fact = decode_key(key)
        except ValueError:
            unparsed.append(key)
            continue
        entry = {"grantee": fact.grantee, "privilege": fact.privilege_type}
        if fact.kind == PrivilegeKind.DATABASE:
            entry["database"] = fact.database or ""
        else:
            entry["schema"] = fact.schema or ""
        if fact.kind == PrivilegeKind.TABLE:
            entry["table"] = fact.table or ""
        groups[fact.kind.value].append(entry)
    return groups, unparsed


def format_snapshot(
    snapshot: Set[str] | None, state_file: Path, *, output_format: str = "json"
) -> str:
    if snapshot is None:
        if output_format == "json":
            return json.dumps({"state_file": str(state_file), "exists": False}, indent=2)
        return f"No saved state at {state_file}."

    groups, unparsed = _group_by_kind(snapshot)

    if output_format == "json":
        doc: dict[str, object] = {
            "state_file": str(state_file),
            "exists": True,
            "count": len(snapshot),
            "privileges": groups,
        }
        if unparsed:
            doc["unparsed"] = unparsed
        return json.dumps(doc, indent=2)

    lines = [f"{state_file} ({len(snapshot)} privileges)"]
    for kind, entries in groups.items():
        if not entries:
            continue
        lines.append(f"{kind}:")
        for e in entries:
            target = ".".join(
                e[k] for k in ("database", "schema", "table") if k in e
            )
            lines.append(f"  {e['privilege']} on {target} to {e['grantee']}")
    for key in unparsed:
        lines.append(f"  ? {key}")
    return "\n".join(lines)
