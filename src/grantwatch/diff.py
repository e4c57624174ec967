"""Snapshot diff engine — compares two privilege snapshots."""

from __future__ import annotations

from collections.abc import Set
from dataclasses import dataclass, field

ADDED = "ADDED"
REMOVED = "REMOVED"


@dataclass(frozen=True)
class Delta:
    added: frozenset[str] = field(default_factory=frozenset)
    removed: frozenset[str] = field(default_factory=frozenset)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed)

    def tags(self) -> list[str]:
        """All additions, then all removals, as ``ADDED:<key>`` / ``REMOVED:<key>``."""
        return [f"{ADDED}:{k}" for k in sorted(self.added)] + [
            f"{REMOVED}:{k}" for k in sorted(self.removed)
        ]


def diff(old: Set[str], new: Set[str]) -> Delta:
    """Keys present only in ``new`` are added, keys present only in ``old`` are removed."""
    return Delta(added=frozenset(new - old), removed=frozenset(old - new))
