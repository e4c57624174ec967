"""Snapshot persistence — a JSON object mapping each privilege key to ``true``."""

from __future__ import annotations

import contextlib
import json
import os
from collections.abc import Set
from pathlib import Path

from grantwatch.privileges import Snapshot


class StoreError(Exception):
    """Raised when the state file cannot be read, parsed, or written."""


class SnapshotStore:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> Snapshot | None:
        """Read the last saved snapshot. Returns None if no state file exists."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"cannot read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            raise StoreError(f"cannot parse {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"{self.path}: expected a JSON object, got {type(data).__name__}")

        keys: set[str] = set()
        for key, present in data.items():
            if not isinstance(present, bool):
                raise StoreError(f"{self.path}: value for {key!r} is not a boolean")
            if present:
                keys.add(key)
        return frozenset(keys)

    def save(self, snapshot: Set[str]) -> None:
        """Overwrite the state file with ``snapshot``.

        Written to a sibling temp file first and renamed into place.
        """
        try:
            payload = json.dumps({key: True for key in sorted(snapshot)}, indent=2)
        except (TypeError, ValueError) as e:
            raise StoreError(f"cannot serialize snapshot: {e}") from e

        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload + "\n")
            os.replace(tmp, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StoreError(f"cannot write {self.path}: {e}") from e
