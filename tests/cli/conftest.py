"""CLI test fixtures."""

from __future__ import annotations

import logging
import os

import pytest

from grantwatch import log


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's ~/.grantwatch/config.toml and GRANTWATCH_* env out of CLI tests."""
    monkeypatch.setattr("grantwatch.config.DEFAULT_CONFIG_FILE", tmp_path / "absent.toml")
    for name in list(os.environ):
        if name.startswith("GRANTWATCH_"):
            monkeypatch.delenv(name)
    yield
    # The CLI's handler is bound to the runner's stderr, which is closed by now.
    if log._handler is not None:
        logging.getLogger("grantwatch").removeHandler(log._handler)
        log._handler = None


@pytest.fixture
def patched_adapter(fake_adapter, monkeypatch):
    """Route the CLI's PostgresAdapter to the in-memory fake."""
    monkeypatch.setattr("grantwatch.cli._shared.PostgresAdapter", lambda: fake_adapter)
    return fake_adapter
