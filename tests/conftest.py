"""Shared fixtures: default isolation and a counter store."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from actioncheck.config import reset_defaults
from actioncheck.store import Store


def pytest_configure(config: pytest.Config) -> None:
    # The pytest11 entry point registers the plugin as "actioncheck" when the
    # package is installed; load it by module otherwise.
    if not config.pluginmanager.hasplugin("actioncheck"):
        config.pluginmanager.import_plugin("actioncheck.pytest_plugin")


# ---------------------------------------------------------------------------
# Process-wide default isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_default_comparator() -> Iterator[None]:
    reset_defaults()
    yield
    reset_defaults()


# ---------------------------------------------------------------------------
# Store fixture
# ---------------------------------------------------------------------------

def _increment_state(state: dict[str, object]) -> None:
    state["count"] = int(state["count"]) + 1  # type: ignore[call-overload]


def _decrement_state(state: dict[str, object]) -> None:
    state["count"] = int(state["count"]) - 1  # type: ignore[call-overload]


@pytest.fixture
def store() -> Store:
    """A counter store with real mutation handlers in ``extras``."""
    return Store(
        state={"count": 0},
        extras={
            "mutations": {
                "increment": _increment_state,
                "decrement": _decrement_state,
            },
        },
    )
