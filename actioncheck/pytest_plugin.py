"""pytest integration.

Registered under the ``pytest11`` entry point, so the fixture below is
available in any test session once actioncheck is installed.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from actioncheck import config


@pytest.fixture
def actioncheck_defaults() -> Iterator[object]:
    """Give a test access to the process-wide defaults and restore them afterwards.

    Yields the :mod:`actioncheck.config` module, so a test can call
    ``actioncheck_defaults.configure(...)`` without leaking the change
    into later tests.
    """
    config.reset_defaults()
    yield config
    config.reset_defaults()
