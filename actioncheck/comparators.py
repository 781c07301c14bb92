"""Built-in comparators.

A comparator decides whether a received Trigger satisfies an expected one.
It is called as ``comparator(kind, received, expected, snapshot)`` and fails
the check by raising; its return value is ignored.

- :func:`strict_comparator` raises :class:`~actioncheck.errors.TriggerMismatch`.
- :func:`permissive_comparator` runs the same comparison but only logs.

Which comparator runs for a given check is decided by
:func:`actioncheck.config.resolve_comparator`.
"""

from __future__ import annotations

import contextlib
import difflib
import logging
import pprint
from collections.abc import Iterator, Mapping
from contextvars import ContextVar
from typing import TYPE_CHECKING

from actioncheck.errors import TriggerMismatch
from actioncheck.triggers import NOT_SET, Trigger, TriggerKind

if TYPE_CHECKING:
    from actioncheck.store import StoreSnapshot

logger = logging.getLogger(__name__)

# Position of the check being compared; set by the reporter around each call.
_check_index: ContextVar[int | None] = ContextVar("actioncheck_check_index", default=None)


@contextlib.contextmanager
def comparing_check(index: int) -> Iterator[None]:
    """Make ``index`` visible to comparators called inside the block."""
    token = _check_index.set(index)
    try:
        yield
    finally:
        _check_index.reset(token)


def strict_comparator(
    kind: TriggerKind,
    received: Trigger,
    expected: Trigger,
    snapshot: StoreSnapshot | None = None,
) -> None:
    """Fail unless ``received`` matches ``expected``.

    Kind and name must be equal. Payload and options are compared with
    :func:`values_equal` only when the expected Trigger declares them; an
    undeclared payload matches anything, including ``None``.

    Raises:
        TriggerMismatch: naming the first field that diverged.
    """
    if received.kind is not expected.kind:
        raise TriggerMismatch("kind", received, expected, index=_check_index.get())
    if received.name != expected.name:
        raise TriggerMismatch("name", received, expected, index=_check_index.get())
    if expected.payload is not NOT_SET and not values_equal(expected.payload, received.payload):
        raise TriggerMismatch(
            "payload",
            received,
            expected,
            index=_check_index.get(),
            detail=payload_diff(expected.payload, received.payload),
        )
    if expected.options is not NOT_SET and not values_equal(expected.options, received.options):
        raise TriggerMismatch(
            "options",
            received,
            expected,
            index=_check_index.get(),
            detail=payload_diff(expected.options, received.options),
        )


def permissive_comparator(
    kind: TriggerKind,
    received: Trigger,
    expected: Trigger,
    snapshot: StoreSnapshot | None = None,
) -> None:
    """Same comparison as :func:`strict_comparator`, logged instead of raised."""
    try:
        strict_comparator(kind, received, expected, snapshot)
    except TriggerMismatch as exc:
        logger.error("%s '%s' not as expected:\n%s", kind.value.upper(), received.name, exc)


def values_equal(expected: object, received: object) -> bool:
    """Deep equality that keeps booleans apart from numbers.

    Mappings compare key by key and lists or tuples element by element,
    both recursively. ``True`` never equals ``1`` at any depth. ``1`` and
    ``1.0`` are equal, as numbers are elsewhere in Python.
    """
    if isinstance(expected, bool) or isinstance(received, bool):
        return type(expected) is type(received) and expected == received
    if isinstance(expected, Mapping) and isinstance(received, Mapping):
        if expected.keys() != received.keys():
            return False
        return all(values_equal(expected[key], received[key]) for key in expected)
    if isinstance(expected, (list, tuple)) and isinstance(received, (list, tuple)):
        if type(expected) is not type(received) or len(expected) != len(received):
            return False
        return all(values_equal(e, r) for e, r in zip(expected, received))
    return bool(expected == received)


def payload_diff(expected: object, received: object) -> str:
    """Render a unified diff of two values' pretty-printed forms."""
    expected_lines = pprint.pformat(expected, width=60).splitlines()
    received_lines = pprint.pformat(received, width=60).splitlines()
    return "\n".join(difflib.unified_diff(
        expected_lines,
        received_lines,
        fromfile="expected",
        tofile="received",
        lineterm="",
    ))
