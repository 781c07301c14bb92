"""Declared expectations: what a test says an action should emit.

An :class:`Expectation` pairs a :class:`~actioncheck.triggers.Trigger` with an
optional per-expectation comparator and an optional callback that runs when
the matching effect is emitted.

Expectation lists are validated in full by :func:`build_expectations` before
the action is invoked, so a typo in a test never costs an action run.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from actioncheck.errors import (
    AsyncCallbackNotSupported,
    ConfigurationError,
    EmptyTriggerInput,
    InvalidExpectationList,
    NonCallableCallback,
    NonCallableComparator,
)
from actioncheck.triggers import NOT_SET, Trigger, TriggerKind, _NotSet

if TYPE_CHECKING:
    from actioncheck.store import ActionContext, StoreSnapshot

logger = logging.getLogger(__name__)

Comparator = Callable[[TriggerKind, Trigger, Trigger, "StoreSnapshot"], object]
"""``(kind, received, expected, snapshot)``; raise to fail the check."""

Callback = Callable[[Trigger, Trigger, "ActionContext"], object]
"""``(received, expected, context)``; the return value goes back to the action."""

ExpectationInput = Union["Expectation", Mapping[str, object]]


# ---------------------------------------------------------------------------
# Expectation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Expectation:
    """One declared effect.

    Attributes:
        trigger: The effect the action should emit at this position.
        comparator: Overrides the run-level and default comparators for
            this position only.
        callback: Called synchronously when the effect is emitted, with
            ``(received, expected, context)``. Use it to apply the real
            mutation handler so the action can read the new state back.
    """
    trigger: Trigger
    comparator: Comparator | None = None
    callback: Callback | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize the trigger; comparator and callback are reported by name."""
        return {
            "trigger": self.trigger.to_dict(),
            "comparator": _callable_name(self.comparator),
            "callback": _callable_name(self.callback),
        }


def _callable_name(func: Callable[..., object] | None) -> str | None:
    if func is None:
        return None
    return getattr(func, "__qualname__", None) or repr(func)


# -- Expectation constructor functions --------------------------------------

def expect_mutation(
    name: str,
    payload: object = NOT_SET,
    options: Mapping[str, object] | None | _NotSet = NOT_SET,
    *,
    comparator: Comparator | None = None,
    callback: Callback | None = None,
) -> Expectation:
    """Expect ``context.commit(name, payload, options)``."""
    return Expectation(
        trigger=Trigger(kind=TriggerKind.MUTATION, name=name, payload=payload, options=options),
        comparator=comparator,
        callback=callback,
    )


def expect_dispatch(
    name: str,
    payload: object = NOT_SET,
    options: Mapping[str, object] | None | _NotSet = NOT_SET,
    *,
    comparator: Comparator | None = None,
    callback: Callback | None = None,
) -> Expectation:
    """Expect ``context.dispatch(name, payload, options)``."""
    return Expectation(
        trigger=Trigger(kind=TriggerKind.DISPATCH, name=name, payload=payload, options=options),
        comparator=comparator,
        callback=callback,
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def build_expectations(raw: Sequence[ExpectationInput] | None) -> list[Expectation]:
    """Validate a declared expectation list and normalize it to Expectations.

    Each element may be an :class:`Expectation` or a mapping with a
    ``trigger`` key (a Trigger or a trigger descriptor) and optional
    ``comparator`` / ``callback`` keys.

    Raises:
        InvalidExpectationList: ``raw`` is not a list or tuple.
        ConfigurationError: the first malformed element, with its index.
    """
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise InvalidExpectationList(type(raw).__name__)

    expectations: list[Expectation] = []
    for index, item in enumerate(raw):
        try:
            expectations.append(_build_one(item))
        except ConfigurationError as exc:
            raise exc.at_index(index) from None
    logger.debug("Validated %d expectation(s)", len(expectations))
    return expectations


def _build_one(item: object) -> Expectation:
    if isinstance(item, Expectation):
        trigger = item.trigger
        comparator = item.comparator
        callback = item.callback
        if not isinstance(trigger, Trigger):
            trigger = _build_trigger(trigger)
    elif isinstance(item, Mapping):
        trigger = _build_trigger(item.get("trigger"))
        comparator = item.get("comparator")  # type: ignore[assignment]
        callback = item.get("callback")  # type: ignore[assignment]
    else:
        type_name = type(item).__name__
        msg = f"expectation must be an Expectation or a mapping (type provided: {type_name})"
        raise InvalidExpectationList(type_name, msg)

    if comparator is not None and not callable(comparator):
        raise NonCallableComparator(comparator)
    if callback is not None and not callable(callback):
        raise NonCallableCallback(callback)
    if callback is not None and inspect.iscoroutinefunction(callback):
        raise AsyncCallbackNotSupported(callback)

    if isinstance(item, Expectation) and trigger is item.trigger:
        return item
    return Expectation(trigger=trigger, comparator=comparator, callback=callback)


def _build_trigger(raw: object) -> Trigger:
    if raw is None:
        raise EmptyTriggerInput()
    if isinstance(raw, Trigger):
        return raw
    if isinstance(raw, Mapping):
        return Trigger.from_descriptor(raw)
    type_name = type(raw).__name__
    msg = f"expectation trigger must be a Trigger or a mapping (type provided: {type_name})"
    raise InvalidExpectationList(type_name, msg)
