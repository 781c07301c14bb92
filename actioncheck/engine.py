"""Evaluation engine: run an action against an instrumented store.

The engine validates the declared expectations, hands the action an
:class:`~actioncheck.store.ActionContext` whose ``commit`` and ``dispatch``
are wired to an :class:`Interceptor`, and records one :class:`Check` per
emitted effect. Matching is strictly positional: the first emitted effect is
paired with the first declared expectation, and so on.

Nothing is compared here. The engine only guarantees that the run completed
and emitted as many effects as were declared; :mod:`actioncheck.verify` runs
the comparators over the recorded checks.

Usage::

    evaluation = evaluate_action(increment, [expect_mutation("increment")])
    assert evaluation.checks[0].received.name == "increment"
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field

from actioncheck.errors import (
    ActionCheckError,
    ActionExecutionFailed,
    AsyncCallbackNotSupported,
    ConfigurationError,
    InterceptorConstructionFailed,
    TriggerCountMismatch,
)
from actioncheck.expectations import (
    Comparator,
    Expectation,
    ExpectationInput,
    build_expectations,
)
from actioncheck.store import ActionContext, Store, StoreSnapshot
from actioncheck.triggers import Trigger, TriggerKind

logger = logging.getLogger(__name__)

Action = Callable[[ActionContext, object], object]


# ---------------------------------------------------------------------------
# Check / Evaluation
# ---------------------------------------------------------------------------

@dataclass
class Check:
    """One emitted effect paired with the expectation at its position.

    Attributes:
        index: Position in emission order (0-based).
        received: The Trigger the action emitted.
        expected: The declared Trigger, or the UNSET sentinel when the
            action emitted more effects than were declared.
        comparator: The expectation's own comparator, if any.
        snapshot: The store as it was at emission time.
    """
    index: int
    received: Trigger
    expected: Trigger
    comparator: Comparator | None
    snapshot: StoreSnapshot

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {
            "index": self.index,
            "received": self.received.to_dict(),
            "expected": self.expected.to_dict(),
            "snapshot": self.snapshot.to_dict(),
        }


@dataclass
class Evaluation:
    """Everything a run produced, before comparison."""
    action_name: str
    checks: list[Check] = field(default_factory=list)
    result: object = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {
            "action_name": self.action_name,
            "checks": [c.to_dict() for c in self.checks],
            "result": self.result,
        }


# ---------------------------------------------------------------------------
# Interceptor
# ---------------------------------------------------------------------------

class Interceptor:
    """Records the effects one action run emits.

    One interceptor serves exactly one run. Its cursor only moves forward
    and emissions are handled in the order they arrive.
    """

    def __init__(self, expectations: list[Expectation], store: Store) -> None:
        self.expectations = expectations
        self.checks: list[Check] = []
        # First emitter or callback misuse, kept so it surfaces even if the action catches it.
        self.failure: ActionCheckError | None = None
        self._cursor = 0
        self.context = store.context(commit=self.emit_mutation, dispatch=self.emit_action)

    def emit_mutation(
        self,
        name: str,
        payload: object = None,
        options: Mapping[str, object] | None = None,
    ) -> object:
        """Stand-in for ``store.commit``."""
        return self._emit(TriggerKind.MUTATION, name, payload, options)

    def emit_action(
        self,
        name: str,
        payload: object = None,
        options: Mapping[str, object] | None = None,
    ) -> object:
        """Stand-in for ``store.dispatch``."""
        return self._emit(TriggerKind.DISPATCH, name, payload, options)

    def _emit(
        self,
        kind: TriggerKind,
        name: str,
        payload: object,
        options: Mapping[str, object] | None,
    ) -> object:
        try:
            received = Trigger(kind=kind, name=name, payload=payload, options=options)
        except ConfigurationError as exc:
            failure = InterceptorConstructionFailed(kind, name, exc)
            if self.failure is None:
                self.failure = failure
            raise failure from exc

        if self._cursor < len(self.expectations):
            expectation = self.expectations[self._cursor]
        else:
            # Too many effects: recorded against the sentinel and reported
            # by the count check once the action has finished.
            expectation = Expectation(trigger=Trigger.unset())

        check = Check(
            index=self._cursor,
            received=received,
            expected=expectation.trigger,
            comparator=expectation.comparator,
            snapshot=self.context.snapshot(),
        )
        self._cursor += 1
        self.checks.append(check)
        logger.debug(
            "Effect %d: received %s, expected %s",
            check.index, received.describe(), expectation.trigger.describe(),
        )

        if expectation.callback is not None:
            outcome = expectation.callback(received, expectation.trigger, self.context)
            if inspect.isawaitable(outcome):
                _discard(outcome)
                failure = AsyncCallbackNotSupported(expectation.callback, index=check.index)
                if self.failure is None:
                    self.failure = failure
                raise failure
            return outcome
        return None


# ---------------------------------------------------------------------------
# Evaluation entry points
# ---------------------------------------------------------------------------

def evaluate_action(
    action: Action,
    expectations: Sequence[ExpectationInput] | None = None,
    payload: object = None,
    store: Store | Mapping[str, object] | None = None,
) -> Evaluation:
    """Run ``action(context, payload)`` and record the effects it emits.

    Coroutine actions are driven to completion with :func:`asyncio.run`.
    From inside a running event loop use :func:`evaluate_action_async`.

    Raises:
        ConfigurationError: an expectation is malformed; the action is not run.
        InterceptorConstructionFailed: the action called an emitter wrongly,
            including when it caught that error and then raised another.
        AsyncCallbackNotSupported: a callback returned an awaitable.
        ActionExecutionFailed: the action or one of its callbacks raised.
        TriggerCountMismatch: more or fewer effects than declared.
    """
    name = _action_name(action)
    interceptor = _prepare(expectations, store)
    result = _call_action(name, action, interceptor, payload)
    if inspect.isawaitable(result):
        if _loop_is_running():
            _discard(result)
            msg = (
                f"action {name!r} returned an awaitable inside a running event loop; "
                "use evaluate_action_async() instead"
            )
            raise RuntimeError(msg)
        result = asyncio.run(_await_action(name, interceptor, result))
    return _finish(name, interceptor, result)


async def evaluate_action_async(
    action: Action,
    expectations: Sequence[ExpectationInput] | None = None,
    payload: object = None,
    store: Store | Mapping[str, object] | None = None,
) -> Evaluation:
    """Async counterpart of :func:`evaluate_action`.

    The action may be a plain function or a coroutine function; its effects
    may be emitted on either side of any ``await``.
    """
    name = _action_name(action)
    interceptor = _prepare(expectations, store)
    result = _call_action(name, action, interceptor, payload)
    if inspect.isawaitable(result):
        result = await _await_action(name, interceptor, result)
    return _finish(name, interceptor, result)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _prepare(
    expectations: Sequence[ExpectationInput] | None,
    store: Store | Mapping[str, object] | None,
) -> Interceptor:
    return Interceptor(build_expectations(expectations), Store.coerce(store))


def _call_action(name: str, action: Action, interceptor: Interceptor, payload: object) -> object:
    try:
        return action(interceptor.context, payload)
    except ActionCheckError:
        raise
    except Exception as exc:
        raise _execution_failure(name, interceptor, exc) from exc


async def _await_action(name: str, interceptor: Interceptor, awaitable: Awaitable[object]) -> object:
    try:
        return await awaitable
    except ActionCheckError:
        raise
    except Exception as exc:
        raise _execution_failure(name, interceptor, exc) from exc


def _execution_failure(name: str, interceptor: Interceptor, exc: Exception) -> ActionCheckError:
    # A misused emitter that the action caught is the root cause of whatever it raised next.
    if interceptor.failure is not None:
        return interceptor.failure
    return ActionExecutionFailed(name, exc)


def _finish(name: str, interceptor: Interceptor, result: object) -> Evaluation:
    if interceptor.failure is not None:
        raise interceptor.failure
    expected = len(interceptor.expectations)
    received = len(interceptor.checks)
    if received != expected:
        raise TriggerCountMismatch(name, expected, received)
    logger.debug("Action %s emitted %d effect(s) as declared", name, received)
    return Evaluation(action_name=name, checks=interceptor.checks, result=result)


def _action_name(action: object) -> str:
    return getattr(action, "__name__", None) or type(action).__name__


def _loop_is_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def _discard(awaitable: object) -> None:
    # Close an un-awaited coroutine so it does not warn on garbage collection.
    close = getattr(awaitable, "close", None)
    if callable(close):
        close()
