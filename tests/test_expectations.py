"""Tests for actioncheck.expectations -- declaring and validating expectations."""

from __future__ import annotations

import pytest

from actioncheck.comparators import permissive_comparator
from actioncheck.engine import evaluate_action
from actioncheck.errors import (
    AsyncCallbackNotSupported,
    ConfigurationError,
    EmptyTriggerInput,
    ErrorKind,
    InvalidExpectationList,
    InvalidTriggerKind,
    InvalidTriggerName,
    InvalidTriggerOptions,
    MisplacedExpectationField,
    NonCallableCallback,
    NonCallableComparator,
)
from actioncheck.expectations import (
    Expectation,
    build_expectations,
    expect_dispatch,
    expect_mutation,
)
from actioncheck.store import ActionContext
from actioncheck.triggers import NOT_SET, TriggerKind, mutation


def increment(context: ActionContext, payload: object) -> None:
    context.commit("increment")
    context.dispatch("console", {"msg": "hello"})


# ---------------------------------------------------------------------------
# Constructor functions
# ---------------------------------------------------------------------------

class TestExpectationConstructors:
    """Tests for expect_mutation / expect_dispatch."""

    def test_expect_mutation(self) -> None:
        e = expect_mutation("add", 3)
        assert e.trigger.kind is TriggerKind.MUTATION
        assert e.trigger.payload == 3
        assert e.comparator is None
        assert e.callback is None

    def test_expect_dispatch_with_hooks(self) -> None:
        def on_emit(received: object, expected: object, context: object) -> None:
            pass

        e = expect_dispatch("console", comparator=permissive_comparator, callback=on_emit)
        assert e.trigger.kind is TriggerKind.DISPATCH
        assert e.trigger.payload is NOT_SET
        assert e.comparator is permissive_comparator
        assert e.callback is on_emit

    def test_to_dict_names_hooks(self) -> None:
        d = expect_mutation("add", comparator=permissive_comparator).to_dict()
        assert d["trigger"] == {"kind": "mutation", "name": "add"}
        assert d["comparator"] == "permissive_comparator"
        assert d["callback"] is None


# ---------------------------------------------------------------------------
# build_expectations
# ---------------------------------------------------------------------------

class TestBuildExpectations:
    """Validation of whole expectation lists."""

    def test_none_means_no_effects(self) -> None:
        assert build_expectations(None) == []

    def test_mixed_inputs_are_normalized(self) -> None:
        declared = expect_mutation("increment")
        result = build_expectations([
            declared,
            {"trigger": {"kind": "dispatch", "name": "console", "payload": {"msg": "hello"}}},
            {"trigger": mutation("add", 3), "comparator": permissive_comparator},
        ])
        assert result[0] is declared
        assert result[1].trigger.name == "console"
        assert result[1].trigger.payload == {"msg": "hello"}
        assert result[2].comparator is permissive_comparator

    def test_tuple_accepted(self) -> None:
        assert len(build_expectations((expect_mutation("increment"),))) == 1

    @pytest.mark.parametrize("raw", [
        {"trigger": {"kind": "mutation", "name": "increment"}},
        "increment",
        42,
    ])
    def test_non_sequence_rejected(self, raw: object) -> None:
        with pytest.raises(InvalidExpectationList, match="list or tuple") as info:
            build_expectations(raw)  # type: ignore[arg-type]
        assert info.value.kind is ErrorKind.INVALID_EXPECTATION_LIST

    def test_non_mapping_element_rejected(self) -> None:
        with pytest.raises(InvalidExpectationList) as info:
            build_expectations([expect_mutation("increment"), "console"])
        assert info.value.index == 1

    def test_missing_trigger(self) -> None:
        with pytest.raises(EmptyTriggerInput, match="empty input") as info:
            build_expectations([{"comparator": permissive_comparator}])
        assert info.value.index == 0

    def test_bad_kind_reports_index(self) -> None:
        with pytest.raises(InvalidTriggerKind) as info:
            build_expectations([
                expect_mutation("increment"),
                {"trigger": {"kind": "mootation", "name": "increment"}},
            ])
        assert info.value.index == 1
        assert str(info.value).startswith("Unable to process expectation 1:")

    def test_bad_name(self) -> None:
        with pytest.raises(InvalidTriggerName):
            build_expectations([{"trigger": {"kind": "mutation", "name": increment}}])

    def test_bad_options(self) -> None:
        with pytest.raises(InvalidTriggerOptions):
            build_expectations([
                {"trigger": {"kind": "mutation", "name": "increment", "options": "root"}},
            ])

    def test_non_mapping_trigger(self) -> None:
        with pytest.raises(InvalidExpectationList, match=r"Trigger or a mapping \(type provided: str\)") as info:
            build_expectations([expect_mutation("increment"), {"trigger": "increment"}])
        assert info.value.index == 1
        assert "kind" not in str(info.value)

    def test_non_callable_comparator(self) -> None:
        with pytest.raises(NonCallableComparator, match="comparator must be callable") as info:
            build_expectations([
                {"trigger": mutation("increment"), "comparator": "permissive_comparator"},
            ])
        assert info.value.value == "permissive_comparator"

    def test_non_callable_callback(self) -> None:
        with pytest.raises(NonCallableCallback, match="callback must be callable"):
            build_expectations([
                {"trigger": mutation("increment"), "callback": "foo"},
            ])

    def test_non_callable_on_expectation_instance(self) -> None:
        with pytest.raises(NonCallableCallback):
            build_expectations([Expectation(trigger=mutation("increment"), callback="foo")])  # type: ignore[arg-type]

    def test_comparator_inside_trigger(self) -> None:
        with pytest.raises(MisplacedExpectationField) as info:
            build_expectations([{
                "trigger": {
                    "kind": "mutation",
                    "name": "increment",
                    "comparator": permissive_comparator,
                },
            }])
        assert info.value.field_name == "comparator"

    def test_callback_inside_trigger(self) -> None:
        with pytest.raises(MisplacedExpectationField, match="callback"):
            build_expectations([{
                "trigger": {"kind": "mutation", "name": "increment", "callback": lambda *a: None},
                "comparator": permissive_comparator,
            }])


class TestFailFast:
    """A malformed expectation must stop the run before the action executes."""

    def test_action_not_invoked(self) -> None:
        calls: list[object] = []

        def spy(context: ActionContext, payload: object) -> None:
            calls.append(payload)
            context.commit("increment")

        with pytest.raises(ConfigurationError):
            evaluate_action(spy, [{"trigger": mutation("increment"), "callback": "foo"}])
        assert calls == []


class TestAsyncCallbacks:
    """Callbacks run inside commit/dispatch and cannot be coroutines."""

    def test_coroutine_function_rejected(self) -> None:
        async def apply(received: object, expected: object, context: ActionContext) -> None:
            context.state["count"] += 1  # type: ignore[operator]

        with pytest.raises(AsyncCallbackNotSupported, match="apply") as info:
            build_expectations([
                expect_mutation("increment"),
                expect_mutation("increment", callback=apply),
            ])
        assert info.value.index == 1
        assert info.value.kind is ErrorKind.ASYNC_CALLBACK_NOT_SUPPORTED

    def test_rejected_before_action_runs(self) -> None:
        calls: list[object] = []

        async def apply(received: object, expected: object, context: ActionContext) -> None:
            context.state["count"] += 1  # type: ignore[operator]

        def answer(context: ActionContext, payload: object) -> object:
            calls.append(payload)
            context.commit("increment")
            return context.state["count"]

        with pytest.raises(AsyncCallbackNotSupported):
            evaluate_action(
                answer,
                [{"trigger": mutation("increment"), "callback": apply}],
                store={"state": {"count": 0}},
            )
        assert calls == []
