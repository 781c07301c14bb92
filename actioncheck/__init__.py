"""actioncheck -- verify the effects a store action emits.

An action routine is called with an instrumented store. Every ``commit`` and
``dispatch`` it makes is recorded and compared, in order, against the
effects the test declared. The action's own return value is passed back on
success.

Usage::

    from actioncheck import evaluate_and_report, expect_dispatch, expect_mutation

    def increment(context, payload):
        context.commit("increment")
        context.dispatch("console", {"msg": "hello"})

    evaluate_and_report(increment, [
        expect_mutation("increment"),
        expect_dispatch("console", {"msg": "hello"}),
    ])
"""

__version__ = "0.1.0"

# Re-export key types for convenience.
from actioncheck.comparators import permissive_comparator, strict_comparator
from actioncheck.config import (
    CheckConfig,
    ReportPolicy,
    configure,
    default_comparator,
    reset_defaults,
    resolve_comparator,
)
from actioncheck.engine import (
    Check,
    Evaluation,
    Interceptor,
    evaluate_action,
    evaluate_action_async,
)
from actioncheck.errors import (
    ActionCheckError,
    ActionExecutionFailed,
    AsyncCallbackNotSupported,
    ConfigurationError,
    EmptyTriggerInput,
    ErrorKind,
    ExecutionError,
    InterceptorConstructionFailed,
    InvalidExpectationList,
    InvalidTriggerKind,
    InvalidTriggerName,
    InvalidTriggerOptions,
    MisplacedExpectationField,
    NonCallableCallback,
    NonCallableComparator,
    TriggerCountMismatch,
    TriggerMismatch,
    TriggerMismatches,
    VerificationError,
)
from actioncheck.expectations import (
    Expectation,
    build_expectations,
    expect_dispatch,
    expect_mutation,
)
from actioncheck.store import ActionContext, Store, StoreSnapshot
from actioncheck.triggers import NOT_SET, Trigger, TriggerKind, dispatch, mutation
from actioncheck.verify import (
    CheckReport,
    CheckResult,
    check_results,
    collect_results,
    evaluate_and_report,
    evaluate_and_report_async,
)

MUTATION = TriggerKind.MUTATION
DISPATCH = TriggerKind.DISPATCH
UNSET = TriggerKind.UNSET

__all__ = [
    "DISPATCH",
    "MUTATION",
    "NOT_SET",
    "UNSET",
    "ActionCheckError",
    "ActionContext",
    "ActionExecutionFailed",
    "AsyncCallbackNotSupported",
    "Check",
    "CheckConfig",
    "CheckReport",
    "CheckResult",
    "ConfigurationError",
    "EmptyTriggerInput",
    "ErrorKind",
    "Evaluation",
    "ExecutionError",
    "Expectation",
    "Interceptor",
    "InterceptorConstructionFailed",
    "InvalidExpectationList",
    "InvalidTriggerKind",
    "InvalidTriggerName",
    "InvalidTriggerOptions",
    "MisplacedExpectationField",
    "NonCallableCallback",
    "NonCallableComparator",
    "ReportPolicy",
    "Store",
    "StoreSnapshot",
    "Trigger",
    "TriggerCountMismatch",
    "TriggerKind",
    "TriggerMismatch",
    "TriggerMismatches",
    "VerificationError",
    "build_expectations",
    "check_results",
    "collect_results",
    "configure",
    "default_comparator",
    "dispatch",
    "evaluate_action",
    "evaluate_action_async",
    "evaluate_and_report",
    "evaluate_and_report_async",
    "expect_dispatch",
    "expect_mutation",
    "mutation",
    "permissive_comparator",
    "reset_defaults",
    "resolve_comparator",
    "strict_comparator",
]
