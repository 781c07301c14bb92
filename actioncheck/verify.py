"""Result reporting: run comparators over a completed evaluation.

:func:`evaluate_and_report` is the main entry point. It runs the action
through :func:`~actioncheck.engine.evaluate_action`, then checks every
recorded effect against its expectation in emission order, so the first
failure reported is the first divergence the action actually produced.

Under :attr:`ReportPolicy.FIRST_FAILURE` (the default) the first raising
comparator ends the run. Under :attr:`ReportPolicy.ALL_FAILURES` every check
runs and the failures are raised together as a
:class:`~actioncheck.errors.TriggerMismatches` carrying a
:class:`CheckReport`.

All report types are JSON-serializable.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from actioncheck.comparators import comparing_check
from actioncheck.config import CheckConfig, ReportPolicy, resolve_comparator
from actioncheck.engine import (
    Action,
    Check,
    Evaluation,
    evaluate_action,
    evaluate_action_async,
)
from actioncheck.errors import TriggerMismatch, TriggerMismatches
from actioncheck.expectations import Comparator, ExpectationInput
from actioncheck.store import Store
from actioncheck.triggers import Trigger

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CheckResult
# ---------------------------------------------------------------------------

@dataclass
class CheckResult:
    """The outcome of comparing one check.

    Attributes:
        index: Position of the check in emission order.
        received: The Trigger the action emitted.
        expected: The Trigger that was declared at this position.
        passed: Whether the comparator accepted the pair.
        failure_reason: The comparator's error message when ``passed`` is False.
    """
    index: int
    received: Trigger
    expected: Trigger
    passed: bool
    failure_reason: str = ""

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {
            "index": self.index,
            "received": self.received.to_dict(),
            "expected": self.expected.to_dict(),
            "passed": self.passed,
            "failure_reason": self.failure_reason,
        }


# ---------------------------------------------------------------------------
# CheckReport
# ---------------------------------------------------------------------------

@dataclass
class CheckReport:
    """Aggregate comparison results for one action run.

    Attributes:
        action_name: Name of the action that was checked.
        results: Per-check results in emission order.
        wall_time_ms: Time spent comparing, in milliseconds.
    """
    action_name: str
    results: list[CheckResult] = field(default_factory=list)
    wall_time_ms: float = 0.0

    @property
    def total_checks(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return self.total_checks - self.passed

    @property
    def all_passed(self) -> bool:
        """True if every check passed."""
        return self.failed == 0

    def failures(self) -> list[CheckResult]:
        """Return only the failed check results."""
        return [r for r in self.results if not r.passed]

    def summary(self) -> str:
        """Generate a human-readable summary, one line per check."""
        lines: list[str] = []
        lines.append(f"Action check report: {self.action_name}")
        lines.append(f"  Total: {self.total_checks}  Passed: {self.passed}  Failed: {self.failed}")
        lines.append("")

        for r in self.results:
            status = "PASS" if r.passed else "FAIL"
            lines.append(f"  [{status}] #{r.index} {r.received.describe()}")
            if not r.passed:
                lines.append(f"         Expected: {r.expected.describe()}")
                lines.append(f"         Reason: {r.failure_reason}")

        status_line = "ALL PASSED" if self.all_passed else f"{self.failed} FAILED"
        lines.append("")
        lines.append(f"  Result: {status_line}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON storage."""
        return {
            "action_name": self.action_name,
            "total_checks": self.total_checks,
            "passed": self.passed,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
            "wall_time_ms": self.wall_time_ms,
            "all_passed": self.all_passed,
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to a JSON string; payloads JSON cannot encode are repr'd."""
        return json.dumps(self.to_dict(), indent=indent, default=repr)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def check_results(
    evaluation: Evaluation,
    comparator: Comparator | None = None,
    *,
    config: CheckConfig | None = None,
) -> object:
    """Compare every check and return the action's result if all pass.

    ``comparator`` is the run-level comparator; when given it takes the
    place of ``config.comparator``.

    Raises:
        TriggerMismatch: from the strict comparator, at the first failure.
        TriggerMismatches: under ``ReportPolicy.ALL_FAILURES``.
        Exception: whatever a custom comparator raises, unchanged.
    """
    run_config = _resolve_config(comparator, config)

    if run_config.policy is ReportPolicy.ALL_FAILURES:
        report = collect_results(evaluation, config=run_config)
        if not report.all_passed:
            raise TriggerMismatches(report)
        return evaluation.result

    start_time = time.monotonic()
    for check in evaluation.checks:
        try:
            _compare(check, run_config.comparator)
        except TriggerMismatch as exc:
            if exc.index is None:
                exc.index = check.index
            raise

    elapsed_ms = (time.monotonic() - start_time) * 1000.0
    logger.info(
        "Action check complete: %s -- %d/%d checks passed in %.1fms",
        evaluation.action_name,
        len(evaluation.checks),
        len(evaluation.checks),
        elapsed_ms,
    )
    return evaluation.result


def collect_results(
    evaluation: Evaluation,
    comparator: Comparator | None = None,
    *,
    config: CheckConfig | None = None,
) -> CheckReport:
    """Run every comparator and collect the outcomes instead of raising.

    Assertion failures (including ``TriggerMismatch``) become failed
    :class:`CheckResult` entries. Any other exception propagates.
    """
    run_config = _resolve_config(comparator, config)
    start_time = time.monotonic()
    results: list[CheckResult] = []

    for check in evaluation.checks:
        try:
            _compare(check, run_config.comparator)
        except AssertionError as exc:
            if isinstance(exc, TriggerMismatch) and exc.index is None:
                exc.index = check.index
            results.append(CheckResult(
                index=check.index,
                received=check.received,
                expected=check.expected,
                passed=False,
                failure_reason=str(exc),
            ))
        else:
            results.append(CheckResult(
                index=check.index,
                received=check.received,
                expected=check.expected,
                passed=True,
            ))

    elapsed_ms = (time.monotonic() - start_time) * 1000.0
    report = CheckReport(
        action_name=evaluation.action_name,
        results=results,
        wall_time_ms=elapsed_ms,
    )
    logger.info(
        "Action check complete: %s -- %d/%d checks passed in %.1fms",
        report.action_name,
        report.passed,
        report.total_checks,
        elapsed_ms,
    )
    return report


def _compare(check: Check, run_comparator: Comparator | None) -> None:
    compare = resolve_comparator(check.comparator, run_comparator)
    with comparing_check(check.index):
        compare(check.received.kind, check.received, check.expected, check.snapshot)


def _resolve_config(comparator: Comparator | None, config: CheckConfig | None) -> CheckConfig:
    if config is None:
        return CheckConfig(comparator=comparator)
    if comparator is not None:
        return dataclasses.replace(config, comparator=comparator)
    return config


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def evaluate_and_report(
    action: Action,
    expectations: Sequence[ExpectationInput] | None = None,
    payload: object = None,
    store: Store | Mapping[str, object] | None = None,
    comparator: Comparator | None = None,
    *,
    config: CheckConfig | None = None,
) -> object:
    """Check that ``action`` emits ``expectations`` in order and return its result.

    Args:
        action: Called as ``action(context, payload)``; may be a coroutine
            function.
        expectations: Declared effects in the order they should be emitted.
        payload: Passed to the action as its second argument.
        store: A :class:`~actioncheck.store.Store` or mapping of store
            fields. ``None`` gives an empty store.
        comparator: Run-level comparator, overriding the process default
            but not per-expectation comparators.
        config: Run settings; ``comparator`` above wins over
            ``config.comparator`` when both are given.

    Returns:
        Whatever the action returned (awaited, for coroutine actions).

    Usage::

        result = evaluate_and_report(
            answer,
            [expect_mutation("increment", callback=apply_increment)],
            store=Store(state={"count": 0}),
        )
    """
    run_config = _resolve_config(comparator, config)
    evaluation = evaluate_action(action, expectations, payload, store)
    return check_results(evaluation, config=run_config)


async def evaluate_and_report_async(
    action: Action,
    expectations: Sequence[ExpectationInput] | None = None,
    payload: object = None,
    store: Store | Mapping[str, object] | None = None,
    comparator: Comparator | None = None,
    *,
    config: CheckConfig | None = None,
) -> object:
    """Async counterpart of :func:`evaluate_and_report`."""
    run_config = _resolve_config(comparator, config)
    evaluation = await evaluate_action_async(action, expectations, payload, store)
    return check_results(evaluation, config=run_config)
