"""Comparator configuration and resolution.

Per-call configuration is a :class:`CheckConfig` passed to
:func:`~actioncheck.verify.evaluate_and_report`. The process-wide default
comparator is the fallback when neither the expectation nor the call names
one; it starts out as :func:`~actioncheck.comparators.strict_comparator`.

The process-wide default is plain module state with no locking. Set it once
at start-up with :func:`configure`; a test that changes it must call
:func:`reset_defaults` afterwards (the ``actioncheck_defaults`` pytest
fixture does this).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from actioncheck.comparators import strict_comparator
from actioncheck.errors import NonCallableComparator
from actioncheck.expectations import Comparator

logger = logging.getLogger(__name__)


class ReportPolicy(Enum):
    """How many comparison failures a run reports."""
    FIRST_FAILURE = "first_failure"
    ALL_FAILURES = "all_failures"


@dataclass(frozen=True)
class CheckConfig:
    """Per-call settings for checking an action.

    Attributes:
        comparator: Run-level comparator; overrides the process default
            but not a per-expectation comparator.
        policy: Stop at the first failing check, or run them all and
            report every failure together.
    """
    comparator: Comparator | None = None
    policy: ReportPolicy = ReportPolicy.FIRST_FAILURE

    def __post_init__(self) -> None:
        if self.comparator is not None and not callable(self.comparator):
            raise NonCallableComparator(self.comparator)


# ---------------------------------------------------------------------------
# Process-wide default
# ---------------------------------------------------------------------------

_default_comparator: Comparator = strict_comparator


def configure(comparator: Comparator) -> None:
    """Replace the process-wide default comparator.

    Not re-entrant: call it at start-up, or from a test that restores the
    previous value with :func:`reset_defaults`.
    """
    global _default_comparator
    if not callable(comparator):
        raise NonCallableComparator(comparator)
    logger.debug("Default comparator set to %s", getattr(comparator, "__qualname__", comparator))
    _default_comparator = comparator


def reset_defaults() -> None:
    """Restore the strict comparator as the process-wide default."""
    global _default_comparator
    _default_comparator = strict_comparator


def default_comparator() -> Comparator:
    """The comparator used when nothing more specific is set."""
    return _default_comparator


def resolve_comparator(
    check_comparator: Comparator | None,
    run_comparator: Comparator | None = None,
) -> Comparator:
    """Pick the comparator for one check.

    Expectation-level beats run-level, which beats the process default.
    The default is read at call time, not captured earlier.
    """
    if check_comparator is not None:
        return check_comparator
    if run_comparator is not None:
        return run_comparator
    return _default_comparator
