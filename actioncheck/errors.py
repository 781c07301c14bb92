"""Error taxonomy for actioncheck.

Every error raised by the library is an :class:`ActionCheckError` tagged with
an :class:`ErrorKind`, so tests can match on ``exc.kind`` and structured
attributes instead of message text.

- :class:`ConfigurationError` -- raised before the action runs.
- :class:`ExecutionError` -- raised while the action runs.
- :class:`VerificationError` -- raised after the run when the emitted effects
  diverge from the declared ones. These are also ``AssertionError`` so test
  runners report them as ordinary failures.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from actioncheck.triggers import Trigger, TriggerKind
    from actioncheck.verify import CheckReport


class ErrorKind(Enum):
    """Tag identifying each member of the error taxonomy."""
    INVALID_EXPECTATION_LIST = "invalid_expectation_list"
    EMPTY_TRIGGER_INPUT = "empty_trigger_input"
    MISPLACED_EXPECTATION_FIELD = "misplaced_expectation_field"
    INVALID_TRIGGER_KIND = "invalid_trigger_kind"
    INVALID_TRIGGER_NAME = "invalid_trigger_name"
    INVALID_TRIGGER_OPTIONS = "invalid_trigger_options"
    NON_CALLABLE_COMPARATOR = "non_callable_comparator"
    NON_CALLABLE_CALLBACK = "non_callable_callback"
    ASYNC_CALLBACK_NOT_SUPPORTED = "async_callback_not_supported"
    INTERCEPTOR_CONSTRUCTION_FAILED = "interceptor_construction_failed"
    ACTION_EXECUTION_FAILED = "action_execution_failed"
    TRIGGER_COUNT_MISMATCH = "trigger_count_mismatch"
    TRIGGER_MISMATCH = "trigger_mismatch"
    TRIGGER_MISMATCHES = "trigger_mismatches"


class ActionCheckError(Exception):
    """Base exception for all actioncheck errors."""

    kind: ErrorKind

    def to_dict(self) -> dict[str, object]:
        """Serialize the tag and message for logging or storage."""
        return {"kind": self.kind.value, "message": str(self)}


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(ActionCheckError):
    """Raised when expectations or triggers are declared incorrectly.

    ``index`` is the position of the offending expectation, or ``None`` when
    the error is not tied to one (e.g. a Trigger built on its own).
    """

    def __init__(self, message: str, index: int | None = None) -> None:
        self.index = index
        self.message = message
        super().__init__(message)

    def at_index(self, index: int) -> ConfigurationError:
        """Attach the expectation index, keeping the original message."""
        self.index = index
        return self

    def __str__(self) -> str:
        if self.index is None:
            return self.message
        return f"Unable to process expectation {self.index}: {self.message}"

    def to_dict(self) -> dict[str, object]:
        result = super().to_dict()
        result["index"] = self.index
        return result


class InvalidExpectationList(ConfigurationError):
    """Raised when expectations are not an ordered sequence."""

    kind = ErrorKind.INVALID_EXPECTATION_LIST

    def __init__(self, type_name: str, message: str | None = None, index: int | None = None) -> None:
        self.type_name = type_name
        super().__init__(
            message or f"expectations must be a list or tuple (type provided: {type_name})",
            index,
        )


class EmptyTriggerInput(ConfigurationError):
    """Raised when a Trigger is built with neither kind nor name."""

    kind = ErrorKind.EMPTY_TRIGGER_INPUT

    def __init__(self, index: int | None = None) -> None:
        super().__init__(
            "Cannot construct Trigger from empty input "
            "(did you put the trigger fields directly in the expectation?)",
            index,
        )


class MisplacedExpectationField(ConfigurationError):
    """Raised when a trigger descriptor carries ``comparator`` or ``callback``."""

    kind = ErrorKind.MISPLACED_EXPECTATION_FIELD

    def __init__(self, field_name: str, index: int | None = None) -> None:
        self.field_name = field_name
        super().__init__(
            f'Found "{field_name}" in a Trigger descriptor. {field_name} is a '
            "property of the Expectation itself, not of its Trigger",
            index,
        )


class InvalidTriggerKind(ConfigurationError):
    """Raised when a Trigger kind is not a known TriggerKind."""

    kind = ErrorKind.INVALID_TRIGGER_KIND

    def __init__(self, value: object, index: int | None = None) -> None:
        self.value = value
        super().__init__(
            f"Trigger kind must be a valid TriggerKind (received {value!r})",
            index,
        )


class InvalidTriggerName(ConfigurationError):
    """Raised when a Trigger name is not a string, or empty on a real effect."""

    kind = ErrorKind.INVALID_TRIGGER_NAME

    def __init__(self, value: object, index: int | None = None) -> None:
        self.value = value
        if isinstance(value, str):
            message = "Trigger name must be non-empty for mutations and dispatches"
        else:
            message = f"Trigger name must be a string (type provided: {type(value).__name__})"
        super().__init__(message, index)


class InvalidTriggerOptions(ConfigurationError):
    """Raised when Trigger options are present but not a mapping."""

    kind = ErrorKind.INVALID_TRIGGER_OPTIONS

    def __init__(self, value: object, index: int | None = None) -> None:
        self.value = value
        super().__init__(
            f"Trigger options must be a mapping (type provided: {type(value).__name__})",
            index,
        )


class NonCallableComparator(ConfigurationError):
    """Raised when a comparator is supplied but cannot be called."""

    kind = ErrorKind.NON_CALLABLE_COMPARATOR

    def __init__(self, value: object, index: int | None = None) -> None:
        self.value = value
        super().__init__(
            f"comparator must be callable (type provided: {type(value).__name__})",
            index,
        )


class NonCallableCallback(ConfigurationError):
    """Raised when an expectation callback is supplied but cannot be called."""

    kind = ErrorKind.NON_CALLABLE_CALLBACK

    def __init__(self, value: object, index: int | None = None) -> None:
        self.value = value
        super().__init__(
            f"callback must be callable (type provided: {type(value).__name__})",
            index,
        )


class AsyncCallbackNotSupported(ConfigurationError):
    """Raised when an expectation callback is a coroutine function or returns an awaitable.

    Callbacks run synchronously inside ``commit``/``dispatch``; a coroutine
    would be handed back un-run and its side effects silently lost.
    """

    kind = ErrorKind.ASYNC_CALLBACK_NOT_SUPPORTED

    def __init__(self, value: object, index: int | None = None) -> None:
        self.value = value
        name = getattr(value, "__qualname__", None) or type(value).__name__
        super().__init__(
            f"callback {name!r} is asynchronous; expectation callbacks must be "
            "plain functions that finish before the emitter returns",
            index,
        )


# ---------------------------------------------------------------------------
# Execution errors
# ---------------------------------------------------------------------------

class ExecutionError(ActionCheckError):
    """Raised when something goes wrong while the action is running."""


class InterceptorConstructionFailed(ExecutionError):
    """Raised when the action calls ``commit``/``dispatch`` with bad arguments."""

    kind = ErrorKind.INTERCEPTOR_CONSTRUCTION_FAILED

    def __init__(self, trigger_kind: TriggerKind, name: object, cause: ConfigurationError) -> None:
        self.trigger_kind = trigger_kind
        self.name = name
        self.cause = cause
        super().__init__(
            f"Error constructing Trigger for received {trigger_kind.value} {name!r}: "
            f"{cause}. This is likely a problem in the call to commit() or "
            "dispatch() in your action code."
        )

    def to_dict(self) -> dict[str, object]:
        result = super().to_dict()
        result["trigger_kind"] = self.trigger_kind.value
        result["name"] = repr(self.name)
        result["cause"] = self.cause.kind.value
        return result


class ActionExecutionFailed(ExecutionError):
    """Raised when the action under test (or one of its callbacks) raises."""

    kind = ErrorKind.ACTION_EXECUTION_FAILED

    def __init__(self, action_name: str, cause: BaseException) -> None:
        self.action_name = action_name
        self.cause = cause
        super().__init__(
            f"[ACTION '{action_name}' FAIL] {type(cause).__name__}: {cause}. "
            "This could be due to an error in your action code or in a "
            "callback supplied as part of your test."
        )

    def to_dict(self) -> dict[str, object]:
        result = super().to_dict()
        result["action_name"] = self.action_name
        result["cause"] = type(self.cause).__name__
        return result


# ---------------------------------------------------------------------------
# Verification errors
# ---------------------------------------------------------------------------

class VerificationError(ActionCheckError, AssertionError):
    """Raised when the emitted effects do not match the declared ones."""


class TriggerCountMismatch(VerificationError):
    """Raised when an action emits more or fewer effects than declared."""

    kind = ErrorKind.TRIGGER_COUNT_MISMATCH

    def __init__(self, action_name: str, expected: int, received: int) -> None:
        self.action_name = action_name
        self.expected = expected
        self.received = received
        super().__init__(
            f"{action_name} triggered the wrong number of effects. "
            f"Expected {expected}, received {received}."
        )

    def to_dict(self) -> dict[str, object]:
        result = super().to_dict()
        result["action_name"] = self.action_name
        result["expected"] = self.expected
        result["received"] = self.received
        return result


class TriggerMismatch(VerificationError):
    """Raised by the strict comparator when a received Trigger diverges.

    Attributes:
        field: Which part diverged: ``"kind"``, ``"name"``, ``"payload"``
            or ``"options"``.
        received: The Trigger emitted by the action.
        expected: The Trigger declared by the test.
        index: Position of the check in emission order. Comparators do not
            know it; the reporter fills it in.
        detail: Optional extra text, such as a payload diff.
    """

    kind = ErrorKind.TRIGGER_MISMATCH

    def __init__(
        self,
        field: str,
        received: Trigger,
        expected: Trigger,
        index: int | None = None,
        detail: str = "",
    ) -> None:
        self.field = field
        self.received = received
        self.expected = expected
        self.index = index
        self.detail = detail
        super().__init__(field, received, expected)

    def __str__(self) -> str:
        position = f"at index {self.index}" if self.index is not None else "at unknown index"
        text = (
            f"Trigger {self.field} mismatch {position}: "
            f"expected {self.expected.describe()}, received {self.received.describe()}"
        )
        if self.detail:
            text = f"{text}\n{self.detail}"
        return text

    def to_dict(self) -> dict[str, object]:
        result = super().to_dict()
        result["index"] = self.index
        result["field"] = self.field
        result["received"] = self.received.to_dict()
        result["expected"] = self.expected.to_dict()
        return result


class TriggerMismatches(VerificationError):
    """Raised under the ALL_FAILURES policy with every failed check."""

    kind = ErrorKind.TRIGGER_MISMATCHES

    def __init__(self, report: CheckReport) -> None:
        self.report = report
        super().__init__(report.summary())

    def to_dict(self) -> dict[str, object]:
        result = super().to_dict()
        result["report"] = self.report.to_dict()
        return result
