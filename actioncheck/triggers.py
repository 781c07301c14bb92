"""Trigger value type: one mutation or dispatch, declared or received.

A Trigger is what an action routine emits against its store: a kind
(mutation or dispatch), a name, and optionally a payload and options. Tests
declare the Triggers they expect; the interceptor builds the Triggers it
receives. Both go through the same validation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Self

from actioncheck.errors import (
    EmptyTriggerInput,
    InvalidTriggerKind,
    InvalidTriggerName,
    InvalidTriggerOptions,
    MisplacedExpectationField,
)

# Expectation-only fields that sometimes end up in a trigger descriptor by mistake.
_EXPECTATION_FIELDS = ("comparator", "callback")


# ---------------------------------------------------------------------------
# NOT_SET marker
# ---------------------------------------------------------------------------

class _NotSet:
    """Marker for a payload or options field that was never declared."""

    _instance: _NotSet | None = None

    def __new__(cls) -> _NotSet:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_SET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _NotSet:
        return self

    def __deepcopy__(self, memo: dict[int, object]) -> _NotSet:
        return self


NOT_SET = _NotSet()


# ---------------------------------------------------------------------------
# TriggerKind / Trigger
# ---------------------------------------------------------------------------

class TriggerKind(Enum):
    """Kinds of store effect an action can emit."""
    MUTATION = "mutation"
    DISPATCH = "dispatch"
    UNSET = "unset"


def _coerce_kind(value: object) -> TriggerKind:
    if isinstance(value, TriggerKind):
        return value
    if isinstance(value, str):
        try:
            return TriggerKind(value)
        except ValueError:
            pass
    raise InvalidTriggerKind(value)


@dataclass(frozen=True)
class Trigger:
    """A single store effect: ``commit(name, payload, options)`` or ``dispatch(...)``.

    ``payload`` and ``options`` default to :data:`NOT_SET`. On an expected
    Trigger that means "any value is fine"; on a received Trigger the
    interceptor always fills them in.

    Construction validates the shape and raises a
    :class:`~actioncheck.errors.ConfigurationError` subclass on the first
    problem found, so a Trigger is never partially valid.
    """
    kind: TriggerKind
    name: str
    payload: object = NOT_SET
    options: Mapping[str, object] | _NotSet | None = NOT_SET

    def __post_init__(self) -> None:
        if self.kind is None and self.name is None:
            raise EmptyTriggerInput()
        object.__setattr__(self, "kind", _coerce_kind(self.kind))
        if not isinstance(self.name, str):
            raise InvalidTriggerName(self.name)
        if not self.name and self.kind is not TriggerKind.UNSET:
            raise InvalidTriggerName(self.name)
        if self.options is not None and self.options is not NOT_SET:
            if not isinstance(self.options, Mapping):
                raise InvalidTriggerOptions(self.options)
            object.__setattr__(self, "options", dict(self.options))

    # -- Construction paths --------------------------------------------------

    @classmethod
    def from_fields(
        cls,
        kind: TriggerKind | str,
        name: str,
        payload: object = NOT_SET,
        options: Mapping[str, object] | _NotSet | None = NOT_SET,
    ) -> Self:
        """Build a Trigger from its four fields."""
        return cls(kind=kind, name=name, payload=payload, options=options)  # type: ignore[arg-type]

    @classmethod
    def from_descriptor(cls, descriptor: Mapping[str, object] | None) -> Self:
        """Build a Trigger from a mapping with ``kind``/``name``/``payload``/``options`` keys.

        Keys that are absent stay :data:`NOT_SET`, so a descriptor without a
        ``payload`` key matches any received payload.
        """
        if not descriptor:
            raise EmptyTriggerInput()
        for field_name in _EXPECTATION_FIELDS:
            if field_name in descriptor:
                raise MisplacedExpectationField(field_name)
        if "kind" not in descriptor and "name" not in descriptor:
            raise EmptyTriggerInput()
        return cls(
            kind=descriptor.get("kind"),  # type: ignore[arg-type]
            name=descriptor.get("name"),  # type: ignore[arg-type]
            payload=descriptor.get("payload", NOT_SET),
            options=descriptor.get("options", NOT_SET),  # type: ignore[arg-type]
        )

    @classmethod
    def unset(cls) -> Self:
        """The sentinel used when an action emits more effects than were declared."""
        return cls(kind=TriggerKind.UNSET, name="")

    @property
    def is_unset(self) -> bool:
        """True for the sentinel returned by :meth:`unset`."""
        return self.kind is TriggerKind.UNSET

    # -- Rendering / serialization ------------------------------------------

    def describe(self) -> str:
        """One-line rendering used in error and log messages."""
        if self.is_unset:
            return "<no effect declared>"
        parts = [f"{self.kind.value} {self.name!r}"]
        if self.payload is not NOT_SET:
            parts.append(f"payload={self.payload!r}")
        if self.options is not NOT_SET and self.options is not None:
            parts.append(f"options={self.options!r}")
        return " ".join(parts)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict; undeclared fields are omitted."""
        result: dict[str, object] = {
            "kind": self.kind.value,
            "name": self.name,
        }
        if self.payload is not NOT_SET:
            result["payload"] = self.payload
        if self.options is not NOT_SET:
            result["options"] = dict(self.options) if self.options is not None else None
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Self:
        """Deserialize from a plain dict (inverse of to_dict)."""
        return cls.from_descriptor(data)


# -- Trigger constructor functions ------------------------------------------

def mutation(
    name: str,
    payload: object = NOT_SET,
    options: Mapping[str, object] | None | _NotSet = NOT_SET,
) -> Trigger:
    """Create a mutation Trigger (``context.commit(name, payload, options)``)."""
    return Trigger(kind=TriggerKind.MUTATION, name=name, payload=payload, options=options)


def dispatch(
    name: str,
    payload: object = NOT_SET,
    options: Mapping[str, object] | None | _NotSet = NOT_SET,
) -> Trigger:
    """Create a dispatch Trigger (``context.dispatch(name, payload, options)``)."""
    return Trigger(kind=TriggerKind.DISPATCH, name=name, payload=payload, options=options)
