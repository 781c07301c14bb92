"""Store stand-in handed to the action under test.

An action routine receives a context object shaped like a Vuex-style store:
``state``, ``getters``, ``root_getters``, ``root_state``, plus the two
effect-emitting entry points ``commit`` and ``dispatch``. Anything else the
test puts on the store (mutation handlers, helper services) travels along in
``extras`` and is readable as a plain attribute.

The caller's :class:`Store` is never modified structurally. Each run builds a
fresh :class:`ActionContext` that shares the store's namespaces by reference,
so a callback that changes ``context.state`` changes the fixture as well.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Self

# Mapping keys recognised by Store.coerce, with the camelCase spellings
# used by JavaScript-style fixtures.
_KEY_ALIASES = {
    "state": "state",
    "getters": "getters",
    "root_getters": "root_getters",
    "rootGetters": "root_getters",
    "root_state": "root_state",
    "rootState": "root_state",
}


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

@dataclass
class Store:
    """The collaborator fixture a test builds for an action.

    Attributes:
        state: Module state the action reads (and callbacks may mutate).
        getters: Computed values visible to the action.
        root_getters: Root-level computed values.
        root_state: Root-level state.
        extras: Any other fields, passed through unmodified.
    """
    state: dict[str, object] = field(default_factory=dict)
    getters: dict[str, object] = field(default_factory=dict)
    root_getters: dict[str, object] = field(default_factory=dict)
    root_state: dict[str, object] = field(default_factory=dict)
    extras: dict[str, object] = field(default_factory=dict)

    @classmethod
    def coerce(cls, store: Store | Mapping[str, object] | None) -> Self:
        """Accept ``None``, a Store, or a plain mapping and return a Store.

        Mapping keys other than the four known namespaces end up in
        ``extras``. The namespace objects themselves are not copied.
        """
        if store is None:
            return cls()
        if isinstance(store, Store):
            return store  # type: ignore[return-value]
        if not isinstance(store, Mapping):
            msg = f"store must be a Store or a mapping (type provided: {type(store).__name__})"
            raise TypeError(msg)

        namespaces: dict[str, object] = {}
        extras: dict[str, object] = {}
        for key, value in store.items():
            target = _KEY_ALIASES.get(key)
            if target is None:
                extras[key] = value
            else:
                namespaces[target] = value
        return cls(extras=extras, **namespaces)  # type: ignore[arg-type]

    def context(
        self,
        commit: Callable[..., object],
        dispatch: Callable[..., object],
    ) -> ActionContext:
        """Build the augmented shallow copy an action receives for one run."""
        return ActionContext(
            state=self.state,
            getters=self.getters,
            root_getters=self.root_getters,
            root_state=self.root_state,
            commit=commit,
            dispatch=dispatch,
            extras=self.extras,
        )


# ---------------------------------------------------------------------------
# ActionContext
# ---------------------------------------------------------------------------

@dataclass
class ActionContext:
    """What the action routine sees as its store during one run."""
    state: dict[str, object]
    getters: dict[str, object]
    root_getters: dict[str, object]
    root_state: dict[str, object]
    commit: Callable[..., object]
    dispatch: Callable[..., object]
    extras: dict[str, object] = field(default_factory=dict)

    def __getattr__(self, name: str) -> object:
        # Only reached for attributes that are not dataclass fields.
        extras = self.__dict__.get("extras")
        if extras is not None and name in extras:
            return extras[name]
        msg = f"{type(self).__name__!r} object has no attribute {name!r}"
        raise AttributeError(msg)

    def snapshot(self) -> StoreSnapshot:
        """Shallow-copy the mutable top-level namespaces as they are right now."""
        return StoreSnapshot(
            state=copy.copy(self.state),
            getters=self.getters,
            root_getters=self.root_getters,
            root_state=copy.copy(self.root_state),
            extras=self.extras,
        )


# ---------------------------------------------------------------------------
# StoreSnapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StoreSnapshot:
    """The store as it looked when an effect was emitted.

    ``state`` and ``root_state`` are fresh dicts, so later reassignment of a
    top-level key does not show up here. Nested objects are still shared
    with the live store.
    """
    state: dict[str, object]
    getters: dict[str, object]
    root_getters: dict[str, object]
    root_state: dict[str, object]
    extras: dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        """Serialize the copied namespaces for reports."""
        return {
            "state": dict(self.state),
            "root_state": dict(self.root_state),
        }
