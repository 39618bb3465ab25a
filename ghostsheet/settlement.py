"""Single-settlement, multicast-once future used to sequence fetch/parse/cache steps."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

Callback = Callable[..., Any]


class SettlementState(str, Enum):
    """Lifecycle of a settlement; transitions are one-way."""

    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Settlement:
    """Hand a value (or failure) to subscribers registered before or after it exists.

    Every callback registered while pending fires exactly once, in registration
    order, when the settlement is first resolved or rejected. Callbacks
    registered after settlement are invoked synchronously with the stored
    arguments. Settling twice has no observable effect.
    """

    def __init__(self) -> None:
        self.state = SettlementState.PENDING
        self.args: tuple[Any, ...] = ()
        self._resolved: list[Callback] = []
        self._rejected: list[Callback] = []

    @property
    def pending(self) -> bool:
        return self.state is SettlementState.PENDING

    @property
    def resolved(self) -> bool:
        return self.state is SettlementState.RESOLVED

    @property
    def rejected(self) -> bool:
        return self.state is SettlementState.REJECTED

    def resolve(self, *args: Any) -> "Settlement":
        return self._settle(SettlementState.RESOLVED, args)

    def reject(self, *args: Any) -> "Settlement":
        return self._settle(SettlementState.REJECTED, args)

    def on_resolved(self, callback: Callback) -> "Settlement":
        if self.state is SettlementState.RESOLVED:
            callback(*self.args)
        elif self.state is SettlementState.PENDING:
            self._resolved.append(callback)
        return self

    def on_rejected(self, callback: Callback) -> "Settlement":
        if self.state is SettlementState.REJECTED:
            callback(*self.args)
        elif self.state is SettlementState.PENDING:
            self._rejected.append(callback)
        return self

    def on_settled(self, callback: Callback) -> "Settlement":
        if self.state is not SettlementState.PENDING:
            callback(*self.args)
        else:
            self._resolved.append(callback)
            self._rejected.append(callback)
        return self

    def then(self, done: Callback | None = None, fail: Callback | None = None) -> "Settlement":
        """Register ``done`` and/or ``fail`` in one call."""

        if done is not None:
            self.on_resolved(done)
        if fail is not None:
            self.on_rejected(fail)
        return self

    def forward(self, other: "Settlement") -> "Settlement":
        """Settle ``other`` with whatever this settlement ends up with."""

        self.on_resolved(other.resolve)
        self.on_rejected(other.reject)
        return self

    def _settle(self, state: SettlementState, args: tuple[Any, ...]) -> "Settlement":
        if self.state is not SettlementState.PENDING:
            return self
        self.state = state
        self.args = args
        callbacks = self._resolved if state is SettlementState.RESOLVED else self._rejected
        self._resolved = []
        self._rejected = []
        for callback in callbacks:
            callback(*args)
        return self

    def __repr__(self) -> str:
        return f"Settlement(state={self.state.value!r}, args={self.args!r})"


__all__ = ["Settlement", "SettlementState"]
