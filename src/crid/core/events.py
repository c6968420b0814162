from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Literal

import structlog

logger = structlog.get_logger(__name__)

FactKind = Literal["enrolled", "status_changed", "removed", "period_changed"]
FactListener = Callable[["Fact"], None]

# Exact payload field sets per fact kind.
FACT_FIELDS: dict[str, tuple[str, ...]] = {
    "enrolled": ("student", "course_code", "course_name", "instructor_name"),
    "status_changed": ("student", "course_code", "old_status", "new_status"),
    "removed": ("student", "course_code", "period", "caller"),
    "period_changed": ("old_period", "new_period", "caller"),
}


@dataclass(frozen=True)
class Fact:
    revision: int
    kind: FactKind
    payload: dict[str, Any] = field(default_factory=dict)
    emitted_at: float = 0.0


class FactLog:
    """Observable record of committed registry mutations.

    Each fact gets the next revision number, so polling clients can ask for
    everything newer than the last revision they saw. Only the most recent
    `max_history` facts are retained; the revision counter never resets.
    """

    def __init__(self, *, max_history: int = 10_000, clock: Callable[[], float] = time.time) -> None:
        if int(max_history) <= 0:
            raise ValueError("max_history must be a positive integer")
        self._lock = threading.RLock()
        self._facts: deque[Fact] = deque(maxlen=int(max_history))
        self._listeners: list[FactListener] = []
        self._revision = 0
        self._clock = clock

    def revision(self) -> int:
        with self._lock:
            return self._revision

    def record(self, kind: FactKind, **payload: Any) -> Fact:
        """Number and store a fact without notifying listeners.

        Callers that record under their own lock hand the result to `publish`
        once that lock is released.
        """
        expected = FACT_FIELDS.get(kind)
        if expected is None:
            raise ValueError(f"Unknown fact kind: {kind!r}")
        if set(payload) != set(expected):
            raise ValueError(f"Fact {kind!r} requires fields {expected}, got {tuple(sorted(payload))}")

        with self._lock:
            self._revision += 1
            fact = Fact(revision=self._revision, kind=kind, payload=dict(payload), emitted_at=float(self._clock()))
            self._facts.append(fact)
            return fact

    def publish(self, fact: Fact) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(fact)
            except Exception:
                # The mutation is already committed; a broken observer must not undo it.
                logger.exception("fact listener failed", kind=fact.kind, revision=fact.revision)

    def emit(self, kind: FactKind, **payload: Any) -> Fact:
        fact = self.record(kind, **payload)
        self.publish(fact)
        return fact

    def since(self, revision: int = 0) -> list[Fact]:
        with self._lock:
            return [f for f in self._facts if f.revision > int(revision)]

    def subscribe(self, listener: FactListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe


def fact_to_dict(fact: Fact) -> dict[str, Any]:
    return {
        "revision": int(fact.revision),
        "kind": fact.kind,
        "payload": dict(fact.payload),
        "emittedAt": float(fact.emitted_at),
    }
