"""
Single-slot store for the latest published FaceExpressionState.

The frame pipeline is the only writer; HTTP handlers and renderers read on their
own schedule. Each publish overwrites the previous value (None included): there
is no queue, no history and no acknowledgment.
"""

import threading
from typing import Optional

from expression.expression_state import FaceExpressionState


class ExpressionStateStore:
    """Last-write-wins slot with a publish counter for pollers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._state: Optional[FaceExpressionState] = None
        self._sequence: int = 0

    def publish(self, state: Optional[FaceExpressionState]) -> None:
        """Replace the slot with this frame's state (None = no face)."""
        with self._lock:
            self._state = state
            self._sequence += 1

    def latest(self) -> Optional[FaceExpressionState]:
        """Most recently published state, or None."""
        with self._lock:
            return self._state

    def snapshot(self):
        """(sequence, state) read atomically."""
        with self._lock:
            return self._sequence, self._state

    @property
    def sequence(self) -> int:
        """Number of publishes so far; changes whenever a new value lands."""
        with self._lock:
            return self._sequence

    def clear(self) -> None:
        """Empty the slot (e.g. when detection stops). Counts as a publish of None."""
        self.publish(None)


_expression_store: Optional[ExpressionStateStore] = None
_expression_store_lock = threading.Lock()


def get_expression_store() -> ExpressionStateStore:
    """Process-wide default store (created on first use)."""
    global _expression_store
    with _expression_store_lock:
        if _expression_store is None:
            _expression_store = ExpressionStateStore()
        return _expression_store
