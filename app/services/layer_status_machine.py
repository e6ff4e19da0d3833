"""Layer status shown in the window, with strict transition controls.

UNKNOWN is the only state a result can be applied from, so ACTIVE and INACTIVE
never flip directly: each refresh passes through UNKNOWN via begin_check().
UNREACHABLE is left only by an explicit re-check.
"""
from __future__ import annotations

import threading
from enum import Enum


class LayerStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    UNREACHABLE = "UNREACHABLE"


class InvalidTransition(RuntimeError):
    pass


class LayerStatusMachine:
    def __init__(self):
        self._state = LayerStatus.UNKNOWN
        self._lock = threading.Lock()

    @property
    def state(self) -> LayerStatus:
        with self._lock:
            return self._state

    def _transition(self, expected: set[LayerStatus], new_state: LayerStatus) -> LayerStatus:
        with self._lock:
            if self._state not in expected:
                raise InvalidTransition(f"Cannot transition {self._state} -> {new_state}")
            self._state = new_state
            return self._state

    def can_check(self, explicit: bool = False) -> bool:
        return explicit or self.state is not LayerStatus.UNREACHABLE

    def begin_check(self, explicit: bool = False) -> LayerStatus:
        expected = {LayerStatus.UNKNOWN, LayerStatus.ACTIVE, LayerStatus.INACTIVE}
        if explicit:
            expected.add(LayerStatus.UNREACHABLE)
        return self._transition(expected, LayerStatus.UNKNOWN)

    def mark_active(self) -> LayerStatus:
        return self._transition({LayerStatus.UNKNOWN}, LayerStatus.ACTIVE)

    def mark_inactive(self) -> LayerStatus:
        return self._transition({LayerStatus.UNKNOWN}, LayerStatus.INACTIVE)

    def mark_unreachable(self) -> LayerStatus:
        return self._transition({LayerStatus.UNKNOWN}, LayerStatus.UNREACHABLE)
