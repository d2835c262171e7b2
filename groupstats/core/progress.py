"""
Cooperative cancellation and progress reporting.

Long phases (loading, per-column computation) check a CancellationToken
between chunks/tasks and report monotonic progress through a
ProgressReporter. Both are safe to share with worker threads.

Usage:
    token = CancellationToken()
    reporter = ProgressReporter('load', callback=print)

    for chunk in chunks:
        token.raise_if_cancelled('load')
        ...
        reporter.update(done / total)
    reporter.finish()

    # From another thread (e.g. a UI "Stop" button):
    token.cancel()
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable

from groupstats.core.exceptions import OperationCancelled


@dataclass(frozen=True)
class ProgressEvent:
    """
    One progress notification.

    Attributes:
        phase: 'load' or 'compute'
        fraction: Completed fraction of the phase, in [0, 1], never
            decreasing within a phase
        message: Human-readable status line
    """
    phase: str
    fraction: float
    message: str = ""


ProgressCallback = Callable[[ProgressEvent], None]


class CancellationToken:
    """Thread-safe cancellation flag, checked between units of work."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, phase: str = "") -> None:
        """Raise OperationCancelled if cancellation was requested."""
        if self._event.is_set():
            raise OperationCancelled(phase)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or timeout; returns the cancelled state."""
        return self._event.wait(timeout)


class ProgressReporter:
    """
    Monotonic progress emitter for one phase.

    Fractions are clamped to [0, 1] and never move backwards. Updates
    smaller than `min_step` are coalesced so callers can report per chunk
    without flooding the observer.
    """

    def __init__(
        self,
        phase: str,
        callback: ProgressCallback | None = None,
        *,
        min_step: float = 0.01,
    ):
        self._phase = phase
        self._callback = callback
        self._min_step = min_step
        self._lock = threading.Lock()
        self._fraction = 0.0
        self._emitted = -1.0

    @property
    def fraction(self) -> float:
        return self._fraction

    def update(self, fraction: float, message: str = "") -> None:
        """Report progress; ignored if it would move backwards."""
        with self._lock:
            fraction = min(max(fraction, self._fraction), 1.0)
            self._fraction = fraction
            if fraction < 1.0 and fraction - self._emitted < self._min_step:
                return
            if fraction == self._emitted:
                return
            self._emitted = fraction
        if self._callback is not None:
            self._callback(ProgressEvent(self._phase, fraction, message))

    def finish(self, message: str = "") -> None:
        """Report phase completion (fraction 1.0)."""
        self.update(1.0, message)
