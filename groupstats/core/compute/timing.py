"""
Wall-clock section timing.

Each stage owns its Timer: the loader times `scan` and `parse`, the
statistics backend `describe` and `compare`, the coordinator `group` and
`columns`. The resulting dict lands in the `timing` field of a Result or
LoadReport.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Accumulating section timer.

    Usage:
        timer = Timer()
        timer.start()
        with timer.section('scan'):
            ...
        timer.stop()
        timer.result()   # {'total_seconds': 0.05, 'scan': 0.03}

    Not thread-safe; a Timer belongs to the thread that started it.
    """

    def __init__(self):
        self._sections: dict[str, float] = {}
        self._start_time: float | None = None
        self._total: float | None = None

    def start(self) -> None:
        self._start_time = time.perf_counter()

    def stop(self) -> None:
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._start_time

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """
        Time the enclosed block under `name`.

        Repeated sections with the same name add up. The section is recorded
        even when the block raises.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self._sections[name] = self._sections.get(name, 0.0) + (time.perf_counter() - start)

    def result(self) -> dict[str, float]:
        """
        'total_seconds' plus every section, in seconds.

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}
