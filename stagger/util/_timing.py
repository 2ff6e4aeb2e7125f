import contextlib
import warnings
from timeit import default_timer as time
from typing import Dict, Mapping


class Timer:
    """Accumulates wall-clock time and hit counts for named operations."""

    def __init__(self):
        self._clock_starts: Dict[str, float] = {}
        self._accumulated_time: Dict[str, float] = {}
        self._hit_count: Dict[str, int] = {}
        self._enabled = True

    def start(self, name: str):
        """Start timing a given named operation."""
        if not self._enabled:
            return
        if name in self._clock_starts:
            raise ValueError(f"clock already started for '{name}'")
        self._clock_starts[name] = time()

    def stop(self, name: str):
        """Stop timing a given named operation, adding the elapsed time to its
        total and increasing its hit count."""
        if not self._enabled:
            return
        if name not in self._clock_starts:
            raise ValueError(f"clock '{name}' was never started")
        elapsed = time() - self._clock_starts.pop(name)
        self._accumulated_time[name] = self._accumulated_time.get(name, 0.0) + elapsed
        self._hit_count[name] = self._hit_count.get(name, 0) + 1

    @contextlib.contextmanager
    def clock(self, name: str):
        """Context manager timing the operations within its context.

        Args:
            name: the name of the operation being timed

        Example:

                >>> timer = Timer()
                >>> with timer.clock("advection"):
                ...     advect_all_fields()
                ...
                >>> timer.times
                {'advection': 0.0032463260000029}
        """
        self.start(name)
        try:
            yield
        finally:
            self.stop(name)

    def _warn_if_running(self, what: str):
        if len(self._clock_starts) > 0:
            warnings.warn(
                f"Retrieved {what} while clocks are still going, "
                "incomplete times are not included: "
                f"{list(self._clock_starts.keys())}",
                RuntimeWarning,
            )

    @property
    def times(self) -> Mapping[str, float]:
        """accumulated timings for each operation name"""
        self._warn_if_running("times")
        return self._accumulated_time.copy()

    @property
    def hits(self) -> Mapping[str, int]:
        """accumulated hit counts for each operation name"""
        self._warn_if_running("hit counts")
        return self._hit_count.copy()

    def reset(self):
        """Remove all accumulated timings."""
        self._accumulated_time.clear()
        self._hit_count.clear()

    def enable(self):
        self._enabled = True

    def disable(self):
        if len(self._clock_starts) > 0:
            raise RuntimeError(
                "Cannot disable timer while clocks are still going: "
                f"{list(self._clock_starts.keys())}"
            )
        self._enabled = False

    @property
    def enabled(self) -> bool:
        """Indicates whether the timer is currently enabled."""
        return self._enabled


class NullTimer(Timer):
    """A Timer which never accumulates timings, used in place of an
    optional timer."""

    def __init__(self):
        super().__init__()
        self._enabled = False

    def enable(self):
        raise NotImplementedError(
            "NullTimer cannot be enabled, maybe create a Timer and "
            "disable it instead of using NullTimer"
        )
