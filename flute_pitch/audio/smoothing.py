"""Median and exponential smoothing of successive raw frequencies."""

from collections import deque
from typing import Deque, Tuple


class SmoothingState:
    """Recent-frequency history owned by a single pitch estimator.

    Each raw reading goes into a bounded FIFO history; the output moves from
    the previous output toward the history's median by ``smoothing_factor``.
    """

    def __init__(self, history_size: int = 5, smoothing_factor: float = 0.3):
        self._history: Deque[float] = deque(maxlen=history_size)
        self._smoothing_factor = smoothing_factor
        self._last_frequency = 0.0

    @property
    def history(self) -> Tuple[float, ...]:
        return tuple(self._history)

    @property
    def last_frequency(self) -> float:
        """Last smoothed output, 0.0 when there is none."""
        return self._last_frequency

    def smooth(self, frequency: float) -> float:
        """Record a raw frequency and return the new smoothed frequency."""
        self._history.append(frequency)

        # Upper median for even-length histories
        ordered = sorted(self._history)
        median = ordered[len(ordered) // 2]

        if self._last_frequency > 0:
            smoothed = (
                self._last_frequency
                + (median - self._last_frequency) * self._smoothing_factor
            )
        else:
            smoothed = median

        self._last_frequency = smoothed
        return smoothed

    def confidence(self) -> float:
        """Stability of the history: 1.0 when the oldest and newest agree.

        Drops by 5 for every unit of relative change between the oldest and
        newest raw readings, floored at 0.
        """
        if len(self._history) < 2:
            return 1.0
        variance = abs(self._history[-1] - self._history[0]) / self._history[0]
        return max(0.0, 1.0 - variance * 5)

    def reset(self) -> None:
        self._history.clear()
        self._last_frequency = 0.0
