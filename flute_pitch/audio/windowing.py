"""Fixed-size analysis windows cut from a continuous sample stream."""

from typing import List, NamedTuple, Optional

import numpy as np


class CompletedWindow(NamedTuple):
    """A finished analysis window and where it ends in the stream."""

    samples: np.ndarray  # Read-only copy, window_size long
    end: int  # Stream index just past the window's last sample


class WindowBuffer:
    """Collects incoming chunks into overlapping analysis windows.

    A window is complete every time ``window_size`` samples are buffered.
    After each completed window the buffer keeps its newest
    ``window_size - hop_size`` samples, so consecutive windows start
    ``hop_size`` samples apart (half a window by default).
    """

    def __init__(self, window_size: int = 4096, hop_size: Optional[int] = None):
        if hop_size is None:
            hop_size = window_size // 2
        if window_size < 1:
            raise ValueError("window_size must be positive")
        if not 0 < hop_size <= window_size:
            raise ValueError("hop_size must be between 1 and window_size")

        self._window_size = window_size
        self._hop_size = hop_size
        self._buffer = np.zeros(window_size, dtype=np.float32)
        self._filled = 0
        self._latest: Optional[np.ndarray] = None
        self._window_count = 0
        self._samples_seen = 0

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def hop_size(self) -> int:
        return self._hop_size

    @property
    def window_count(self) -> int:
        """Number of windows completed since creation or the last clear()."""
        return self._window_count

    @property
    def samples_seen(self) -> int:
        """Number of samples appended since creation or the last clear()."""
        return self._samples_seen

    def append(self, samples: np.ndarray) -> List[CompletedWindow]:
        """Add a chunk of samples and return the windows it completed.

        Returned windows hold read-only copies, oldest first.
        """
        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        completed = []
        position = 0

        while position < len(samples):
            take = min(self._window_size - self._filled, len(samples) - position)
            self._buffer[self._filled : self._filled + take] = samples[
                position : position + take
            ]
            self._filled += take
            position += take

            if self._filled == self._window_size:
                window = self._buffer.copy()
                window.flags.writeable = False
                completed.append(CompletedWindow(window, self._samples_seen + position))
                self._latest = window
                self._window_count += 1

                keep = self._window_size - self._hop_size
                self._buffer[:keep] = self._buffer[self._hop_size :]
                self._filled = keep

        self._samples_seen += len(samples)
        return completed

    def latest(self) -> Optional[np.ndarray]:
        """The most recently completed window, or None if none is complete yet."""
        return self._latest

    def clear(self) -> None:
        self._buffer[:] = 0.0
        self._filled = 0
        self._latest = None
        self._window_count = 0
        self._samples_seen = 0
