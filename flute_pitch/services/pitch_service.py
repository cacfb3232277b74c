"""Services that connect an audio input to a pitch estimator.

Both services cut the incoming stream into the same half-overlapping windows
and run the same PitchEstimator on every one of them, in order. They differ
only in where the estimator runs and how results reach the consumer:

- PushPitchService estimates inside the audio callback and notifies
  listeners once per window.
- PullPitchService only queues windows in the audio callback; the consumer
  calls poll() from its own loop and the estimates are computed on that
  thread.

Each window is stamped with the time of its last sample: the chunk's
timestamp plus the window's end offset within the chunk.

Use one service per session; each owns its estimator's smoothing state.
"""

from __future__ import annotations
import threading
import time
from abc import abstractmethod
from collections import deque
from typing import Callable, Deque, List, Optional, Tuple

import numpy as np

from ..audio.pitch_estimator import PitchEstimator
from ..audio.windowing import CompletedWindow, WindowBuffer
from ..core.config import DetectorConfig
from ..core.events import PitchEvents
from ..core.interfaces import IAudioInput, IPitchEstimator, IPitchService
from ..logger import get_logger
from ..note_types import PitchEstimate, SampleWindow

logger = get_logger(__name__)


class PitchService(IPitchService):
    """Shared lifecycle for the push and pull services.

    Subclasses implement ``_on_audio``, which receives every chunk from the
    audio input.
    """

    def __init__(
        self,
        audio_input: IAudioInput,
        estimator: Optional[IPitchEstimator] = None,
        config: Optional[DetectorConfig] = None,
    ) -> None:
        """Initialize the service.

        Args:
            audio_input: Source of mono sample chunks
            estimator: Pitch estimator, or None to create one from ``config``
            config: Detector settings; the window size is taken from here
        """
        if estimator is None:
            estimator = PitchEstimator(config)
        if config is None:
            config = getattr(estimator, "config", None) or DetectorConfig()

        self._audio_input = audio_input
        self._estimator = estimator
        self._config = config
        self._buffer = WindowBuffer(config.window_size)
        self._running = False
        self._start_time = 0.0

    @property
    def estimator(self) -> IPitchEstimator:
        return self._estimator

    @property
    def sample_rate(self) -> float:
        return self._audio_input.sample_rate

    @property
    def window_count(self) -> int:
        """Analysis windows completed since the service was started."""
        return self._buffer.window_count

    def is_running(self) -> bool:
        """True while started and the audio input is still delivering."""
        return self._running and self._audio_input.is_running()

    def start(self) -> bool:
        """Start audio acquisition.

        Returns:
            False if the audio input could not be started
        """
        if self.is_running():
            logger.warning("Pitch detection already running")
            return True

        self._reset_state()
        if not self._audio_input.start(self._on_audio):
            logger.error("Audio input failed to start")
            self._running = False
            return False

        self._running = True
        self._start_time = time.time()
        logger.info(
            f"{type(self).__name__} started at {self._audio_input.sample_rate}Hz "
            f"(window={self._buffer.window_size}, hop={self._buffer.hop_size})"
        )
        return True

    def stop(self) -> None:
        """Stop acquisition and clear smoothing and buffered audio."""
        if not self._running:
            return

        self._audio_input.stop()
        self._running = False
        self._reset_state()
        logger.info(f"{type(self).__name__} stopped")

    def _window(self, samples: np.ndarray) -> SampleWindow:
        return SampleWindow.from_samples(samples, self._audio_input.sample_rate)

    def _append(self, samples: np.ndarray, timestamp: float) -> List[Tuple[np.ndarray, float]]:
        """Buffer a chunk; return each completed window with its own timestamp."""
        chunk_start = self._buffer.samples_seen
        rate = self._audio_input.sample_rate
        completed: List[CompletedWindow] = self._buffer.append(samples)
        return [
            (window.samples, timestamp + (window.end - chunk_start) / rate)
            for window in completed
        ]

    def _reset_state(self) -> None:
        self._estimator.reset()
        self._buffer.clear()

    @abstractmethod
    def _on_audio(self, samples: np.ndarray, timestamp: float) -> None:
        """Handle one chunk from the audio input."""
        pass


class PushPitchService(PitchService):
    """Estimates on the audio thread and notifies listeners per window."""

    def __init__(
        self,
        audio_input: IAudioInput,
        estimator: Optional[IPitchEstimator] = None,
        config: Optional[DetectorConfig] = None,
    ) -> None:
        super().__init__(audio_input, estimator, config)
        self.events = PitchEvents()
        self._latest: Optional[PitchEstimate] = None

    @property
    def latest(self) -> Optional[PitchEstimate]:
        """Estimate from the most recent window (None during silence).

        Replaced as a whole after every window, so readers on other threads
        always see a complete estimate.
        """
        return self._latest

    def start(
        self,
        on_pitch: Optional[Callable[[PitchEstimate, float], None]] = None,
        on_silence: Optional[Callable[[float], None]] = None,
    ) -> bool:
        """Start detection, optionally registering listeners first."""
        if on_pitch is not None:
            self.events.on_pitch(on_pitch)
        if on_silence is not None:
            self.events.on_silence(on_silence)
        return super().start()

    def _reset_state(self) -> None:
        super()._reset_state()
        self._latest = None

    def _on_audio(self, samples: np.ndarray, timestamp: float) -> None:
        for window, window_time in self._append(samples, timestamp):
            estimate = self._estimator.estimate(self._window(window))
            self._latest = estimate
            if estimate is not None:
                self.events.emit_pitch(estimate, window_time)
            else:
                self.events.emit_silence(window_time)


class PullPitchService(PitchService):
    """Queues windows on the audio thread; estimates when the caller polls."""

    # Windows kept between polls; older ones are dropped when it overflows
    MAX_PENDING_WINDOWS = 64

    def __init__(
        self,
        audio_input: IAudioInput,
        estimator: Optional[IPitchEstimator] = None,
        config: Optional[DetectorConfig] = None,
    ) -> None:
        super().__init__(audio_input, estimator, config)
        self._lock = threading.Lock()
        self._pending: Deque[Tuple[np.ndarray, float]] = deque(
            maxlen=self.MAX_PENDING_WINDOWS
        )
        self._dropped = 0
        self._last_estimate: Optional[PitchEstimate] = None

    @property
    def window_count(self) -> int:
        with self._lock:
            return self._buffer.window_count

    def _reset_state(self) -> None:
        with self._lock:
            super()._reset_state()
            self._pending.clear()
            self._dropped = 0
        self._last_estimate = None

    def _on_audio(self, samples: np.ndarray, timestamp: float) -> None:
        with self._lock:
            for window in self._append(samples, timestamp):
                if len(self._pending) == self._pending.maxlen:
                    self._dropped += 1
                self._pending.append(window)

    def poll_all(self) -> List[Tuple[Optional[PitchEstimate], float]]:
        """Estimate every window completed since the last poll, oldest first.

        Returns:
            (estimate or None, window timestamp) per window; empty when not
            started or when no new window is complete
        """
        if not self._running:
            return []

        with self._lock:
            pending = list(self._pending)
            self._pending.clear()
            dropped, self._dropped = self._dropped, 0

        if dropped:
            logger.warning(f"Dropped {dropped} window(s) that were not polled in time")

        results = []
        for window, window_time in pending:
            self._last_estimate = self._estimator.estimate(self._window(window))
            results.append((self._last_estimate, window_time))
        return results

    def poll(self) -> Optional[PitchEstimate]:
        """Estimate the pitch of the most recent complete window.

        Windows that completed since the previous poll are analysed in order
        first, so smoothing sees the same sequence as in push mode. Polling
        again before a new window is complete returns the previous result.

        Returns:
            The current estimate, or None when not running, before the first
            window is complete, or when no pitch was found
        """
        if not self._running:
            return None
        self.poll_all()
        return self._last_estimate
