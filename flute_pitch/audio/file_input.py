"""Audio inputs backed by recorded audio instead of a live device."""

from __future__ import annotations
import threading
import time
from typing import Callable, Optional

import numpy as np
import soundfile as sf

from ..core.interfaces import IAudioInput
from ..logger import get_logger

logger = get_logger(__name__)


class ArrayAudioInput(IAudioInput):
    """Delivers an in-memory signal in fixed-size chunks.

    With ``realtime=True`` a background thread delivers chunks at playback
    speed, like a microphone would. Otherwise nothing is delivered until the
    caller drives it with ``pump()`` / ``pump_all()``, which keeps offline
    analysis and tests deterministic.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: float,
        chunk_size: int = 1024,
        realtime: bool = False,
        loop: bool = False,
        gain: float = 1.0,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")

        data = np.asarray(samples, dtype=np.float32)
        if data.ndim > 1:
            # Keep the first channel
            data = data[:, 0]
        if gain != 1.0:
            data = data * gain

        self._samples = data
        self._sample_rate = float(sample_rate)
        self._chunk_size = chunk_size
        self._realtime = realtime
        self._loop = loop
        self._position = 0
        self._callback: Optional[Callable[[np.ndarray, float], None]] = None
        self._running = False
        self._thread: Optional[threading.Thread] = None

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def duration(self) -> float:
        """Length of the signal in seconds."""
        return len(self._samples) / self._sample_rate

    @property
    def position(self) -> int:
        """Index of the next sample to deliver."""
        return self._position

    def is_running(self) -> bool:
        return self._running

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        if self._running:
            return True

        self._callback = callback
        self._position = 0
        self._running = True

        if self._realtime:
            self._thread = threading.Thread(target=self._stream_data, daemon=True)
            self._thread.start()
        return True

    def stop(self) -> None:
        self._running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

    def pump(self) -> bool:
        """Deliver the next chunk to the callback.

        Returns:
            False once the signal is exhausted (and not looping) or the input
            is stopped
        """
        if not self._running or self._callback is None:
            return False

        if self._position >= len(self._samples):
            if not self._loop or len(self._samples) == 0:
                return False
            self._position = 0

        chunk = self._samples[self._position : self._position + self._chunk_size]
        timestamp = self._position / self._sample_rate
        self._position += len(chunk)
        self._callback(chunk, timestamp)
        return True

    def pump_all(self) -> int:
        """Deliver every remaining chunk; returns the number delivered."""
        if self._loop:
            raise ValueError("pump_all() would never finish on a looping input")
        count = 0
        while self.pump():
            count += 1
        return count

    def _stream_data(self) -> None:
        interval = self._chunk_size / self._sample_rate
        while self._running and self.pump():
            # Simulate real-time playback speed
            time.sleep(interval)
        self._running = False


class WavFileInput(ArrayAudioInput):
    """Provides audio data by reading a sound file with soundfile."""

    def __init__(
        self,
        file_path: str,
        chunk_size: int = 1024,
        realtime: bool = False,
        loop: bool = False,
        gain: float = 1.0,
    ) -> None:
        data, sample_rate = sf.read(file_path, dtype="float32", always_2d=True)
        logger.info(
            f"Loaded {file_path}: {len(data)} frames, {data.shape[1]} channel(s), {sample_rate}Hz"
        )
        self._file_path = file_path
        super().__init__(
            data,
            sample_rate,
            chunk_size=chunk_size,
            realtime=realtime,
            loop=loop,
            gain=gain,
        )

    @property
    def file_path(self) -> str:
        return self._file_path
