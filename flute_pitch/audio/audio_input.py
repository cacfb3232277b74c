"""Live microphone input via sounddevice."""

from __future__ import annotations
import time
from typing import Any, Callable, ClassVar, Dict, List, Optional

import numpy as np
import sounddevice as sd

from ..core.interfaces import IAudioInput
from ..logger import get_logger

logger = get_logger(__name__)


def list_input_devices() -> List[Dict[str, Any]]:
    """Return the input-capable audio devices known to sounddevice.

    Each entry has ``id``, ``name``, ``channels`` and ``default_samplerate``.
    """
    devices = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] > 0:
            devices.append(
                {
                    "id": device_id,
                    "name": device["name"],
                    "channels": device["max_input_channels"],
                    "default_samplerate": device["default_samplerate"],
                }
            )
    return devices


class SoundDeviceInput(IAudioInput):
    """Audio input handler using sounddevice library."""

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 1024
    CHANNELS: ClassVar[int] = 1  # Mono audio
    FALLBACK_SAMPLE_RATES: ClassVar[List[int]] = [44100, 48000, 22050]

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input handler.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Preferred sample rate in Hz, or None for default (44100)
            frames_per_buffer: Block size in frames, or None for default (1024)
            channels: Number of channels to open; only the first is analysed
        """
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._frames_per_buffer = frames_per_buffer or self.FRAMES_PER_BUFFER
        self._channels = channels or self.CHANNELS

        self._stream: Optional[sd.InputStream] = None
        self._callback: Optional[Callable[[np.ndarray, float], None]] = None
        self._running = False

    @property
    def sample_rate(self) -> float:
        """Sample rate of the open stream (or the requested rate before start)."""
        return self._sample_rate

    def is_running(self) -> bool:
        return self._running

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info: Any,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback for processing audio data from the input stream.

        Note:
            This is called from the audio thread, so it should be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._callback:
            # Extract mono audio data (take first channel if multi-channel)
            audio_data = indata[:, 0] if indata.ndim > 1 else indata
            self._callback(audio_data.copy(), time.time())

    def _candidate_rates(self) -> List[int]:
        rates = [r for r in self.FALLBACK_SAMPLE_RATES if r != self._sample_rate]
        return [self._sample_rate] + rates

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio and pass it to the callback.

        Tries the requested sample rate first, then the common fallbacks.

        Returns:
            True if a stream was opened, False if the device is unavailable
        """
        if self._running:
            logger.warning("Audio input already running")
            return True

        self._callback = callback

        for rate in self._candidate_rates():
            try:
                logger.info(f"Trying to start audio input with sample rate: {rate} Hz")
                sd.check_input_settings(
                    device=self._device_id, channels=self._channels, samplerate=rate
                )
                self._stream = sd.InputStream(
                    device=self._device_id,
                    samplerate=rate,
                    blocksize=self._frames_per_buffer,
                    channels=self._channels,
                    dtype="float32",
                    callback=self._audio_callback,
                )
                self._stream.start()
            except (sd.PortAudioError, ValueError) as e:
                logger.warning(f"Failed to start audio input with sample rate {rate} Hz: {e}")
                self._close_stream()
                continue

            self._sample_rate = rate
            self._running = True
            logger.info(
                f"Audio input started: device={self._device_id}, rate={rate}Hz, "
                f"block={self._frames_per_buffer}"
            )
            return True

        logger.error("Could not start audio input with any sample rate")
        self._callback = None
        return False

    def _close_stream(self) -> None:
        if self._stream is not None:
            try:
                self._stream.close()
            except sd.PortAudioError as e:
                logger.warning(f"Error closing audio stream: {e}")
            self._stream = None

    def stop(self) -> None:
        """Stop capturing audio."""
        if not self._running:
            return

        if self._stream is not None:
            self._stream.stop()
        self._close_stream()
        self._running = False
        self._callback = None
        logger.info("Audio input stopped")
