"""Pitch estimation for single analysis windows."""

from __future__ import annotations
from typing import Any, Optional

from ..core.config import DetectorConfig
from ..core.interfaces import IPitchEstimator
from ..logger import get_logger
from ..note_types import PitchEstimate, SampleWindow
from ..note_utils import frequency_to_note
from .autocorrelation import NO_PITCH, auto_correlate, rms
from .smoothing import SmoothingState

logger = get_logger(__name__)


class PitchEstimator(IPitchEstimator):
    """Turns sample windows into smoothed note estimates.

    Each call runs four gates in order: an RMS silence gate, autocorrelation,
    a frequency range gate and smoothing. Failing any gate returns None and
    clears the smoothing history so the next note attack starts fresh.

    An estimator owns its SmoothingState; use one instance per audio stream.
    """

    def __init__(self, config: Optional[DetectorConfig] = None, **overrides: Any) -> None:
        """Initialize the estimator.

        Args:
            config: Detector settings, or None for the defaults
            **overrides: Individual DetectorConfig fields to override

        Raises:
            ConfigError: If the resulting configuration is invalid
        """
        config = config or DetectorConfig()
        if overrides:
            config = config.replace(**overrides)
        self._config = config
        self._smoothing = SmoothingState(
            history_size=config.history_size,
            smoothing_factor=config.smoothing_factor,
        )

        logger.info(
            f"Pitch estimator initialized: range={config.min_freq}-{config.max_freq}Hz, "
            f"silence_rms={config.silence_rms_threshold}, window={config.window_size}"
        )

    @property
    def config(self) -> DetectorConfig:
        return self._config

    @property
    def smoothing(self) -> SmoothingState:
        return self._smoothing

    def estimate(self, window: SampleWindow) -> Optional[PitchEstimate]:
        """Estimate the pitch of one window.

        Args:
            window: Samples in [-1, 1] and their sample rate

        Returns:
            PitchEstimate, or None when the window is silent or its pitch
            falls outside [min_freq, max_freq]
        """
        level = rms(window.samples)
        if level < self._config.silence_rms_threshold:
            logger.debug(f"Signal too weak: rms={level:.4f}")
            self.reset()
            return None

        raw_frequency = auto_correlate(window.samples, window.sample_rate)
        if raw_frequency == NO_PITCH or not (
            self._config.min_freq <= raw_frequency <= self._config.max_freq
        ):
            logger.debug(f"No pitch in range: raw={raw_frequency:.1f}Hz rms={level:.4f}")
            self.reset()
            return None

        smoothed = self._smoothing.smooth(raw_frequency)
        confidence = self._smoothing.confidence()
        info = frequency_to_note(smoothed, self._config.a4_reference)

        estimate = PitchEstimate.from_note_info(
            info, confidence=confidence, raw_frequency=raw_frequency
        )
        logger.debug(
            f"{estimate.full_note} {estimate.frequency:.1f}Hz {estimate.cents:+d}c "
            f"(raw: {raw_frequency:.1f}Hz, conf: {confidence:.2f}, rms: {level:.4f})"
        )
        return estimate

    def reset(self) -> None:
        """Clear smoothing history."""
        self._smoothing.reset()
