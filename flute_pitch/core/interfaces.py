"""Defines the core interfaces for the flute_pitch package."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Callable

import numpy as np

from ..note_types import PitchEstimate, SampleWindow


class IAudioInput(ABC):
    """Interface for audio sources that deliver mono sample chunks."""

    @abstractmethod
    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio; ``callback`` receives (samples, timestamp)."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if audio is running."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> float:
        """The sample rate of the delivered audio."""
        pass


class IPitchEstimator(ABC):
    """Interface for single-window pitch estimation."""

    @abstractmethod
    def estimate(self, window: SampleWindow) -> Optional[PitchEstimate]:
        """Estimate the pitch of one window, or None if there is none."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Forget any smoothing history."""
        pass


class IPitchService(ABC):
    """Interface for services that connect an audio input to an estimator."""

    @abstractmethod
    def start(self) -> bool:
        """Start acquisition and detection."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop acquisition and clear detection state."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the service is running."""
        pass
