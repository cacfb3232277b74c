"""Core components for the flute_pitch package."""

# Import interfaces for easier access
from .interfaces import (
    IAudioInput,
    IPitchEstimator,
    IPitchService,
)
from .config import ConfigError, ConfigManager, DetectorConfig

__all__ = [
    "IAudioInput",
    "IPitchEstimator",
    "IPitchService",
    "ConfigError",
    "ConfigManager",
    "DetectorConfig",
]
