"""Real-time monophonic pitch detection for wind instruments."""

from .audio.pitch_estimator import PitchEstimator
from .core.config import ConfigError, DetectorConfig
from .note_matcher import NoteMatcher
from .note_types import MatchResult, PitchEstimate, SampleWindow
from .note_utils import frequency_to_note, note_to_frequency

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DetectorConfig",
    "MatchResult",
    "NoteMatcher",
    "PitchEstimate",
    "PitchEstimator",
    "SampleWindow",
    "frequency_to_note",
    "note_to_frequency",
]
