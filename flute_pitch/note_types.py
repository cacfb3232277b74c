"""Type definitions for the flute_pitch project."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np


@dataclass(frozen=True)
class SampleWindow:
    """A fixed-length block of mono samples captured at a known rate."""

    samples: np.ndarray  # Float samples in [-1, 1], read-only
    sample_rate: float  # Hz

    @classmethod
    def from_samples(cls, samples, sample_rate: float) -> "SampleWindow":
        """Copy ``samples`` into a read-only float64 array and wrap it."""
        data = np.array(samples, dtype=np.float64).reshape(-1)
        data.flags.writeable = False
        return cls(samples=data, sample_rate=float(sample_rate))

    def __len__(self) -> int:
        return len(self.samples)


@dataclass(frozen=True)
class NoteInfo:
    """A frequency expressed as the nearest equal-tempered note."""

    frequency: float  # Hz, rounded to one decimal
    note: str  # Pitch class, e.g. 'G' or 'C#'
    octave: int  # Scientific pitch notation octave
    full_note: str  # note + octave, e.g. 'G4'
    cents: int  # Offset from the nearest note, [-50, 50]
    midi_note: int  # A4 = 69


@dataclass(frozen=True)
class PitchEstimate:
    """One analysis cycle's pitch reading."""

    frequency: float  # Smoothed frequency in Hz, one decimal
    note: str
    octave: int
    full_note: str
    cents: int
    midi_note: int
    confidence: float  # Stability of recent readings (0-1)
    raw_frequency: float  # Autocorrelation output before smoothing

    @classmethod
    def from_note_info(
        cls, info: NoteInfo, confidence: float, raw_frequency: float
    ) -> "PitchEstimate":
        return cls(
            frequency=info.frequency,
            note=info.note,
            octave=info.octave,
            full_note=info.full_note,
            cents=info.cents,
            midi_note=info.midi_note,
            confidence=confidence,
            raw_frequency=raw_frequency,
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of comparing an estimate with a target note."""

    match: bool
    accuracy: float  # 0-100, linear in cents
    cents: Optional[int] = None
