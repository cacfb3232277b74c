"""Utility functions for working with musical notes and frequencies."""

import math
import re
from typing import Dict, List, Optional, Tuple

import numpy as np

from .logger import get_logger
from .note_types import NoteInfo

logger = get_logger(__name__)

A4_FREQUENCY = 440.0
A4_MIDI = 69

# Chromatic order starting at C. The estimator and note_to_frequency both
# index into this table.
NOTE_NAMES: List[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]

SHARP_TO_FLAT: Dict[str, str] = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
}

FLAT_TO_SHARP: Dict[str, str] = {v: k for k, v in SHARP_TO_FLAT.items()}

# Spellings that cross an octave boundary: (pitch class, octave shift)
_WRAPPING_ENHARMONICS: Dict[str, Tuple[str, int]] = {
    "Cb": ("B", -1),
    "B#": ("C", 1),
    "Fb": ("E", 0),
    "E#": ("F", 0),
}

# This pattern matches:
# - Note letter (A-G, case insensitive)
# - Optional accidental (# or b)
# - Optional octave number, possibly negative
NOTE_PATTERN = re.compile(r"^([A-Ga-g])([#b]?)(-?[0-9]+)?$")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_note(name: str) -> Optional[Tuple[str, Optional[int]]]:
    """Split a note name into a sharp-spelled pitch class and an octave.

    Args:
        name: Note name such as 'G4', 'Bb', 'f#5' or 'Cb4'

    Returns:
        (pitch_class, octave) with octave None when absent, or None if the
        name is not a recognizable note

    Examples:
        >>> parse_note('Bb3')  # ('A#', 3)
        >>> parse_note('Cb4')  # ('B', 3)
    """
    if not name or not isinstance(name, str):
        return None

    match = NOTE_PATTERN.match(name.strip())
    if not match:
        return None

    letter, accidental, octave_part = match.groups()
    spelled = letter.upper() + accidental
    octave = int(octave_part) if octave_part is not None else None

    if spelled in _WRAPPING_ENHARMONICS:
        spelled, shift = _WRAPPING_ENHARMONICS[spelled]
        if octave is not None:
            octave += shift
    elif spelled in FLAT_TO_SHARP:
        spelled = FLAT_TO_SHARP[spelled]

    if spelled not in NOTE_NAMES:
        return None
    return spelled, octave


def pitch_class(name: str) -> Optional[str]:
    """Return the sharp-spelled pitch class of a note name, ignoring octave."""
    parsed = parse_note(name)
    return parsed[0] if parsed else None


def frequency_to_note(
    frequency: float, a4: float = A4_FREQUENCY
) -> Optional[NoteInfo]:
    """Convert a frequency in Hz to the nearest equal-tempered note.

    Args:
        frequency: The frequency in Hz to convert
        a4: Reference frequency of A4

    Returns:
        NoteInfo with note name, octave, cents offset and MIDI number, or
        None if the frequency is not a positive finite number
    """
    if not isinstance(frequency, (int, float, np.floating)) or not np.isfinite(
        frequency
    ):
        logger.warning(f"Invalid frequency value: {frequency}")
        return None

    if frequency <= 0:
        logger.debug(f"Non-positive frequency: {frequency}")
        return None

    semitones = 12 * math.log2(frequency / a4)
    nearest = _round_half_up(semitones)
    midi_note = nearest + A4_MIDI
    note = NOTE_NAMES[midi_note % 12]
    octave = midi_note // 12 - 1
    cents = _round_half_up((semitones - nearest) * 100)

    return NoteInfo(
        frequency=_round_half_up(frequency * 10) / 10,
        note=note,
        octave=octave,
        full_note=f"{note}{octave}",
        cents=cents,
        midi_note=midi_note,
    )


def note_to_frequency(name: str, a4: float = A4_FREQUENCY) -> Optional[float]:
    """Get the equal-tempered frequency of a note name (e.g. "G4" -> 392.0).

    Returns:
        Frequency in Hz, or None if the pitch class is unrecognized or the
        octave is missing
    """
    parsed = parse_note(name)
    if parsed is None or parsed[1] is None:
        logger.debug(f"Cannot convert note to frequency: {name!r}")
        return None

    note, octave = parsed
    semitones = (octave - 4) * 12 + (NOTE_NAMES.index(note) - NOTE_NAMES.index("A"))
    return a4 * 2 ** (semitones / 12)


def get_note_name(freq: float, a4: float = A4_FREQUENCY) -> str:
    """Convert frequency to note name using Scientific Pitch Notation (SPN).

    Note:
        - Middle C is C4 (261.63 Hz)
        - Octave numbers change between B and C (e.g., B3 -> C4)
    """
    info = frequency_to_note(freq, a4)
    return info.full_note if info else "---"
