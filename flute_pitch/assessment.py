"""Consumers that turn streams of estimates into assessment decisions.

NoteCapture and ScaleAssessment drive the "play each note of your
instrument" flow; HoldTracker decides when a target note has been held in
tune long enough.
"""

from collections import Counter
from dataclasses import dataclass
from typing import List, Optional

from .logger import get_logger
from .note_types import MatchResult, PitchEstimate
from .note_utils import pitch_class

logger = get_logger(__name__)


@dataclass(frozen=True)
class CapturedNote:
    """Summary of one listening period."""

    note: str  # Full note name, e.g. 'G4'
    frequency: float  # Mean frequency of the winning note's samples
    samples: int
    skipped: bool = False


class NoteCapture:
    """Collects estimates while a single note is played."""

    def __init__(self):
        self._estimates: List[PitchEstimate] = []

    def __len__(self) -> int:
        return len(self._estimates)

    def add(self, estimate: Optional[PitchEstimate]) -> None:
        if estimate is not None:
            self._estimates.append(estimate)

    def clear(self) -> None:
        self._estimates = []

    def summarize(self) -> Optional[CapturedNote]:
        """The most common note and its mean frequency, or None if empty.

        Ties go to the note that was heard first.
        """
        if not self._estimates:
            return None

        counts = Counter(e.full_note for e in self._estimates)
        note, count = counts.most_common(1)[0]
        mean = sum(e.frequency for e in self._estimates if e.full_note == note) / count

        logger.debug(f"Captured note counts: {dict(counts)}")
        return CapturedNote(note=note, frequency=round(mean, 1), samples=count)


@dataclass(frozen=True)
class AssessmentResult:
    scale: List[str]  # Full note names in the order captured
    root: str  # Pitch class of the first captured note


class ScaleAssessment:
    """Step-by-step capture of the notes an instrument can play.

    For every step: ``begin_step()``, feed estimates with ``add()`` while the
    player holds the note, then ``finish_listening()``. A detected note can
    be accepted with ``confirm()`` or recaptured with ``retry()``; a step
    can be ``skip()``-ped at any time.
    """

    READY = "ready"
    LISTENING = "listening"
    CONFIRM = "confirm"
    DONE = "done"

    def __init__(self, steps: int = 6, min_notes: int = 5):
        if steps < 1:
            raise ValueError("steps must be positive")
        if not 1 <= min_notes <= steps:
            raise ValueError("min_notes must be between 1 and steps")

        self.steps = steps
        self.min_notes = min_notes
        self.phase = self.READY
        self.step = 0
        self.notes: List[CapturedNote] = []
        self.pending: Optional[CapturedNote] = None
        self._capture = NoteCapture()

    @property
    def complete(self) -> bool:
        return self.phase == self.DONE

    def begin_step(self) -> None:
        """Start listening for the current step's note."""
        if self.complete:
            raise ValueError("Assessment is already complete")
        self._capture.clear()
        self.pending = None
        self.phase = self.LISTENING

    def add(self, estimate: Optional[PitchEstimate]) -> None:
        """Record an estimate; ignored unless listening."""
        if self.phase == self.LISTENING:
            self._capture.add(estimate)

    def finish_listening(self) -> Optional[CapturedNote]:
        """End the listening period and return the detected note, if any."""
        if self.phase != self.LISTENING:
            raise ValueError(f"Not listening (phase: {self.phase})")

        self.pending = self._capture.summarize()
        self.phase = self.CONFIRM
        if self.pending is None:
            logger.info(f"Step {self.step + 1}: no note detected")
        else:
            logger.info(
                f"Step {self.step + 1}: detected {self.pending.note} "
                f"@ {self.pending.frequency}Hz ({self.pending.samples} samples)"
            )
        return self.pending

    def confirm(self) -> None:
        """Accept the pending note and advance to the next step."""
        if self.phase != self.CONFIRM or self.pending is None:
            raise ValueError("No detected note to confirm")
        self.notes.append(self.pending)
        self._advance()

    def retry(self) -> None:
        """Discard the pending note and listen again for the same step."""
        self.begin_step()

    def skip(self) -> None:
        """Record the current step as skipped and advance."""
        if self.complete:
            raise ValueError("Assessment is already complete")
        self.notes.append(CapturedNote(note="—", frequency=0.0, samples=0, skipped=True))
        self._advance()

    def _advance(self) -> None:
        self.pending = None
        self._capture.clear()
        self.step += 1
        self.phase = self.DONE if self.step >= self.steps else self.READY

    def captured_scale(self) -> List[str]:
        return [n.note for n in self.notes if not n.skipped]

    def finish(self) -> AssessmentResult:
        """Return the captured scale.

        Raises:
            ValueError: If fewer than ``min_notes`` notes were captured
        """
        scale = self.captured_scale()
        if len(scale) < self.min_notes:
            raise ValueError(
                f"Need at least {self.min_notes} notes, captured {len(scale)}"
            )
        return AssessmentResult(scale=scale, root=pitch_class(scale[0]))


@dataclass(frozen=True)
class HoldStatus:
    holding: bool
    progress: float  # Percent of the required hold time, 0-100
    accuracy: float  # Mean accuracy over the current hold
    complete: bool


class HoldTracker:
    """Tracks how long a target note has been held with acceptable accuracy."""

    MIN_HOLD_SECONDS = 0.3
    MAX_HOLD_SECONDS = 2.0
    # Samples needed before the running accuracy can reject a hold
    MIN_SAMPLES_FOR_REJECT = 5

    def __init__(self, hold_required: float = 0.8, min_note_accuracy: float = 60.0):
        self.hold_required = hold_required
        self.min_note_accuracy = min_note_accuracy
        self._hold_start: Optional[float] = None
        self._accuracies: List[float] = []

    @property
    def hold_required(self) -> float:
        """Seconds a note must be held, clamped to [0.3, 2.0]."""
        return self._hold_required

    @hold_required.setter
    def hold_required(self, value: float) -> None:
        self._hold_required = max(self.MIN_HOLD_SECONDS, min(self.MAX_HOLD_SECONDS, value))

    def reset(self) -> None:
        self._hold_start = None
        self._accuracies = []

    def update(self, result: MatchResult, now: float) -> HoldStatus:
        """Feed one match result taken at time ``now`` (seconds).

        A non-matching result ends the hold. While matching, accuracies are
        averaged; once more than MIN_SAMPLES_FOR_REJECT have been seen, an
        average below ``min_note_accuracy`` also ends the hold.
        """
        if not result.match:
            self.reset()
            return HoldStatus(holding=False, progress=0.0, accuracy=0.0, complete=False)

        if self._hold_start is None:
            self._hold_start = now
            self._accuracies = [result.accuracy]
        else:
            self._accuracies.append(result.accuracy)

        average = sum(self._accuracies) / len(self._accuracies)
        if len(self._accuracies) > self.MIN_SAMPLES_FOR_REJECT and average < self.min_note_accuracy:
            logger.debug(f"Hold rejected: average accuracy {average:.0f} < {self.min_note_accuracy}")
            self.reset()
            return HoldStatus(holding=False, progress=0.0, accuracy=average, complete=False)

        held = now - self._hold_start
        progress = min(100.0, held / self._hold_required * 100.0)
        return HoldStatus(
            holding=True,
            progress=progress,
            accuracy=average,
            complete=held >= self._hold_required,
        )
