from typing import Optional

from .logger import get_logger
from .note_types import MatchResult, PitchEstimate
from .note_utils import pitch_class

logger = get_logger(__name__)

DEFAULT_TOLERANCE_CENTS = 50


class NoteMatcher:
    """
    Encapsulates logic for comparing a pitch estimate to a target note,
    including normalization and enharmonic equivalence.
    """

    @staticmethod
    def accuracy(cents: int) -> float:
        """Linear score: 100 when in tune, 0 at 50 cents or more off."""
        return max(0.0, 100.0 - abs(cents) * 2.0)

    @classmethod
    def match(
        cls,
        estimate: Optional[PitchEstimate],
        target: str,
        tolerance_cents: float = DEFAULT_TOLERANCE_CENTS,
    ) -> MatchResult:
        """
        Check if the estimate matches the target note, ignoring octave.

        Args:
            estimate: The current pitch estimate, or None when nothing is sounding
            target: The target note (e.g., 'A', 'A#4', 'Bb')
            tolerance_cents: Largest cents deviation that still counts as a match

        Returns:
            MatchResult: match flag, accuracy (0-100) and the estimate's cents.
            Accuracy is reported even when the pitch class differs so a
            consumer can show partial credit.
        """
        if estimate is None:
            return MatchResult(match=False, accuracy=0.0)

        target_class = pitch_class(str(target).strip() if target is not None else "")
        if target_class is None:
            logger.warning(f"Invalid target note format: {target!r}")

        same_class = target_class is not None and estimate.note == target_class
        in_tolerance = abs(estimate.cents) <= tolerance_cents
        result = MatchResult(
            match=same_class and in_tolerance,
            accuracy=cls.accuracy(estimate.cents),
            cents=estimate.cents,
        )

        logger.debug(
            f"Target {target!r} ({target_class}) vs played {estimate.full_note} "
            f"{estimate.cents:+d}c -> match={result.match} accuracy={result.accuracy:.0f}"
        )
        return result
