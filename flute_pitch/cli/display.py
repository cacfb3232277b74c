"""Text rendering of pitch estimates for terminal consumers."""

from typing import Optional

from ..note_types import MatchResult, PitchEstimate

IN_TUNE_CENTS = 10
NEEDLE_WIDTH = 41


def needle_position(cents: int) -> float:
    """Needle position in percent of the meter width, centred at 50."""
    return max(10.0, min(90.0, 50 + (cents / 50) * 40))


def tuning_state(cents: int) -> str:
    if abs(cents) <= IN_TUNE_CENTS:
        return "in tune"
    return "sharp" if cents > 0 else "flat"


def render_meter(cents: Optional[int]) -> str:
    """A fixed-width ASCII meter with the needle at ``cents`` (centre if None)."""
    position = needle_position(cents) if cents is not None else 50.0
    index = round(position / 100 * (NEEDLE_WIDTH - 1))
    cells = ["-"] * NEEDLE_WIDTH
    cells[NEEDLE_WIDTH // 2] = "|"
    cells[index] = "^" if cents is not None else "|"
    return "[" + "".join(cells) + "]"


def format_estimate(
    estimate: Optional[PitchEstimate], match: Optional[MatchResult] = None
) -> str:
    """One display line; absence renders as the neutral '—' state."""
    if estimate is None:
        line = f"{'—':<4} {'— Hz':>9} {'0¢':>5} {render_meter(None)}"
    else:
        line = (
            f"{estimate.full_note:<4} {estimate.frequency:>6.1f} Hz "
            f"{estimate.cents:>+4d}¢ {render_meter(estimate.cents)} "
            f"{tuning_state(estimate.cents):<7} conf {estimate.confidence:.2f}"
        )

    if match is not None:
        verdict = "MATCH" if match.match else "miss"
        line += f"  {verdict} {match.accuracy:3.0f}%"
    return line
