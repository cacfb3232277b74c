"""Signal acquisition and single-window pitch analysis."""
