"""Command-line interface for flute_pitch."""
