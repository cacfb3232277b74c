"""Push and pull services around the pitch estimator."""

from .pitch_service import PitchService, PullPitchService, PushPitchService

__all__ = ["PitchService", "PullPitchService", "PushPitchService"]
