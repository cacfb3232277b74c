"""Event system for flute_pitch components."""

from typing import Dict, List, Callable, Any
from enum import Enum, auto

from ..logger import get_logger

logger = get_logger(__name__)


class PitchEventType(Enum):
    """Event types for pitch detection."""

    PITCH_DETECTED = auto()
    SILENCE = auto()


class EventEmitter:
    """Event emitter for flute_pitch components."""

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        Listener errors are logged so a faulty consumer cannot stop the
        audio thread that emits.
        """
        for callback in list(self._listeners.get(event_type, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}", exc_info=True)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")


class PitchEvents:
    """Event emitter specifically for pitch detection events."""

    def __init__(self):
        self._emitter = EventEmitter()

    def on_pitch(self, callback: Callable) -> None:
        """Register ``callback(estimate, timestamp)`` for detected pitches."""
        self._emitter.on(PitchEventType.PITCH_DETECTED, callback)

    def on_silence(self, callback: Callable) -> None:
        """Register ``callback(timestamp)`` for windows without a pitch."""
        self._emitter.on(PitchEventType.SILENCE, callback)

    def emit_pitch(self, estimate, timestamp: float) -> None:
        self._emitter.emit(PitchEventType.PITCH_DETECTED, estimate, timestamp)

    def emit_silence(self, timestamp: float) -> None:
        self._emitter.emit(PitchEventType.SILENCE, timestamp)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._emitter.clear()
