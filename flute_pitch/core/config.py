"""Configuration management for flute_pitch components."""

import dataclasses
import json
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..logger import get_logger

logger = get_logger(__name__)


class ConfigError(ValueError):
    """Raised when detector or audio settings are malformed."""


def _coerce(name: str, kind: type, raw: Any) -> Any:
    try:
        value = kind(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be {kind.__name__}, got {raw!r}") from None
    if kind is int and isinstance(raw, float) and not raw.is_integer():
        raise ConfigError(f"{name} must be a whole number, got {raw!r}")
    return value


@dataclass(frozen=True)
class DetectorConfig:
    """Validated settings for the pitch estimator and note matcher.

    Silence threshold: 0.02 RMS rejects breath noise and room bleed that a
    microphone picks up between notes. Lowering it (e.g. 0.008) lets very
    soft playing through at the cost of more false readings on breath noise.
    """

    min_freq: float = 250.0  # Hz, ~B3
    max_freq: float = 1200.0  # Hz, ~D6
    a4_reference: float = 440.0
    silence_rms_threshold: float = 0.02
    smoothing_factor: float = 0.3
    history_size: int = 5
    match_tolerance_cents: float = 50.0
    window_size: int = 4096

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.type is float and not math.isfinite(value):
                raise ConfigError(f"{f.name} must be a finite number, got {value}")
        if self.min_freq <= 0:
            raise ConfigError(f"min_freq must be positive, got {self.min_freq}")
        if self.min_freq >= self.max_freq:
            raise ConfigError(
                f"min_freq ({self.min_freq}) must be below max_freq ({self.max_freq})"
            )
        if self.a4_reference <= 0:
            raise ConfigError(
                f"a4_reference must be positive, got {self.a4_reference}"
            )
        if self.silence_rms_threshold < 0:
            raise ConfigError(
                f"silence_rms_threshold must not be negative, got {self.silence_rms_threshold}"
            )
        if not 0.0 < self.smoothing_factor < 1.0:
            raise ConfigError(
                f"smoothing_factor must be between 0 and 1 (exclusive), got {self.smoothing_factor}"
            )
        if not isinstance(self.history_size, int) or self.history_size < 1:
            raise ConfigError(
                f"history_size must be a positive integer, got {self.history_size}"
            )
        if self.match_tolerance_cents < 0:
            raise ConfigError(
                f"match_tolerance_cents must not be negative, got {self.match_tolerance_cents}"
            )
        # Autocorrelation needs at least a few lags to interpolate around
        if not isinstance(self.window_size, int) or self.window_size < 4:
            raise ConfigError(
                f"window_size must be an integer of at least 4, got {self.window_size}"
            )

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "DetectorConfig":
        """Build a config from a mapping, rejecting unknown keys.

        Values are converted to the field types, so strings from a command
        line or numbers from JSON are both accepted.
        """
        fields = {f.name: f.type for f in dataclasses.fields(cls)}
        unknown = set(values) - set(fields)
        if unknown:
            raise ConfigError(f"Unknown detector options: {', '.join(sorted(unknown))}")
        return cls(**{k: _coerce(k, fields[k], v) for k, v in values.items()})

    def replace(self, **overrides: Any) -> "DetectorConfig":
        """Return a validated copy with ``overrides`` applied."""
        return self.from_dict({**self.to_dict(), **overrides})

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


class ConfigManager:
    """Configuration manager for flute_pitch components."""

    DETECTOR = "pitch_detector"
    AUDIO_INPUT = "audio_input"

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory holding configuration files, or None to use default
        """
        if config_dir is None:
            # Use ~/.config/flute_pitch by default
            home = os.path.expanduser("~")
            config_dir = os.path.join(home, ".config", "flute_pitch")

        self.config_dir = Path(config_dir)

        # Default configurations
        self.default_configs: Dict[str, Dict[str, Any]] = {
            self.DETECTOR: DetectorConfig().to_dict(),
            self.AUDIO_INPUT: {
                "device_id": None,
                "sample_rate": 44100,
                "frames_per_buffer": 1024,
                "channels": 1,
            },
        }

        # Load existing configurations, falling back to defaults
        self.configs: Dict[str, Dict[str, Any]] = {}
        for config_name, default_config in self.default_configs.items():
            self.configs[config_name] = self.load_config(config_name, default_config)

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from file, or return the defaults.

        Args:
            name: Configuration name
            default_config: Default configuration to use if file doesn't exist

        Returns:
            Configuration dictionary

        Raises:
            ConfigError: If the file exists but is not valid JSON
        """
        config_file = self.config_dir / f"{name}.json"

        if not config_file.exists():
            return default_config.copy()

        try:
            with open(config_file, "r") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration file {config_file}: {e}") from e
        logger.info(f"Loaded configuration from {config_file}")

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file {config_file} must hold a JSON object")

        # Ensure all default keys are present
        for key, value in default_config.items():
            config.setdefault(key, value)
        return config

    def save_config(self, name: str) -> Path:
        """Save a configuration section to file.

        Args:
            name: Configuration name

        Returns:
            Path of the written file
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        config_file = self.config_dir / f"{name}.json"

        with open(config_file, "w") as f:
            json.dump(self.configs[name], f, indent=2)
        logger.info(f"Saved configuration to {config_file}")
        return config_file

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get configuration by name.

        Raises:
            ConfigError: If the name is not a known configuration section
        """
        if name not in self.configs:
            raise ConfigError(f"Unknown configuration: {name}")
        return self.configs[name].copy()

    def get_detector_config(self, **overrides: Any) -> DetectorConfig:
        """Get the validated detector configuration, with optional overrides."""
        return DetectorConfig.from_dict({**self.get_config(self.DETECTOR), **overrides})

    def update_config(self, name: str, updates: Dict[str, Any]) -> Path:
        """Update configuration and save to file.

        Detector updates are validated before anything is written.
        """
        merged = {**self.get_config(name), **updates}
        if name == self.DETECTOR:
            DetectorConfig.from_dict(merged)

        self.configs[name] = merged
        return self.save_config(name)

    def reset_config(self, name: str) -> Path:
        """Reset configuration to default and save it."""
        if name not in self.default_configs:
            raise ConfigError(f"Unknown configuration: {name}")

        self.configs[name] = self.default_configs[name].copy()
        return self.save_config(name)
