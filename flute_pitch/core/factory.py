"""Factory for creating flute_pitch components."""

from typing import Any, Dict, Optional, Type

from ..audio.file_input import WavFileInput
from ..audio.pitch_estimator import PitchEstimator
from ..logger import get_logger
from ..services.pitch_service import PitchService, PullPitchService, PushPitchService
from .config import ConfigError, ConfigManager
from .interfaces import IAudioInput, IPitchEstimator

logger = get_logger(__name__)


class ComponentFactory:
    """Factory for creating flute_pitch components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # Register default component implementations
        self.estimator_classes: Dict[str, Type[IPitchEstimator]] = {
            "default": PitchEstimator,
        }

        # The live "default" input is resolved in create_audio_input
        self.audio_input_classes: Dict[str, Type[IAudioInput]] = {
            "wav": WavFileInput,
        }

        self.service_classes: Dict[str, Type[PitchService]] = {
            "push": PushPitchService,
            "pull": PullPitchService,
        }

    def create_estimator(
        self, implementation: str = "default", **overrides: Any
    ) -> IPitchEstimator:
        """Create a pitch estimator from the stored detector configuration.

        Args:
            implementation: Name of the implementation to use
            **overrides: DetectorConfig fields to override

        Raises:
            ConfigError: If the implementation is not registered or the
                configuration is invalid
        """
        if implementation not in self.estimator_classes:
            raise ConfigError(f"Unknown estimator implementation: {implementation}")

        config = self.config_manager.get_detector_config(**overrides)
        instance = self.estimator_classes[implementation](config)

        logger.info(f"Created pitch estimator: {implementation}")
        return instance

    def create_audio_input(
        self, implementation: str = "default", **kwargs: Any
    ) -> IAudioInput:
        """Create an audio input.

        Live inputs start from the stored ``audio_input`` configuration;
        other implementations take only the given keyword arguments.

        Raises:
            ConfigError: If the implementation is not registered
        """
        if implementation == "default":
            # sounddevice loads the PortAudio library on import
            from ..audio.audio_input import SoundDeviceInput

            config = self.config_manager.get_config(ConfigManager.AUDIO_INPUT)
            config.update({k: v for k, v in kwargs.items() if v is not None})
            instance = SoundDeviceInput(**config)
        elif implementation in self.audio_input_classes:
            instance = self.audio_input_classes[implementation](**kwargs)
        else:
            raise ConfigError(f"Unknown audio input implementation: {implementation}")

        logger.info(f"Created audio input: {implementation}")
        return instance

    def create_service(
        self,
        mode: str = "push",
        audio_input: Optional[IAudioInput] = None,
        **overrides: Any,
    ) -> PitchService:
        """Create a push or pull pitch service.

        Args:
            mode: "push" or "pull"
            audio_input: Audio input to use, or None for the live default
            **overrides: DetectorConfig fields to override

        Raises:
            ConfigError: If the mode is unknown or the configuration is invalid
        """
        if mode not in self.service_classes:
            raise ConfigError(f"Unknown service mode: {mode}")

        config = self.config_manager.get_detector_config(**overrides)
        estimator = self.create_estimator(**overrides)
        if audio_input is None:
            audio_input = self.create_audio_input()

        instance = self.service_classes[mode](audio_input, estimator=estimator, config=config)
        logger.info(f"Created pitch service: {mode}")
        return instance
