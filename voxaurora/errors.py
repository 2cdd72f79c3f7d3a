"""Fatal startup errors.

Per-utterance failures never surface as exceptions; only problems that make
it impossible to run at all (no microphone, no model, broken config) do.
"""


class VoxAuroraError(Exception):
    """Base class for VoxAurora errors."""


class AudioDeviceError(VoxAuroraError):
    """The audio input device could not be opened."""


class ModelLoadError(VoxAuroraError):
    """A model file could not be loaded."""


class ConfigError(VoxAuroraError):
    """A command configuration file is missing, malformed, or incomplete."""
