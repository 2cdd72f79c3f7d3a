"""VoxAurora -- offline voice commands behind a wake word."""

__version__ = "0.1.0"
