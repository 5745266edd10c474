"""Input layer - audio loading."""

from .loader import AudioLoader, AudioInfo

__all__ = ["AudioLoader", "AudioInfo"]
