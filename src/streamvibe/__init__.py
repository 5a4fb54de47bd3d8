"""StreamVibe video upload, playback, and view accounting core."""

__version__ = "0.1.0"

__all__ = ["__version__"]
