"""FFmpeg-backed file compression service."""

__version__ = "1.0.0"
