from __future__ import annotations


class Hat606Error(Exception):
    """Base error for the hat606 package."""


class InvalidParamsError(Hat606Error):
    """Raised when render settings cannot produce a buffer."""


class OutputOpenError(Hat606Error):
    """Raised when the output destination cannot be opened."""


class BufferAllocationError(Hat606Error):
    """Raised when the sample buffer cannot be allocated."""


class WavWriteError(Hat606Error):
    """Raised when writing the WAV stream to its sink fails."""
