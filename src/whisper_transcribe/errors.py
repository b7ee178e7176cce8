"""
Exceptions raised by the transcription pipeline.
"""

from typing import Optional


class TranscribeError(Exception):
    """Base class for every error the pipeline raises."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        super().__init__(message)


class ProbeError(TranscribeError):
    """Raised when a source recording cannot be read or has no duration."""


class SplitError(TranscribeError):
    """Raised when ffmpeg fails to produce a normalized audio artifact."""


class SizeLimitExceeded(TranscribeError):
    """Raised when an artifact is still over the upload limit after compression."""

    def __init__(self, path: str, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            "File still too large after compression. Please try a shorter audio file. "
            f"({size / (1024 * 1024):.1f} MB, limit {limit / (1024 * 1024):.0f} MB)",
            path=path,
        )


class TranscriptionError(TranscribeError):
    """Raised when the remote speech-to-text call fails."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        super().__init__(message, path=path, cause=cause)


class RunCancelled(TranscribeError):
    """Raised when a run is stopped through its cancel token."""
