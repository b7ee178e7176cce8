"""
Whisper Chunked Transcribe - Transcribe audio files of any length with OpenAI's Whisper API.

Splits recordings longer than five minutes into normalized chunks, transcribes each
one in turn with progress reporting, then joins the text back together.
"""

__version__ = "0.1.0"

from .api import WhisperAPI
from .config import Settings
from .errors import (
    ProbeError,
    RunCancelled,
    SizeLimitExceeded,
    SplitError,
    TranscribeError,
    TranscriptionError,
)
from .transcriber import CancelToken, ProgressEvent, RunState, Transcriber

__all__ = [
    "Transcriber",
    "WhisperAPI",
    "Settings",
    "ProgressEvent",
    "RunState",
    "CancelToken",
    "TranscribeError",
    "ProbeError",
    "SplitError",
    "SizeLimitExceeded",
    "TranscriptionError",
    "RunCancelled",
    "__version__",
]
