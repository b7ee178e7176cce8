"""
Runtime settings, read from the environment (and a .env file if present).
"""

import math
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

MAX_UPLOAD_BYTES = 25 * 1024 * 1024
DEFAULT_CHUNK_SECONDS = 300


def parse_chunk_length(value, name: str = "chunk length") -> float:
    """Parse a chunk length in seconds, rejecting non-numeric and non-positive values."""
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number of seconds, got {value!r}") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise ValueError(f"{name} must be a positive number of seconds, got {value!r}")
    return seconds


@dataclass
class Settings:
    api_key: Optional[str] = None
    model: str = "whisper-1"
    language: str = "en"
    chunk_length: float = DEFAULT_CHUNK_SECONDS
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    # Coarse estimate used for the "minutes remaining" status text
    minutes_per_chunk: int = 5
    temp_root: str = field(default_factory=tempfile.gettempdir)
    ffmpeg_binary: str = field(default_factory=lambda: shutil.which("ffmpeg") or "ffmpeg")
    ffprobe_binary: str = field(default_factory=lambda: shutil.which("ffprobe") or "ffprobe")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Loads a .env file first, so OPENAI_API_KEY can live there.
        """
        load_dotenv()
        defaults = cls()
        return cls(
            api_key=os.getenv("OPENAI_API_KEY") or None,
            model=os.getenv("WHISPER_MODEL", defaults.model),
            language=os.getenv("TRANSCRIBE_LANGUAGE", defaults.language),
            chunk_length=parse_chunk_length(os.getenv("CHUNK_SECONDS", defaults.chunk_length), "CHUNK_SECONDS"),
            temp_root=os.getenv("TRANSCRIBE_TEMP_DIR", defaults.temp_root),
            ffmpeg_binary=os.getenv("FFMPEG_BINARY", defaults.ffmpeg_binary),
            ffprobe_binary=os.getenv("FFPROBE_BINARY", defaults.ffprobe_binary),
        )
