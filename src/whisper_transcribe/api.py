"""
OpenAI Whisper API wrapper for audio transcription uploads.
"""

import logging
from pathlib import Path
from typing import Optional

import requests

from .errors import TranscriptionError

logger = logging.getLogger(__name__)


class WhisperAPI:
    """Wrapper for OpenAI's speech-to-text endpoint."""

    TRANSCRIPTIONS_URL = "https://api.openai.com/v1/audio/transcriptions"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "whisper-1",
        language: str = "en",
        timeout: int = 600
    ):
        """
        Initialize the Whisper API client.

        Args:
            api_key: OpenAI API key. A missing key is reported on the first
                     transcription call, not here.
            model: Speech-to-text model. Default is whisper-1.
            language: ISO-639-1 language of the audio.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key
        self.model = model
        self.language = language
        self.timeout = timeout

    def transcribe(self, filepath, mime_type: str = "audio/wav") -> str:
        """
        Upload one audio file and return its plain-text transcript.

        Args:
            filepath: Path to the audio artifact (must already be under the upload limit).
            mime_type: MIME type of the file.

        Returns:
            The transcript exactly as the service returned it.
        """
        filepath = Path(filepath)
        if not self.api_key:
            raise TranscriptionError(
                "Authentication failed: no API key configured. Set OPENAI_API_KEY.",
                path=str(filepath),
            )

        logger.info("Transcribing %s (%.1f MB)", filepath.name, filepath.stat().st_size / (1024 * 1024))

        data = {
            "model": self.model,
            "language": self.language,
            "response_format": "text",
        }
        try:
            with open(filepath, "rb") as f:
                response = requests.post(
                    self.TRANSCRIPTIONS_URL,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    data=data,
                    files={"file": (filepath.name, f, mime_type)},
                    timeout=self.timeout
                )
        except requests.RequestException as e:
            raise TranscriptionError(
                f"Transcription request failed: {e}", path=str(filepath), cause=e
            ) from e

        if response.status_code in (401, 403):
            raise TranscriptionError(
                f"Authentication failed: {response.status_code} {response.text}",
                path=str(filepath),
                status_code=response.status_code,
            )
        if response.status_code != 200:
            raise TranscriptionError(
                f"Transcription failed: {response.status_code} {response.text}",
                path=str(filepath),
                status_code=response.status_code,
            )

        logger.debug("Transcription received: %s...", response.text[:100])
        return response.text
