"""
Main transcriber class for chunked audio transcription.
"""

import enum
import logging
import shutil
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .config import Settings
from .errors import RunCancelled, SizeLimitExceeded
from .media import normalize_audio, probe_duration, split_audio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    percent_complete: float
    status_message: str


ProgressHandler = Callable[[ProgressEvent], None]


class RunState(enum.Enum):
    IDLE = "idle"
    PROBING = "probing"
    SPLITTING = "splitting"
    TRANSCRIBING_CHUNKS = "transcribing_chunks"
    COMPRESSING_WHOLE = "compressing_whole"
    TRANSCRIBING_WHOLE = "transcribing_whole"
    DONE = "done"
    FAILED = "failed"


class CancelToken:
    """Cooperative cancellation flag, checked between segments."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class Transcriber:
    """
    Transcribe audio files of any length through a size-limited API.

    Recordings longer than one chunk are split into normalized segments
    that are transcribed one at a time and joined back together. Shorter
    recordings are normalized as a whole and sent in a single request.
    Every run works inside its own temporary directory, removed when the
    run ends whether it succeeded or not.
    """

    def __init__(
        self,
        client,
        settings: Optional[Settings] = None,
        prober: Callable = probe_duration,
        splitter: Callable = split_audio,
        normalizer: Callable = normalize_audio,
        verbose: bool = True
    ):
        """
        Initialize the transcriber.

        Args:
            client: Object with a transcribe(path) -> str method (e.g. WhisperAPI).
            settings: Chunk length, size limit and tool locations. Defaults to Settings().
            prober: Returns the duration in seconds of an audio file.
            splitter: Produces the ordered segments for the chunked path.
            normalizer: Produces the single artifact for the short-file path.
            verbose: Whether to print progress messages.
        """
        self.client = client
        self.settings = settings or Settings()
        self.prober = prober
        self.splitter = splitter
        self.normalizer = normalizer
        self.verbose = verbose
        self.state = RunState.IDLE
        self._handlers: List[ProgressHandler] = []

    def _log(self, message: str):
        """Print message if verbose mode is on."""
        if self.verbose:
            print(message)

    def on_progress(self, handler: ProgressHandler):
        """
        Register a callback invoked with every ProgressEvent.

        The handler stays registered for all later runs of this transcriber.
        Pass on_progress to process_audio for a handler scoped to one run.
        """
        self._handlers.append(handler)
        return handler

    def _emit(self, handlers: List[ProgressHandler], event: ProgressEvent):
        for handler in handlers:
            handler(event)

    def process_audio(
        self,
        audio_file,
        on_progress: Optional[ProgressHandler] = None,
        cancel_token: Optional[CancelToken] = None
    ) -> str:
        """
        Run the full pipeline on one recording.

        Args:
            audio_file: Path to the source recording.
            on_progress: Extra progress callback for this run only.
            cancel_token: Stops the run at the next segment boundary when cancelled.

        Returns:
            The transcript, trimmed of surrounding whitespace.
        """
        handlers = list(self._handlers)
        if on_progress is not None:
            handlers.append(on_progress)

        audio_path = Path(audio_file)
        run_dir = None
        try:
            self.state = RunState.PROBING
            duration = self.prober(audio_path, ffprobe_binary=self.settings.ffprobe_binary)
            self._log(f"Audio duration: {duration:.1f} seconds")

            Path(self.settings.temp_root).mkdir(parents=True, exist_ok=True)
            run_dir = Path(tempfile.mkdtemp(prefix="audio-chunks-", dir=self.settings.temp_root))

            if duration > self.settings.chunk_length:
                transcription = self._transcribe_chunked(audio_path, duration, run_dir, handlers, cancel_token)
            else:
                transcription = self._transcribe_whole(audio_path, run_dir, handlers, cancel_token)

            self.state = RunState.DONE
            return transcription.strip()
        except Exception:
            self.state = RunState.FAILED
            raise
        finally:
            if run_dir is not None:
                shutil.rmtree(run_dir, ignore_errors=True)

    def _check_size(self, artifact):
        size = Path(artifact).stat().st_size
        if size > self.settings.max_upload_bytes:
            logger.error("%s is %d bytes, over the %d byte limit", artifact, size, self.settings.max_upload_bytes)
            raise SizeLimitExceeded(str(artifact), size, self.settings.max_upload_bytes)

    def _check_cancelled(self, cancel_token: Optional[CancelToken]):
        if cancel_token is not None and cancel_token.cancelled:
            raise RunCancelled("Transcription cancelled")

    def _transcribe_chunked(self, audio_path, duration, run_dir, handlers, cancel_token) -> str:
        self.state = RunState.SPLITTING
        self._log("Splitting audio into chunks...")
        segments = self.splitter(
            audio_path,
            duration,
            chunk_length=self.settings.chunk_length,
            output_dir=run_dir,
            ffmpeg_binary=self.settings.ffmpeg_binary,
        )
        total = len(segments)
        self._log(f"Created {total} chunks")

        self.state = RunState.TRANSCRIBING_CHUNKS
        transcription = ""
        for done, segment in enumerate(segments, start=1):
            self._check_size(segment.path)
            self._check_cancelled(cancel_token)
            self._log(f"  Transcribing chunk {done}/{total}...")
            text = self.client.transcribe(segment.path)
            transcription += text + " "
            Path(segment.path).unlink()

            estimated_minutes = (total - done) * self.settings.minutes_per_chunk
            self._emit(handlers, ProgressEvent(
                percent_complete=done / total * 100,
                status_message=(
                    f"Transcribing chunk {done} of {total} "
                    f"(about {estimated_minutes} minutes remaining)"
                ),
            ))

        return transcription

    def _transcribe_whole(self, audio_path, run_dir, handlers, cancel_token) -> str:
        self.state = RunState.COMPRESSING_WHOLE
        self._log("Compressing audio...")
        artifact = self.normalizer(
            audio_path,
            run_dir / "converted-audio.wav",
            ffmpeg_binary=self.settings.ffmpeg_binary,
        )

        self._check_size(artifact)

        self._check_cancelled(cancel_token)
        self.state = RunState.TRANSCRIBING_WHOLE
        self._log("Transcribing audio...")
        transcription = self.client.transcribe(artifact)
        Path(artifact).unlink()

        self._emit(handlers, ProgressEvent(percent_complete=100.0, status_message="Transcription complete"))
        return transcription
