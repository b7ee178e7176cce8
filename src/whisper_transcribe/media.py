"""
ffprobe/ffmpeg helpers: duration probing, normalization and chunk splitting.
"""

import logging
import math
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .config import DEFAULT_CHUNK_SECONDS
from .errors import ProbeError, SplitError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioFormat:
    """Normalization applied to every artifact sent for transcription."""
    channels: int = 1
    sample_rate_hz: int = 16000
    bitrate_kbps: int = 32
    volume: float = 1.5
    container: str = "wav"
    codec: str = "pcm_s16le"


DEFAULT_FORMAT = AudioFormat()


@dataclass(frozen=True)
class Segment:
    """A normalized slice [start, start + duration) of the source recording."""
    index: int
    path: Path
    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


def probe_duration(filepath, ffprobe_binary: str = "ffprobe") -> float:
    """Get audio duration in seconds using ffprobe."""
    filepath = Path(filepath)
    if not filepath.exists():
        raise ProbeError(f"Audio file not found: {filepath}", path=str(filepath))

    cmd = [
        ffprobe_binary, "-v", "error", "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1", str(filepath)
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise ProbeError(f"Could not run ffprobe: {e}", path=str(filepath), cause=e) from e

    if result.returncode != 0:
        raise ProbeError(f"ffprobe failed: {result.stderr.strip()}", path=str(filepath))

    output = result.stdout.strip()
    try:
        duration = float(output)
    except ValueError as e:
        raise ProbeError(
            f"Could not parse duration of {filepath.name}: {output!r}", path=str(filepath), cause=e
        ) from e
    if not math.isfinite(duration) or duration < 0:
        raise ProbeError(f"Invalid duration for {filepath.name}: {output!r}", path=str(filepath))

    logger.debug("Probed %s: %.2f seconds", filepath, duration)
    return duration


def plan_segments(total_duration: float, chunk_length: float = DEFAULT_CHUNK_SECONDS) -> List[Tuple[float, float]]:
    """
    Compute the (start, length) windows covering [0, total_duration).

    The last window holds whatever remains after the full-length ones.
    """
    if chunk_length <= 0:
        raise ValueError(f"chunk_length must be positive, got {chunk_length}")

    num_chunks = math.ceil(total_duration / chunk_length)
    windows = []
    for i in range(num_chunks):
        start = i * chunk_length
        windows.append((start, min(chunk_length, total_duration - start)))
    return windows


def format_seconds(value: float) -> str:
    """Fixed-point seconds for ffmpeg, which rejects exponent notation ("1e-06")."""
    return f"{value:.6f}".rstrip("0").rstrip(".") or "0"


def _encode_command(
    source: Path,
    output: Path,
    audio_format: AudioFormat,
    ffmpeg_binary: str,
    start: Optional[float] = None,
    length: Optional[float] = None,
) -> List[str]:
    cmd = [ffmpeg_binary, "-y"]
    # Input seeking: ffmpeg jumps to start instead of decoding up to it
    if start is not None:
        cmd += ["-ss", format_seconds(start)]
    cmd += ["-i", str(source)]
    if length is not None:
        cmd += ["-t", format_seconds(length)]
    cmd += [
        "-vn",
        "-ac", str(audio_format.channels),
        "-ar", str(audio_format.sample_rate_hz),
        "-b:a", f"{audio_format.bitrate_kbps}k",
        "-af", f"volume={audio_format.volume}",
        "-acodec", audio_format.codec,
        "-f", audio_format.container,
        str(output),
    ]
    return cmd


def _run_ffmpeg(cmd: List[str], output: Path) -> None:
    logger.debug("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True)
    except OSError as e:
        raise SplitError(f"Could not run ffmpeg: {e}", path=str(output), cause=e) from e

    if result.returncode != 0:
        error_msg = result.stderr.decode(errors="replace") if result.stderr else ""
        logger.error("ffmpeg failed for %s: %s", output, error_msg)
        raise SplitError(f"ffmpeg failed: {error_msg}", path=str(output))


def normalize_audio(
    filepath,
    output_path,
    audio_format: AudioFormat = DEFAULT_FORMAT,
    ffmpeg_binary: str = "ffmpeg",
) -> Path:
    """Re-encode the whole file with the transcription normalization."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _run_ffmpeg(_encode_command(Path(filepath), output_path, audio_format, ffmpeg_binary), output_path)
    return output_path


def split_audio(
    filepath,
    total_duration: float,
    chunk_length: float = DEFAULT_CHUNK_SECONDS,
    output_dir=None,
    audio_format: AudioFormat = DEFAULT_FORMAT,
    ffmpeg_binary: str = "ffmpeg",
) -> List[Segment]:
    """
    Split an audio file into normalized, time-bounded segments.

    Args:
        filepath: Path to the source audio file.
        total_duration: Duration of the source in seconds (from probe_duration).
        chunk_length: Maximum length of one segment in seconds.
        output_dir: Directory for the segment files, created if missing.
        audio_format: Normalization applied to each segment.
        ffmpeg_binary: ffmpeg executable to run.

    Returns:
        Segments in index order. Each file is fully written when returned.
    """
    filepath = Path(filepath)
    output_dir = Path(output_dir) if output_dir is not None else Path("audio_chunks")
    windows = plan_segments(total_duration, chunk_length)

    segments = []
    for index, (start, length) in enumerate(windows):
        if index == 0:
            output_dir.mkdir(parents=True, exist_ok=True)
        segment_path = output_dir / f"segment-{index}.{audio_format.container}"
        cmd = _encode_command(filepath, segment_path, audio_format, ffmpeg_binary, start=start, length=length)
        _run_ffmpeg(cmd, segment_path)

        segments.append(Segment(index=index, path=segment_path, start=start, duration=length))
        logger.info("Created segment %d: %.1fm - %.1fm", index, start / 60, (start + length) / 60)

    return segments
