from pathlib import Path

import pytest

from whisper_transcribe.config import Settings
from whisper_transcribe.media import Segment, plan_segments


class FakeClient:
    """Stands in for WhisperAPI: returns canned text and records each call."""

    def __init__(self, texts=None, fail_on=None, error=None):
        self.texts = list(texts or [])
        self.fail_on = fail_on
        self.error = error
        self.calls = []
        self.existing_files = []

    def transcribe(self, filepath):
        filepath = Path(filepath)
        self.calls.append(filepath)
        self.existing_files.append(sorted(p.name for p in filepath.parent.iterdir()))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise self.error
        return self.texts[len(self.calls) - 1]


def fake_prober(duration):
    def prober(path, **kwargs):
        return duration
    return prober


def fake_splitter(path, total_duration, chunk_length=300, output_dir=None, **kwargs):
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    segments = []
    for index, (start, length) in enumerate(plan_segments(total_duration, chunk_length)):
        segment_path = output_dir / f"segment-{index}.wav"
        segment_path.write_bytes(b"RIFF" + b"\x00" * 16)
        segments.append(Segment(index=index, path=segment_path, start=start, duration=length))
    return segments


def sized_normalizer(size):
    def normalizer(path, output_path, **kwargs):
        output_path = Path(output_path)
        with open(output_path, "wb") as f:
            f.truncate(size)
        return output_path
    return normalizer


@pytest.fixture
def temp_root(tmp_path):
    root = tmp_path / "runs"
    root.mkdir()
    return root


@pytest.fixture
def settings(temp_root):
    return Settings(api_key="sk-test", temp_root=str(temp_root))


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "interview.mp3"
    path.write_bytes(b"ID3" + b"\x00" * 32)
    return path
