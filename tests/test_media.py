import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from whisper_transcribe.errors import ProbeError, SplitError
from whisper_transcribe.media import format_seconds, normalize_audio, plan_segments, probe_duration, split_audio


def completed(cmd, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)


def fake_ffmpeg(cmd, **kwargs):
    """Write the output file named last on the command line, like ffmpeg would."""
    Path(cmd[-1]).write_bytes(b"RIFF" + b"\x00" * 40)
    return completed(cmd, stdout=b"", stderr=b"")


class TestPlanSegments:
    def test_remainder_goes_to_last_segment(self):
        assert plan_segments(650, 300) == [(0, 300), (300, 300), (600, 50)]

    def test_exact_multiple(self):
        assert plan_segments(600, 300) == [(0, 300), (300, 300)]

    @pytest.mark.parametrize("duration", [301, 899.5, 1234.25, 7200])
    def test_windows_cover_duration(self, duration):
        windows = plan_segments(duration, 300)

        assert windows[0][0] == 0
        for (start, length), (next_start, _) in zip(windows, windows[1:]):
            assert start + length == next_start
        last_start, last_length = windows[-1]
        assert last_start + last_length == pytest.approx(duration)
        assert all(0 < length <= 300 for _, length in windows)

    def test_rejects_non_positive_chunk_length(self):
        with pytest.raises(ValueError):
            plan_segments(100, 0)


class TestProbeDuration:
    def test_parses_ffprobe_output(self, tmp_path):
        audio = tmp_path / "talk.m4a"
        audio.write_bytes(b"data")

        with patch("whisper_transcribe.media.subprocess.run", return_value=completed([], stdout="652.371000\n")) as run:
            assert probe_duration(audio) == pytest.approx(652.371)

        cmd = run.call_args[0][0]
        assert cmd[0] == "ffprobe"
        assert cmd[-1] == str(audio)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProbeError):
            probe_duration(tmp_path / "nope.mp3")

    def test_ffprobe_error(self, tmp_path):
        audio = tmp_path / "corrupt.mp3"
        audio.write_bytes(b"garbage")

        result = completed([], returncode=1, stderr="Invalid data found when processing input")
        with patch("whisper_transcribe.media.subprocess.run", return_value=result):
            with pytest.raises(ProbeError, match="Invalid data"):
                probe_duration(audio)

    def test_unparseable_duration(self, tmp_path):
        audio = tmp_path / "odd.wav"
        audio.write_bytes(b"data")

        with patch("whisper_transcribe.media.subprocess.run", return_value=completed([], stdout="N/A\n")):
            with pytest.raises(ProbeError):
                probe_duration(audio)

    def test_ffprobe_not_installed(self, tmp_path):
        audio = tmp_path / "talk.mp3"
        audio.write_bytes(b"data")

        with patch("whisper_transcribe.media.subprocess.run", side_effect=FileNotFoundError("ffprobe")):
            with pytest.raises(ProbeError):
                probe_duration(audio)


class TestSplitAudio:
    def test_produces_ordered_normalized_segments(self, tmp_path):
        source = tmp_path / "long.mp3"
        source.write_bytes(b"data")
        out_dir = tmp_path / "chunks"

        with patch("whisper_transcribe.media.subprocess.run", side_effect=fake_ffmpeg) as run:
            segments = split_audio(source, 650, chunk_length=300, output_dir=out_dir)

        assert [s.index for s in segments] == [0, 1, 2]
        assert [s.duration for s in segments] == [300, 300, 50]
        assert [s.path.name for s in segments] == ["segment-0.wav", "segment-1.wav", "segment-2.wav"]
        assert all(s.path.exists() for s in segments)
        assert segments[-1].end == 650

        cmd = run.call_args_list[2][0][0]
        assert cmd.index("-ss") < cmd.index("-i")
        assert cmd[cmd.index("-ss") + 1] == "600"
        assert cmd[cmd.index("-t") + 1] == "50"
        assert cmd[cmd.index("-ac") + 1] == "1"
        assert cmd[cmd.index("-ar") + 1] == "16000"
        assert cmd[cmd.index("-b:a") + 1] == "32k"
        assert cmd[cmd.index("-af") + 1] == "volume=1.5"

    def test_encode_failure_raises(self, tmp_path):
        source = tmp_path / "long.mp3"
        source.write_bytes(b"data")

        result = completed([], returncode=1, stderr=b"Conversion failed!")
        with patch("whisper_transcribe.media.subprocess.run", return_value=result) as run:
            with pytest.raises(SplitError, match="Conversion failed!"):
                split_audio(source, 650, output_dir=tmp_path / "chunks")

        assert run.call_count == 1


def test_normalize_audio_spans_whole_file(tmp_path):
    source = tmp_path / "short.wav"
    source.write_bytes(b"data")
    output = tmp_path / "run" / "converted-audio.wav"

    with patch("whisper_transcribe.media.subprocess.run", side_effect=fake_ffmpeg) as run:
        assert normalize_audio(source, output) == output

    cmd = run.call_args[0][0]
    assert "-ss" not in cmd
    assert "-t" not in cmd
    assert output.exists()


@pytest.mark.parametrize("value, expected", [
    (0, "0"),
    (600.0, "600"),
    (50, "50"),
    (12.5, "12.5"),
    (9.999999974752427e-07, "0.000001"),
])
def test_format_seconds_is_fixed_point(value, expected):
    assert format_seconds(value) == expected


def test_sub_millisecond_remainder_is_not_exponent(tmp_path):
    source = tmp_path / "long.mp3"
    source.write_bytes(b"data")

    with patch("whisper_transcribe.media.subprocess.run", side_effect=fake_ffmpeg) as run:
        segments = split_audio(source, 600.000001, chunk_length=300, output_dir=tmp_path / "chunks")

    assert len(segments) == 3
    cmd = run.call_args_list[-1][0][0]
    assert cmd[cmd.index("-ss") + 1] == "600"
    assert cmd[cmd.index("-t") + 1] == "0.000001"
    assert "e" not in cmd[cmd.index("-t") + 1]
