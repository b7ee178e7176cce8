"""
Command-line interface for whisper-transcribe.
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .api import WhisperAPI
from .config import Settings, parse_chunk_length
from .desktop import select_file
from .errors import TranscribeError
from .transcriber import Transcriber


def chunk_duration(value: str) -> float:
    try:
        return parse_chunk_length(value, "--chunk-duration")
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whisper-transcribe",
        description="Transcribe audio files of any length using OpenAI's Whisper API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pick a file with the native dialog
  whisper-transcribe

  # Basic usage
  whisper-transcribe interview.mp3

  # Save the transcript to a file
  whisper-transcribe interview.m4a -o transcript.txt

  # Transcribe Spanish audio
  whisper-transcribe entrevista.wav --language es

Environment Variables:
  OPENAI_API_KEY    Your OpenAI API key (required, may be set in .env)
"""
    )

    parser.add_argument(
        "audio_file",
        nargs="?",
        help="Path to the audio file to transcribe (opens a file picker if omitted)"
    )

    parser.add_argument(
        "-o", "--output",
        help="Write the transcript to this file instead of stdout"
    )

    parser.add_argument(
        "-k", "--api-key",
        help="OpenAI API key (or set OPENAI_API_KEY env var)"
    )

    parser.add_argument(
        "-m", "--model",
        help="Speech-to-text model to use (default: whisper-1)"
    )

    parser.add_argument(
        "-l", "--language",
        help="Language of the audio (default: en)"
    )

    parser.add_argument(
        "--chunk-duration",
        type=chunk_duration,
        help="Chunk duration in seconds (default: 300 = 5 minutes)"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress messages"
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for diagnostics (default: WARNING)"
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def main(argv=None):
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s - %(message)s",
    )

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.api_key:
        settings.api_key = args.api_key
    if args.model:
        settings.model = args.model
    if args.language:
        settings.language = args.language
    if args.chunk_duration is not None:
        settings.chunk_length = args.chunk_duration

    audio_file = args.audio_file or select_file()
    if not audio_file:
        print("No file selected.", file=sys.stderr)
        sys.exit(1)

    def show_progress(event):
        if not args.quiet:
            print(f"[{event.percent_complete:5.1f}%] {event.status_message}", file=sys.stderr)

    try:
        client = WhisperAPI(
            api_key=settings.api_key,
            model=settings.model,
            language=settings.language
        )
        transcriber = Transcriber(client, settings=settings, verbose=False)
        transcriber.on_progress(show_progress)

        transcription = transcriber.process_audio(audio_file)

        if args.output:
            Path(args.output).write_text(transcription, encoding="utf-8")
            if not args.quiet:
                print(f"Transcript saved to: {args.output}", file=sys.stderr)
        else:
            print(transcription)

    except TranscribeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
