"""
Native file picker for choosing the recording to transcribe.
"""

from typing import Optional

AUDIO_EXTENSIONS = ("mp3", "m4a", "wav")


def select_file() -> Optional[str]:
    """Open a file dialog restricted to audio files. Returns None if cancelled."""
    import tkinter
    from tkinter import filedialog

    root = tkinter.Tk()
    root.withdraw()
    try:
        path = filedialog.askopenfilename(
            title="Select audio file",
            filetypes=[("Audio Files", " ".join(f"*.{ext}" for ext in AUDIO_EXTENSIONS))],
        )
    finally:
        root.destroy()
    return path or None
