"""Batch enhancement session and the command-line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .processor import AudioProcessor, ProcessingError

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS: tuple[str, ...] = (
    ".wav", ".flac", ".ogg", ".mp3", ".aiff", ".aif", ".m4a", ".opus",
)

LOWPASS_RANGE = (6000, 192000)
MULTIPLIER_RANGE = (1, 16)


def is_audio_file(path: str | os.PathLike[str]) -> bool:
    """Whether the path carries a known audio extension, ignoring case."""
    return Path(path).suffix.lower() in AUDIO_EXTENSIONS


def output_path_for(path: str | os.PathLike[str]) -> Path:
    """Place the result next to the input with ``_enhanced`` added to the stem."""
    source = Path(path)
    return source.parent / f"{source.stem}_enhanced{source.suffix}"


@dataclass
class Settings:
    """Processing options applied to every file of a batch."""

    enable_hfc: bool = True
    compressed_mode: bool = False
    lowpass_freq: int = 16000
    sample_rate_multiplier: int = 2

    def __post_init__(self) -> None:
        low, high = LOWPASS_RANGE
        if not low <= self.lowpass_freq <= high:
            raise ValueError(f"lowpass frequency must be within {low}..{high} Hz")
        low, high = MULTIPLIER_RANGE
        if not low <= self.sample_rate_multiplier <= high:
            raise ValueError(f"sample rate multiplier must be within {low}..{high}")


class BatchSession:
    """A list of input files processed one after another with shared settings."""

    def __init__(
        self,
        settings: Settings | None = None,
        processor: AudioProcessor | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.processor = processor if processor is not None else AudioProcessor()
        self.files: list[str] = []
        self.status_message = "Ready"
        self.progress = 0.0
        self.processing = False
        self.current_file: str | None = None
        self.last_success_count: int | None = None
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def add_file(self, path: str | os.PathLike[str]) -> bool:
        """Queue an audio file; report whether it was added."""
        text = os.fspath(path)
        name = Path(text).name
        if not is_audio_file(text):
            self.status_message = f"Not a valid audio file: {name}"
            return False
        if text in self.files:
            self.status_message = f"File already in list: {name}"
            return False
        self.files.append(text)
        self.status_message = f"Added: {name}"
        return True

    def remove_file(self, index: int) -> str:
        """Remove and return the queued file at ``index``."""
        removed = self.files.pop(index)
        self.status_message = "Removed file"
        return removed

    def clear_files(self) -> None:
        self.files.clear()
        self.status_message = "File list cleared"

    def _begin(self) -> bool:
        with self._lock:
            if not self.files or self.processing:
                return False
            self.processing = True
            self.progress = 0.0
            self.status_message = "Processing..."
            return True

    def _run(self) -> int:
        files = list(self.files)
        total = len(files)
        successes = 0
        settings = self.settings
        try:
            for position, path in enumerate(files):
                self.current_file = path
                name = Path(path).name
                self.status_message = f"Processing: {name}"

                def report(fraction: float, position: int = position) -> None:
                    self.progress = (position + fraction) / total

                try:
                    self.processor.process_file(
                        path,
                        output_path_for(path),
                        settings.enable_hfc,
                        settings.lowpass_freq,
                        settings.compressed_mode,
                        settings.sample_rate_multiplier,
                        report,
                    )
                except ProcessingError as exc:
                    logger.error("%s", exc)
                    self.status_message = f"Error processing: {name}"
                else:
                    successes += 1
                    self.status_message = f"Completed: {name}"
            self.status_message = (
                f"Processing complete! {successes}/{total} files processed successfully"
            )
        finally:
            self.current_file = None
            self.last_success_count = successes
            self.progress = 1.0
            self.processing = False
        return successes

    def process_files(self) -> int:
        """Process every queued file now; return how many succeeded."""
        if not self._begin():
            return 0
        return self._run()

    def start(self) -> bool:
        """Process the queue on a background thread; report whether it started."""
        self.wait()
        if not self._begin():
            return False
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        return True

    def wait(self) -> int | None:
        """Block until background processing ends; return its success count."""
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        return self.last_success_count


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hraudiowizard",
        description="Enhance audio files by rebuilding their high frequencies.",
    )
    parser.add_argument("files", nargs="+", help="input audio files")
    parser.add_argument(
        "--no-hfc", dest="enable_hfc", action="store_false",
        help="disable high frequency compensation",
    )
    parser.add_argument("--lowpass", type=int, default=16000, help="lowpass frequency in Hz")
    parser.add_argument(
        "--multiplier", type=int, default=2, help="sample rate multiplier for the output"
    )
    parser.add_argument(
        "--compressed", action="store_true", help="settings for compressed sources"
    )
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Process the files named on the command line; return the exit status."""
    parser = _parser()
    args = parser.parse_args(argv)
    try:
        settings = Settings(
            enable_hfc=args.enable_hfc,
            compressed_mode=args.compressed,
            lowpass_freq=args.lowpass,
            sample_rate_multiplier=args.multiplier,
        )
    except ValueError as exc:
        parser.error(str(exc))

    session = BatchSession(settings, AudioProcessor(args.seed))
    for path in args.files:
        if not session.add_file(path):
            print(session.status_message, file=sys.stderr)
    if not session.files:
        print("No audio files to process", file=sys.stderr)
        return 1

    successes = session.process_files()
    print(session.status_message)
    return 0 if successes == len(session.files) else 1