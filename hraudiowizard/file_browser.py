"""Directory browsing for picking audio files."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

DEFAULT_EXTENSIONS: tuple[str, ...] = (".wav", ".flac", ".ogg", ".mp3", ".aiff", ".aif", ".m4a")

_KIB = 1024
_MIB = 1024 * 1024


def format_size(size: int) -> str:
    """Render a byte count as whole bytes, kilobytes or megabytes."""
    if size < 0:
        raise ValueError(f"size must not be negative, got {size}")
    if size < _KIB:
        return f"{size} B"
    if size < _MIB:
        return f"{size // _KIB} KB"
    return f"{size // _MIB} MB"


@dataclass(frozen=True)
class BrowserEntry:
    """One listed item: a directory or a file that passes the extension filter."""

    path: Path
    is_dir: bool
    size: int = 0

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def label(self) -> str:
        if self.is_dir:
            return f"[DIR] {self.name}"
        return f"{self.name} ({format_size(self.size)})"


class FileBrowser:
    """Tracks a current directory, an extension filter and a selected file."""

    def __init__(
        self,
        start: str | os.PathLike[str] | None = None,
        extensions: Iterable[str] | None = None,
    ) -> None:
        self.current = Path(start) if start is not None else Path.home()
        self.extensions: list[str] = list(
            DEFAULT_EXTENSIONS if extensions is None else extensions
        )
        self.selected: str | None = None

    def set_extension_filter(self, extensions: Iterable[str]) -> None:
        """Replace the accepted extensions; an empty filter accepts every file."""
        self.extensions = list(extensions)

    def has_valid_extension(self, path: str | os.PathLike[str]) -> bool:
        """Whether the file's extension matches the filter, ignoring case."""
        if not self.extensions:
            return True
        suffix = Path(path).suffix.lower()
        return any(suffix == accepted.lower() for accepted in self.extensions)

    def navigate_to(self, path: str | os.PathLike[str]) -> bool:
        """Move to ``path`` if it is an existing directory; report whether it moved."""
        target = Path(path)
        if target.is_dir():
            self.current = target
            return True
        return False

    def go_up(self) -> bool:
        """Move to the parent of the current directory."""
        return self.navigate_to(self.current.parent)

    def entries(self) -> list[BrowserEntry]:
        """List visible directories, then matching files, each sorted by name."""
        found: list[BrowserEntry] = []
        with os.scandir(self.current) as listing:
            for item in listing:
                if item.name.startswith("."):
                    continue
                if item.is_dir():
                    found.append(BrowserEntry(Path(item.path), True))
                elif item.is_file() and self.has_valid_extension(item.name):
                    found.append(BrowserEntry(Path(item.path), False, item.stat().st_size))
        found.sort(key=lambda entry: (not entry.is_dir, entry.name))
        return found

    def select(self, path: str | os.PathLike[str]) -> str:
        """Mark a file as selected and return its path as a string."""
        target = Path(path)
        if not target.is_file():
            raise ValueError(f"not a regular file: {target}")
        if not self.has_valid_extension(target):
            raise ValueError(f"extension not accepted: {target.name}")
        self.selected = str(target)
        return self.selected