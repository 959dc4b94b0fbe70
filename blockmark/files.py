"""Filesystem implementation of the file capability."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from .capabilities import FetchError

_CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)


class ClipboardError(OSError):
    """Raised when no clipboard tool accepts the text."""


class LocalFiles:
    """Read assets from disk and save exports into a destination directory."""

    def __init__(self, destination: Path) -> None:
        self.destination = destination.expanduser()

    def fetch(self, path: str) -> bytes:
        location = Path(path.removeprefix("file://"))
        try:
            return location.read_bytes()
        except FileNotFoundError:
            raise FetchError(path, status=404) from None
        except OSError as exc:
            raise FetchError(path, reason=str(exc)) from exc

    def save(self, data: bytes, filename: str) -> None:
        """Write ``data`` atomically to ``destination/filename``."""

        self.destination.mkdir(parents=True, exist_ok=True)
        target = self.destination / filename
        partial = target.with_name(target.name + ".part")
        try:
            partial.write_bytes(data)
            partial.replace(target)
        finally:
            if partial.exists():
                partial.unlink()

    def write_clipboard(self, text: str) -> None:
        for command in _CLIPBOARD_COMMANDS:
            if shutil.which(command[0]) is None:
                continue
            process = subprocess.run(
                list(command),
                input=text,
                capture_output=True,
                text=True,
                check=False,
            )
            if process.returncode != 0:
                stderr = process.stderr.strip()
                raise ClipboardError(
                    f"{command[0]} failed (exit {process.returncode}): {stderr}"
                )
            return
        raise ClipboardError("No clipboard tool found (pbcopy, wl-copy, xclip, xsel).")


__all__ = ["ClipboardError", "LocalFiles"]
