"""Filesystem effects required by the scheduler.

The scheduler never touches the disk directly. It is handed an object
implementing :class:`MakeActions`: :class:`FileSystemActions` for real builds,
:class:`MemoryActions` for a virtual filesystem with a logical clock.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath
import stat
from typing import Optional, Protocol

from .errors import BuildIOError


class MakeActions(Protocol):
    """Capabilities the build scheduler needs from its host."""

    def get_timestamp(self, path) -> Optional[int]:
        """Return the modification time of ``path``, or ``None`` if it is absent."""

    def read_text(self, path) -> str:
        """Read ``path`` fully as text."""

    def write_text(self, path, text: str) -> None:
        """Write ``text`` to ``path``, creating parent directories first."""

    def progress(self, message: str) -> None:
        """Report a progress message. Must not affect the build."""


class FileSystemActions:
    """Real-disk actions; progress goes to standard output."""

    def __init__(self, stream=None, quiet=False):
        self._stream = stream
        self._quiet = quiet

    def get_timestamp(self, path):
        try:
            info = os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as exc:
            raise BuildIOError.from_os_error(path, exc) from exc
        if not stat.S_ISREG(info.st_mode):
            return None
        return info.st_mtime_ns

    def read_text(self, path):
        self.progress(f"Reading {path}")
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise BuildIOError.from_os_error(path, exc) from exc

    def write_text(self, path, text):
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BuildIOError.from_os_error(path.parent, exc) from exc
        self.progress(f"Writing {path}")
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise BuildIOError.from_os_error(path, exc) from exc

    def progress(self, message):
        if not self._quiet:
            print(message, file=self._stream)


def _key(path) -> str:
    return str(PurePath(path))


class MemoryActions:
    """In-memory filesystem for deterministic builds.

    Timestamps come from a logical clock that advances on every write or
    :meth:`touch`, so "newer than" never depends on the host's mtime
    resolution.
    """

    def __init__(self, files=None):
        self._clock = 0
        self.files: dict[str, str] = {}
        self.mtimes: dict[str, int] = {}
        self.directories: set[str] = set()
        self.broken: set[str] = set()
        self.reads: list[str] = []
        self.writes: list[str] = []
        self.messages: list[str] = []
        for path, text in (files or {}).items():
            self.add_file(path, text)

    def _tick(self):
        self._clock += 1
        return self._clock

    def add_file(self, path, text, mtime=None):
        key = _key(path)
        self.files[key] = text
        self.mtimes[key] = self._tick() if mtime is None else mtime
        return key

    def touch(self, path):
        key = _key(path)
        if key not in self.files:
            raise KeyError(f"Cannot touch missing file {key}")
        self.mtimes[key] = self._tick()

    def remove(self, path):
        key = _key(path)
        self.files.pop(key, None)
        self.mtimes.pop(key, None)

    def text(self, path):
        return self.files[_key(path)]

    def exists(self, path):
        return _key(path) in self.files

    def get_timestamp(self, path):
        key = _key(path)
        if key in self.broken:
            raise BuildIOError(key, "Permission denied")
        return self.mtimes.get(key)

    def read_text(self, path):
        key = _key(path)
        self.progress(f"Reading {key}")
        if key in self.broken:
            raise BuildIOError(key, "Permission denied")
        if key not in self.files:
            raise BuildIOError(key, "No such file or directory")
        self.reads.append(key)
        return self.files[key]

    def write_text(self, path, text):
        key = _key(path)
        if key in self.broken:
            raise BuildIOError(key, "Permission denied")
        for parent in PurePath(key).parents:
            self.directories.add(str(parent))
        self.progress(f"Writing {key}")
        self.files[key] = text
        self.mtimes[key] = self._tick()
        self.writes.append(key)

    def progress(self, message):
        self.messages.append(message)


__all__ = ["FileSystemActions", "MakeActions", "MemoryActions"]
