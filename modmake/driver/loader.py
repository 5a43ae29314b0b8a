"""Read the raw inputs of a build."""

from __future__ import annotations

from pathlib import Path

from ..prelude import PRELUDE_SOURCE
from .core import InputRecord, Origin, RebuildPolicy
from .errors import BuildIOError


def builtin_records():
    """Return the records for modules that ship with the driver."""

    return [InputRecord(Origin.virtual(), RebuildPolicy.NEVER, PRELUDE_SOURCE)]


def load_inputs(files, include_builtins=True):
    """Read every file in ``files`` eagerly and return their input records.

    A single missing or unreadable file raises :class:`BuildIOError` before
    anything else happens. The built-in prelude, when requested, is always
    the first record.
    """

    records = []
    for path in files:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise BuildIOError.from_os_error(path, exc) from exc
        records.append(InputRecord(Origin(str(path)), RebuildPolicy.NORMAL, text))

    if include_builtins:
        records = builtin_records() + records
    return records


__all__ = ["builtin_records", "load_inputs"]
