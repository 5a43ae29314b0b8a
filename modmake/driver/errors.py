"""Exception types raised by the modmake driver.

Every error is fatal to a build invocation; the CLI catches
:class:`ModMakeError` and exits with a failure status.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence


class ModMakeError(Exception):
    """Base class for every error the driver reports to the user."""


class BuildIOError(ModMakeError):
    """A filesystem operation failed for ``path``."""

    def __init__(self, path, reason):
        self.path = str(path)
        self.reason = str(reason)
        super().__init__(f"I/O error on {self.path}: {self.reason}")

    @classmethod
    def from_os_error(cls, path, exc: Exception) -> "BuildIOError":
        return cls(path, getattr(exc, "strerror", None) or exc)


@dataclass(frozen=True)
class ParseFailure:
    label: str
    line: int
    message: str

    def __str__(self) -> str:
        where = f"{self.label}:{self.line}" if self.label else f"<builtin>:{self.line}"
        return f"{where}: {self.message}"


class ParseError(ModMakeError):
    """Aggregate of every per-module parse failure in one run."""

    def __init__(self, failures: Iterable[ParseFailure]):
        self.failures = tuple(failures)
        lines = ["Unable to parse modules:"]
        lines.extend(f"  {failure}" for failure in self.failures)
        super().__init__("\n".join(lines))


class BuildError(ModMakeError):
    """Failure detected by the build scheduler."""


class CyclicDependencyError(BuildError):
    def __init__(self, cycle: Sequence[str]):
        self.cycle = tuple(cycle)
        path = " -> ".join([*self.cycle, self.cycle[0]]) if self.cycle else ""
        super().__init__(f"Cycle in module dependencies: {path}")


class UnknownModuleError(BuildError):
    def __init__(self, module: str, missing: str):
        self.module = module
        self.missing = missing
        super().__init__(f"Module {missing} imported by {module} was not found")


class DuplicateModuleError(BuildError):
    def __init__(self, name: str, labels: Sequence[str] = ()):
        self.name = name
        self.labels = tuple(labels)
        where = ""
        if self.labels:
            where = " (" + ", ".join(label or "<builtin>" for label in self.labels) + ")"
        super().__init__(f"Module {name} is defined more than once{where}")


class CompileError(BuildError):
    """Backend failure while compiling one module."""

    def __init__(self, module: str, messages: Sequence[str]):
        self.module = module
        self.messages = tuple(messages)
        lines = [f"Error compiling module {module}:"]
        lines.extend(f"  {message}" for message in self.messages)
        super().__init__("\n".join(lines))


__all__ = [
    "BuildError",
    "BuildIOError",
    "CompileError",
    "CyclicDependencyError",
    "DuplicateModuleError",
    "ModMakeError",
    "ParseError",
    "ParseFailure",
    "UnknownModuleError",
]
