"""Core data structures shared by the modmake driver."""

from __future__ import annotations

from dataclasses import dataclass, field
import enum
import json
from typing import Optional


class RebuildPolicy(enum.Enum):
    """How the scheduler treats an input unit when deciding staleness."""

    NORMAL = "normal"
    NEVER = "never"


@dataclass(frozen=True)
class Origin:
    """Where an input came from: a real file path, or ``None`` for built-ins."""

    path: Optional[str] = None

    @classmethod
    def virtual(cls) -> "Origin":
        return cls(None)

    @property
    def is_virtual(self) -> bool:
        return self.path is None

    @property
    def label(self) -> str:
        """Label used when tagging diagnostics; empty for virtual inputs."""

        return self.path or ""

    def __str__(self) -> str:  # pragma: no cover - representation helper
        return self.path or "<builtin>"


@dataclass(frozen=True)
class InputRecord:
    origin: Origin
    policy: RebuildPolicy
    text: str


@dataclass(frozen=True)
class Declaration:
    """A single ``name = expression`` binding in a module body."""

    name: str
    expression: str
    line: int
    comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class Module:
    """A parsed compilation unit. Identity is ``name``."""

    name: str
    imports: tuple[str, ...]
    exports: tuple[str, ...]
    declarations: tuple[Declaration, ...]
    origin: Origin
    policy: RebuildPolicy = RebuildPolicy.NORMAL

    @property
    def source_path(self) -> Optional[str]:
        return self.origin.path

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"Module({self.name}, imports={list(self.imports)})"


@dataclass(frozen=True)
class Interface:
    """Exported surface of a module, as dependents see it."""

    module: str
    exports: tuple[str, ...]
    imports: tuple[str, ...] = ()

    def to_dict(self):
        return {
            "module": self.module,
            "exports": list(self.exports),
            "imports": list(self.imports),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n"

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise TypeError("Interface must be built from a mapping")
        module = data.get("module")
        if not isinstance(module, str) or not module:
            raise ValueError("Interface is missing a module name")
        exports = data.get("exports", [])
        imports = data.get("imports", [])
        if not isinstance(exports, list) or not isinstance(imports, list):
            raise ValueError(f"Interface for {module} must list exports and imports")
        if not all(isinstance(name, str) for name in [*exports, *imports]):
            raise ValueError(f"Interface for {module} contains non-string names")
        return cls(module, tuple(exports), tuple(imports))

    @classmethod
    def from_json(cls, text: str) -> "Interface":
        return cls.from_dict(json.loads(text))


@dataclass(frozen=True)
class CompiledArtifact:
    """Generated code plus the interface written alongside it."""

    module: str
    code: str
    interface: Interface


@dataclass(frozen=True)
class BuildOptions:
    """Options threaded explicitly through the scheduler and the backend."""

    optimize: bool = True
    comments: bool = False
    verbose_errors: bool = False
    no_prelude: bool = False


@dataclass
class BuildReport:
    """Outcome of a successful :func:`make` call, in processing order."""

    rebuilt: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


__all__ = [
    "BuildOptions",
    "BuildReport",
    "CompiledArtifact",
    "Declaration",
    "InputRecord",
    "Interface",
    "Module",
    "Origin",
    "RebuildPolicy",
]
