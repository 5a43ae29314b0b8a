"""Incremental build scheduler.

Modules are processed one at a time in dependency order. A module is
recompiled when it has no previous artifact, when its source is newer than
that artifact, or when one of its dependencies was recompiled in the same
run. Everything else is skipped and its interface is loaded from the
``externs.json`` written by an earlier build.
"""

from __future__ import annotations

import logging
from pathlib import Path

import networkx as nx

from ..constants import CODE_FILE, EXTERNS_FILE
from .actions import FileSystemActions
from .compiler import compile_module, interface_of
from .core import BuildOptions, BuildReport, Interface, RebuildPolicy
from .errors import (
    BuildError,
    CyclicDependencyError,
    DuplicateModuleError,
    UnknownModuleError,
)
from .graph import dependency_graph

LOGGER = logging.getLogger(__name__)


def artifact_paths(output_dir, module_name):
    """Return ``(code_path, externs_path)`` for a module under ``output_dir``."""

    base = Path(output_dir) / module_name
    return base / CODE_FILE, base / EXTERNS_FILE


def build_plan(modules):
    """Order ``modules`` so every dependency precedes its dependents.

    Ties keep input order, so the built-in prelude stays first. Duplicate
    names, unknown imports and cycles are rejected here, before any I/O.
    """

    by_name = {}
    for module in modules:
        if module.name in by_name:
            raise DuplicateModuleError(
                module.name, [by_name[module.name].origin.label, module.origin.label]
            )
        by_name[module.name] = module

    for module in modules:
        for dep in module.imports:
            if dep not in by_name:
                raise UnknownModuleError(module.name, dep)

    graph = dependency_graph(modules)
    try:
        cycle = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:
        pass
    else:
        # Edges point dependency -> dependent; walk them backwards to read as imports.
        raise CyclicDependencyError([dependent for _, dependent in reversed(cycle)])

    position = {module.name: index for index, module in enumerate(modules)}
    ordered = nx.lexicographical_topological_sort(graph, key=position.__getitem__)
    return [by_name[name] for name in ordered]


def artifact_timestamp(actions, code_path, externs_path):
    """Timestamp of a module's artifact: the older of its two files."""

    code_time = actions.get_timestamp(code_path)
    externs_time = actions.get_timestamp(externs_path)
    if code_time is None or externs_time is None:
        return None
    return min(code_time, externs_time)


def stale_reason(module, source_time, artifact_time, rebuilt):
    """Return why ``module`` must be rebuilt, or ``None`` when it is fresh."""

    if artifact_time is None:
        return "no previous artifact"
    if source_time is None:
        return "source file is missing"
    if source_time > artifact_time:
        return "source is newer than artifact"
    changed = [dep for dep in module.imports if dep in rebuilt]
    if changed:
        return "dependency rebuilt: " + ", ".join(changed)
    return None


def load_interface(actions, module, externs_path):
    """Read the interface a previous build wrote for ``module``."""

    text = actions.read_text(externs_path)
    try:
        iface = Interface.from_json(text)
    except (TypeError, ValueError) as exc:
        raise BuildError(f"Corrupt externs file {externs_path}: {exc}") from exc
    if iface.module != module.name:
        raise BuildError(
            f"Corrupt externs file {externs_path}: describes {iface.module}, "
            f"expected {module.name}"
        )
    return iface


def make(
    output_dir,
    modules,
    prefix=(),
    actions=None,
    options=None,
    compiler=compile_module,
):
    """Bring the output tree for ``modules`` up to date.

    Raises a :class:`~modmake.driver.errors.ModMakeError` subclass on the
    first fatal problem. Artifacts written before the failure are kept.
    """

    if actions is None:
        actions = FileSystemActions()
    if options is None:
        options = BuildOptions()

    plan = build_plan(modules)
    report = BuildReport()
    interfaces = {}
    rebuilt = set()

    for module in plan:
        if module.policy is RebuildPolicy.NEVER:
            LOGGER.debug("%s: built-in, never rebuilt", module.name)
            interfaces[module.name] = interface_of(module)
            report.skipped.append(module.name)
            continue

        code_path, externs_path = artifact_paths(output_dir, module.name)
        source_time = (
            actions.get_timestamp(module.source_path)
            if module.source_path is not None
            else None
        )
        artifact_time = artifact_timestamp(actions, code_path, externs_path)
        reason = stale_reason(module, source_time, artifact_time, rebuilt)

        if reason is None:
            LOGGER.debug("%s: up to date", module.name)
            interfaces[module.name] = load_interface(actions, module, externs_path)
            report.skipped.append(module.name)
            continue

        LOGGER.debug("%s: rebuilding (%s)", module.name, reason)
        actions.progress(f"Compiling {module.name}")
        deps = {dep: interfaces[dep] for dep in module.imports}
        artifact = compiler(module, deps, options, prefix=prefix)

        actions.write_text(code_path, artifact.code)
        actions.write_text(externs_path, artifact.interface.to_json())
        interfaces[module.name] = artifact.interface
        rebuilt.add(module.name)
        report.rebuilt.append(module.name)

    return report


__all__ = [
    "artifact_paths",
    "artifact_timestamp",
    "build_plan",
    "load_interface",
    "make",
    "stale_reason",
]
