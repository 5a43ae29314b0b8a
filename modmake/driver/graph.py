"""Module dependency graph construction and Graphviz export."""

from __future__ import annotations

from pathlib import Path

import networkx as nx
import pydot

from .core import RebuildPolicy
from .errors import BuildIOError


def dependency_graph(modules):
    """Return a directed graph with an edge ``dependency -> dependent`` per import.

    Imports that name modules outside ``modules`` are ignored here; the
    scheduler rejects them before the graph is built.
    """

    graph = nx.DiGraph()
    for index, module in enumerate(modules):
        graph.add_node(module.name, module=module, index=index)
    for module in modules:
        for dep in module.imports:
            if dep in graph:
                graph.add_edge(dep, module.name)
    return graph


def to_pydot(modules):
    graph = dependency_graph(modules)
    dot = pydot.Dot(
        "modules",
        graph_type="digraph",
        rankdir="LR",
        fontname="Helvetica",
    )
    ids = {}
    for name, data in graph.nodes(data=True):
        ids[name] = f"m{data['index']}"
        module = data["module"]
        builtin = module.policy is RebuildPolicy.NEVER
        dot.add_node(
            pydot.Node(
                ids[name],
                label=name,
                shape="box",
                style="dashed" if builtin else "rounded",
                color="#7f8c8d" if builtin else "#34495e",
                fontname="Helvetica",
            )
        )
    for dep, dependent in graph.edges():
        dot.add_edge(pydot.Edge(ids[dep], ids[dependent], arrowsize="0.8"))
    return dot


def export_dependency_graph(modules, output_path):
    """Write the dependency graph of ``modules`` to ``output_path`` as DOT."""

    dot = to_pydot(modules)
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(dot.to_string(), encoding="utf-8")
    except OSError as exc:
        raise BuildIOError.from_os_error(output_path, exc) from exc
    print(f"  ✓ Dependency graph exported → {output_path}")
    return output_path


__all__ = ["dependency_graph", "export_dependency_graph", "to_pydot"]
