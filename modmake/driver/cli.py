"""Command-line interface for the modmake driver.

Progress lines go to standard output. Parse and build errors are printed to
standard error, prefixed with ``✗``, and the exit status is 1.
"""
from __future__ import annotations

import argparse
import logging
import sys

from ..constants import DEFAULT_OUTPUT_DIR, TOOL_NAME, VERSION, default_header_prefix
from .core import BuildOptions
from .errors import ModMakeError
from .graph import export_dependency_graph
from .loader import load_inputs
from .parser import parse_all
from .scheduler import build_plan, make


def parse_args(args):
    argp = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description=f"{TOOL_NAME} - Compiles modules to JavaScript",
        epilog=(
            "Progress is printed to stdout; errors are printed to stderr and "
            f"exit with status 1. {TOOL_NAME} {VERSION}"
        ),
    )

    argp.add_argument("files", nargs="*", metavar="FILE", help="The input module file(s)")
    argp.add_argument(
        "-o",
        "--output",
        default=DEFAULT_OUTPUT_DIR,
        help="The output directory (default: %(default)s)",
    )
    argp.add_argument("--no-prelude", action="store_true", help="Omit the Prelude")
    argp.add_argument(
        "--no-opts", action="store_true", help="Skip the optimization phase"
    )
    argp.add_argument(
        "-c",
        "--comments",
        action="store_true",
        help="Include comments in the generated code",
    )
    argp.add_argument(
        "-v",
        "--verbose-errors",
        action="store_true",
        help="Display verbose error messages",
    )
    argp.add_argument(
        "-p",
        "--no-prefix",
        action="store_true",
        help="Do not include the comment header in generated code",
    )
    argp.add_argument(
        "--graph",
        metavar="OUTPUT",
        help="Export the module dependency graph as a Graphviz DOT file",
    )
    argp.add_argument(
        "--debug", action="store_true", help="Log scheduling decisions to stderr"
    )
    argp.add_argument("--version", action="version", version=VERSION)

    return argp.parse_args(args)


def build_options(params):
    return BuildOptions(
        optimize=not params.no_opts,
        comments=params.comments,
        verbose_errors=params.verbose_errors,
        no_prelude=params.no_prelude,
    )


def compile_inputs(params, actions=None):
    """Load, parse and build the inputs named by ``params``."""

    options = build_options(params)
    records = load_inputs(params.files, include_builtins=not options.no_prelude)
    modules = parse_all(records)
    # Reject cycles and unknown imports before the graph file is written.
    build_plan(modules)
    if params.graph:
        export_dependency_graph(modules, params.graph)
    prefix = [] if params.no_prefix else default_header_prefix()
    return make(params.output, modules, prefix, actions=actions, options=options)


def main(args, actions=None):
    """Run a build and return the process exit status."""

    params = parse_args(args)
    if params.debug:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    try:
        compile_inputs(params, actions)
    except ModMakeError as exc:
        print(f"✗ {exc}", file=sys.stderr)
        return 1
    return 0


def run():  # pragma: no cover
    sys.exit(main(sys.argv[1:]))


__all__ = [
    "build_options",
    "compile_inputs",
    "main",
    "parse_args",
    "run",
]


if __name__ == "__main__":  # pragma: no cover
    run()
