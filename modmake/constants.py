"""Shared constant values for the modmake driver."""

VERSION = "0.3.1"

TOOL_NAME = "modmake"

DEFAULT_OUTPUT_DIR = "output"

CODE_FILE = "index.js"
EXTERNS_FILE = "externs.json"

HEADER_TEMPLATE = "Generated by {tool} version {version}"

PRELUDE_MODULE = "Prelude"


def default_header_prefix():
    """Return the one-line header placed at the top of generated code."""

    return [HEADER_TEMPLATE.format(tool=TOOL_NAME, version=VERSION)]


__all__ = [
    "VERSION",
    "TOOL_NAME",
    "DEFAULT_OUTPUT_DIR",
    "CODE_FILE",
    "EXTERNS_FILE",
    "HEADER_TEMPLATE",
    "PRELUDE_MODULE",
    "default_header_prefix",
]
