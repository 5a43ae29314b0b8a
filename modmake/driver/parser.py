"""Front-end for the module language and the all-or-nothing parse gate.

Module source is line oriented::

    -- comments attach to the next declaration
    module Data.Maybe
    import Prelude
    export fromMaybe, isJust
    fromMaybe = function (d) { return Prelude.identity(d); }

Indented lines continue the previous declaration's expression. A capitalised
dotted prefix such as ``Data.Maybe.fromMaybe`` is read as a module reference;
common host globals (``Math``, ``JSON``, ``Object`` ...) are exempt unless a
module of that name is imported.
"""

from __future__ import annotations

import re

from .core import Declaration, InputRecord, Module
from .errors import ParseError, ParseFailure

MODULE_NAME_RE = re.compile(r"^[A-Z][A-Za-z0-9_]*(?:\.[A-Z][A-Za-z0-9_]*)*$")
IDENT_RE = re.compile(r"^[a-z_][A-Za-z0-9_]*$")
KEYWORD_RE = re.compile(r"^(module|import|export)(?:\s+(.*))?$")
DECL_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")


def _is_comment(stripped):
    return stripped.startswith("--")


def parse_module(record: InputRecord) -> Module:
    """Parse one input record, raising :class:`ParseError` on any failure."""

    label = record.origin.label
    failures = []
    name = None
    imports = []
    exports = []
    decls = []
    current = None
    pending_comments = []

    def fail(line_no, message):
        failures.append(ParseFailure(label, line_no, message))

    for line_no, raw in enumerate(record.text.splitlines(), start=1):
        line = raw.rstrip()
        stripped = line.strip()
        if not stripped:
            continue
        if _is_comment(stripped):
            pending_comments.append(stripped[2:].strip())
            continue

        if line[:1].isspace():
            if current is None:
                fail(line_no, "Indented line does not continue a declaration")
            else:
                current["expression"].append(line)
            continue

        keyword = KEYWORD_RE.match(stripped)
        if name is None:
            if not keyword or keyword.group(1) != "module":
                fail(line_no, "Expected a 'module <Name>' header")
                # Nothing below is meaningful without a module name.
                break
            module_name = (keyword.group(2) or "").strip()
            if not MODULE_NAME_RE.match(module_name):
                fail(line_no, f"Invalid module name: {module_name!r}")
                break
            name = module_name
            pending_comments = []
            continue

        if keyword:
            kind, rest = keyword.group(1), (keyword.group(2) or "").strip()
            pending_comments = []
            current = None
            if kind == "module":
                fail(line_no, f"Duplicate module header in module {name}")
            elif kind == "import":
                if not MODULE_NAME_RE.match(rest):
                    fail(line_no, f"Invalid module name in import: {rest!r}")
                elif rest not in imports:
                    imports.append(rest)
            else:
                names = [part.strip() for part in rest.split(",")]
                if not rest or not all(IDENT_RE.match(part) for part in names):
                    fail(line_no, f"Invalid export list: {rest!r}")
                    continue
                for part in names:
                    if part not in exports:
                        exports.append(part)
            continue

        decl = DECL_RE.match(stripped)
        if not decl:
            fail(line_no, f"Unrecognised line: {stripped!r}")
            continue
        ident, expression = decl.group(1), decl.group(2).strip()
        if not IDENT_RE.match(ident):
            fail(line_no, f"Declaration names must start lowercase: {ident!r}")
            continue
        current = {
            "name": ident,
            "expression": [expression] if expression else [],
            "line": line_no,
            "comments": tuple(pending_comments),
        }
        decls.append(current)
        pending_comments = []

    if name is None and not failures:
        failures.append(ParseFailure(label, 1, "Empty module: missing 'module <Name>' header"))

    for entry in decls:
        if not entry["expression"]:
            fail(entry["line"], f"Declaration {entry['name']} has no expression")

    if failures:
        raise ParseError(failures)

    declarations = tuple(
        Declaration(
            entry["name"],
            "\n".join(entry["expression"]),
            entry["line"],
            entry["comments"],
        )
        for entry in decls
    )
    return Module(
        name=name,
        imports=tuple(imports),
        exports=tuple(exports),
        declarations=declarations,
        origin=record.origin,
        policy=record.policy,
    )


def parse_all(records) -> list[Module]:
    """Parse every record, or raise one :class:`ParseError` for all failures."""

    modules = []
    failures = []
    for record in records:
        try:
            modules.append(parse_module(record))
        except ParseError as exc:
            failures.extend(exc.failures)
    if failures:
        raise ParseError(failures)
    return modules


__all__ = ["parse_all", "parse_module"]
