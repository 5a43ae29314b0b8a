"""Reference compiler backend: checks a module and emits CommonJS code."""

from __future__ import annotations

import re
from typing import Mapping

from .core import BuildOptions, CompiledArtifact, Declaration, Interface, Module
from .errors import CompileError

QUALIFIED_REF_RE = re.compile(
    r"(?<![\w.$])((?:[A-Z][A-Za-z0-9_]*\.)+)([a-z_][A-Za-z0-9_]*)\b"
)
LOCAL_REF_RE = re.compile(r"(?<![\w.$])([a-z_][A-Za-z0-9_]*)\b")

# Host globals that look like qualified references but never name a module.
JS_GLOBALS = frozenset(
    {
        "Array",
        "Boolean",
        "Date",
        "Error",
        "Intl",
        "JSON",
        "Map",
        "Math",
        "Number",
        "Object",
        "Promise",
        "Reflect",
        "RegExp",
        "Set",
        "String",
        "Symbol",
    }
)


def js_module_name(name: str) -> str:
    """Return the JavaScript binding used for an imported module."""

    return name.replace(".", "_")


def exported_names(module: Module) -> tuple[str, ...]:
    """Names visible to dependents; a module without an export list exports everything."""

    if module.exports:
        return module.exports
    return tuple(dict.fromkeys(decl.name for decl in module.declarations))


def interface_of(module: Module) -> Interface:
    """Derive the interface of ``module`` without compiling its body."""

    return Interface(module.name, exported_names(module), module.imports)


def qualified_references(expression: str):
    """Yield ``(module, name)`` for every qualified reference in ``expression``."""

    for match in QUALIFIED_REF_RE.finditer(expression):
        yield match.group(1)[:-1], match.group(2)


def _where(module: Module, decl: Declaration) -> str:
    label = module.origin.label or "<builtin>"
    first_line = decl.expression.splitlines()[0] if decl.expression else ""
    return f"at {label}:{decl.line}\n      {decl.name} = {first_line}"


def check_module(
    module: Module,
    interfaces: Mapping[str, Interface],
    options: BuildOptions = BuildOptions(),
) -> list[str]:
    """Return the list of error messages for ``module``; empty when it is well formed."""

    errors = []

    def report(message, decl=None):
        if options.verbose_errors and decl is not None:
            message = f"{message}\n    {_where(module, decl)}"
        errors.append(message)

    seen = {}
    for decl in module.declarations:
        if decl.name in seen:
            report(
                f"Duplicate declaration {decl.name} (first declared on line {seen[decl.name]})",
                decl,
            )
        else:
            seen[decl.name] = decl.line

    for name in module.exports:
        if name not in seen:
            report(f"Export {name} is not declared in module {module.name}")

    for imp in module.imports:
        if imp not in interfaces:
            report(f"No interface available for imported module {imp}")

    for decl in module.declarations:
        for target, name in qualified_references(decl.expression):
            if target not in module.imports:
                if target in JS_GLOBALS:
                    continue
                report(f"Module {target} is not imported by {module.name}", decl)
                continue
            iface = interfaces.get(target)
            if iface is not None and name not in iface.exports:
                report(f"Module {target} does not export {name}", decl)

    return errors


def dead_code_elimination(module: Module) -> list[Declaration]:
    """Keep only declarations reachable from the module's exports."""

    by_name = {decl.name: decl for decl in module.declarations}
    live = set()
    pending = [name for name in exported_names(module) if name in by_name]
    while pending:
        name = pending.pop()
        if name in live:
            continue
        live.add(name)
        for ref in LOCAL_REF_RE.findall(by_name[name].expression):
            if ref in by_name and ref not in live:
                pending.append(ref)
    return [decl for decl in module.declarations if decl.name in live]


def _rewrite_expression(expression: str, optimize: bool) -> str:
    def replace(match):
        return f"{js_module_name(match.group(1)[:-1])}.{match.group(2)}"

    if optimize:
        expression = "\n".join(line.strip() for line in expression.splitlines())
    return QUALIFIED_REF_RE.sub(replace, expression)


def generate_code(module: Module, declarations, options: BuildOptions, prefix=()) -> str:
    lines = [f"// {line}" for line in prefix]
    lines.append('"use strict";')
    for imp in module.imports:
        lines.append(f'var {js_module_name(imp)} = require("../{imp}/index.js");')
    for decl in declarations:
        if options.comments:
            lines.extend(f"// {comment}" if comment else "//" for comment in decl.comments)
        expression = _rewrite_expression(decl.expression, options.optimize)
        lines.append(f"var {decl.name} = {expression};")
    lines.append("module.exports = {")
    for name in exported_names(module):
        lines.append(f"    {name}: {name},")
    lines.append("};")
    return "\n".join(lines) + "\n"


def compile_module(
    module: Module,
    interfaces: Mapping[str, Interface],
    options: BuildOptions = BuildOptions(),
    prefix=(),
) -> CompiledArtifact:
    """Type-check ``module`` against its dependencies' interfaces and generate code."""

    errors = check_module(module, interfaces, options)
    if errors:
        raise CompileError(module.name, errors)

    declarations = (
        dead_code_elimination(module) if options.optimize else list(module.declarations)
    )
    code = generate_code(module, declarations, options, prefix)
    return CompiledArtifact(module.name, code, interface_of(module))


__all__ = [
    "check_module",
    "compile_module",
    "dead_code_elimination",
    "exported_names",
    "generate_code",
    "interface_of",
    "js_module_name",
    "qualified_references",
]
