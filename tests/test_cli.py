"""End-to-end builds through ``modmake.driver.cli`` on a real filesystem."""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from modmake import VERSION  # noqa: E402
from modmake.driver import cli as driver_cli  # noqa: E402

PAST = 1_000_000_000


def _write(path, text, mtime=PAST):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    os.utime(path, (mtime, mtime))
    return path


def _sources(tmp_path):
    x = _write(tmp_path / "src" / "X.src", "module X\nexport value\nvalue = 1\n")
    y = _write(
        tmp_path / "src" / "Y.src",
        "module Y\nimport X\nimport Prelude\nvalue = Prelude.identity(X.value)\n",
    )
    return x, y


def _snapshot(out):
    return {
        path.relative_to(out).as_posix(): path.read_bytes()
        for path in sorted(out.rglob("*"))
        if path.is_file()
    }


def test_parse_args_defaults():
    params = driver_cli.parse_args([])

    assert params.files == []
    assert params.output == "output"
    assert not params.no_prelude
    assert not params.no_prefix
    assert not params.no_opts
    assert not params.comments
    assert not params.verbose_errors
    assert params.graph is None

    options = driver_cli.build_options(driver_cli.parse_args(["--no-opts", "-c", "-v"]))
    assert not options.optimize
    assert options.comments
    assert options.verbose_errors


def test_three_run_scenario(tmp_path, capsys):
    x, y = _sources(tmp_path)
    out = tmp_path / "output"
    args = ["-o", str(out), str(x), str(y)]

    assert driver_cli.main(args) == 0
    first_out = capsys.readouterr().out
    assert f"Writing {out / 'X' / 'index.js'}" in first_out
    assert f"Writing {out / 'Y' / 'externs.json'}" in first_out
    assert sorted(_snapshot(out)) == [
        "X/externs.json",
        "X/index.js",
        "Y/externs.json",
        "Y/index.js",
    ]
    first = _snapshot(out)

    assert driver_cli.main(args) == 0
    second_out = capsys.readouterr().out
    assert "Compiling" not in second_out
    assert "Writing" not in second_out
    assert f"Reading {out / 'X' / 'externs.json'}" in second_out
    assert _snapshot(out) == first

    future = time.time() + 3600
    os.utime(x, (future, future))
    assert driver_cli.main(args) == 0
    third_out = capsys.readouterr().out
    assert "Compiling X" in third_out
    assert "Compiling Y" in third_out


def test_generated_code_header(tmp_path):
    x, _ = _sources(tmp_path)
    out = tmp_path / "output"

    assert driver_cli.main(["-o", str(out), str(x)]) == 0
    code = (out / "X" / "index.js").read_text(encoding="utf-8")
    assert code.splitlines()[0] == f"// Generated by modmake version {VERSION}"

    plain = tmp_path / "plain"
    assert driver_cli.main(["-p", "-o", str(plain), str(x)]) == 0
    code = (plain / "X" / "index.js").read_text(encoding="utf-8")
    assert code.splitlines()[0] == '"use strict";'


def test_missing_input_fails_without_writing(tmp_path, capsys):
    x, _ = _sources(tmp_path)
    out = tmp_path / "output"

    status = driver_cli.main(["-o", str(out), str(x), str(tmp_path / "Nope.src")])

    assert status == 1
    assert "I/O error" in capsys.readouterr().err
    assert not out.exists()


def test_parse_failure_fails_without_writing(tmp_path, capsys):
    x, _ = _sources(tmp_path)
    broken = _write(tmp_path / "src" / "Broken.src", "not a module\n")
    out = tmp_path / "output"

    status = driver_cli.main(["-o", str(out), str(x), str(broken)])

    assert status == 1
    err = capsys.readouterr().err
    assert "Unable to parse modules:" in err
    assert str(broken) in err
    assert not out.exists()


def test_cycle_fails_without_writing(tmp_path, capsys):
    a = _write(tmp_path / "A.src", "module A\nimport B\nvalue = 1\n")
    b = _write(tmp_path / "B.src", "module B\nimport A\nvalue = 2\n")
    out = tmp_path / "output"

    assert driver_cli.main(["-o", str(out), str(a), str(b)]) == 1
    assert "Cycle in module dependencies" in capsys.readouterr().err
    assert not out.exists()


def test_missing_prelude_is_reported(tmp_path, capsys):
    _, y = _sources(tmp_path)
    x = tmp_path / "src" / "X.src"

    status = driver_cli.main(["--no-prelude", "-o", str(tmp_path / "out"), str(x), str(y)])

    assert status == 1
    assert "Module Prelude imported by Y was not found" in capsys.readouterr().err


def test_compile_error_keeps_earlier_modules(tmp_path, capsys):
    x, _ = _sources(tmp_path)
    bad = _write(tmp_path / "src" / "Bad.src", "module Bad\nimport X\nvalue = X.nope\n")
    out = tmp_path / "output"

    status = driver_cli.main(["-v", "-o", str(out), str(x), str(bad)])

    assert status == 1
    err = capsys.readouterr().err
    assert "Error compiling module Bad" in err
    assert f"at {bad}:3" in err
    assert (out / "X" / "index.js").exists()
    assert not (out / "Bad").exists()


def test_graph_export(tmp_path, capsys):
    x, y = _sources(tmp_path)
    graph_path = tmp_path / "graphs" / "modules.dot"

    status = driver_cli.main(
        ["-o", str(tmp_path / "out"), "--graph", str(graph_path), str(x), str(y)]
    )

    assert status == 0
    text = graph_path.read_text(encoding="utf-8")
    assert "digraph" in text
    assert "Prelude" in text
    assert "->" in text
    assert "Dependency graph exported" in capsys.readouterr().out


def test_debug_logging_reports_decisions(tmp_path, caplog):
    x, _ = _sources(tmp_path)
    caplog.set_level(logging.DEBUG, logger="modmake.driver.scheduler")

    assert driver_cli.main(["--debug", "-o", str(tmp_path / "out"), str(x)]) == 0

    assert "X: rebuilding (no previous artifact)" in caplog.text
    assert "Prelude: built-in, never rebuilt" in caplog.text


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        driver_cli.parse_args(["--version"])

    assert excinfo.value.code == 0
    assert VERSION in capsys.readouterr().out


def test_graph_is_not_written_for_a_cycle(tmp_path, capsys):
    a = _write(tmp_path / "A.src", "module A\nimport B\nvalue = 1\n")
    b = _write(tmp_path / "B.src", "module B\nimport A\nvalue = 2\n")
    graph_path = tmp_path / "graphs" / "modules.dot"

    status = driver_cli.main(
        ["-o", str(tmp_path / "out"), "--graph", str(graph_path), str(a), str(b)]
    )

    assert status == 1
    captured = capsys.readouterr()
    assert "Cycle in module dependencies" in captured.err
    assert "Dependency graph exported" not in captured.out
    assert not graph_path.exists()
    assert not (tmp_path / "graphs").exists()


def test_help_names_the_error_stream(capsys):
    with pytest.raises(SystemExit) as excinfo:
        driver_cli.parse_args(["--help"])

    assert excinfo.value.code == 0
    assert "stderr" in capsys.readouterr().out
