# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the call-matcher CLI harness."""

import io
import json
import logging
import re
from pathlib import Path

from cli.call_matcher_harness import run

SAMPLE_SOURCE = "\n".join(
    [
        "void demo(void) {",
        "    CALL(Foo, obj, bar /x, y/);",
        "    NSCALL(MyNs,",
        "           doThing /1, 2/);",
        "}",
        "",
    ]
)


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def test_cli_001_requires_command() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run([], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_cli_002_scan_fails_when_path_is_missing(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["scan", "--path", str(tmp_path / "missing")], stdout=stdout, stderr=stderr
    )

    assert exit_code == 2
    assert "Path does not exist" in stderr.getvalue()


def test_cli_003_scan_json_prints_records(tmp_path: Path) -> None:
    _write_file(tmp_path / "project" / "demo.c", SAMPLE_SOURCE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["scan", "--path", str(tmp_path / "project"), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["errors"] == []
    assert [
        (r["file_path"], r["kind"], r["line"], r["end_line"], r["rendering"])
        for r in payload["records"]
    ] == [
        ("demo.c", "CALL", 2, 2, "(Foo&)obj.bar(x, y)"),
        ("demo.c", "NSCALL", 3, 4, "MyNs::doThing(1, 2)"),
    ]


def test_cli_004_scan_json_writes_to_output_file(tmp_path: Path) -> None:
    _write_file(tmp_path / "project" / "demo.h", SAMPLE_SOURCE)
    output_path = tmp_path / "out" / "result.json"
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "scan",
            "--path",
            str(tmp_path / "project"),
            "--format",
            "json",
            "--output",
            str(output_path),
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == ""
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert len(payload["records"]) == 2
    assert payload["records"][0]["owner"] == "Foo"


def test_cli_005_scan_table_output_lists_renderings(tmp_path: Path) -> None:
    _write_file(tmp_path / "project" / "demo.c", SAMPLE_SOURCE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["scan", "--path", str(tmp_path / "project")], stdout=stdout, stderr=stderr
    )

    assert exit_code == 0
    compact_text = re.sub(r"[^a-zA-Z0-9_:.()&,-]+", "", _strip_ansi(stdout.getvalue()))
    assert "demo.c" in compact_text
    assert "(Foo&)obj.bar(x,y)" in compact_text
    assert "MyNs::doThing(1,2)" in compact_text


def test_cli_006_scan_reports_discovery_errors(tmp_path: Path) -> None:
    _write_file(tmp_path / "ok.c", "MTD(A, m /x/)")
    (tmp_path / "bad.c").write_bytes(b"\xff\xfe")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["scan", "--path", str(tmp_path), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert "discovery_error" in stderr.getvalue()
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert [r["rendering"] for r in payload["records"]] == ["A.m(x)"]
    assert payload["errors"][0]["file_path"] == "bad.c"


def test_cli_007_annotate_prints_virtual_lines(tmp_path: Path) -> None:
    source_file = tmp_path / "demo.c"
    _write_file(source_file, SAMPLE_SOURCE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["annotate", "--file", str(source_file)], stdout=stdout, stderr=stderr)

    assert exit_code == 0
    assert _strip_ansi(stdout.getvalue()).splitlines() == [
        "void demo(void) {",
        "    CALL(Foo, obj, bar /x, y/);",
        "    (Foo&)obj.bar(x, y)",
        "    NSCALL(MyNs,",
        "           doThing /1, 2/);",
        "    MyNs::doThing(1, 2)",
        "}",
    ]


def test_cli_008_annotate_rejects_ineligible_file(tmp_path: Path) -> None:
    source_file = tmp_path / "demo.cpp"
    _write_file(source_file, SAMPLE_SOURCE)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["annotate", "--file", str(source_file)], stdout=stdout, stderr=stderr)

    assert exit_code == 2
    assert "Not a C/C++ file" in stderr.getvalue()
    assert stdout.getvalue() == ""


def test_cli_009_annotate_accepts_cpp_when_permissive(tmp_path: Path) -> None:
    source_file = tmp_path / "demo.cpp"
    _write_file(source_file, "MTD(Widget, draw /int x/)\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["annotate", "--file", str(source_file), "--permissive"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert "Widget.draw(int x)" in _strip_ansi(stdout.getvalue())


def test_cli_010_verbose_does_not_leak_log_levels(tmp_path: Path) -> None:
    _write_file(tmp_path / "demo.c", SAMPLE_SOURCE)
    root_level = logging.getLogger().level
    package_level = logging.getLogger("call_matcher").level

    exit_code = run(
        ["--verbose", "scan", "--path", str(tmp_path), "--format", "json"],
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )

    assert exit_code == 0
    assert logging.getLogger().level == root_level
    assert logging.getLogger("call_matcher").level == package_level
    assert logging.getLogger("cli").level == logging.NOTSET


def test_cli_011_annotate_reports_undecodable_file(tmp_path: Path) -> None:
    source_file = tmp_path / "bad.c"
    source_file.write_bytes(b"\xff\xfe")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["annotate", "--file", str(source_file)], stdout=stdout, stderr=stderr)

    assert exit_code == 2
    assert "discovery_error" in stderr.getvalue()
    assert "bad.c" in stderr.getvalue()
    assert stdout.getvalue() == ""
