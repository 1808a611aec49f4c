"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from doclets.cli import _build_parser, main
from doclets.logging import configure_logging


def _write_events(path: Path, comment: str = "/** Adds. */") -> Path:
    payload = {
        "files": [
            {
                "filename": "math.js",
                "events": [
                    {
                        "comment": comment,
                        "context": {"name": "add", "type": "FunctionDeclaration", "lineno": 1},
                    }
                ],
            }
        ]
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "build", "events.json"])
    assert args.verbose is True
    assert args.command == "build"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["build", "events.json", "--verbose"])
    assert args.verbose is True
    assert args.events == "events.json"


def test_cli_build_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["build", "events.json", "--dictionary", "jsdoc", "--allow-unknown-tags", "--prune", "-o", "out.json"]
    )
    assert args.dictionary == ["jsdoc"]
    assert args.allow_unknown_tags is True
    assert args.prune is True
    assert args.output == "out.json"


def test_cli_rejects_unknown_dictionary() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["tags", "--dictionary", "nope"])


def test_build_writes_doclet_json(tmp_path: Path) -> None:
    events = _write_events(tmp_path / "events.json")
    output = tmp_path / "doclets.json"

    main(["build", str(events), "--config", str(tmp_path), "--output", str(output)])

    [doclet] = json.loads(output.read_text(encoding="utf-8"))
    assert doclet["longname"] == "add"
    assert doclet["kind"] == "function"
    assert doclet["description"] == "Adds."


def test_build_exits_nonzero_when_errors_are_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    events = _write_events(tmp_path / "events.json", "/** @notatag */")

    with pytest.raises(SystemExit) as excinfo:
        main(["build", str(events), "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert '"longname": "add"' in capsys.readouterr().out


def test_build_reports_missing_events_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["build", str(tmp_path / "missing.json"), "--config", str(tmp_path)])

    assert excinfo.value.code == 1


def test_tags_lists_known_tags(capsys: pytest.CaptureFixture[str]) -> None:
    main(["tags"])

    lines = capsys.readouterr().out.splitlines()
    assert any(line.startswith("@param") for line in lines)
    assert "@final" in lines


def test_cli_logging_flags() -> None:
    args = _build_parser().parse_args(["--quiet", "--log-file", "run.log", "tags"])
    assert args.quiet is True
    assert args.log_file == Path("run.log")


def test_log_file_records_debug_lines(tmp_path: Path) -> None:
    events = _write_events(tmp_path / "events.json")
    log_file = tmp_path / "logs" / "doclets.log"

    main(
        [
            "--quiet",
            "--log-file",
            str(log_file),
            "build",
            str(events),
            "--config",
            str(tmp_path),
            "-o",
            str(tmp_path / "out.json"),
        ]
    )
    configure_logging()

    text = log_file.read_text(encoding="utf-8")
    assert "DEBUG doclets.builder: Built function doclet add" in text
    assert "Built 1 doclet(s)" in text
