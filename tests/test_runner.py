import json
from pathlib import Path

import pytest

from uplang.loaders.directory import SourceFile
from uplang.parsing.parser import UnterminatedConstructError
from uplang.runner import ValidateProgress, run_dump, run_format, run_validate
from uplang.utils.logging import NullLogger


class RecordingProgress(ValidateProgress):
    def __init__(self) -> None:
        self.started_with: int | None = None
        self.advanced: list[str] = []
        self.finished = False

    def start(self, total: int) -> None:
        self.started_with = total

    def advance(self, source: SourceFile) -> None:
        self.advanced.append(source.relative_path)

    def finish(self) -> None:
        self.finished = True


def test_validate_passes_and_reports_progress(sample_sources_path: Path, capsys) -> None:
    progress = RecordingProgress()

    exit_code = run_validate(sample_sources_path, logger=NullLogger(), progress=progress)

    assert exit_code == 0
    assert progress.started_with == 2
    assert progress.advanced == ["app.up", "services/worker.up"]
    assert progress.finished
    assert "All checks passed (2 file(s))" in capsys.readouterr().out


def test_validate_collects_parse_errors(tmp_path: Path, capsys) -> None:
    (tmp_path / "good.up").write_text("a 1\n", encoding="utf-8")
    (tmp_path / "broken.up").write_text("a 1\nblock {\n  b 2\n", encoding="utf-8")

    exit_code = run_validate(tmp_path, logger=NullLogger())

    output = capsys.readouterr().out
    assert exit_code == 1
    assert "broken.up:2: block is never closed with '}' -> block {" in output
    assert "Found 1 validation error(s)." in output


def test_warnings_fail_only_in_strict_mode(tmp_path: Path) -> None:
    (tmp_path / "dupes.up").write_text("cfg {\n  a 1\n  a 2\n}\n", encoding="utf-8")

    assert run_validate(tmp_path, logger=NullLogger()) == 0
    assert run_validate(tmp_path, strict=True, logger=NullLogger()) == 1


def test_unreadable_file_is_a_validation_error(tmp_path: Path, capsys) -> None:
    (tmp_path / "bad.up").write_bytes(b"\xff\xfe")
    logger = NullLogger()

    exit_code = run_validate(tmp_path, logger=logger)

    assert exit_code == 1
    assert logger.warnings[0].code == "W004"
    assert "Unreadable file: bad.up" in capsys.readouterr().out


def test_validate_writes_log_file_to_log_dir(tmp_path: Path) -> None:
    sources = tmp_path / "sources"
    sources.mkdir()
    (sources / "stray.up").write_text("]\n", encoding="utf-8")
    log_dir = tmp_path / "logs"

    run_validate(sources, log_dir=log_dir)

    logs = list(log_dir.glob("sources_*.log"))
    assert len(logs) == 1
    assert "[W003][Document]" in logs[0].read_text(encoding="utf-8")


def test_empty_directory_is_not_an_error_unless_strict(tmp_path: Path) -> None:
    assert run_validate(tmp_path, logger=NullLogger()) == 0
    assert run_validate(tmp_path, strict=True, logger=NullLogger()) == 1


def test_dump_outline_and_json(sample_sources_path: Path) -> None:
    outline = run_dump(sample_sources_path / "app.up")
    payload = json.loads(run_dump(sample_sources_path / "app.up", as_json=True))

    assert "server {2 entries}" in outline
    assert [node["key"] for node in payload["nodes"]] == ["name", "age", "server", "tags"]
    assert payload["nodes"][1]["annotation"] == "int"


def test_format_rewrites_file_in_place(tmp_path: Path) -> None:
    path = tmp_path / "app.up"
    path.write_text("# comment\nname    demo\ncfg {\nport!int 1\n}\n", encoding="utf-8")

    formatted = run_format(path, write=True)

    assert formatted == "name demo\ncfg {\n  port!int 1\n}\n"
    assert path.read_text(encoding="utf-8") == formatted


def test_dump_propagates_parse_errors(tmp_path: Path) -> None:
    path = tmp_path / "broken.up"
    path.write_text("text ```\nnever closed\n", encoding="utf-8")

    with pytest.raises(UnterminatedConstructError):
        run_dump(path)
