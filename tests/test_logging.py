from pathlib import Path

from uplang.parsing.parser import parse_document
from uplang.utils.logging import LOG_DIR_ENV, NullLogger, WarningLogger, resolve_log_dir


def test_logger_reports_parser_warnings_with_location(tmp_path: Path) -> None:
    logger = WarningLogger("config_source", log_dir=tmp_path / "logs")

    parse_document("cfg {\n  a 1\n  a 2\n}\n", source_file="services/app.up", logger=logger)

    assert logger.warnings
    entry = logger.warnings[0]
    assert entry.filename == "services/app.up"
    assert entry.format() == (
        "services/app.up:3 [W002][Block] "
        "duplicate key 'a' replaces the earlier value"
    )
    assert logger.log_path.read_text(encoding="utf-8") == f"{entry.format()}\n"


def test_logger_appends_entries_to_log_file(tmp_path: Path) -> None:
    logger = WarningLogger("my docs!", log_dir=tmp_path)

    logger.warn(
        filename="a.up",
        line=None,
        element_type="File",
        message="file could not be read as UTF-8 text",
        code="file-io-warning",
    )

    assert logger.log_path.parent == tmp_path
    assert logger.log_path.name.startswith("my_docs__")
    assert logger.log_path.read_text(encoding="utf-8") == (
        "a.up [W004][File] file could not be read as UTF-8 text\n"
    )
    assert logger.summary() == f"Found 1 warnings. See {logger.log_path.name}"


def test_log_dir_comes_from_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path / "env_logs"))

    assert resolve_log_dir() == tmp_path / "env_logs"
    assert resolve_log_dir(tmp_path / "explicit") == tmp_path / "explicit"

    monkeypatch.delenv(LOG_DIR_ENV)
    assert resolve_log_dir() == Path("logs")


def test_null_logger_keeps_warnings_in_memory() -> None:
    logger = NullLogger()

    parse_document("}\n", logger=logger)

    assert logger.has_warnings()
    assert logger.warnings[0].format() == (
        "<string>:1 [W003][Document] stray '}' without an open construct, skipped"
    )
