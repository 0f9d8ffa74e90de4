"""Entry points behind the uplang commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from .loaders.directory import SOURCE_SUFFIX, SourceFile, SourceTree, load_sources
from .parsing.parser import UPParseError, parse_document, parse_file
from .render.writer import dump_document
from .utils.logging import WarningLogger


class ValidateProgress(Protocol):
    """Reporting hook for validation progress."""

    def start(self, total: int) -> None:
        """Begin tracking validation progress.

        Args:
            total: Number of sources that will be parsed.
        """

    def advance(self, source: SourceFile) -> None:
        """Advance the tracker once a source has been parsed.

        Args:
            source: Source that has just been parsed.
        """

    def finish(self) -> None:
        """Finalize progress tracking."""


def run_validate(
    target_path: Path,
    *,
    strict: bool = False,
    logger: WarningLogger | None = None,
    progress: ValidateProgress | None = None,
    log_dir: Path | None = None,
) -> int:
    """Parse every UP source under ``target_path`` and report problems.

    Args:
        target_path: A ``.up`` file or a directory of them.
        strict: When True, parse warnings also fail validation.
        logger: Optional warning logger; a file-backed one is created otherwise.
        progress: Optional reporter advanced once per parsed source.
        log_dir: Directory for the warning log when ``logger`` is omitted.

    Returns:
        int: 0 when all checks pass; 1 on parse errors, unreadable files, or
        warnings in strict mode.
    """

    print("🔧 Validating UP sources…")
    if strict:
        print("Strict mode enabled: warnings will block validation.")
    tree: SourceTree = load_sources(target_path)
    active_logger = logger or WarningLogger(tree.root.name, log_dir=log_dir)

    if not tree.sources:
        print(f"⚠️ No {SOURCE_SUFFIX} files found under {target_path}.")
        return 1 if strict else 0

    errors: list[str] = []
    if progress:
        progress.start(len(tree.sources))
    try:
        for source in tree.sources:
            error = _validate_source(source, active_logger)
            if error:
                errors.append(error)
            if progress:
                progress.advance(source)
    finally:
        if progress:
            progress.finish()

    if active_logger.has_warnings():
        print("⚠️ Parse warnings:")
        for warning in active_logger.warnings:
            print(f" - {warning.format()}")
        print(active_logger.summary())

    if errors:
        print("❌ Validation errors:")
        for error in errors:
            print(f" - {error}")
        print(f"Found {len(errors)} validation error(s).")
        return 1

    if strict and active_logger.has_warnings():
        return 1

    print(f"✅ All checks passed ({len(tree.sources)} file(s)).")
    return 0


def run_dump(target_path: Path, *, as_json: bool = False) -> str:
    """Return the parsed tree of one file as an outline or as JSON.

    Raises:
        UPParseError: If the file does not parse.
    """

    document = parse_file(target_path)
    if as_json:
        return json.dumps(document.to_data(), indent=2, ensure_ascii=False)
    return document.pretty()


def run_format(target_path: Path, *, write: bool = False) -> str:
    """Return one file re-written in canonical form, optionally in place.

    Raises:
        UPParseError: If the file does not parse.
        ValueError: If the document cannot be expressed in UP syntax.
    """

    formatted = dump_document(parse_file(target_path))
    if write:
        target_path.write_text(formatted, encoding="utf-8")
    return formatted


def _validate_source(source: SourceFile, logger: WarningLogger) -> str | None:
    if source.read_error:
        logger.warn(
            filename=source.relative_path,
            line=None,
            element_type="File",
            message="file could not be read as UTF-8 text",
            code="file-io-warning",
        )
        return f"Unreadable file: {source.relative_path}"
    try:
        parse_document(source.content, source_file=source.relative_path, logger=logger)
    except UPParseError as exc:
        return f"{source.relative_path}:{exc.line_number}: {exc.reason} -> {exc.line.strip()}"
    return None


__all__ = ["ValidateProgress", "run_dump", "run_format", "run_validate"]
