"""Lightweight logging utilities for compiler-style parse warnings."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List

LOG_DIR_ENV = "UPLANG_LOG_DIR"
DEFAULT_LOG_DIR = Path("logs")
UNNAMED_SOURCE = "<string>"

WARN_CODES = {
    "non-numeric-dedent": "W001",
    "duplicate-key": "W002",
    "stray-closer": "W003",
    "file-io-warning": "W004",
}


@dataclass(frozen=True)
class WarningEntry:
    """Captured warning with minimal metadata."""

    filename: str
    line: int | None
    element_type: str
    message: str
    code: str

    def format(self) -> str:
        location = f"{self.filename}:{self.line}" if self.line is not None else self.filename
        return f"{location} [{self.code}][{self.element_type}] {self.message}"


class WarningLogger:
    """Collect warnings and append them to a timestamped log file.

    The log directory is ``log_dir`` when given, otherwise ``$UPLANG_LOG_DIR``,
    otherwise ``./logs``. Filenames are recorded as the parser reports them;
    text parsed without a name is shown as ``<string>``.
    """

    def __init__(self, root_name: str, *, log_dir: Path | None = None) -> None:
        sanitized = re.sub(r"[^A-Za-z0-9_-]", "_", root_name) or "sources"
        timestamp = datetime.now().strftime("%Y-%m-%d-%H%M")
        self.log_path = resolve_log_dir(log_dir) / f"{sanitized}_{timestamp}.log"
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._warnings: List[WarningEntry] = []

    @property
    def warnings(self) -> list[WarningEntry]:
        return list(self._warnings)

    def warn(
        self,
        *,
        filename: str,
        line: int | None,
        element_type: str,
        message: str,
        code: str,
    ) -> None:
        entry = self._record(
            filename=filename,
            line=line,
            element_type=element_type,
            message=message,
            code=code,
        )
        with self.log_path.open("a", encoding="utf-8") as handle:
            handle.write(f"{entry.format()}\n")

    def summary(self) -> str:
        return f"Found {len(self._warnings)} warnings. See {self.log_path.name}"

    def has_warnings(self) -> bool:
        return bool(self._warnings)

    def _record(
        self,
        *,
        filename: str,
        line: int | None,
        element_type: str,
        message: str,
        code: str,
    ) -> WarningEntry:
        entry = WarningEntry(
            filename=filename or UNNAMED_SOURCE,
            line=line,
            element_type=element_type,
            message=message,
            code=WARN_CODES.get(code, code),
        )
        self._warnings.append(entry)
        return entry


class NullLogger(WarningLogger):
    """Logger that keeps warnings in memory without writing a log file."""

    def __init__(self) -> None:
        self.log_path = Path(os.devnull)
        self._warnings: list[WarningEntry] = []

    def warn(
        self,
        *,
        filename: str,
        line: int | None,
        element_type: str,
        message: str,
        code: str,
    ) -> None:
        self._record(
            filename=filename,
            line=line,
            element_type=element_type,
            message=message,
            code=code,
        )


def resolve_log_dir(log_dir: Path | None = None) -> Path:
    """Return the directory warning logs are written to."""

    if log_dir is not None:
        return log_dir
    configured = os.environ.get(LOG_DIR_ENV)
    return Path(configured) if configured else DEFAULT_LOG_DIR


__all__ = [
    "DEFAULT_LOG_DIR",
    "LOG_DIR_ENV",
    "NullLogger",
    "WARN_CODES",
    "WarningEntry",
    "WarningLogger",
    "UNNAMED_SOURCE",
    "resolve_log_dir",
]
