"""Discovery of UP source files on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, List, TypedDict

HIDDEN_PREFIX = "."
SOURCE_SUFFIX = ".up"


class _RenderNode(TypedDict):
    files: list["SourceFile"]
    children: Dict[str, "_RenderNode"]


@dataclass
class SourceFile:
    """A single UP file discovered on disk."""

    path: Path
    relative_path: str
    content: str
    read_error: bool = False


@dataclass
class SourceTree:
    """In-memory view of the UP files under one root."""

    root: Path
    sources: list[SourceFile]

    def pretty(self) -> str:
        """Return a human-readable tree of the discovered files.

        Returns:
            str: The root folder followed by its files and sub-folders.
        """

        structure: _RenderNode = {"files": [], "children": {}}
        for source in self.sources:
            parts = source.relative_path.split("/")
            current = structure
            for part in parts[:-1]:
                current = current["children"].setdefault(
                    part, {"files": [], "children": {}}
                )
            current["files"].append(source)

        lines: List[str] = [f"{self.root.name}/"]

        def _render(node: _RenderNode, indent: int) -> None:
            for source in sorted(node["files"], key=lambda s: s.relative_path):
                marker = " (unreadable)" if source.read_error else ""
                lines.append(f"{'  ' * indent}{PurePosixPath(source.relative_path).name}{marker}")

            for name, child in sorted(node["children"].items()):
                lines.append(f"{'  ' * indent}{name}/")
                _render(child, indent + 1)

        _render(structure, 1)
        return "\n".join(lines)

    def find_by_path(self, relative_path: str) -> SourceFile | None:
        """Locate a source by its relative path.

        Args:
            relative_path: POSIX-style path relative to the tree root.

        Returns:
            SourceFile | None: The matching file, if present.
        """

        normalized = _normalize_path(relative_path)
        for source in self.sources:
            if source.relative_path == normalized:
                return source
        return None

    def paths(self) -> set[str]:
        return {source.relative_path for source in self.sources}


def load_sources(target_path: Path) -> SourceTree:
    """Load a single UP file, or every ``.up`` file below a directory.

    Hidden files and directories are skipped. Files that cannot be read as
    UTF-8 are kept with ``read_error`` set so callers can report them.

    Args:
        target_path: A ``.up`` file or a directory to scan recursively.

    Returns:
        SourceTree: Discovered sources sorted by relative path.

    Raises:
        FileNotFoundError: If ``target_path`` does not exist.
    """

    if not target_path.exists():
        raise FileNotFoundError(f"Source path does not exist: {target_path}")

    if target_path.is_file():
        root = target_path.parent
        return SourceTree(root=root, sources=[_read_source(target_path, root)])

    sources: list[SourceFile] = []
    for dirpath, dirnames, filenames in os.walk(target_path):
        dirnames[:] = [d for d in dirnames if not d.startswith(HIDDEN_PREFIX)]
        for filename in filenames:
            if filename.startswith(HIDDEN_PREFIX) or not filename.endswith(SOURCE_SUFFIX):
                continue
            sources.append(_read_source(Path(dirpath) / filename, target_path))

    sources.sort(key=lambda s: s.relative_path)
    return SourceTree(root=target_path, sources=sources)


def _read_source(full_path: Path, root: Path) -> SourceFile:
    content = ""
    read_error = False
    try:
        # Untranslated, so a lone "\r" reaches the parser as it does for parse_file.
        with full_path.open("r", encoding="utf-8", newline="") as handle:
            content = handle.read()
    except (OSError, UnicodeDecodeError):
        read_error = True
    return SourceFile(
        path=full_path,
        relative_path=_normalize_path(full_path.relative_to(root)),
        content=content,
        read_error=read_error,
    )


def _normalize_path(path: Path | str) -> str:
    return PurePosixPath(path).as_posix()


__all__ = ["SourceFile", "SourceTree", "load_sources"]
