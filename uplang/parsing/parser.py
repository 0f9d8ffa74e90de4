"""Recursive-descent parser turning UP text into an immutable Document.

Every construct opens on a single line. Sub-parsers take the full line tuple
and the index of the line they start on, and return the value they built with
the index of the first line they did not consume.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Sequence, Tuple

from uplang.model.document import Document, Node
from uplang.model.values import Block, List, Multiline, Scalar, Value
from uplang.parsing.scanner import LineScanner
from uplang.utils.logging import NullLogger, WarningLogger

FENCE = "```"
BLOCK_OPEN = "{"
BLOCK_CLOSE = "}"
LIST_OPEN = "["
LIST_CLOSE = "]"
COMMENT_PREFIX = "#"
TYPE_SEPARATOR = "!"
ITEM_SEPARATOR = ","

_WHITESPACE_RE = re.compile(r"\s")
_DEDENT_RE = re.compile(r"[0-9]+")


class UPParseError(ValueError):
    """Raised when UP input cannot be parsed into a document.

    Attributes:
        reason: What went wrong, without positional context.
        line_number: 1-based number of the line the failure is attributed to.
        line: Raw text of that line.
    """

    def __init__(self, reason: str, line_number: int, line: str) -> None:
        super().__init__(f"Parse error at line {line_number}: {reason}\n  Line: {line}")
        self.reason = reason
        self.line_number = line_number
        self.line = line


class UnterminatedConstructError(UPParseError):
    """A block, list, or multiline fence was still open at end of input."""


class MalformedLineError(UPParseError):
    """A line could not be turned into a node."""


def parse_document(
    text: str, *, source_file: str = "", logger: WarningLogger | None = None
) -> Document:
    """Parse UP text into a Document.

    Args:
        text: Complete UP source.
        source_file: Name used in warnings and stored on the document.
        logger: Optional warning collector; warnings are dropped when omitted.

    Returns:
        Document: Root nodes in source order.

    Raises:
        UPParseError: If any construct is unterminated or a line is malformed.
    """

    return parse_scanner(LineScanner.from_text(text), source_file=source_file, logger=logger)


def parse_lines(
    lines: Iterable[str], *, source_file: str = "", logger: WarningLogger | None = None
) -> Document:
    """Parse already split lines (without terminators) into a Document."""

    frozen = tuple(lines)
    active_logger = logger or NullLogger()
    nodes = _parse_root(frozen, source_file, active_logger)
    return Document(nodes=tuple(nodes), source_file=source_file or None)


def parse_scanner(
    scanner: LineScanner, *, source_file: str = "", logger: WarningLogger | None = None
) -> Document:
    """Drain ``scanner`` and parse everything it yields."""

    return parse_lines(scanner, source_file=source_file, logger=logger)


def parse_file(
    path: Path, *, source_file: str | None = None, logger: WarningLogger | None = None
) -> Document:
    """Read and parse a UTF-8 encoded UP file."""

    with LineScanner.open(path) as scanner:
        return parse_scanner(
            scanner,
            source_file=source_file if source_file is not None else path.as_posix(),
            logger=logger,
        )


def _parse_root(
    lines: Sequence[str], source_file: str, logger: WarningLogger
) -> list[Node]:
    nodes: list[Node] = []
    index = 0
    while index < len(lines):
        stripped = lines[index].strip()
        if _is_ignorable(stripped):
            index += 1
            continue

        if stripped in (BLOCK_CLOSE, LIST_CLOSE):
            _warn_stray_closer(stripped, index, source_file, logger, "Document")
            index += 1
            continue

        node, index = _parse_node(lines, index, source_file, logger)
        nodes.append(node)
    return nodes


def _parse_node(
    lines: Sequence[str], index: int, source_file: str, logger: WarningLogger
) -> Tuple[Node, int]:
    line = lines[index]
    key_part, value_part = _split_key_value(line)
    key, type_annotation = _split_key_and_type(key_part)
    if not key:
        raise MalformedLineError("missing key before type annotation", index + 1, line)

    try:
        value, next_index = _parse_value(
            lines, index, value_part, type_annotation, source_file, logger
        )
        node = Node(
            key=key,
            value=value,
            type_annotation=type_annotation,
            source_line=index + 1,
        )
    except UPParseError:
        raise
    except (TypeError, ValueError) as exc:
        raise MalformedLineError(str(exc), index + 1, line) from exc
    return node, next_index


def _split_key_value(line: str) -> Tuple[str, str]:
    content = line.strip()
    match = _WHITESPACE_RE.search(content)
    if match is None:
        return content, ""
    return content[: match.start()], content[match.start() :].strip()


def _split_key_and_type(key_part: str) -> Tuple[str, str | None]:
    key, separator, annotation = key_part.partition(TYPE_SEPARATOR)
    if not separator:
        return key, None
    return key, annotation


def _parse_value(
    lines: Sequence[str],
    index: int,
    value_part: str,
    type_annotation: str | None,
    source_file: str,
    logger: WarningLogger,
) -> Tuple[Value, int]:
    if value_part.startswith(FENCE):
        return _parse_multiline(lines, index, type_annotation, source_file, logger)

    if value_part == BLOCK_OPEN:
        return _parse_block(lines, index, source_file, logger)

    if value_part == LIST_OPEN:
        return _parse_list(lines, index, source_file, logger)

    if _is_inline_list(value_part):
        return _parse_inline_list(value_part), index + 1

    return Scalar(text=value_part), index + 1


def _parse_multiline(
    lines: Sequence[str],
    index: int,
    type_annotation: str | None,
    source_file: str,
    logger: WarningLogger,
) -> Tuple[Multiline, int]:
    start = index
    index += 1
    captured: list[str] = []
    while index < len(lines):
        line = lines[index]
        if line.strip() == FENCE:
            amount = _dedent_amount(type_annotation, start, source_file, logger)
            if amount is not None:
                captured = _dedent(captured, amount)
            return Multiline(text="\n".join(captured)), index + 1
        captured.append(line)
        index += 1

    raise UnterminatedConstructError(
        f"multiline text is never closed with '{FENCE}'", start + 1, lines[start]
    )


def _parse_block(
    lines: Sequence[str], index: int, source_file: str, logger: WarningLogger
) -> Tuple[Block, int]:
    start = index
    index += 1
    entries: dict[str, Value] = {}
    annotations: dict[str, str] = {}
    while index < len(lines):
        stripped = lines[index].strip()
        if stripped == BLOCK_CLOSE:
            return Block(entries=entries, annotations=annotations), index + 1

        if _is_ignorable(stripped):
            index += 1
            continue

        if stripped == LIST_CLOSE:
            _warn_stray_closer(stripped, index, source_file, logger, "Block")
            index += 1
            continue

        node, index = _parse_node(lines, index, source_file, logger)
        if node.key in entries:
            logger.warn(
                filename=source_file,
                line=node.source_line,
                element_type="Block",
                message=f"duplicate key '{node.key}' replaces the earlier value",
                code="duplicate-key",
            )
        entries[node.key] = node.value
        if node.type_annotation is None:
            annotations.pop(node.key, None)
        else:
            annotations[node.key] = node.type_annotation

    raise UnterminatedConstructError(
        f"block is never closed with '{BLOCK_CLOSE}'", start + 1, lines[start]
    )


def _parse_list(
    lines: Sequence[str], index: int, source_file: str, logger: WarningLogger
) -> Tuple[List, int]:
    start = index
    index += 1
    items: list[Value] = []
    while index < len(lines):
        stripped = lines[index].strip()
        if stripped == LIST_CLOSE:
            return List(items=tuple(items)), index + 1

        if _is_ignorable(stripped):
            index += 1
            continue

        if _is_inline_list(stripped):
            items.append(_parse_inline_list(stripped))
            index += 1
        elif stripped == BLOCK_OPEN:
            block, index = _parse_block(lines, index, source_file, logger)
            items.append(block)
        else:
            # list entries are bare text: no key or annotation splitting
            items.append(Scalar(text=stripped))
            index += 1

    raise UnterminatedConstructError(
        f"list is never closed with '{LIST_CLOSE}'", start + 1, lines[start]
    )


def _parse_inline_list(text: str) -> List:
    content = text.strip()[1:-1]
    if not content.strip():
        return List()
    return List(items=tuple(Scalar(text=item.strip()) for item in content.split(ITEM_SEPARATOR)))


def _dedent_amount(
    type_annotation: str | None, start: int, source_file: str, logger: WarningLogger
) -> int | None:
    if type_annotation is None:
        return None
    if _DEDENT_RE.fullmatch(type_annotation):
        return int(type_annotation)
    logger.warn(
        filename=source_file,
        line=start + 1,
        element_type="Multiline",
        message=f"annotation '{type_annotation}' is not a dedent count, text kept as written",
        code="non-numeric-dedent",
    )
    return None


def _dedent(lines: Sequence[str], amount: int) -> list[str]:
    # lines shorter than the dedent count are kept unchanged
    return [line[amount:] if len(line) >= amount else line for line in lines]


def _warn_stray_closer(
    closer: str, index: int, source_file: str, logger: WarningLogger, element_type: str
) -> None:
    logger.warn(
        filename=source_file,
        line=index + 1,
        element_type=element_type,
        message=f"stray '{closer}' without an open construct, skipped",
        code="stray-closer",
    )


def _is_ignorable(stripped: str) -> bool:
    return not stripped or stripped.startswith(COMMENT_PREFIX)


def _is_inline_list(text: str) -> bool:
    return len(text) >= 2 and text.startswith(LIST_OPEN) and text.endswith(LIST_CLOSE)


__all__ = [
    "MalformedLineError",
    "UPParseError",
    "UnterminatedConstructError",
    "parse_document",
    "parse_file",
    "parse_lines",
    "parse_scanner",
]
