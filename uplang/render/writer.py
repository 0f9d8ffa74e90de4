"""Write documents back out as canonical UP text."""

from __future__ import annotations

import re
from typing import Sequence

from uplang.model.document import Document, Node
from uplang.model.values import Block, List, Multiline, Scalar, Table, Value
from uplang.parsing.parser import (
    BLOCK_CLOSE,
    BLOCK_OPEN,
    COMMENT_PREFIX,
    FENCE,
    ITEM_SEPARATOR,
    LIST_CLOSE,
    LIST_OPEN,
    TYPE_SEPARATOR,
)

INDENT = "  "

_KEY_RE = re.compile(r"[^\s!]+")
_DEDENT_RE = re.compile(r"[0-9]+")


def dump_document(document: Document) -> str:
    """Render a document as UP text that parses back to an equal document.

    Args:
        document: Document to render.

    Returns:
        str: UP source terminated by a newline, or ``""`` for an empty document.

    Raises:
        ValueError: If the document holds something the surface syntax cannot
            express, such as a table or a scalar that would be re-read as a
            different construct.
    """

    lines: list[str] = []
    for node in document.nodes:
        lines.extend(_render_node(node, 0))
    return "\n".join(lines) + "\n" if lines else ""


def _render_node(node: Node, depth: int) -> list[str]:
    return _render_entry(node.key, node.type_annotation, node.value, depth)


def _render_entry(
    key: str, annotation: str | None, value: Value, depth: int
) -> list[str]:
    if not _KEY_RE.fullmatch(key) or key.startswith(COMMENT_PREFIX):
        raise ValueError(f"key {key!r} cannot be written as UP")
    if annotation is not None and _has_whitespace(annotation):
        raise ValueError(f"annotation {annotation!r} of '{key}' contains whitespace")
    pad = INDENT * depth
    head = f"{pad}{key}{TYPE_SEPARATOR}{annotation}" if annotation is not None else f"{pad}{key}"

    if isinstance(value, Scalar):
        _check_scalar(value.text, key)
        if not value.text and annotation is None and key in (BLOCK_CLOSE, LIST_CLOSE):
            raise ValueError(f"key {key!r} without a value reads back as a closer")
        return [f"{head} {value.text}" if value.text else head]

    if isinstance(value, Block):
        return [f"{head} {BLOCK_OPEN}", *_render_block_body(value, depth + 1), f"{pad}{BLOCK_CLOSE}"]

    if isinstance(value, List):
        if _fits_inline(value.items):
            return [f"{head} {_inline_list(value.items)}"]
        return [f"{head} {LIST_OPEN}", *_render_list_items(value.items, depth + 1), f"{pad}{LIST_CLOSE}"]

    if isinstance(value, Multiline):
        return [f"{head} {FENCE}", *_render_multiline(value, annotation, key), f"{pad}{FENCE}"]

    if isinstance(value, Table):
        raise ValueError(f"table '{key}' has no UP surface syntax")

    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def _render_block_body(block: Block, depth: int) -> list[str]:
    lines: list[str] = []
    for key, child in block.entries.items():
        lines.extend(_render_entry(key, block.annotation(key), child, depth))
    return lines


def _render_list_items(items: Sequence[Value], depth: int) -> list[str]:
    pad = INDENT * depth
    lines: list[str] = []
    for item in items:
        if isinstance(item, Scalar):
            _check_list_scalar(item.text)
            lines.append(f"{pad}{item.text}")
        elif isinstance(item, List):
            if not _fits_inline(item.items):
                raise ValueError("nested lists inside a list must hold plain scalars")
            lines.append(f"{pad}{_inline_list(item.items)}")
        elif isinstance(item, Block):
            lines.append(f"{pad}{BLOCK_OPEN}")
            lines.extend(_render_block_body(item, depth + 1))
            lines.append(f"{pad}{BLOCK_CLOSE}")
        elif isinstance(item, (Multiline, Table)):
            raise ValueError(f"a {item.kind} cannot be written as a list item")
        else:
            raise TypeError(f"Unsupported value type: {type(item).__name__}")
    return lines


def _render_multiline(value: Multiline, annotation: str | None, key: str) -> list[str]:
    text_lines = value.lines()
    if any(line.strip() == FENCE for line in text_lines):
        raise ValueError(f"multiline text of '{key}' contains a closing fence line")
    if annotation is not None and _DEDENT_RE.fullmatch(annotation):
        # re-indent so the dedent applied on parse restores the stored text
        prefix = " " * int(annotation)
        text_lines = [prefix + line for line in text_lines]
    return text_lines


def _fits_inline(items: Sequence[Value]) -> bool:
    if len(items) == 1 and isinstance(items[0], Scalar) and not items[0].text:
        # "[]" would read back as an empty list
        return False
    for position, item in enumerate(items):
        if not isinstance(item, Scalar):
            return False
        text = item.text
        if text != text.strip() or "\n" in text:
            return False
        if ITEM_SEPARATOR in text or LIST_OPEN in text or LIST_CLOSE in text:
            return False
        if position == 0 and text.startswith(FENCE):
            return False
    return True


def _inline_list(items: Sequence[Value]) -> str:
    return LIST_OPEN + ", ".join(str(item) for item in items) + LIST_CLOSE


def _check_scalar(text: str, key: str) -> None:
    if "\n" in text or text != text.strip():
        raise ValueError(f"scalar '{key}' has surrounding whitespace or line breaks")
    if text.startswith(FENCE) or text in (BLOCK_OPEN, LIST_OPEN):
        raise ValueError(f"scalar '{key}' would be read back as another construct")
    if text.startswith(LIST_OPEN) and text.endswith(LIST_CLOSE):
        raise ValueError(f"scalar '{key}' would be read back as an inline list")


def _check_list_scalar(text: str) -> None:
    if not text or "\n" in text or text != text.strip():
        raise ValueError(f"list item {text!r} cannot be written on its own line")
    if text.startswith(COMMENT_PREFIX) or text in (BLOCK_OPEN, LIST_CLOSE):
        raise ValueError(f"list item {text!r} would be read back as another construct")
    if text.startswith(LIST_OPEN) and text.endswith(LIST_CLOSE):
        raise ValueError(f"list item {text!r} would be read back as an inline list")


def _has_whitespace(text: str) -> bool:
    return any(char.isspace() for char in text)


__all__ = ["dump_document"]
