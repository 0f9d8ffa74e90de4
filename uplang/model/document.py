"""Nodes and the document root produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Type, TypeVar

from uplang.model.values import Block, List, Multiline, Scalar, Table, Value

V = TypeVar("V", bound=Value)


@dataclass(frozen=True)
class Node:
    """A key, its optional type annotation, and the value it holds.

    ``source_line`` is the 1-based line the node started on. It is kept for
    diagnostics only and does not take part in equality.
    """

    key: str
    value: Value
    type_annotation: str | None = None
    source_line: int | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise ValueError("node key must be a non-empty string")
        if not isinstance(self.value, Value):
            raise TypeError(f"node '{self.key}' value must be a Value")

    @property
    def has_type_annotation(self) -> bool:
        return self.type_annotation is not None

    def to_data(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"key": self.key, "value": self.value.to_data()}
        if self.type_annotation is not None:
            payload["annotation"] = self.type_annotation
        if self.source_line is not None:
            payload["source_line"] = self.source_line
        return payload


@dataclass(frozen=True)
class Document:
    """Ordered root nodes of one parsed UP source.

    Lookups scan the root nodes in order and return the first node whose key
    matches. The typed getters return ``None`` both when no node has the key
    and when the matching node holds a different kind of value.
    """

    nodes: tuple[Node, ...] = ()
    source_file: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        nodes = tuple(self.nodes)
        for node in nodes:
            if not isinstance(node, Node):
                raise TypeError(f"document nodes must be Node, got {type(node).__name__}")
        object.__setattr__(self, "nodes", nodes)

    @classmethod
    def empty(cls) -> "Document":
        return cls()

    def is_empty(self) -> bool:
        return not self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def get_node(self, key: str) -> Node | None:
        """Return the first root node named ``key``."""

        for node in self.nodes:
            if node.key == key:
                return node
        return None

    def get_scalar(self, key: str) -> str | None:
        """Return the raw text of a scalar node."""

        scalar = self._get_value(key, Scalar)
        return scalar.text if scalar is not None else None

    def get_block(self, key: str) -> Block | None:
        return self._get_value(key, Block)

    def get_list(self, key: str) -> List | None:
        return self._get_value(key, List)

    def get_multiline(self, key: str) -> Multiline | None:
        return self._get_value(key, Multiline)

    def get_table(self, key: str) -> Table | None:
        return self._get_value(key, Table)

    def to_data(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"nodes": [node.to_data() for node in self.nodes]}
        if self.source_file:
            payload["source_file"] = self.source_file
        return payload

    def pretty(self) -> str:
        """Return an indented outline of the document tree.

        Returns:
            str: One line per node, list item, or captured text line.
        """

        lines: list[str] = []
        for node in self.nodes:
            _render_value(_label(node.key, node.type_annotation), node.value, 0, lines)
        return "\n".join(lines)

    def _get_value(self, key: str, kind: Type[V]) -> V | None:
        node = self.get_node(key)
        if node is not None and isinstance(node.value, kind):
            return node.value
        return None


def _label(key: str, annotation: str | None) -> str:
    return f"{key}!{annotation}" if annotation is not None else key


def _render_value(label: str, value: Value, indent: int, lines: list[str]) -> None:
    pad = "  " * indent
    if isinstance(value, Scalar):
        lines.append(f"{pad}{label} = {value.text}")
    elif isinstance(value, Block):
        lines.append(f"{pad}{label} {{{len(value)} entries}}")
        for key, child in value.entries.items():
            _render_value(_label(key, value.annotation(key)), child, indent + 1, lines)
    elif isinstance(value, List):
        lines.append(f"{pad}{label} [{len(value)} items]")
        for item in value.items:
            if isinstance(item, Scalar):
                lines.append(f"{pad}  - {item.text}")
            else:
                _render_value("-", item, indent + 1, lines)
    elif isinstance(value, Table):
        lines.append(f"{pad}{label} table ({', '.join(value.columns)})")
        for row in value.rows:
            lines.append(f"{pad}  | " + " | ".join(_cell_text(cell) for cell in row))
    elif isinstance(value, Multiline):
        text_lines = value.lines()
        lines.append(f"{pad}{label} ``` ({len(text_lines)} lines)")
        lines.extend(f"{pad}  | {text_line}" for text_line in text_lines)
    else:
        raise TypeError(f"Unsupported value type: {type(value).__name__}")


def _cell_text(cell: Value) -> str:
    if isinstance(cell, (Scalar, Multiline)):
        return cell.text
    return f"<{cell.kind}>"


__all__ = ["Document", "Node"]
