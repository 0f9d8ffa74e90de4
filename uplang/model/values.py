"""Value variants held by UP nodes.

A node value is exactly one of :class:`Scalar`, :class:`Block`, :class:`List`,
:class:`Table` or :class:`Multiline`. Containers handed to a constructor are
copied once into tuples or read-only mappings, so a tree cannot change after
it has been built.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Iterator, Mapping


@dataclass(frozen=True)
class Value(ABC):
    """Base for the closed set of value variants.

    Every variant exposes ``kind`` and a ``to_data`` helper returning plain,
    JSON-compatible data for debugging output and tests.
    """

    kind: ClassVar[str]

    def to_data(self) -> dict[str, Any]:
        """Serialize the value into a structured dictionary."""

        return {"type": self.kind, **self._serialize()}

    @abstractmethod
    def _serialize(self) -> dict[str, Any]:
        """Return variant-specific fields for serialization."""


@dataclass(frozen=True)
class Scalar(Value):
    """Leaf text value. Type annotations never convert it."""

    text: str
    kind: ClassVar[str] = "scalar"

    def __str__(self) -> str:
        return self.text

    def _serialize(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True, eq=False)
class Block(Value):
    """Ordered key/value mapping written between ``{`` and ``}``.

    ``annotations`` holds the type annotation of every entry that carried one;
    keys without an annotation are absent from it.
    """

    entries: Mapping[str, Value] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)
    kind: ClassVar[str] = "block"

    def __post_init__(self) -> None:
        entries = dict(self.entries)
        for key, value in entries.items():
            _require_value(value, f"block entry '{key}'")
        annotations = dict(self.annotations)
        unknown = sorted(set(annotations) - set(entries))
        if unknown:
            raise ValueError(f"annotations given for unknown keys: {', '.join(unknown)}")
        object.__setattr__(self, "entries", MappingProxyType(entries))
        object.__setattr__(self, "annotations", MappingProxyType(annotations))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Block):
            return NotImplemented
        return tuple(self.entries.items()) == tuple(other.entries.items()) and dict(
            self.annotations
        ) == dict(other.annotations)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def get(self, key: str) -> Value | None:
        """Return the value stored under ``key``, or ``None`` when absent."""

        return self.entries.get(key)

    def annotation(self, key: str) -> str | None:
        """Return the type annotation of ``key``, or ``None`` when it has none."""

        return self.annotations.get(key)

    def _serialize(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "entries": {key: value.to_data() for key, value in self.entries.items()}
        }
        if self.annotations:
            payload["annotations"] = dict(self.annotations)
        return payload


@dataclass(frozen=True)
class List(Value):
    """Ordered sequence of values, written inline or across lines."""

    items: tuple[Value, ...] = ()
    kind: ClassVar[str] = "list"

    def __post_init__(self) -> None:
        items = tuple(self.items)
        for position, item in enumerate(items):
            _require_value(item, f"list item {position}")
        object.__setattr__(self, "items", items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def _serialize(self) -> dict[str, Any]:
        return {"items": [item.to_data() for item in self.items]}


@dataclass(frozen=True)
class Table(Value):
    """Columns plus rows of values.

    No surface syntax produces a table yet; it exists for callers that build
    documents programmatically.
    """

    columns: tuple[str, ...] = ()
    rows: tuple[tuple[Value, ...], ...] = ()
    kind: ClassVar[str] = "table"

    def __post_init__(self) -> None:
        rows = tuple(tuple(row) for row in self.rows)
        for row_index, row in enumerate(rows):
            for column_index, cell in enumerate(row):
                _require_value(cell, f"table cell {row_index}:{column_index}")
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "rows", rows)

    def _serialize(self) -> dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [[cell.to_data() for cell in row] for row in self.rows],
        }


@dataclass(frozen=True)
class Multiline(Value):
    """Text captured verbatim between backtick fences."""

    text: str
    kind: ClassVar[str] = "multiline"

    def __str__(self) -> str:
        return self.text

    def lines(self) -> list[str]:
        return self.text.split("\n")

    def _serialize(self) -> dict[str, Any]:
        return {"text": self.text}


def _require_value(candidate: object, where: str) -> None:
    if not isinstance(candidate, Value):
        raise TypeError(f"{where} must be a Value, got {type(candidate).__name__}")


VALUE_TYPES = (Scalar, Block, List, Table, Multiline)


__all__ = [
    "Block",
    "List",
    "Multiline",
    "Scalar",
    "Table",
    "VALUE_TYPES",
    "Value",
]
