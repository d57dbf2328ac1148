from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True, order=True)
class Pos:
    line: int
    column: int
    offset: int

    def as_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass(frozen=True)
class Range:
    filename: str
    start: Pos
    end: Pos

    def __post_init__(self) -> None:
        if self.end.offset < self.start.offset:
            raise ValueError(f"range end {self.end} precedes start {self.start}")

    @classmethod
    def join(cls, first: "Range", last: "Range") -> "Range":
        return cls(first.filename, first.start, last.end)

    def contains(self, other: "Range") -> bool:
        return self.start.offset <= other.start.offset and other.end.offset <= self.end.offset

    def as_dict(self) -> dict[str, object]:
        return {"filename": self.filename, "start": self.start.as_dict(), "end": self.end.as_dict()}

    def __str__(self) -> str:
        return f"{self.filename}:{self.start.line}:{self.start.column}"


@dataclass(frozen=True)
class Property:
    key: str
    value: str
    key_range: Range
    value_range: Range
    key_resolved: bool = True
    value_literal: bool = True
    # whitespace before the key when it starts its line, else None
    key_indent: str | None = ""
    # nothing but whitespace or a comment follows the value on its line
    value_ends_line: bool = True

    @property
    def starts_line(self) -> bool:
        return self.key_indent is not None

    @property
    def pair_range(self) -> Range:
        return Range.join(self.key_range, self.value_range)


@dataclass(frozen=True)
class Comment:
    text: str
    range: Range
    standalone: bool = False


@dataclass(frozen=True)
class Attribute:
    name: str
    value: str
    range: Range
    value_range: Range
    value_literal: bool = True


@dataclass(frozen=True)
class ConfigBlock:
    range: Range
    open_brace: Range
    properties: tuple[Property, ...] = ()
    entry_indent: str = "    "


@dataclass(frozen=True)
class TopicRecord:
    name: str
    filename: str
    def_range: Range
    attributes: Mapping[str, Attribute] = field(default_factory=dict)
    config: ConfigBlock | None = None
    config_error: str | None = None
    comments: tuple[Comment, ...] = ()
    body_indent: str = "  "

    def attribute(self, name: str) -> Attribute | None:
        return self.attributes.get(name)


__all__ = ["Attribute", "Comment", "ConfigBlock", "Pos", "Property", "Range", "TopicRecord"]
