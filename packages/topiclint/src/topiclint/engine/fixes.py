from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ..core.errors import FixConflictError
from ..source.model import Range


class FixKind(str, Enum):
    INSERT_AFTER = "insert_after"
    REPLACE = "replace"
    DELETE = "delete"


@dataclass(frozen=True)
class Fix:
    kind: FixKind
    range: Range
    text: str = ""

    @classmethod
    def insert_after(cls, anchor: Range, text: str) -> "Fix":
        return cls(FixKind.INSERT_AFTER, anchor, text)

    @classmethod
    def replace(cls, target: Range, text: str) -> "Fix":
        return cls(FixKind.REPLACE, target, text)

    @classmethod
    def delete(cls, target: Range) -> "Fix":
        return cls(FixKind.DELETE, target, "")

    @property
    def span(self) -> tuple[int, int]:
        if self.kind == FixKind.INSERT_AFTER:
            return (self.range.end.offset, self.range.end.offset)
        return (self.range.start.offset, self.range.end.offset)

    def as_dict(self) -> dict[str, object]:
        return {"kind": self.kind.value, "range": self.range.as_dict(), "text": self.text}


@dataclass(frozen=True)
class Edit:
    start: int
    end: int
    text: str
    seq: int


def plan_edits(fixes: Iterable[Fix]) -> list[Edit]:
    """Order fixes for a single splice pass over the original text.

    Edits are sorted by position; edits sharing an insertion point keep the
    order in which they were given, which is rule priority order when the
    fixes come from a topic's issue list.
    """
    seen: set[Fix] = set()
    edits: list[Edit] = []
    for seq, fix in enumerate(fixes):
        if fix in seen:
            continue
        seen.add(fix)
        start, end = fix.span
        edits.append(Edit(start, end, fix.text, seq))
    edits.sort(key=lambda edit: (edit.start, edit.end, edit.seq))
    for prev, cur in zip(edits, edits[1:]):
        if cur.start < prev.end:
            raise FixConflictError(
                f"overlapping fixes at offsets {prev.start}-{prev.end} and {cur.start}-{cur.end}"
            )
    return edits


def apply_fixes(text: str, fixes: Iterable[Fix]) -> str:
    edits = plan_edits(fixes)
    if edits and edits[-1].end > len(text):
        raise FixConflictError(f"fix range ends at offset {edits[-1].end} beyond source length {len(text)}")
    out: list[str] = []
    cursor = 0
    for edit in edits:
        out.append(text[cursor : edit.start])
        out.append(edit.text)
        cursor = max(cursor, edit.end)
    out.append(text[cursor:])
    return "".join(out)


__all__ = ["Edit", "Fix", "FixKind", "apply_fixes", "plan_edits"]
