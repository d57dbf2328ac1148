"""Human readable comments bound to numeric config values.

A numeric property such as ``retention.ms`` carries a comment spelling out
its value, either on the same line after the value or on its own line right
above the key. `reconcile` compares that comment with the canonical text
produced by `topiclint.engine.units` and proposes the edit that restores it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..core.errors import InvalidNumericValue
from ..source.model import Comment, Property, Range
from .fixes import Fix
from .issues import Issue, Severity
from .units import UnitKind, canonical_comment, matches_canonical


@dataclass(frozen=True)
class AnnotatedProperty:
    key: str
    kind: UnitKind
    base_phrase: str
    infinite_value: int | None = None
    owns_validity: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", UnitKind(self.kind))
        if not self.key.strip():
            raise ValueError("annotated property key must not be empty")
        if not self.base_phrase.strip():
            raise ValueError(f"{self.key}: base phrase must not be empty")

    @property
    def unit_label(self) -> str:
        return "milliseconds" if self.kind == UnitKind.DURATION else "bytes"

    def canonical(self, raw: str) -> str:
        return canonical_comment(self.kind, raw, self.base_phrase, self.infinite_value)

    def as_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "kind": self.kind.value,
            "base_phrase": self.base_phrase,
            "infinite_value": self.infinite_value,
            "owns_validity": self.owns_validity,
        }


DEFAULT_ANNOTATIONS: tuple[AnnotatedProperty, ...] = (
    # retention rule reports invalid values of both retention properties
    AnnotatedProperty("retention.ms", UnitKind.DURATION, "keep data", infinite_value=-1),
    AnnotatedProperty("local.retention.ms", UnitKind.DURATION, "keep data in primary storage", infinite_value=-2),
    AnnotatedProperty(
        "max.compaction.lag.ms", UnitKind.DURATION, "allow not compacted keys maximum", owns_validity=True
    ),
    AnnotatedProperty("max.message.bytes", UnitKind.BYTES, "allow for a batch of records maximum", owns_validity=True),
    AnnotatedProperty("retention.bytes", UnitKind.BYTES, "keep on each partition", infinite_value=-1, owns_validity=True),
)


def find_annotation(prop: Property, comments: Iterable[Comment]) -> Comment | None:
    """Comment bound to `prop`: same line after the value wins over the line above the key."""
    rows = list(comments)
    value_end = prop.value_range.end
    for comment in rows:
        start = comment.range.start
        if prop.value_ends_line and start.line == value_end.line and start.offset >= value_end.offset:
            return comment
    if not prop.starts_line:
        return None
    key_line = prop.key_range.start.line
    for comment in rows:
        if comment.standalone and comment.range.end.line == key_line - 1:
            return comment
    return None


def _insert_annotation(prop: Property, canonical: str, entry_indent: str) -> Fix:
    """Trailing comment when the value ends its line, otherwise a comment line above the key."""
    if prop.value_ends_line:
        return Fix.insert_after(prop.value_range, " " + canonical)
    before_key = Range(prop.key_range.filename, prop.key_range.start, prop.key_range.start)
    if prop.key_indent is not None:
        return Fix.insert_after(before_key, f"{canonical}\n{prop.key_indent}")
    return Fix.insert_after(before_key, f"\n{entry_indent}{canonical}\n{entry_indent}")


def reconcile(
    prop: Property,
    annotated: AnnotatedProperty,
    comments: Iterable[Comment],
    rule_id: str,
    severity: Severity = Severity.ERROR,
    entry_indent: str = "    ",
) -> Issue | None:
    try:
        if not prop.value_literal:
            raise InvalidNumericValue(prop.value)
        canonical = annotated.canonical(prop.value)
    except InvalidNumericValue:
        if not annotated.owns_validity:
            return None
        return Issue(
            rule_id,
            f"{prop.key} must have a valid integer value expressed in {annotated.unit_label}",
            prop.value_range,
            severity,
        )
    annotation = find_annotation(prop, comments)
    if annotation is None:
        return Issue(
            rule_id,
            f"{prop.key} must have a comment with the human readable value: adding it ...",
            prop.key_range,
            severity,
            _insert_annotation(prop, canonical, entry_indent),
        )
    if matches_canonical(annotation.text, canonical):
        return None
    return Issue(
        rule_id,
        f"{prop.key} value doesn't correspond to the human readable value in the comment: fixing it ...",
        annotation.range,
        severity,
        Fix.replace(annotation.range, canonical),
    )


__all__ = ["AnnotatedProperty", "DEFAULT_ANNOTATIONS", "find_annotation", "reconcile"]
