from __future__ import annotations

from typing import Iterable, Iterator

from ..core.errors import MalformedKeyError
from ..source.model import Property


class AttributeIndex:
    """Lookup of one topic's config properties by key.

    Built fresh for every topic. The first occurrence of a key wins; later
    duplicates never shadow it.
    """

    def __init__(self, properties: dict[str, Property]) -> None:
        self._properties = properties

    @classmethod
    def build(cls, properties: Iterable[Property]) -> "AttributeIndex":
        table: dict[str, Property] = {}
        for prop in properties:
            if not prop.key_resolved:
                raise MalformedKeyError(
                    f"{prop.key_range}: config key `{prop.key}` cannot be resolved to a literal string"
                )
            table.setdefault(prop.key, prop)
        return cls(table)

    def lookup(self, key: str) -> Property | None:
        return self._properties.get(key)

    def keys(self) -> list[str]:
        return list(self._properties)

    def __contains__(self, key: object) -> bool:
        return key in self._properties

    def __iter__(self) -> Iterator[Property]:
        return iter(self._properties.values())

    def __len__(self) -> int:
        return len(self._properties)


__all__ = ["AttributeIndex"]
