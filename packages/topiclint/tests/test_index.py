from __future__ import annotations

import pytest

from topiclint.core.errors import MalformedKeyError, StructuralError
from topiclint.engine.index import AttributeIndex

from helpers import read_topic, topic_source


def _index(*config_lines: str) -> AttributeIndex:
    topic = read_topic(topic_source(*config_lines))
    assert topic.config is not None
    return AttributeIndex.build(topic.config.properties)


def test_lookup_by_literal_key() -> None:
    index = _index('"cleanup.policy" = "delete"', 'retention_ms = "1"')
    prop = index.lookup("cleanup.policy")
    assert prop is not None
    assert prop.value == "delete"
    assert "retention_ms" in index
    assert index.lookup("compression.type") is None
    assert index.keys() == ["cleanup.policy", "retention_ms"]
    assert len(index) == 2


def test_first_occurrence_of_a_duplicate_key_wins() -> None:
    index = _index('"retention.ms" = "1"', '"retention.ms" = "2"')
    prop = index.lookup("retention.ms")
    assert prop is not None
    assert prop.value == "1"
    assert len(index) == 1


@pytest.mark.parametrize("key", ['"${local.prefix}.ms"', "(var.key)"])
def test_unresolvable_key_is_structural(key: str) -> None:
    with pytest.raises(MalformedKeyError) as exc:
        _index(f'{key} = "1"')
    assert isinstance(exc.value, StructuralError)
    assert "cannot be resolved to a literal string" in str(exc.value)
