from __future__ import annotations

import pytest

from topiclint.core.errors import FixConflictError
from topiclint.engine.fixes import Fix, FixKind, apply_fixes, plan_edits

from helpers import make_range

TEXT = "alpha beta gamma\n"


def test_fixes_compose_against_the_original_text() -> None:
    fixes = [
        Fix.replace(make_range(TEXT, 6, 10), "BETA"),
        Fix.insert_after(make_range(TEXT, 0, 5), "!"),
        Fix.delete(make_range(TEXT, 10, 16)),
    ]
    assert apply_fixes(TEXT, fixes) == "alpha! BETA\n"


def test_coinciding_insertions_keep_emission_order() -> None:
    anchor = make_range(TEXT, 0, 5)
    fixes = [Fix.insert_after(anchor, " one"), Fix.insert_after(anchor, " two")]
    assert apply_fixes(TEXT, fixes) == "alpha one two beta gamma\n"
    assert apply_fixes(TEXT, list(reversed(fixes))) == "alpha two one beta gamma\n"


def test_insertion_before_a_replacement_at_the_same_offset() -> None:
    fixes = [Fix.replace(make_range(TEXT, 6, 10), "B"), Fix.insert_after(make_range(TEXT, 0, 6), "[")]
    assert apply_fixes(TEXT, fixes) == "alpha [B gamma\n"


def test_identical_fixes_apply_once() -> None:
    fix = Fix.insert_after(make_range(TEXT, 0, 5), "!")
    assert len(plan_edits([fix, fix])) == 1
    assert apply_fixes(TEXT, [fix, fix]) == "alpha! beta gamma\n"


def test_overlapping_fixes_conflict() -> None:
    fixes = [Fix.replace(make_range(TEXT, 0, 10), "x"), Fix.delete(make_range(TEXT, 6, 16))]
    with pytest.raises(FixConflictError):
        apply_fixes(TEXT, fixes)


def test_fix_beyond_the_text_conflicts() -> None:
    with pytest.raises(FixConflictError):
        apply_fixes("short", [Fix.delete(make_range(TEXT, 0, 10))])


def test_insert_span_is_the_anchor_end() -> None:
    fix = Fix.insert_after(make_range(TEXT, 6, 10), "x")
    assert fix.kind == FixKind.INSERT_AFTER
    assert fix.span == (10, 10)
    assert fix.as_dict()["kind"] == "insert_after"
