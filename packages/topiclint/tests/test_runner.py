from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from topiclint.core.context import RunContext
from topiclint.core.errors import ScriptError
from topiclint.core.exit_codes import ERR_USAGE
from topiclint.engine.runner import check_file, check_paths, check_source, discover_files
from topiclint.policy import Policy

from helpers import FIXTURES_ROOT, GOLDENS_ROOT, check_text, fixed_text, topic_source

CTX = RunContext(run_id="pytest-run", quiet=True)


def test_fixture_issues_grouped_per_topic() -> None:
    text = (FIXTURES_ROOT / "topics.tf").read_text(encoding="utf-8")
    result = check_text(text)
    assert [topic.name for topic in result.topics] == ["payments", "payment_state", "audit"]
    assert [len(topic.issues) for topic in result.topics] == [5, 4, 2]
    assert [issue.rule_id for issue in result.topics[0].issues] == [
        "topic_config",
        "topic_config",
        "topic_config",
        "topic_config",
        "topic_config_comments",
    ]
    assert all(issue.fixable for issue in result.issues)


def test_fixture_matches_golden_after_fix() -> None:
    text = (FIXTURES_ROOT / "topics.tf").read_text(encoding="utf-8")
    golden = (GOLDENS_ROOT / "topics.fixed.tf").read_text(encoding="utf-8")
    fixed = fixed_text(text)
    assert fixed == golden
    assert check_text(fixed).issues == []


def test_malformed_key_aborts_only_its_topic() -> None:
    bad = topic_source('(var.key) = "1"').replace('"topic"', '"bad"', 1)
    good = topic_source('"compression.type" = "zstd"', '"cleanup.policy" = "compact"')
    result = check_source(bad + "\n" + good, "main.tf", Policy())
    assert [topic.status for topic in result.topics] == ["error", "pass"]
    assert result.topics[0].issues == ()
    assert "cannot be resolved to a literal string" in (result.topics[0].error or "")
    assert result.status == "error"


def test_non_object_config_is_a_topic_error() -> None:
    text = 'resource "kafka_topic" "t" {\n  name = "t"\n  config = local.config\n}\n'
    result = check_source(text, "main.tf", Policy())
    assert result.topics[0].error is not None
    assert result.errors == [result.topics[0].error]


def test_syntax_error_is_a_file_error() -> None:
    result = check_source('resource "kafka_topic" "t" {\n', "broken.tf", Policy())
    assert result.topics == ()
    assert result.error is not None
    assert result.error.startswith("broken.tf:1:")


@pytest.mark.integration
def test_discover_files_walks_directories(tmp_path: Path) -> None:
    (tmp_path / "team").mkdir()
    (tmp_path / ".terraform").mkdir()
    (tmp_path / "team" / "b.tf").write_text("", encoding="utf-8")
    (tmp_path / "a.tf").write_text("", encoding="utf-8")
    (tmp_path / "notes.md").write_text("", encoding="utf-8")
    (tmp_path / ".terraform" / "cached.tf").write_text("", encoding="utf-8")
    found = discover_files([tmp_path, tmp_path / "a.tf"])
    assert found == [tmp_path / "a.tf", tmp_path / "team" / "b.tf"]


def test_discover_files_rejects_missing_paths(tmp_path: Path) -> None:
    with pytest.raises(ScriptError) as exc:
        discover_files([tmp_path / "missing"])
    assert exc.value.code == ERR_USAGE


@pytest.mark.integration
def test_fix_writes_the_file_and_reports_what_remains(tmp_path: Path) -> None:
    target = tmp_path / "topic.tf"
    target.write_text(topic_source('"compression.type" = "zstd"'), encoding="utf-8")
    result = check_file(target, Policy(), CTX, fix=True)
    assert result.fixed == 2
    assert '"retention.ms" = "???"' in target.read_text(encoding="utf-8")
    assert [issue.message for issue in result.issues] == [
        "retention.ms must have a valid integer value expressed in milliseconds. Use -1 for infinite retention"
    ]


@pytest.mark.integration
def test_check_paths_fixes_the_fixture(tmp_path: Path) -> None:
    shutil.copy(FIXTURES_ROOT / "topics.tf", tmp_path / "topics.tf")
    summary = check_paths([tmp_path], Policy(), CTX, fix=True)
    assert [result.fixed for result in summary.files] == [11]
    assert summary.issues == []
    assert not summary.has_errors
    assert (tmp_path / "topics.tf").read_text(encoding="utf-8") == (GOLDENS_ROOT / "topics.fixed.tf").read_text(
        encoding="utf-8"
    )


@pytest.mark.integration
def test_unreadable_file_is_a_file_error(tmp_path: Path) -> None:
    target = tmp_path / "latin1.tf"
    target.write_bytes(b"\xff\xfe\x00")
    result = check_file(target, Policy(), CTX)
    assert result.error is not None
    assert "cannot read file" in result.error


def test_lexer_errors_stay_inside_their_file() -> None:
    stray = check_source("locals {\n  x = ٣\n}\n", "stray.tf", Policy())
    unicode_ok = check_source('locals {\n  café = 1\n}\n', "unicode.tf", Policy())
    assert stray.error == "stray.tf:2:7: unexpected character `٣`"
    assert unicode_ok.error is None
    assert unicode_ok.topics == ()
