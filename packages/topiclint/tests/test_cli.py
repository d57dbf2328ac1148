from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from topiclint import __version__
from topiclint.cli import main
from topiclint.core.exit_codes import ERR_CONFIG, ERR_ISSUES, ERR_STRUCTURE, ERR_USAGE, OK

from helpers import FIXTURES_ROOT, GOLDENS_ROOT, run_topiclint, topic_source


@pytest.fixture
def fixture_copy(tmp_path: Path) -> Path:
    target = tmp_path / "topics.tf"
    shutil.copy(FIXTURES_ROOT / "topics.tf", target)
    return target


def test_version_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["version"]) == OK
    assert capsys.readouterr().out.strip() == f"topiclint {__version__}"


def test_rules_command_lists_rules_in_order(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["rules"]) == OK
    rows = [line.split("\t") for line in capsys.readouterr().out.splitlines()]
    assert [(row[0], row[1]) for row in rows] == [
        ("topic_config", "error"),
        ("topic_no_infinite_retention", "warning"),
        ("topic_config_comments", "error"),
    ]


def test_explain_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--json", "--run-id", "cli-run", "explain", "topic_no_infinite_retention"]) == OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["run_id"] == "cli-run"
    assert payload["rule"]["id"] == "topic_no_infinite_retention"
    assert payload["rule"]["severity"] == "warning"


def test_explain_unknown_rule_is_a_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["explain", "topic_nope"]) == ERR_USAGE
    assert "unknown rule `topic_nope`" in capsys.readouterr().err


def test_conflicting_output_flags(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--json", "--format", "text", "version"]) == ERR_USAGE
    assert "conflicting output flags" in capsys.readouterr().err


@pytest.mark.integration
def test_check_json_reports_issues(fixture_copy: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--json", "check", str(fixture_copy)]) == ERR_ISSUES
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "fail"
    assert payload["summary"]["issues"] == 11
    assert fixture_copy.read_text(encoding="utf-8") == (FIXTURES_ROOT / "topics.tf").read_text(encoding="utf-8")


@pytest.mark.integration
def test_check_fix_rewrites_files(fixture_copy: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["check", "--fix", str(fixture_copy.parent)]) == OK
    assert capsys.readouterr().out.splitlines()[-1] == "pass: files=1 topics=3 issues=0 fixable=0 errors=0 fixed=11"
    assert fixture_copy.read_text(encoding="utf-8") == (GOLDENS_ROOT / "topics.fixed.tf").read_text(encoding="utf-8")


@pytest.mark.integration
def test_check_selected_rule_only(fixture_copy: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["check", "--rule", "topic_no_infinite_retention", str(fixture_copy)]) == OK
    assert capsys.readouterr().out.strip() == "pass: files=1 topics=3 issues=0 fixable=0 errors=0"


@pytest.mark.integration
def test_quiet_pass_prints_nothing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "main.tf"
    target.write_text(topic_source('"compression.type" = "zstd"', '"cleanup.policy" = "compact"'), encoding="utf-8")
    assert main(["--quiet", "check", str(target)]) == OK
    assert capsys.readouterr().out == ""


@pytest.mark.integration
def test_warnings_do_not_fail_the_run(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "main.tf"
    target.write_text(
        topic_source(
            '"compression.type" = "zstd"',
            '"cleanup.policy" = "delete"',
            '"retention.ms" = "-1" # keep data forever',
            '"remote.storage.enable" = "true"',
            '"local.retention.ms" = "86400000" # keep data in primary storage for 1 day',
        ),
        encoding="utf-8",
    )
    assert main(["check", str(target)]) == OK
    assert "warning [topic_no_infinite_retention]" in capsys.readouterr().out


@pytest.mark.integration
def test_disabled_rule_in_policy_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "main.tf"
    target.write_text(topic_source('"cleanup.policy" = "compact"'), encoding="utf-8")
    policy = tmp_path / "policy.toml"
    policy.write_text('schema_version = 1\n[rules]\ndisabled = ["topic_config"]\n', encoding="utf-8")
    assert main(["--config", str(policy), "check", str(target)]) == OK
    capsys.readouterr()
    assert main(["--config", str(policy), "check", "--rule", "topic_config", str(target)]) == ERR_ISSUES


@pytest.mark.integration
def test_structural_errors_win_over_issues(fixture_copy: Path, capsys: pytest.CaptureFixture[str]) -> None:
    broken = fixture_copy.parent / "broken.tf"
    broken.write_text('resource "kafka_topic" "t" {\n', encoding="utf-8")
    assert main(["check", str(fixture_copy.parent)]) == ERR_STRUCTURE
    out = capsys.readouterr().out
    assert f"{broken}: error: {broken}:1:" in out


@pytest.mark.integration
def test_missing_policy_file_is_a_config_error(fixture_copy: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--json", "--config", str(fixture_copy.parent / "absent.toml"), "check", str(fixture_copy)]) == ERR_CONFIG
    payload = json.loads(capsys.readouterr().err.splitlines()[-1])
    assert payload["schema_name"] == "topiclint.error.v1"
    assert payload["errors"][0]["code"] == ERR_CONFIG


@pytest.mark.integration
def test_missing_path_is_a_usage_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["check", str(tmp_path / "absent.tf")]) == ERR_USAGE
    assert "path not found" in capsys.readouterr().err


@pytest.mark.integration
def test_module_entrypoint_runs() -> None:
    proc = run_topiclint("--json", "version")
    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["topiclint_version"] == __version__
    assert payload["run_id"] == "pytest-run"
