from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Sequence

from topiclint.engine.fixes import apply_fixes
from topiclint.engine.runner import FileResult, TopicResult, check_source
from topiclint.policy import Policy
from topiclint.rules import RULES, RuleDef, select_rules
from topiclint.source.hcl import read_topics
from topiclint.source.model import Pos, Range, TopicRecord

ROOT = Path(__file__).resolve().parents[3]
TESTS_ROOT = Path(__file__).resolve().parent
FIXTURES_ROOT = TESTS_ROOT / "fixtures"
GOLDENS_ROOT = TESTS_ROOT / "goldens"
FILENAME = "main.tf"


def topic_source(*config_lines: str, head: Sequence[str] = ('name               = "topic"', "replication_factor = 3")) -> str:
    """A single kafka_topic resource with the given config entries, one per line."""
    lines = ['resource "kafka_topic" "topic" {']
    lines.extend(f"  {line}" for line in head)
    lines.append("  config = {")
    lines.extend(f"    {line}" for line in config_lines)
    lines.append("  }")
    lines.append("}")
    return "\n".join(lines) + "\n"


def read_topic(text: str) -> TopicRecord:
    topics = read_topics(text, FILENAME)
    assert len(topics) == 1
    return topics[0]


def check_text(text: str, rules: Sequence[RuleDef] = RULES, policy: Policy | None = None) -> FileResult:
    return check_source(text, FILENAME, policy or Policy(), rules)


def check_one(text: str, *rule_ids: str, policy: Policy | None = None) -> TopicResult:
    rules = select_rules(list(rule_ids)) if rule_ids else RULES
    result = check_text(text, rules, policy)
    assert result.error is None
    assert len(result.topics) == 1
    return result.topics[0]


def messages(result: TopicResult | FileResult) -> list[str]:
    return [issue.message for issue in result.issues]


def fixed_text(text: str, rules: Sequence[RuleDef] = RULES, policy: Policy | None = None) -> str:
    return apply_fixes(text, check_text(text, rules, policy).fixes)


def line_of(text: str, needle: str) -> int:
    return next(no for no, line in enumerate(text.splitlines(), start=1) if needle in line)


def make_range(text: str, start: int, end: int, filename: str = FILENAME) -> Range:
    def pos(offset: int) -> Pos:
        line = text.count("\n", 0, offset) + 1
        column = offset - (text.rfind("\n", 0, offset) + 1) + 1
        return Pos(line, column, offset)

    return Range(filename, pos(start), pos(end))


def run_topiclint(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "packages/topiclint/src")
    env.setdefault("RUN_ID", "pytest-run")
    return subprocess.run(
        [sys.executable, "-m", "topiclint", *args],
        cwd=(cwd or ROOT),
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )
