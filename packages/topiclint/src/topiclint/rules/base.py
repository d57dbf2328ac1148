from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..engine.fixes import Fix
from ..engine.index import AttributeIndex
from ..engine.issues import Issue, IssueReporter, Severity
from ..policy import Policy
from ..source.model import ConfigBlock, Range, TopicRecord

RuleFunc = Callable[["RuleContext"], None]


@dataclass(frozen=True)
class RuleDef:
    rule_id: str
    description: str
    severity: Severity
    fn: RuleFunc
    fix_hint: str = "Apply the proposed fix with `topiclint check --fix`."
    tags: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.rule_id

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.rule_id,
            "description": self.description,
            "severity": self.severity.value,
            "fix_hint": self.fix_hint,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class RuleContext:
    """Everything one rule sees while it evaluates one topic."""

    topic: TopicRecord
    index: AttributeIndex
    policy: Policy
    reporter: IssueReporter
    rule: RuleDef

    def emit(self, message: str, where: Range, fix: Fix | None = None, removes: str | None = None) -> Issue:
        return self.reporter.emit(
            self.rule.rule_id, message, where, severity=self.rule.severity, fix=fix, removes=removes
        )

    def record(self, issue: Issue, removes: str | None = None) -> Issue:
        return self.reporter.record(issue, removes=removes)

    def insert_config_entry(self, config: ConfigBlock, *lines: str) -> Fix:
        """Fix adding `lines` as new entries right after the config `{`."""
        text = "".join(f"\n{config.entry_indent}{line}" for line in lines)
        return Fix.insert_after(config.open_brace, text)


__all__ = ["RuleContext", "RuleDef", "RuleFunc"]
