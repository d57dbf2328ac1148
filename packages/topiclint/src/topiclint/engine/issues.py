from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..source.model import Range
from .fixes import Fix


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"


@dataclass(frozen=True)
class Issue:
    rule_id: str
    message: str
    range: Range
    severity: Severity = Severity.ERROR
    fix: Fix | None = None

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    def as_dict(self) -> dict[str, object]:
        return {
            "rule": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
            "range": self.range.as_dict(),
            "fix": self.fix.as_dict() if self.fix is not None else None,
        }


class IssueReporter:
    """Collects the issues of one topic in emission order."""

    def __init__(self, topic: str) -> None:
        self.topic = topic
        self._issues: list[Issue] = []
        self._removed: set[str] = set()

    def emit(
        self,
        rule_id: str,
        message: str,
        where: Range,
        *,
        severity: Severity = Severity.ERROR,
        fix: Fix | None = None,
        removes: str | None = None,
    ) -> Issue:
        issue = Issue(rule_id=rule_id, message=message, range=where, severity=severity, fix=fix)
        return self.record(issue, removes=removes)

    def record(self, issue: Issue, *, removes: str | None = None) -> Issue:
        """Append an already built issue; `removes` names a config key its fix deletes."""
        self._issues.append(issue)
        if removes is not None:
            self._removed.add(removes)
        return issue

    def is_removed(self, key: str) -> bool:
        return key in self._removed

    @property
    def issues(self) -> tuple[Issue, ...]:
        return tuple(self._issues)


__all__ = ["Issue", "IssueReporter", "Severity"]
