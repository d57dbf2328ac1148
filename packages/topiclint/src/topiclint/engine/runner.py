"""Runs the topic rules over topics, sources and paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from ..core.context import RunContext
from ..core.errors import ScriptError, StructuralError
from ..core.exit_codes import ERR_USAGE
from ..core.logging import log_event
from ..policy import Policy
from ..rules import RULES, RuleContext, RuleDef
from ..source.hcl import read_topics
from ..source.model import Range, TopicRecord
from .fixes import Fix, apply_fixes
from .index import AttributeIndex
from .issues import Issue, IssueReporter, Severity

SOURCE_SUFFIX = ".tf"


@dataclass(frozen=True)
class TopicResult:
    name: str
    range: Range
    issues: tuple[Issue, ...] = ()
    error: str | None = None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "error"
        return "fail" if self.issues else "pass"

    @property
    def fixes(self) -> list[Fix]:
        return [issue.fix for issue in self.issues if issue.fix is not None]

    def as_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "status": self.status,
            "error": self.error,
            "issues": [issue.as_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class FileResult:
    path: str
    topics: tuple[TopicResult, ...] = ()
    error: str | None = None
    fixed: int = 0

    @property
    def issues(self) -> list[Issue]:
        return [issue for topic in self.topics for issue in topic.issues]

    @property
    def fixes(self) -> list[Fix]:
        return [fix for topic in self.topics for fix in topic.fixes]

    @property
    def errors(self) -> list[str]:
        rows = [] if self.error is None else [self.error]
        rows.extend(topic.error for topic in self.topics if topic.error is not None)
        return rows

    @property
    def status(self) -> str:
        if self.errors:
            return "error"
        return "fail" if self.issues else "pass"

    def as_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "status": self.status,
            "error": self.error,
            "fixed": self.fixed,
            "topics": [topic.as_dict() for topic in self.topics],
        }


@dataclass
class RunSummary:
    files: list[FileResult] = field(default_factory=list)

    @property
    def issues(self) -> list[Issue]:
        return [issue for result in self.files for issue in result.issues]

    @property
    def has_errors(self) -> bool:
        return any(result.errors for result in self.files)

    @property
    def has_blocking_issues(self) -> bool:
        return any(issue.severity == Severity.ERROR for issue in self.issues)


def check_topic(topic: TopicRecord, policy: Policy, rules: Sequence[RuleDef] = RULES) -> TopicResult:
    if topic.config_error is not None:
        return TopicResult(topic.name, topic.def_range, error=topic.config_error)
    reporter = IssueReporter(topic.name)
    try:
        index = AttributeIndex.build(topic.config.properties if topic.config is not None else ())
        for rule in rules:
            rule.fn(RuleContext(topic=topic, index=index, policy=policy, reporter=reporter, rule=rule))
    except StructuralError as exc:
        return TopicResult(topic.name, topic.def_range, error=exc.message)
    return TopicResult(topic.name, topic.def_range, reporter.issues)


def check_source(text: str, filename: str, policy: Policy, rules: Sequence[RuleDef] = RULES) -> FileResult:
    try:
        topics = read_topics(text, filename)
    except StructuralError as exc:
        return FileResult(filename, error=exc.message)
    return FileResult(filename, tuple(check_topic(topic, policy, rules) for topic in topics))


def discover_files(paths: Iterable[Path]) -> list[Path]:
    out: list[Path] = []
    for path in paths:
        if path.is_dir():
            out.extend(
                sorted(
                    item
                    for item in path.rglob(f"*{SOURCE_SUFFIX}")
                    if item.is_file() and not any(part.startswith(".") for part in item.relative_to(path).parts)
                )
            )
        elif path.is_file():
            out.append(path)
        else:
            raise ScriptError(f"path not found: {path}", ERR_USAGE, "missing_path")
    return list(dict.fromkeys(out))


def check_file(
    path: Path,
    policy: Policy,
    ctx: RunContext,
    rules: Sequence[RuleDef] = RULES,
    fix: bool = False,
) -> FileResult:
    filename = str(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log_event(ctx, "error", "runner", "read_failed", path=filename, error=str(exc))
        return FileResult(filename, error=f"{filename}: cannot read file: {exc}")
    result = check_source(text, filename, policy, rules)
    log_event(
        ctx,
        "debug",
        "runner",
        "checked",
        path=filename,
        topics=len(result.topics),
        issues=len(result.issues),
        errors=len(result.errors),
    )
    fixes = result.fixes
    if not fix or not fixes:
        return result
    fixed_text = apply_fixes(text, fixes)
    applied = len(set(fixes))
    path.write_text(fixed_text, encoding="utf-8")
    log_event(ctx, "info", "runner", "fixed", path=filename, fixes=applied)
    after = check_source(fixed_text, filename, policy, rules)
    return FileResult(after.path, after.topics, after.error, fixed=applied)


def check_paths(
    paths: Iterable[Path],
    policy: Policy,
    ctx: RunContext,
    rules: Sequence[RuleDef] = RULES,
    fix: bool = False,
) -> RunSummary:
    files = discover_files(paths)
    log_event(ctx, "debug", "runner", "start", files=len(files), rules=",".join(rule.rule_id for rule in rules))
    summary = RunSummary()
    for path in files:
        summary.files.append(check_file(path, policy, ctx, rules, fix))
    return summary


__all__ = [
    "FileResult",
    "RunSummary",
    "SOURCE_SUFFIX",
    "TopicResult",
    "check_file",
    "check_paths",
    "check_source",
    "check_topic",
    "discover_files",
]
