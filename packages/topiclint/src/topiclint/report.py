from __future__ import annotations

from typing import Any

from .contracts.schema import validate_self
from .core.context import RunContext
from .core.serialize import dumps_json
from .engine.runner import RunSummary

CHECK_RUN_SCHEMA = "topiclint.check-run.v1"


def _status(summary: RunSummary) -> str:
    if summary.has_errors:
        return "error"
    return "fail" if summary.issues else "pass"


def build_report_payload(summary: RunSummary, ctx: RunContext) -> dict[str, Any]:
    issues = summary.issues
    payload: dict[str, Any] = {
        "schema_name": CHECK_RUN_SCHEMA,
        "schema_version": 1,
        "tool": "topiclint",
        "kind": "check-run",
        "run_id": ctx.run_id,
        "status": _status(summary),
        "summary": {
            "files": len(summary.files),
            "topics": sum(len(result.topics) for result in summary.files),
            "issues": len(issues),
            "fixable": sum(1 for issue in issues if issue.fixable),
            "fixed": sum(result.fixed for result in summary.files),
            "errors": sum(len(result.errors) for result in summary.files),
        },
        "files": [result.as_dict() for result in summary.files],
    }
    return validate_self(CHECK_RUN_SCHEMA, payload)


def render_text(payload: dict[str, Any], verbose: bool = False) -> str:
    lines: list[str] = []
    for row in payload["files"]:
        if row["error"]:
            lines.append(f"{row['path']}: error: {row['error']}")
        for topic in row["topics"]:
            if topic["error"]:
                lines.append(f"{row['path']}: error [{topic['name']}]: {topic['error']}")
            for issue in topic["issues"]:
                start = issue["range"]["start"]
                suffix = " (fixable)" if issue["fix"] is not None else ""
                lines.append(
                    f"{issue['range']['filename']}:{start['line']}:{start['column']}: "
                    f"{issue['severity']} [{issue['rule']}] {issue['message']}{suffix}"
                )
                if verbose and issue["fix"] is not None:
                    lines.append(f"    fix: {issue['fix']['kind']} {issue['fix']['text']!r}")
    counts = payload["summary"]
    tail = (
        f"{payload['status']}: files={counts['files']} topics={counts['topics']} issues={counts['issues']} "
        f"fixable={counts['fixable']} errors={counts['errors']}"
    )
    if counts["fixed"]:
        tail += f" fixed={counts['fixed']}"
    lines.append(tail)
    return "\n".join(lines)


def render_json(payload: dict[str, Any]) -> str:
    return dumps_json(payload, pretty=False)


__all__ = ["CHECK_RUN_SCHEMA", "build_report_payload", "render_json", "render_text"]
