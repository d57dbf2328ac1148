from __future__ import annotations

from ..engine.comments import reconcile
from .base import RuleContext


def check_config_comments(ctx: RuleContext) -> None:
    config = ctx.topic.config
    if config is None:
        return
    for annotated in ctx.policy.annotations:
        prop = ctx.index.lookup(annotated.key)
        if prop is None or ctx.reporter.is_removed(annotated.key):
            continue
        issue = reconcile(
            prop, annotated, ctx.topic.comments, ctx.rule.rule_id, ctx.rule.severity, config.entry_indent
        )
        if issue is not None:
            ctx.record(issue)


__all__ = ["check_config_comments"]
