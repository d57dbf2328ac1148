from __future__ import annotations

from ..core.errors import ScriptError
from ..core.exit_codes import ERR_USAGE
from ..engine.issues import Severity
from ..policy import Policy
from .base import RuleDef
from .comments import check_config_comments
from .infinite import check_no_infinite_retention
from .topic_config import check_topic_config

# evaluation order within a topic; later rules rely on what earlier ones scheduled for removal
RULES: tuple[RuleDef, ...] = (
    RuleDef(
        "topic_config",
        "Replication factor, compression, cleanup policy, retention and tiered storage of a kafka_topic.",
        Severity.ERROR,
        check_topic_config,
        fix_hint="Apply the proposed fix; replace any `???` retention placeholder with a real value.",
        tags=("config", "retention"),
    ),
    RuleDef(
        "topic_no_infinite_retention",
        "Warn about a negative retention.ms, which keeps data forever.",
        Severity.WARNING,
        check_no_infinite_retention,
        fix_hint="Use a compacted topic or a finite retention, or disable this rule in the policy file.",
        tags=("retention",),
    ),
    RuleDef(
        "topic_config_comments",
        "Numeric config values carry a comment with their human readable value.",
        Severity.ERROR,
        check_config_comments,
        tags=("comments",),
    ),
)


def rule_ids() -> list[str]:
    return [rule.rule_id for rule in RULES]


def get_rule(rule_id: str) -> RuleDef:
    for rule in RULES:
        if rule.rule_id == rule_id:
            return rule
    raise ScriptError(f"unknown rule `{rule_id}`; known rules: {', '.join(rule_ids())}", ERR_USAGE, "unknown_rule")


def select_rules(only: list[str] | None = None, policy: Policy | None = None) -> tuple[RuleDef, ...]:
    """Rules to run, always in registry order regardless of how `only` is ordered.

    Rules named in `only` run even when the policy disables them.
    """
    if only:
        wanted = {get_rule(rule_id).rule_id for rule_id in only}
        return tuple(rule for rule in RULES if rule.rule_id in wanted)
    if policy is None:
        return RULES
    return tuple(rule for rule in RULES if policy.rule_enabled(rule.rule_id))


__all__ = ["RULES", "get_rule", "rule_ids", "select_rules"]
