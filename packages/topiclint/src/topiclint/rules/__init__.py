"""Topic rules, evaluated in `RULES` order."""

from __future__ import annotations

from .base import RuleContext, RuleDef, RuleFunc
from .registry import RULES, get_rule, rule_ids, select_rules

__all__ = ["RULES", "RuleContext", "RuleDef", "RuleFunc", "get_rule", "rule_ids", "select_rules"]
