from __future__ import annotations

from ..core.errors import InvalidNumericValue
from ..engine.units import parse_int
from .base import RuleContext
from .retention import RETENTION_KEY

INFINITE_RETENTION_MESSAGE = (
    "infinite retention is not recommended: check whether a compacted topic fits the use case, "
    "otherwise keep long term data in a database. When infinite retention is really needed, "
    "disable topic_no_infinite_retention in the policy file and record the reason there"
)


def check_no_infinite_retention(ctx: RuleContext) -> None:
    prop = ctx.index.lookup(RETENTION_KEY)
    if prop is None or not prop.value_literal:
        return
    try:
        retention = parse_int(prop.value)
    except InvalidNumericValue:
        # reported by topic_config
        return
    if ctx.policy.is_infinite_retention(retention):
        ctx.emit(INFINITE_RETENTION_MESSAGE, prop.value_range)


__all__ = ["INFINITE_RETENTION_MESSAGE", "check_no_infinite_retention"]
