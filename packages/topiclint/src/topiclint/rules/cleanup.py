"""Resolution of a topic's effective cleanup policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..engine.index import AttributeIndex
from ..policy import Policy
from ..source.model import ConfigBlock, Property
from .base import RuleContext

CLEANUP_POLICY_KEY = "cleanup.policy"


class CleanupState(str, Enum):
    UNSET = "unset"
    DELETE = "delete"
    COMPACT = "compact"
    INVALID = "invalid"


@dataclass(frozen=True)
class CleanupResolution:
    state: CleanupState
    effective: CleanupState | None
    prop: Property | None = None


def resolve_cleanup_policy(index: AttributeIndex, policy: Policy) -> CleanupResolution:
    prop = index.lookup(CLEANUP_POLICY_KEY)
    if prop is None:
        return CleanupResolution(CleanupState.UNSET, CleanupState(policy.cleanup_policy_default))
    if prop.value_literal and prop.value in policy.cleanup_policies:
        state = CleanupState(prop.value)
        return CleanupResolution(state, state, prop)
    return CleanupResolution(CleanupState.INVALID, None, prop)


def check_cleanup_policy(ctx: RuleContext, config: ConfigBlock) -> CleanupResolution:
    resolution = resolve_cleanup_policy(ctx.index, ctx.policy)
    if resolution.state == CleanupState.UNSET:
        default = ctx.policy.cleanup_policy_default
        ctx.emit(
            f"missing {CLEANUP_POLICY_KEY}: using default '{default}'",
            config.range,
            ctx.insert_config_entry(config, f'"{CLEANUP_POLICY_KEY}" = "{default}"'),
        )
    elif resolution.state == CleanupState.INVALID and resolution.prop is not None:
        allowed = ", ".join(ctx.policy.cleanup_policies)
        ctx.emit(
            f"invalid {CLEANUP_POLICY_KEY}: it must be one of [{allowed}], but currently is '{resolution.prop.value}'",
            resolution.prop.value_range,
        )
    return resolution


__all__ = [
    "CLEANUP_POLICY_KEY",
    "CleanupResolution",
    "CleanupState",
    "check_cleanup_policy",
    "resolve_cleanup_policy",
]
