"""Retention and tiered storage requirements of a topic.

Which of ``retention.ms``, ``remote.storage.enable`` and
``local.retention.ms`` a topic must or must not define is a pure function of
its cleanup policy and retention time, computed by `required_properties`.
`check_retention` reads the topic, asks the table and reports the gaps.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..core.errors import InvalidNumericValue
from ..engine.fixes import Fix
from ..engine.units import parse_int
from ..policy import Policy
from ..source.model import ConfigBlock, Property
from .base import RuleContext
from .cleanup import CleanupState

RETENTION_KEY = "retention.ms"
TIERED_STORAGE_KEY = "remote.storage.enable"
TIERED_STORAGE_ENABLED = "true"
LOCAL_RETENTION_KEY = "local.retention.ms"
COMPACTED_REASON = "compacted topic"


class Presence(str, Enum):
    REQUIRED = "required"
    FORBIDDEN = "forbidden"
    UNCONSTRAINED = "unconstrained"


@dataclass(frozen=True)
class Requirements:
    retention: Presence
    tiered_storage: Presence
    local_retention: Presence
    reason: str | None = None


def short_retention_reason(policy: Policy) -> str:
    return f"less than {policy.tiered_storage_threshold_days} days retention"


def must_enable_tiered_storage(policy: Policy, retention_ms: int) -> bool:
    return retention_ms >= policy.tiered_storage_threshold_ms or policy.is_infinite_retention(retention_ms)


def required_properties(policy: Policy, cleanup: CleanupState, retention_ms: int | None = None) -> Requirements:
    if cleanup == CleanupState.COMPACT:
        return Requirements(Presence.FORBIDDEN, Presence.FORBIDDEN, Presence.FORBIDDEN, COMPACTED_REASON)
    if cleanup != CleanupState.DELETE:
        raise ValueError(f"retention requirements need a resolved cleanup policy, got `{cleanup.value}`")
    if retention_ms is None:
        return Requirements(Presence.REQUIRED, Presence.UNCONSTRAINED, Presence.UNCONSTRAINED)
    if must_enable_tiered_storage(policy, retention_ms):
        return Requirements(Presence.REQUIRED, Presence.REQUIRED, Presence.REQUIRED)
    return Requirements(Presence.REQUIRED, Presence.FORBIDDEN, Presence.FORBIDDEN, short_retention_reason(policy))


def _as_int(prop: Property) -> int | None:
    if not prop.value_literal:
        return None
    try:
        return parse_int(prop.value)
    except InvalidNumericValue:
        return None


def _retention_ms(ctx: RuleContext, config: ConfigBlock) -> int | None:
    prop = ctx.index.lookup(RETENTION_KEY)
    if prop is None:
        placeholder = ctx.policy.retention_placeholder
        ctx.emit(
            f"{RETENTION_KEY} must be defined on a topic with cleanup policy delete: "
            f"replace the '{placeholder}' placeholder with the retention in milliseconds",
            config.range,
            ctx.insert_config_entry(config, f'"{RETENTION_KEY}" = "{placeholder}"'),
        )
        return None
    retention = _as_int(prop)
    if retention is None:
        ctx.emit(
            f"{RETENTION_KEY} must have a valid integer value expressed in milliseconds. "
            "Use -1 for infinite retention",
            prop.value_range,
        )
    return retention


def _delete_entry(ctx: RuleContext, prop: Property, message: str, where_key: bool = False) -> None:
    ctx.emit(
        message,
        prop.key_range if where_key else prop.value_range,
        Fix.delete(prop.pair_range),
        removes=prop.key,
    )


def _check_tiered_storage(ctx: RuleContext, config: ConfigBlock, req: Requirements) -> None:
    prop = ctx.index.lookup(TIERED_STORAGE_KEY)
    enabled = prop is not None and prop.value_literal and prop.value == TIERED_STORAGE_ENABLED
    if req.tiered_storage == Presence.REQUIRED and not enabled:
        message = (
            "tiered storage must be enabled when retention time is longer than "
            f"{ctx.policy.tiered_storage_threshold_days} days"
        )
        if prop is None:
            fix = ctx.insert_config_entry(config, f'"{TIERED_STORAGE_KEY}" = "{TIERED_STORAGE_ENABLED}"')
            ctx.emit(message, config.range, fix)
        else:
            ctx.emit(message, prop.value_range, Fix.replace(prop.value_range, f'"{TIERED_STORAGE_ENABLED}"'))
    elif req.tiered_storage == Presence.FORBIDDEN and prop is not None and enabled:
        _delete_entry(ctx, prop, f"tiered storage is not supported for {req.reason}: disabling it...")


def _check_local_retention(ctx: RuleContext, config: ConfigBlock, req: Requirements) -> None:
    prop = ctx.index.lookup(LOCAL_RETENTION_KEY)
    if req.local_retention == Presence.REQUIRED:
        if prop is None:
            default_ms = ctx.policy.local_retention_default_ms
            lines = [f'"{LOCAL_RETENTION_KEY}" = "{default_ms}"']
            annotated = ctx.policy.annotation(LOCAL_RETENTION_KEY)
            if annotated is not None:
                lines.insert(0, annotated.canonical(str(default_ms)))
            ctx.emit(
                f"missing {LOCAL_RETENTION_KEY} when tiered storage is enabled: using default '{default_ms}'",
                config.range,
                ctx.insert_config_entry(config, *lines),
            )
        elif _as_int(prop) is None:
            ctx.emit(f"{LOCAL_RETENTION_KEY} must have a valid integer value expressed in milliseconds", prop.value_range)
    elif req.local_retention == Presence.FORBIDDEN and prop is not None:
        _delete_entry(
            ctx,
            prop,
            f"defining {LOCAL_RETENTION_KEY} is misleading when tiered storage is disabled due to {req.reason}: "
            "removing it...",
        )


def check_retention(ctx: RuleContext, config: ConfigBlock, cleanup: CleanupState) -> None:
    if cleanup == CleanupState.DELETE:
        retention = _retention_ms(ctx, config)
        if retention is None:
            return
        req = required_properties(ctx.policy, cleanup, retention)
    else:
        req = required_properties(ctx.policy, cleanup)
    _check_tiered_storage(ctx, config, req)
    _check_local_retention(ctx, config, req)
    if req.retention == Presence.FORBIDDEN:
        prop = ctx.index.lookup(RETENTION_KEY)
        if prop is not None:
            _delete_entry(ctx, prop, f"defining {RETENTION_KEY} is misleading for {req.reason}: removing it...", where_key=True)


__all__ = [
    "COMPACTED_REASON",
    "LOCAL_RETENTION_KEY",
    "Presence",
    "RETENTION_KEY",
    "Requirements",
    "TIERED_STORAGE_ENABLED",
    "TIERED_STORAGE_KEY",
    "check_retention",
    "must_enable_tiered_storage",
    "required_properties",
    "short_retention_reason",
]
