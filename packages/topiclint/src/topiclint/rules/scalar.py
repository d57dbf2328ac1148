"""Presence and equality checks on single topic fields."""

from __future__ import annotations

from ..core.errors import InvalidNumericValue
from ..engine.fixes import Fix
from ..engine.units import parse_int
from ..source.model import ConfigBlock
from .base import RuleContext

NAME_ATTR = "name"
REPLICATION_FACTOR_ATTR = "replication_factor"
CONFIG_ATTR = "config"
COMPRESSION_TYPE_KEY = "compression.type"

MISSING_CONFIG_MESSAGE = "missing config attribute: the topic configuration must be specified in a config attribute"


def check_replication_factor(ctx: RuleContext) -> None:
    target = ctx.policy.replication_factor
    replacement = f"{REPLICATION_FACTOR_ATTR} = {target}"
    attr = ctx.topic.attribute(REPLICATION_FACTOR_ATTR)
    if attr is None:
        name = ctx.topic.attribute(NAME_ATTR)
        # the new attribute goes right after `name`, so no fix without one
        fix = None if name is None else Fix.insert_after(name.range, f"\n{ctx.topic.body_indent}{replacement}")
        ctx.emit(f"missing {REPLICATION_FACTOR_ATTR}: it must be equal to '{target}'", ctx.topic.def_range, fix)
        return
    try:
        if not attr.value_literal:
            raise InvalidNumericValue(attr.value)
        current = parse_int(attr.value)
    except InvalidNumericValue:
        ctx.emit(f"the {REPLICATION_FACTOR_ATTR} must be an integer equal to '{target}'", attr.value_range)
        return
    if current != target:
        ctx.emit(
            f"the {REPLICATION_FACTOR_ATTR} must be equal to '{target}'",
            attr.range,
            Fix.replace(attr.range, replacement),
        )


def check_config_present(ctx: RuleContext) -> ConfigBlock | None:
    if ctx.topic.config is None:
        ctx.emit(MISSING_CONFIG_MESSAGE, ctx.topic.def_range)
    return ctx.topic.config


def check_compression_type(ctx: RuleContext, config: ConfigBlock) -> None:
    target = ctx.policy.compression_type
    prop = ctx.index.lookup(COMPRESSION_TYPE_KEY)
    if prop is None:
        ctx.emit(
            f"missing {COMPRESSION_TYPE_KEY}: it must be equal to '{target}'",
            config.range,
            ctx.insert_config_entry(config, f'"{COMPRESSION_TYPE_KEY}" = "{target}"'),
        )
        return
    if not prop.value_literal or prop.value != target:
        ctx.emit(
            f"the {COMPRESSION_TYPE_KEY} value must be equal to '{target}'",
            prop.value_range,
            Fix.replace(prop.value_range, f'"{target}"'),
        )


__all__ = [
    "COMPRESSION_TYPE_KEY",
    "CONFIG_ATTR",
    "MISSING_CONFIG_MESSAGE",
    "NAME_ATTR",
    "REPLICATION_FACTOR_ATTR",
    "check_compression_type",
    "check_config_present",
    "check_replication_factor",
]
