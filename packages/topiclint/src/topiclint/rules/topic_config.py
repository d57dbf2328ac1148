from __future__ import annotations

from .base import RuleContext
from .cleanup import check_cleanup_policy
from .retention import check_retention
from .scalar import check_compression_type, check_config_present, check_replication_factor


def check_topic_config(ctx: RuleContext) -> None:
    """Replication and compression first, then cleanup policy, then retention."""
    check_replication_factor(ctx)
    config = check_config_present(ctx)
    if config is None:
        return
    check_compression_type(ctx, config)
    resolution = check_cleanup_policy(ctx, config)
    effective = resolution.effective
    if effective is None:
        # an invalid cleanup.policy leaves nothing to derive retention from
        return
    check_retention(ctx, config, effective)


__all__ = ["check_topic_config"]
