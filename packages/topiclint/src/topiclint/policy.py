from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from .configs import configs_root
from .contracts.schema import validate
from .core.env import getenv
from .core.errors import PolicyConfigError, ScriptError
from .engine.comments import DEFAULT_ANNOTATIONS, AnnotatedProperty
from .engine.units import MILLIS_IN_ONE_DAY

POLICY_SCHEMA = "topiclint.policy.v1"
POLICY_ENV = "TOPICLINT_CONFIG"
CLEANUP_POLICIES: tuple[str, ...] = ("delete", "compact")


@dataclass(frozen=True)
class Policy:
    """Named constants every topic rule reads; never mutated during a run."""

    replication_factor: int = 3
    compression_type: str = "zstd"
    cleanup_policies: tuple[str, ...] = CLEANUP_POLICIES
    cleanup_policy_default: str = "delete"
    tiered_storage_threshold_days: int = 3
    local_retention_default_days: int = 1
    retention_placeholder: str = "???"
    annotations: tuple[AnnotatedProperty, ...] = DEFAULT_ANNOTATIONS
    disabled_rules: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.cleanup_policy_default not in self.cleanup_policies:
            raise PolicyConfigError(
                f"cleanup policy default `{self.cleanup_policy_default}` is not one of {list(self.cleanup_policies)}"
            )
        keys = [item.key for item in self.annotations]
        if len(keys) != len(set(keys)):
            raise PolicyConfigError("annotated property keys must be unique")

    @property
    def tiered_storage_threshold_ms(self) -> int:
        return self.tiered_storage_threshold_days * MILLIS_IN_ONE_DAY

    @property
    def local_retention_default_ms(self) -> int:
        return self.local_retention_default_days * MILLIS_IN_ONE_DAY

    @staticmethod
    def is_infinite_retention(millis: int) -> bool:
        return millis < 0

    def annotation(self, key: str) -> AnnotatedProperty | None:
        return next((item for item in self.annotations if item.key == key), None)

    def rule_enabled(self, rule_id: str) -> bool:
        return rule_id not in self.disabled_rules

    def as_dict(self) -> dict[str, Any]:
        return {
            "replication_factor": self.replication_factor,
            "compression_type": self.compression_type,
            "cleanup_policies": list(self.cleanup_policies),
            "cleanup_policy_default": self.cleanup_policy_default,
            "tiered_storage_threshold_days": self.tiered_storage_threshold_days,
            "local_retention_default_days": self.local_retention_default_days,
            "retention_placeholder": self.retention_placeholder,
            "annotations": [item.as_dict() for item in self.annotations],
            "disabled_rules": sorted(self.disabled_rules),
        }


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise PolicyConfigError(f"policy file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise PolicyConfigError(f"{path}: invalid TOML: {exc}") from exc
    try:
        validate(POLICY_SCHEMA, payload)
    except ScriptError as exc:
        raise PolicyConfigError(f"{path}: {exc.message}") from exc
    return payload


def _annotation(row: dict[str, Any]) -> AnnotatedProperty:
    return AnnotatedProperty(
        key=str(row["key"]),
        kind=row["kind"],
        base_phrase=str(row["base_phrase"]),
        infinite_value=int(row["infinite_value"]) if "infinite_value" in row else None,
        owns_validity=bool(row.get("owns_validity", False)),
    )


def _overlay(base: Policy, payload: dict[str, Any]) -> Policy:
    section = payload.get("policy", {})
    annotations = {item.key: item for item in base.annotations}
    for row in payload.get("annotations", []):
        # user rows replace packaged rows with the same key, new keys append
        annotations[str(row["key"])] = _annotation(row)
    disabled = payload.get("rules", {}).get("disabled")
    return Policy(
        replication_factor=int(section.get("replication_factor", base.replication_factor)),
        compression_type=str(section.get("compression_type", base.compression_type)),
        cleanup_policies=base.cleanup_policies,
        cleanup_policy_default=str(section.get("cleanup_policy_default", base.cleanup_policy_default)),
        tiered_storage_threshold_days=int(
            section.get("tiered_storage_threshold_days", base.tiered_storage_threshold_days)
        ),
        local_retention_default_days=int(
            section.get("local_retention_default_days", base.local_retention_default_days)
        ),
        retention_placeholder=str(section.get("retention_placeholder", base.retention_placeholder)),
        annotations=tuple(annotations.values()),
        disabled_rules=frozenset(disabled) if disabled is not None else base.disabled_rules,
    )


@lru_cache(maxsize=1)
def default_policy() -> Policy:
    return _overlay(Policy(), _read_toml(configs_root() / "policy.toml"))


def load_policy(path: Path) -> Policy:
    return _overlay(default_policy(), _read_toml(path))


def resolve_policy(path: Path | None = None) -> Policy:
    if path is not None:
        return load_policy(path)
    env_path = getenv(POLICY_ENV)
    if env_path:
        return load_policy(Path(env_path))
    return default_policy()


__all__ = [
    "CLEANUP_POLICIES",
    "POLICY_ENV",
    "POLICY_SCHEMA",
    "Policy",
    "default_policy",
    "load_policy",
    "resolve_policy",
]
