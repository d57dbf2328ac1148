"""Centralized environment variable helpers."""

from __future__ import annotations

import os

TRUTHY = frozenset({"1", "true", "yes", "on"})


def getenv(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def env_flag(name: str) -> bool:
    return str(os.environ.get(name, "")).strip().lower() in TRUTHY
