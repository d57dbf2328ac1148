"""Packaged default policy files."""

from __future__ import annotations

from importlib import resources
from pathlib import Path


def configs_root() -> Path:
    return Path(str(resources.files(__package__)))
