from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_CONFIG, ERR_INTERNAL, ERR_STRUCTURE


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class StructuralError(ScriptError):
    """A topic definition the engine cannot evaluate at all."""

    def __init__(self, message: str, kind: str = "structural_error") -> None:
        super().__init__(message, ERR_STRUCTURE, kind)


class MalformedKeyError(StructuralError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "malformed_key")


class SourceSyntaxError(StructuralError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "source_syntax")


class PolicyConfigError(ScriptError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_CONFIG, "policy_config")


class FixConflictError(ScriptError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_INTERNAL, "fix_conflict")


class InvalidNumericValue(ValueError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"not a valid integer: {raw!r}")
        self.raw = raw


__all__ = [
    "FixConflictError",
    "InvalidNumericValue",
    "MalformedKeyError",
    "PolicyConfigError",
    "ScriptError",
    "SourceSyntaxError",
    "StructuralError",
]
