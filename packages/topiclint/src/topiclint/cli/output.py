"""CLI payload output helpers."""

from __future__ import annotations

from ..core.context import RunContext
from ..core.serialize import dumps_json


def emit(payload: dict[str, object], as_json: bool) -> None:
    print(dumps_json(payload, pretty=not as_json))


def build_base_payload(ctx: RunContext, status: str = "ok") -> dict[str, object]:
    return {
        "schema_version": 1,
        "tool": "topiclint",
        "status": status,
        "run_id": ctx.run_id,
        "format": ctx.output_format,
    }


def resolve_output_format(*, cli_json: bool, cli_format: str | None) -> str:
    if cli_json:
        return "json"
    return cli_format or "text"


def render_error(*, as_json: bool, message: str, code: int) -> str:
    if as_json:
        return dumps_json(
            {
                "schema_name": "topiclint.error.v1",
                "schema_version": 1,
                "tool": "topiclint",
                "status": "error",
                "errors": [{"code": code, "message": message}],
            },
            pretty=False,
        )
    return message
