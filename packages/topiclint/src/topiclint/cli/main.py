from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .. import __version__
from ..core.context import RunContext
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_INTERNAL, ERR_USAGE, OK
from ..core.logging import log_event
from ..rules import RULES, get_rule
from .check import configure_check_parser, run_check_command
from .output import build_base_payload, emit, render_error, resolve_output_format


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="topiclint", description="policy checks and fixes for kafka_topic definitions")
    p.add_argument("--version", action="version", version=f"topiclint {__version__}")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--run-id", help="run identifier reported in logs and payloads")
    p.add_argument("--config", type=Path, default=None, help="policy TOML file (default: $TOPICLINT_CONFIG)")
    p.add_argument("--log-json", action="store_true", help="write stderr log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable debug log events and fix details")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    configure_check_parser(sub)
    sub.add_parser("rules", help="list the topic rules in evaluation order")
    explain_p = sub.add_parser("explain", help="describe one rule")
    explain_p.add_argument("rule", metavar="RULE_ID")
    sub.add_parser("version", help="print the topiclint version")
    return p


def _rules_payload(ctx: RunContext) -> dict[str, object]:
    return {**build_base_payload(ctx), "rules": [rule.as_dict() for rule in RULES]}


def main(argv: list[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)
    if ns.format and ns.json and ns.format != "json":
        print("conflicting output flags: use either --format json or --json", file=sys.stderr)
        return ERR_USAGE
    fmt = resolve_output_format(cli_json=ns.json, cli_format=ns.format)
    ctx = RunContext.from_args(ns.run_id, fmt, ns.verbose, ns.quiet, ns.log_json)
    as_json = ctx.output_format == "json"
    try:
        log_event(ctx, "debug", "cli", "start", cmd=ns.cmd, fmt=ctx.output_format)
        if ns.cmd == "version":
            if as_json:
                emit({**build_base_payload(ctx), "topiclint_version": __version__}, as_json)
            else:
                print(f"topiclint {__version__}")
            return OK
        if ns.cmd == "rules":
            if as_json:
                emit(_rules_payload(ctx), as_json)
            else:
                for rule in RULES:
                    print(f"{rule.rule_id}\t{rule.severity.value}\t{rule.description}")
            return OK
        if ns.cmd == "explain":
            rule = get_rule(ns.rule)
            if as_json:
                emit({**build_base_payload(ctx), "rule": rule.as_dict()}, as_json)
            else:
                print(f"{rule.rule_id} ({rule.severity.value})\n{rule.description}\nfix: {rule.fix_hint}")
            return OK
        if ns.cmd == "check":
            return run_check_command(ctx, ns)
        return ERR_USAGE
    except ScriptError as exc:
        log_event(ctx, "error", "cli", "failed", cmd=ns.cmd, kind=exc.kind, code=exc.code)
        print(render_error(as_json=as_json, message=str(exc), code=exc.code), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(render_error(as_json=as_json, message=f"internal error: {exc}", code=ERR_INTERNAL), file=sys.stderr)
        return ERR_INTERNAL


__all__ = ["build_parser", "main"]
