from __future__ import annotations

import argparse
from pathlib import Path

from ..core.context import RunContext
from ..core.exit_codes import ERR_ISSUES, ERR_STRUCTURE, OK
from ..engine.runner import check_paths
from ..policy import resolve_policy
from ..report import build_report_payload, render_json, render_text
from ..rules import select_rules


def configure_check_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("check", help="check kafka_topic resources in .tf files or directories")
    p.add_argument("paths", nargs="+", type=Path, metavar="PATH")
    p.add_argument("--fix", action="store_true", help="apply every proposed fix in place, then report what remains")
    p.add_argument(
        "--rule",
        action="append",
        dest="rules",
        metavar="RULE_ID",
        help="run only this rule (repeatable); overrides rules disabled by the policy",
    )


def run_check_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    policy = resolve_policy(ns.config)
    rules = select_rules(ns.rules, policy)
    summary = check_paths(ns.paths, policy, ctx, rules, fix=ns.fix)
    payload = build_report_payload(summary, ctx)
    if ctx.output_format == "json":
        print(render_json(payload))
    elif not ctx.quiet or payload["status"] != "pass":
        print(render_text(payload, verbose=ctx.verbose))
    if summary.has_errors:
        return ERR_STRUCTURE
    if summary.has_blocking_issues:
        return ERR_ISSUES
    return OK
