"""Batch and single-URL command line front end for the attribution resolver.

Usage (examples)
----------------
# One visit, pretty printed
python scripts/resolve_attribution.py \
  --url "https://example.com/?utm_source=newsletter&utm_medium=email" \
  --referrer "https://mail.example.net/" --indent 2

# JSON lines in, JSON lines out, ad storage consent denied
cat visits.jsonl | python scripts/resolve_attribution.py --deny-ad-storage > resolved.jsonl

Each input line is either a JSON object with ``page_location`` and
``page_referrer`` or a bare URL taken as ``page_location``.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections import Counter
from contextlib import ExitStack
from dataclasses import dataclass
from typing import IO, Any, Iterable, Sequence

from .logging import configure_logging, jlog, logging_context, set_global_context
from .options import DEFAULT_OPTIONS, ResolutionOptions, apply_overrides
from .resolver import resolve_attribution
from .versioning import get_contract_version

SELF_REFERRAL_ENV = "ATTRIBUTION_SELF_REFERRAL_HOSTS"


@dataclass(frozen=True)
class CliArgs:
    url: str | None
    referrer: str | None
    input_path: str | None
    output_path: str | None
    indent: int | None
    options: ResolutionOptions


def _load_options_file(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError("options file must contain a JSON object")
    return data


def _env_self_referral_hosts() -> list[str]:
    raw = os.getenv(SELF_REFERRAL_ENV, "")
    return [h for h in (part.strip() for part in raw.split(",")) if h]


def build_options(ns: argparse.Namespace, file_overrides: dict[str, Any] | None = None) -> ResolutionOptions:
    """Layer defaults, the options file, the environment and flags, in that order."""

    opts = apply_overrides(DEFAULT_OPTIONS, file_overrides or {})
    file_sets_hosts = bool(file_overrides) and any(
        k in file_overrides for k in ("selfReferralHosts", "self_referral_hosts")
    )

    env_hosts = _env_self_referral_hosts()

    flags: dict[str, Any] = {}
    if ns.self_referral_host:
        flags["self_referral_hosts"] = ns.self_referral_host
    elif env_hosts and not file_sets_hosts:
        flags["self_referral_hosts"] = env_hosts
    if ns.precedence:
        flags["precedence"] = ns.precedence
    if ns.keep_click_ids:
        flags["keep_click_ids_in_clean_url"] = True
    consent: dict[str, bool] = {}
    if ns.deny_ad_storage:
        consent["ad_storage_granted"] = False
    if ns.deny_analytics_storage:
        consent["analytics_storage_granted"] = False
    if consent:
        flags["consent"] = consent
    return apply_overrides(opts, flags)


def validate_args(ns: argparse.Namespace) -> None:
    if ns.referrer and not ns.url:
        jlog("warning", event="referrer_without_url", message="--referrer is only used together with --url")
    if ns.url and ns.input:
        jlog("warning", event="input_ignored", message="--input is ignored when --url is given")


def parse_args(argv: Sequence[str] | None = None) -> CliArgs:
    p = argparse.ArgumentParser(description="Resolve last-touch marketing attribution from page URLs")
    p.add_argument("--url", help="Resolve a single page_location instead of reading JSON lines")
    p.add_argument("--referrer", help="page_referrer for --url")
    p.add_argument("--input", help="JSON lines file to read (default: stdin)")
    p.add_argument("--output", help="File to write results to (default: stdout)")
    p.add_argument("--indent", type=int, help="Pretty-print JSON with this indent")
    p.add_argument("--options", help="JSON file with option overrides (removeParams, consent, precedence, ...)")
    p.add_argument("--deny-ad-storage", action="store_true", help="Drop click identifiers (ad_storage denied)")
    p.add_argument("--deny-analytics-storage", action="store_true", help="Record analytics_storage as denied")
    p.add_argument("--keep-click-ids", action="store_true", help="Keep click identifiers in cleaned_url")
    p.add_argument(
        "--self-referral-host",
        action="append",
        default=[],
        help=f"Host to ignore as referrer; repeatable (default from ${SELF_REFERRAL_ENV})",
    )
    p.add_argument(
        "--precedence",
        nargs="+",
        help="Enabled rules, e.g. gclid gbraid_wbraid utm referrer direct",
    )

    ns = p.parse_args(argv)
    file_overrides = None
    if ns.options:
        try:
            file_overrides = _load_options_file(ns.options)
        except (OSError, ValueError) as exc:
            p.error(f"could not load --options {ns.options}: {exc}")
    if ns.input and not ns.url and not (os.path.isfile(ns.input) and os.access(ns.input, os.R_OK)):
        p.error(f"could not read --input {ns.input}")
    validate_args(ns)

    return CliArgs(
        url=ns.url,
        referrer=ns.referrer,
        input_path=ns.input,
        output_path=ns.output,
        indent=ns.indent,
        options=build_options(ns, file_overrides),
    )


def parse_line(line: str) -> dict[str, Any] | None:
    """Turn one input line into resolver input; ``None`` for blank or invalid lines."""

    text = line.strip()
    if not text:
        return None
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            jlog("warning", event="invalid_input_line", error=str(exc))
            return None
        if not isinstance(data, dict):
            jlog("warning", event="invalid_input_line", error="not a JSON object")
            return None
        return data
    return {"page_location": text}


def resolve_lines(lines: Iterable[str], options: ResolutionOptions, out: IO[str]) -> Counter[str]:
    """Resolve each line and write one JSON result per line; returns counts per reason."""

    reasons: Counter[str] = Counter()
    for lineno, line in enumerate(lines, start=1):
        raw = parse_line(line)
        if raw is None:
            if line.strip():
                reasons["skipped"] += 1
                jlog("info", event="line_skipped", line=lineno)
            continue
        result = resolve_attribution(raw, options)
        reasons[result.attribution.reason] += 1
        out.write(json.dumps(result.to_dict(), ensure_ascii=False) + "\n")
    return reasons


def run(args: CliArgs, *, stdin: IO[str] | None = None, stdout: IO[str] | None = None) -> int:
    """Execute the CLI for the supplied arguments and return an exit code."""

    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    if args.url:
        result = resolve_attribution({"page_location": args.url, "page_referrer": args.referrer}, args.options)
        text = json.dumps(result.to_dict(), ensure_ascii=False, indent=args.indent)
        if args.output_path:
            with open(args.output_path, "w", encoding="utf-8") as fh:
                fh.write(text + "\n")
        else:
            stdout.write(text + "\n")
        jlog("info", event="resolved_single", reason=result.attribution.reason)
        return 0

    jlog("info", event="batch_start", input=args.input_path or "-", output=args.output_path or "-")
    with ExitStack() as stack:
        src = stack.enter_context(open(args.input_path, encoding="utf-8")) if args.input_path else stdin
        dst = stack.enter_context(open(args.output_path, "w", encoding="utf-8")) if args.output_path else stdout
        reasons = resolve_lines(src, args.options, dst)
    jlog("info", event="batch_summary", total=sum(reasons.values()), reasons=dict(sorted(reasons.items())))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    set_global_context(app="attribution_resolver")
    with logging_context(command="resolve", contract_version=get_contract_version()):
        args = parse_args(argv)
        return run(args)


__all__ = ["CliArgs", "SELF_REFERRAL_ENV", "build_options", "main", "parse_args", "parse_line", "resolve_lines", "run"]
