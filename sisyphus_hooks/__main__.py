#!/usr/bin/env python3
"""
sisyphus-hooks - prompt mode detection and todo continuation for Claude Code.

Usage:
  sisyphus-hooks prompt-submit          # UserPromptSubmit hook (reads JSON from stdin)
  sisyphus-hooks stop                   # Stop hook (reads JSON from stdin)
  sisyphus-hooks profile                # Print the resolved profile and registration JSON
  sisyphus-hooks render --out DIR       # Render the hook scripts + settings fragment
  sisyphus-hooks verify                 # Check both profiles against the catalog

prompt-submit and stop run the engine in-process; they answer exactly like
the rendered scripts do.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from sisyphus_hooks import __version__
from sisyphus_hooks.classifier import classify
from sisyphus_hooks.config import configure_cli_logging, configure_logging, load_settings
from sisyphus_hooks.contract import check_equivalence
from sisyphus_hooks.extractor import extract_prompt
from sisyphus_hooks.guard import decide
from sisyphus_hooks.profile import (
    ExecutionProfile,
    HostFamily,
    ProfileConfig,
    check_profile,
    resolve_profile_config,
    select_profile,
)
from sisyphus_hooks.protocol import ContinuationDecision, run_hook
from sisyphus_hooks.render import write_artifacts
from sisyphus_hooks.transaction import TransactionError


def prompt_submit_handler(raw: bytes) -> ContinuationDecision:
    directive = classify(extract_prompt(raw))
    if directive is None:
        return ContinuationDecision.allow()
    return ContinuationDecision.inject(directive.text)


def _resolve(args: argparse.Namespace) -> ProfileConfig:
    config = resolve_profile_config()
    if args.profile or args.host:
        host = HostFamily(args.host) if args.host else config.host
        # A host override without a profile re-runs selection for that host
        profile = ExecutionProfile(args.profile) if args.profile else select_profile(host=host)
        config = ProfileConfig(profile, host)
        for warning in check_profile(config):
            print(f"[WARN] {warning}", file=sys.stderr)
    return config


def stop_handler(raw: bytes) -> ContinuationDecision:
    settings = load_settings()
    configure_logging(settings)
    return decide(settings.todos_dir)


def _logged_prompt_submit(raw: bytes) -> ContinuationDecision:
    configure_logging(load_settings())
    return prompt_submit_handler(raw)


def cmd_prompt_submit(args: argparse.Namespace) -> int:
    return run_hook(_logged_prompt_submit)


def cmd_stop(args: argparse.Namespace) -> int:
    return run_hook(stop_handler)


def cmd_profile(args: argparse.Namespace) -> int:
    configure_cli_logging(args.verbose)
    config = _resolve(args)
    output = {
        "profile": config.profile.value,
        "host": config.host.value,
        "home_placeholder": config.home_placeholder,
        **config.hooks_settings(),
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    configure_cli_logging(args.verbose)
    config = _resolve(args)
    try:
        written = write_artifacts(Path(args.out), config)
    except TransactionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for path in written:
        print(path)
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    configure_cli_logging(args.verbose)
    problems = check_equivalence()
    if problems:
        return 1
    print("python and bash profiles match the catalog")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sisyphus-hooks",
        description="Prompt mode detection and todo continuation hooks for Claude Code",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("prompt-submit", help="UserPromptSubmit hook").set_defaults(func=cmd_prompt_submit)
    sub.add_parser("stop", help="Stop hook").set_defaults(func=cmd_stop)

    for name, func, help_text in (
        ("profile", cmd_profile, "Print the resolved execution profile"),
        ("render", cmd_render, "Render hook scripts for a profile"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--profile", choices=[e.value for e in ExecutionProfile],
                       help="Override the resolved profile")
        p.add_argument("--host", choices=[e.value for e in HostFamily],
                       help="Override the detected host family")
        p.add_argument("-v", "--verbose", action="store_true")
        p.set_defaults(func=func)
        if name == "render":
            p.add_argument("--out", required=True, help="Output directory")

    p = sub.add_parser("verify", help="Check both profiles against the catalog")
    p.add_argument("-v", "--verbose", action="store_true")
    p.set_defaults(func=cmd_verify)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
