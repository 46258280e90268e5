"""
CLI Application - Command line entry point for clientsync.
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict

from clientsync import __version__
from clientsync.adapters.audit import JsonlAuditSink, create_audit_sink
from clientsync.adapters.config import EnvironmentConfigProvider
from clientsync.adapters.memory import build_orchestrator
from clientsync.core.domain import ClientRecord
from clientsync.core.exceptions import ConfigError

from .exit_codes import ExitCode
from .logging import setup_logging
from .output import Console


DEMO_FAILURE_POINTS = {
    "primary": ("primary", "create"),
    "spreadsheet": ("spreadsheet", "create"),
    "tracker": ("tracker", "create_linked_item"),
    "link": ("spreadsheet", "update"),
}


def create_parser() -> argparse.ArgumentParser:
    """
    Create the command-line argument parser for clientsync.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="clientsync",
        description="Keep client records consistent across the primary store, "
        "the spreadsheet and the project tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the effective configuration
  clientsync config

  # Check a specific config file
  clientsync config --config ./clientsync.yaml

  # Show the last 20 audit entries
  clientsync audit --log audit.jsonl --limit 20

  # Show only entries that need an operator
  clientsync audit --log audit.jsonl --manual-only

  # Dry-run a create against in-memory platforms, failing at the tracker
  clientsync demo --name "Acme" --fail-at tracker
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Log output format (default: from config, else text)",
    )
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    # Accepted after every subcommand: clientsync config --config PATH
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Path to config file")

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser(
        "config", parents=[common], help="Load, validate and print configuration"
    )

    audit = subparsers.add_parser("audit", parents=[common], help="Read a JSONL audit log")
    audit.add_argument("--log", default=None, help="Audit log path (default: audit.log_path)")
    audit.add_argument("--limit", type=int, default=None, help="Show only the last N entries")
    audit.add_argument(
        "--level", choices=["debug", "info", "warn", "error"], default=None, help="Minimum level"
    )
    audit.add_argument(
        "--manual-only",
        action="store_true",
        help="Only rollback failures and workflows needing manual cleanup",
    )
    audit.add_argument("--json", action="store_true", help="Output JSON lines")

    demo = subparsers.add_parser(
        "demo", parents=[common], help="Run a create workflow against in-memory platforms"
    )
    demo.add_argument("--name", default="Demo Client", help="Client name")
    demo.add_argument("--email", default=None, help="Client email")
    demo.add_argument(
        "--fail-at",
        choices=sorted(DEMO_FAILURE_POINTS),
        default=None,
        help="Inject a failure at this step",
    )
    demo.add_argument("--json", action="store_true", help="Output JSON")

    return parser


LEVEL_ORDER = {"debug": 0, "info": 1, "warn": 2, "error": 3}


def needs_manual_attention(record) -> bool:
    if record.action == "ROLLBACK_FAILED":
        return True
    return bool(record.metadata.get("manual_cleanup"))


def run_config(args, console: Console, provider: EnvironmentConfigProvider) -> int:
    errors = provider.validate()
    if errors:
        console.config_errors(errors)
        return ExitCode.CONFIG_ERROR

    config = provider.load()
    if console.json_mode:
        print(json.dumps({"valid": True, "source": provider.name, **asdict(config)}, indent=2))
        return ExitCode.SUCCESS

    console.header("clientsync configuration")
    console.info(f"Source: {provider.name}")
    for section in ("sync", "audit", "logging"):
        console.section(section)
        values = asdict(getattr(config, section))
        console.table(["Key", "Value"], [[k, str(v)] for k, v in values.items()])
    console.print()
    console.success("Configuration is valid")
    return ExitCode.SUCCESS


def run_audit(args, console: Console, provider: EnvironmentConfigProvider) -> int:
    path = args.log or provider.get("audit.log_path")
    if not path:
        console.error("No audit log given (use --log or set audit.log_path)")
        return ExitCode.CONFIG_ERROR

    try:
        records = list(JsonlAuditSink.read(path))
    except FileNotFoundError:
        console.error(f"Audit log not found: {path}")
        return ExitCode.FILE_NOT_FOUND

    if args.level:
        threshold = LEVEL_ORDER[args.level]
        records = [r for r in records if LEVEL_ORDER.get(r.level, 0) >= threshold]
    if args.manual_only:
        records = [r for r in records if needs_manual_attention(r)]
    if args.limit is not None:
        records = records[-args.limit :] if args.limit > 0 else []

    if not console.json_mode:
        console.section(f"{len(records)} audit entries from {path}")
    for record in records:
        console.audit_record(record)
    return ExitCode.SUCCESS


def run_demo(args, console: Console, provider: EnvironmentConfigProvider) -> int:
    config = provider.load()
    orchestrator = build_orchestrator(config.sync, audit_sink=create_audit_sink(config.audit))

    if args.fail_at:
        platform_attr, method = DEMO_FAILURE_POINTS[args.fail_at]
        getattr(orchestrator, platform_attr).fail_on[method] = RuntimeError(
            f"injected failure at {args.fail_at}"
        )

    result = orchestrator.create_client_workflow(ClientRecord(name=args.name, email=args.email))
    console.sync_result(result)

    if result.success:
        return ExitCode.SUCCESS
    if result.rollback is None:
        return ExitCode.VALIDATION_ERROR
    if result.manual_attention:
        return ExitCode.MANUAL_ATTENTION
    return ExitCode.SYNC_ERROR


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the clientsync CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return ExitCode.ERROR

    json_mode = getattr(args, "json", False)
    console = Console(color=not args.no_color, verbose=args.verbose, json_mode=json_mode)

    provider = EnvironmentConfigProvider(
        config_file=args.config,
        cli_overrides={
            "log_level": "DEBUG" if args.verbose else None,
            "log_format": args.log_format,
            "log_file": args.log_file,
        },
    )

    try:
        logging_config = provider.load().logging
    except ConfigError as e:
        console.config_errors([str(e)])
        return ExitCode.CONFIG_ERROR

    setup_logging(
        level=getattr(logging, logging_config.level.upper(), logging.INFO),
        log_format=logging_config.format,
        log_file=logging_config.file,
        static_fields={"service": "clientsync", "version": __version__},
    )

    commands = {
        "config": run_config,
        "audit": run_audit,
        "demo": run_demo,
    }
    try:
        return commands[args.command](args, console, provider)
    except KeyboardInterrupt:
        console.error("Interrupted")
        return ExitCode.SIGINT


def run() -> None:
    """
    Entry point for the console script.

    Calls main() and exits with its return code.
    """
    sys.exit(main())


if __name__ == "__main__":
    run()
