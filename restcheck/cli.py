# restcheck/cli.py
"""
Command line entry point.

Usage:
    # Run every scenario against the live services
    restcheck run

    # Only the JSONPlaceholder group, four workers, verbose request logging
    restcheck run --api jsonplaceholder --workers 4 -v

    # Offline, from the bundled recorded responses
    restcheck run --mode replay

    # Point a group at another host (e.g. a local stand-in)
    restcheck run --jsonplaceholder-url http://localhost:3000

    # Show the scenario table
    restcheck list

Exit codes: 0 all passed, 1 any failure, 2 usage/configuration error,
130 interrupted.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from restcheck import catalog
from restcheck.cassette import MODES
from restcheck.reporter import Reporter, print_summary
from restcheck.runner import ScenarioRunner
from restcheck.settings import load_settings
from restcheck.types import ConfigurationError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="restcheck",
        description="Table-driven HTTP contract checks for JSONPlaceholder and Random User Generator",
    )
    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Run scenarios")
    run.add_argument("--jsonplaceholder-url", help="Override the JSONPlaceholder base URL")
    run.add_argument("--randomuser-url", help="Override the Random User Generator base URL")
    run.add_argument("--only", nargs="+", metavar="NAME", help="Run only these scenarios")
    run.add_argument("--api", choices=list(catalog.APIS), help="Run only one scenario group")
    run.add_argument("--tag", action="append", help="Run scenarios carrying this tag (repeatable)")
    run.add_argument("--workers", type=int, help="Parallel workers (default 1)")
    run.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default 10)")
    run.add_argument("--mode", choices=list(MODES), help="live (default), record or replay")
    run.add_argument("--cassette-dir", help="Directory holding recorded responses")
    run.add_argument("--schemas-dir", help="Directory holding JSON schemas")
    run.add_argument("--report-dir", help="Write JSON, JUnit XML and HTML reports here")
    run.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    run.add_argument("-v", "--verbose", action="store_true", help="Log method, URI, status and body")

    ls = sub.add_parser("list", help="List scenarios")
    ls.add_argument("--api", choices=list(catalog.APIS))
    ls.add_argument("--tag", action="append")

    return parser


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Per-request lines come from our own client in verbose mode
    logging.getLogger("httpx").setLevel(logging.WARNING)


def cmd_list(args: argparse.Namespace) -> int:
    for s in catalog.select(api=args.api, tags=args.tag):
        tags = ",".join(s.tags)
        print(f"{s.name:<28} {s.api:<16} {s.label:<28} [{tags}]")
        if s.description:
            print(f"{'':<28} {s.description}")
    return EXIT_OK


def cmd_run(args: argparse.Namespace) -> int:
    settings = load_settings(
        jsonplaceholder_url=args.jsonplaceholder_url,
        randomuser_url=args.randomuser_url,
        workers=args.workers,
        timeout_sec=args.timeout,
        mode=args.mode,
        cassette_dir=args.cassette_dir,
        schemas_dir=args.schemas_dir,
        report_dir=args.report_dir,
        verify_ssl=False if args.insecure else None,
        verbose=True if args.verbose else None,
    )
    _setup_logging(settings.log_level)

    scenarios = catalog.select(names=args.only, api=args.api, tags=args.tag)
    if not scenarios:
        raise ConfigurationError("no scenarios selected")

    runner = ScenarioRunner(settings)
    summary = runner.run(scenarios)

    print_summary(summary)

    if settings.report_dir:
        paths = Reporter(settings.report_dir).create_reports(summary)
        for kind, path in paths.items():
            print(f"{kind}: {path}")

    if summary.interrupted:
        _exit_abandoning_workers(EXIT_INTERRUPTED)
    return EXIT_OK if summary.ok else EXIT_FAILED


def _exit_abandoning_workers(code: int) -> None:
    """Exit now; pool threads still waiting on a response are not joined."""
    sys.stdout.flush()
    sys.stderr.flush()
    logging.shutdown()
    os._exit(code)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_USAGE

    try:
        if args.command == "list":
            return cmd_list(args)
        return cmd_run(args)
    except ConfigurationError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
