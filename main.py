#!/usr/bin/env python
# coding: utf-8
"""
============================================================
ENRON EMAIL CORPUS — TEAMS & CONNECTORS
============================================================
Reads a directory of raw mail files, builds the who-wrote-
to-whom graph, then reports:

  - connectors: people whose removal splits their team
  - per-person lookups: sent / received counts, team size

Usage:
    enron-teams maildir/                      # print connectors, then prompt
    enron-teams maildir/ connectors.txt       # also write connectors to a file
    enron-teams maildir/ --summary stats.csv  # per-address CSV export

Environment:
    MAIL_WORKERS, MAIL_DRAIN_TIMEOUT, MAIL_DOMAIN
============================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from ingest import ingest
from process import ConnectivityAnalyzer
from query import QueryService, export_summary, run_prompt, write_connectors
from settings import Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="enron-teams",
        description="Find teams and connectors in a mail corpus.",
    )
    parser.add_argument("mail_dir", help="root directory of the mail files")
    parser.add_argument("connectors_file", nargs="?", default=None,
                        help="optional file to write the connectors to")
    parser.add_argument("--summary", metavar="CSV", default=None,
                        help="write per-address statistics to this CSV file")
    parser.add_argument("--workers", type=int, default=None,
                        help="reader threads (default: MAIL_WORKERS or CPU count)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="seconds to wait for readers (default: MAIL_DRAIN_TIMEOUT or 60)")
    parser.add_argument("--domain", default=None,
                        help="address domain to recognise (default: MAIL_DOMAIN or enron.com)")
    parser.add_argument("--no-progress", action="store_true",
                        help="disable the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    values = {
        "mail_dir":        args.mail_dir,
        "connectors_file": args.connectors_file,
        "summary_file":    args.summary,
        "show_progress":   not args.no_progress,
    }
    # Unset flags fall back to the environment defaults in Settings
    if args.workers is not None:
        values["workers"] = args.workers
    if args.timeout is not None:
        values["drain_timeout"] = args.timeout
    if args.domain is not None:
        values["domain"] = args.domain
    return Settings(**values)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args   = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    try:
        settings = settings_from_args(args)
    except ValidationError as e:
        parser.print_usage(sys.stderr)
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"{parser.prog}: error: {field}: {err['msg']}", file=sys.stderr)
        return 2

    graph, _ = ingest(settings.mail_dir, settings)

    print("🔗 Finding teams & connectors …")
    analysis = ConnectivityAnalyzer(graph).run()
    print(f"   {len(analysis.teams):,} teams, {len(analysis.connectors):,} connectors")

    service = QueryService(graph, analysis)
    write_connectors(analysis.connectors, sys.stdout, settings.connectors_file)

    if settings.summary_file is not None:
        if export_summary(service, settings.summary_file) is not None:
            print(f"💾 Summary written to {settings.summary_file}")

    run_prompt(service, sys.stdin, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
