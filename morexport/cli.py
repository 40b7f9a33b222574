"""
morexport/cli.py
Command-line interface: one subcommand per report.

USAGE:
  mor-exporter <report> -s "YYYY-MM-DD HH:mm:SS" -e "YYYY-MM-DD HH:mm:SS" [-p provider]
  python -m morexport.cli <report> ...

EXAMPLES:
  mor-exporter incoming-calls-duration -s "2023-01-01 00:00:00" -e "2023-01-31 23:59:59"
  mor-exporter numbers-activity-by-provider -s "2023-01-01 00:00:00" -e "2023-01-31 23:59:59" -p sfr
  mor-exporter --config prod.env -o exports/ prices-by-destination -s ... -e ...

The historical camelCase command names (morIncomingCallsDuration, ...) are
accepted as aliases. Connection settings come from .env in the working
directory (or --config) and the environment; see morexport/config.py.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from morexport.config import load_settings
from morexport.errors import ExporterError, ValidationError
from morexport.report import DATE_FORMAT_DISPLAY, parse_window, run_report
from morexport.reports import REPORTS, get_report
from morexport.tunnel.executor import TunneledQueryExecutor

logger = logging.getLogger(__name__)

GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'

EXIT_OK         = 0
EXIT_FAILURE    = 1
EXIT_VALIDATION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'mor-exporter',
        description = 'Generates CSV stats from Kolmisoft MOR through an SSH tunnel.',
        formatter_class = argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--config',
        type    = Path,
        default = None,
        help    = 'dotenv config file (default: .env in the current directory)',
    )
    parser.add_argument(
        '--output-dir', '-o',
        type    = Path,
        default = Path('.'),
        help    = 'Directory for the exported CSV (default: current directory)',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging (includes the SQL text)',
    )

    sub = parser.add_subparsers(dest='report', metavar='<report>')
    sub.required = True

    for report in REPORTS:
        p = sub.add_parser(
            report.name,
            aliases     = list(report.aliases),
            help        = report.summary,
            description = f"{report.summary}\nColumns: {', '.join(report.header)}.",
            formatter_class = argparse.RawDescriptionHelpFormatter,
        )
        p.add_argument(
            '--dateStart', '-s',
            dest = 'date_start',
            help = f"The start date of the export (e.g., '{DATE_FORMAT_DISPLAY}')",
        )
        p.add_argument(
            '--dateEnd', '-e',
            dest = 'date_end',
            help = f"The end date of the export (e.g., '{DATE_FORMAT_DISPLAY}')",
        )
        if report.uses_provider:
            p.add_argument(
                '--provider', '-p',
                default = '',
                help    = "A part of the provider name, case-insensitive (e.g., 'sfr')",
            )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    logging.basicConfig(
        level   = logging.DEBUG if args.verbose else logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )
    # paramiko is chatty at DEBUG
    logging.getLogger('paramiko').setLevel(logging.WARNING)

    report = get_report(args.report)

    # ── VALIDATE INPUT (no network before this passes) ───────
    try:
        window = parse_window(args.date_start, args.date_end, getattr(args, 'provider', ''))
    except ValidationError as e:
        _print(f"{YELLOW}{e}{RESET}")
        return EXIT_VALIDATION

    output_dir = args.output_dir
    if not output_dir.is_dir():
        _print(f"{RED}Error: Directory not found: {output_dir}{RESET}")
        return EXIT_VALIDATION

    _step(f"{report.name}: {window.start_text} → {window.end_text}"
          + (f" (provider: {window.provider or '*'})" if report.uses_provider else ''))

    # ── QUERY + EXPORT ───────────────────────────────────────
    try:
        settings = load_settings(args.config)
        executor = TunneledQueryExecutor(settings.profile)
        path     = run_report(report, window, settings, executor, output_dir=output_dir)
    except ExporterError as e:
        logger.error(f"{type(e).__name__}: {e}")
        _print(f"{RED}✗ Export failed, no file written.{RESET}")
        return EXIT_FAILURE

    _ok(f"Exported to {CYAN}{path.resolve()}{RESET}")
    return EXIT_OK


# ── PRINT HELPERS ────────────────────────────────────────────

def _step(msg):  _print(f"  {CYAN}→{RESET} {msg}")
def _ok(msg):    _print(f"  {GREEN}✓{RESET} {msg}")
def _print(msg): print(msg)


if __name__ == '__main__':
    sys.exit(main())
