"""
morexport/report.py
Generic report driver.

A report is a ReportDefinition: SQL builder, row decoder, CSV header and a
render step (geo enrichment, aggregation, cell formatting). The driver runs
the query through the executor, renders every line in memory, and only then
writes the file, so a failed run never leaves a partial CSV behind.

Output: YYYY_MM_DD_HH_MM_SS_export.csv, ';' separated, header first,
'\n' line endings, UTF-8 without BOM.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

from morexport.config import Settings
from morexport.errors import ValidationError
from morexport.tunnel.executor import TunneledQueryExecutor, row_decoder

logger = logging.getLogger(__name__)

DATE_FORMAT         = '%Y-%m-%d %H:%M:%S'
DATE_FORMAT_DISPLAY = 'YYYY-MM-DD HH:mm:SS'
FILENAME_FORMAT     = '%Y_%m_%d_%H_%M_%S'
FILENAME_SUFFIX     = '_export.csv'
CSV_DELIMITER       = ';'


# ── REPORT WINDOW ────────────────────────────────────────────

@dataclass(frozen=True)
class ReportWindow:
    """Validated query window; calldate bounds are exclusive."""
    start:    datetime
    end:      datetime
    provider: str = ''

    @property
    def start_text(self) -> str:
        return self.start.strftime(DATE_FORMAT)

    @property
    def end_text(self) -> str:
        return self.end.strftime(DATE_FORMAT)


def parse_window(date_start: Optional[str], date_end: Optional[str],
                 provider: Optional[str] = '') -> ReportWindow:
    """Raises ValidationError with a message meant for the user."""
    start = _parse_date(date_start, 'dateStart')
    end   = _parse_date(date_end, 'dateEnd')
    if start > end:
        raise ValidationError(
            f"dateStart ({start.strftime(DATE_FORMAT)}) is after dateEnd ({end.strftime(DATE_FORMAT)})"
        )
    return ReportWindow(start=start, end=end, provider=(provider or '').strip())


def _parse_date(value: Optional[str], flag: str) -> datetime:
    try:
        return datetime.strptime((value or '').strip(), DATE_FORMAT)
    except ValueError as e:
        raise ValidationError(
            f"Invalid {flag} format. Please use '{DATE_FORMAT_DISPLAY}'"
        ) from e


# ── REPORT DEFINITION ────────────────────────────────────────

Query = Tuple[str, Tuple[Any, ...]]


@dataclass(frozen=True)
class ReportDefinition:
    name:          str
    summary:       str
    header:        Tuple[str, ...]
    build_query:   Callable[[ReportWindow, Settings], Query]
    decode_row:    Callable[[Sequence[Any]], Any]
    render:        Callable[[List[Any], Settings], List[List[str]]]
    aliases:       Tuple[str, ...] = field(default_factory=tuple)
    uses_provider: bool            = False


# ── DRIVER ───────────────────────────────────────────────────

def export_filename(moment: datetime) -> str:
    return moment.strftime(FILENAME_FORMAT) + FILENAME_SUFFIX


def run_report(
    definition: ReportDefinition,
    window:     ReportWindow,
    settings:   Settings,
    executor:   TunneledQueryExecutor,
    output_dir: Path = Path('.'),
    clock:      Callable[[], datetime] = datetime.now,
) -> Path:
    """Query, render and write one report. Returns the written path."""
    logger.info(
        f"{definition.name} called with dateStart: {window.start_text} and dateEnd: {window.end_text}"
        + (f" and provider: {window.provider}" if definition.uses_provider else '')
    )

    sql, params = definition.build_query(window, settings)
    rows  = executor.execute(sql, params, row_decoder(definition.decode_row))
    lines = definition.render(rows, settings)

    path = Path(output_dir) / export_filename(clock())
    write_csv(path, definition.header, lines)
    logger.info(f"{path.name} exported ({len(lines)} lines)")
    return path


def write_csv(path: Path, header: Sequence[str], lines: Sequence[Sequence[str]]) -> Path:
    with open(path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.writer(f, delimiter=CSV_DELIMITER, lineterminator='\n')
        writer.writerow(header)
        writer.writerows(lines)
    return path
