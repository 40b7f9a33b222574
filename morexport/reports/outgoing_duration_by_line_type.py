"""
morexport/reports/outgoing_duration_by_line_type.py
Answered outgoing calls with their duration, classified by country and
mobile / landline. Mobile numbers carry a _MOBILE suffix on the region code.
Numbers that do not parse are kept, classified UNKNOWN.
"""

from typing import Any, List, Sequence

from morexport.config import Settings
from morexport.formatting import db_int, db_text, seconds_to_hours
from morexport.geo.resolver import classify, normalize_number
from morexport.models.records import LineTypeDurationRow
from morexport.report import ReportDefinition, ReportWindow

SQL = """SELECT
    c.dst AS Destination,
    c.billsec AS Duration
FROM calls c
WHERE c.calldate > %s
  AND c.calldate < %s
  AND c.dst_device_id = 0
  AND c.disposition = 'ANSWERED';"""

HEADER = ('Country', 'Destination', 'Duration', 'Duration (hours)')


def build_query(window: ReportWindow, settings: Settings):
    return SQL, (window.start_text, window.end_text)


def decode_row(record: Sequence[Any]) -> LineTypeDurationRow:
    destination, duration = record
    return LineTypeDurationRow(
        destination = db_text(destination) or '',
        duration    = db_int(duration),
    )


def render(rows: List[LineTypeDurationRow], settings: Settings) -> List[List[str]]:
    lines = []
    for r in rows:
        geo = classify(r.destination)
        lines.append([
            geo.line_type_label,
            normalize_number(r.destination),
            str(r.duration),
            seconds_to_hours(r.duration),
        ])
    return lines


REPORT = ReportDefinition(
    name        = 'outgoing-duration-by-line-type',
    aliases     = ('morCallsDurationPerMobileOrLandlinePhones',),
    summary     = 'Export answered outgoing call durations per mobile or landline destination.',
    header      = HEADER,
    build_query = build_query,
    decode_row  = decode_row,
    render      = render,
)
