"""
morexport/reports/max_calls_per_day_by_country.py
Outgoing call counts per day and country.

MOR groups calls by billing destination; several destinations map to one
country (mobile/fixed/special rates), so rows are classified from their
prefix and folded into (day, country) totals. Lines come out in first-seen
order of those keys.
"""

from typing import Any, List, Sequence

from morexport.aggregators.call_count_aggregator import CallCountAccumulator
from morexport.config import Settings
from morexport.formatting import db_int, db_text
from morexport.geo.resolver import classify_prefix
from morexport.models.records import DailyDestinationCallsRow
from morexport.report import ReportDefinition, ReportWindow

SQL = """SELECT
    DATE(c.calldate) AS Day,
    d.name AS Destination,
    c.prefix AS Prefix,
    COUNT(*) AS Calls
FROM calls c
INNER JOIN destinations d ON c.prefix = d.prefix
WHERE c.calldate > %s
  AND c.calldate < %s
  AND c.dst_device_id = 0
GROUP BY Destination, Day
ORDER BY Destination, Day;"""

HEADER = ('Day', 'Country', 'Calls')


def build_query(window: ReportWindow, settings: Settings):
    return SQL, (window.start_text, window.end_text)


def decode_row(record: Sequence[Any]) -> DailyDestinationCallsRow:
    day, destination, prefix, calls = record
    return DailyDestinationCallsRow(
        day         = db_text(day) or '',
        destination = db_text(destination) or '',
        prefix      = db_text(prefix) or '',
        calls       = db_int(calls),
    )


def render(rows: List[DailyDestinationCallsRow], settings: Settings) -> List[List[str]]:
    acc = CallCountAccumulator()
    for r in rows:
        country = classify_prefix(r.prefix, r.destination).display_name
        acc.fold(r.day, country, r.calls)
    return [[s.day, s.label, str(s.calls)] for s in acc]


REPORT = ReportDefinition(
    name        = 'max-calls-per-day-by-country',
    aliases     = ('morMaxCallsNumberPerDaysByDestinations',),
    summary     = 'Export the number of outgoing calls per day for each destination country.',
    header      = HEADER,
    build_query = build_query,
    decode_row  = decode_row,
    render      = render,
)
