"""
morexport/reports/incoming_calls_duration.py
Incoming call seconds per DID over the window, with provider, owner and device.
"""

from typing import Any, List, Sequence

from morexport.config import Settings
from morexport.formatting import db_int, db_text, nullable, seconds_to_hours
from morexport.models.records import IncomingDurationRow
from morexport.report import ReportDefinition, ReportWindow

SQL = """SELECT
    d.did AS Did,
    IFNULL(SUM(c.duration), 0) AS Seconds,
    p.name AS Provider,
    u.username AS Username,
    dv.extension AS Extension,
    dv.description AS Description,
    d.status AS Status,
    d.closed_till AS UpdateDate
FROM dids d
LEFT JOIN (
    SELECT sc.dst, sc.duration, sc.calldate
    FROM calls sc
    WHERE sc.calldate > %s AND sc.calldate < %s
) c ON c.dst = d.did
LEFT JOIN providers p ON d.provider_id = p.id
LEFT JOIN users u ON d.user_id = u.id
LEFT JOIN devices dv ON d.device_id = dv.id
GROUP BY d.did
ORDER BY Seconds DESC, Description;"""

HEADER = ('Did', 'Seconds', 'Provider', 'Username', 'Extension',
          'Description', 'Status', 'UpdateDate', 'Duration (hours)')


def build_query(window: ReportWindow, settings: Settings):
    return SQL, (window.start_text, window.end_text)


def decode_row(record: Sequence[Any]) -> IncomingDurationRow:
    did, seconds, provider, username, extension, description, status, update_date = record
    return IncomingDurationRow(
        did         = db_text(did) or '',
        seconds     = db_int(seconds),
        provider    = db_text(provider) or '',
        username    = db_text(username) or '',
        extension   = db_text(extension),
        description = db_text(description),
        status      = db_text(status) or '',
        update_date = db_text(update_date) or '',
    )


def render(rows: List[IncomingDurationRow], settings: Settings) -> List[List[str]]:
    return [
        [
            r.did,
            str(r.seconds),
            r.provider,
            r.username,
            nullable(r.extension),
            nullable(r.description),
            r.status,
            r.update_date,
            seconds_to_hours(r.seconds),
        ]
        for r in rows
    ]


REPORT = ReportDefinition(
    name        = 'incoming-calls-duration',
    aliases     = ('morIncomingCallsDuration',),
    summary     = 'Export incoming call duration per DID for a date range.',
    header      = HEADER,
    build_query = build_query,
    decode_row  = decode_row,
    render      = render,
)
