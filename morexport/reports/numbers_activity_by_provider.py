"""
morexport/reports/numbers_activity_by_provider.py
Incoming and outgoing activity (calls, seconds, last call) of every active
DID whose provider name contains the --provider text, case-insensitive.
An empty --provider matches every provider.
"""

from typing import Any, List, Sequence

from morexport.config import Settings
from morexport.formatting import db_int, db_text, nullable
from morexport.models.records import NumberActivityRow
from morexport.report import ReportDefinition, ReportWindow

SQL = r"""SELECT
    d.did AS DID,
    COUNT(DISTINCT CASE WHEN c.provider_id = 0 THEN c.id END) AS IncomingCalls,
    SUM(CASE WHEN c.provider_id = 0 THEN c.billsec ELSE 0 END) AS IncomingDuration,
    MAX(CASE WHEN c.provider_id = 0 THEN c.calldate END) AS LastIncoming,
    COUNT(DISTINCT CASE WHEN c.provider_id != 0 THEN c.id END) AS OutgoingCalls,
    SUM(CASE WHEN c.provider_id != 0 THEN c.billsec ELSE 0 END) AS OutgoingDuration,
    MAX(CASE WHEN c.provider_id != 0 THEN c.calldate END) AS LastOutgoing,
    p.name AS Provider
FROM dids d
LEFT JOIN calls c
    ON (c.dst = d.did OR c.src = d.did)
    AND c.calldate > %s
    AND c.calldate < %s
LEFT JOIN providers p ON d.provider_id = p.id
WHERE d.status = 'active'
  AND LOWER(p.name) LIKE %s ESCAPE '\\'
GROUP BY d.did, d.provider_id
ORDER BY d.did;"""

HEADER = ('DID', 'Incoming Calls', 'Incoming Duration (seconds)', 'Last Incoming',
          'Outgoing Calls', 'Outgoing Duration (seconds)', 'Last Outgoing', 'Provider')


def provider_pattern(provider: str) -> str:
    """Substring LIKE pattern with the user's wildcards escaped."""
    text = (provider or '').lower()
    for char in ('\\', '%', '_'):
        text = text.replace(char, '\\' + char)
    return f"%{text}%"


def build_query(window: ReportWindow, settings: Settings):
    return SQL, (window.start_text, window.end_text, provider_pattern(window.provider))


def decode_row(record: Sequence[Any]) -> NumberActivityRow:
    (did, incoming_calls, incoming_duration, last_incoming,
     outgoing_calls, outgoing_duration, last_outgoing, provider) = record
    return NumberActivityRow(
        did               = db_text(did) or '',
        incoming_calls    = db_int(incoming_calls),
        incoming_duration = db_int(incoming_duration),
        last_incoming     = db_text(last_incoming),
        outgoing_calls    = db_int(outgoing_calls),
        outgoing_duration = db_int(outgoing_duration),
        last_outgoing     = db_text(last_outgoing),
        provider          = db_text(provider) or '',
    )


def render(rows: List[NumberActivityRow], settings: Settings) -> List[List[str]]:
    return [
        [
            r.did,
            str(r.incoming_calls),
            str(r.incoming_duration),
            nullable(r.last_incoming),
            str(r.outgoing_calls),
            str(r.outgoing_duration),
            nullable(r.last_outgoing),
            r.provider,
        ]
        for r in rows
    ]


REPORT = ReportDefinition(
    name          = 'numbers-activity-by-provider',
    aliases       = ('morCallsIncomingOutgoingNumbersDurationLastByProvider',),
    summary       = 'Export incoming/outgoing calls, duration and last call date of active numbers for a provider.',
    header        = HEADER,
    build_query   = build_query,
    decode_row    = decode_row,
    render        = render,
    uses_provider = True,
)
