"""
morexport/reports/prices_by_destination.py
Provider cost per device group and destination, with the average price
per minute.

Device groups (MOR_DEVICE_GROUPS) map a label to the source device ids
billed under it; only calls from those devices routed to MOR_PROVIDER_IDS
are counted. Price comes back from MySQL with a decimal comma.
"""

from typing import Any, List, Sequence, Tuple

from morexport.config import Settings
from morexport.formatting import (
    average_price_per_minute, db_int, db_text, minutes_to_hours, parse_price,
)
from morexport.geo.resolver import classify_prefix
from morexport.models.records import DestinationPriceRow
from morexport.report import ReportDefinition, ReportWindow

SQL = """SELECT
    CASE
{cases}
    END AS DeviceGroup,
    d.name AS Destination,
    c.prefix AS Prefix,
    REPLACE(CAST(ROUND(SUM(c.provider_price), 2) AS CHAR), '.', ',') AS Price,
    ROUND(SUM(c.duration) / 60) AS Duration
FROM calls c
INNER JOIN destinations d ON c.prefix = d.prefix
WHERE c.calldate > %s
  AND c.calldate < %s
  AND c.src_device_id IN ({device_ids})
  AND c.provider_id IN ({provider_ids})
GROUP BY DeviceGroup, Destination
ORDER BY DeviceGroup, Destination;"""

CASE_LINE = "        WHEN c.src_device_id IN ({ids}) THEN %s"

HEADER = ('Device group', 'Country', 'Destination', 'Prefix', 'Price',
          'Duration', 'Duration (hours)', 'Average (Price/Min)')


def _placeholders(count: int) -> str:
    return ', '.join(['%s'] * count)


def build_query(window: ReportWindow, settings: Settings) -> Tuple[str, Tuple[Any, ...]]:
    params: List[Any] = []
    cases = []
    for group, ids in settings.device_groups:
        cases.append(CASE_LINE.format(ids=_placeholders(len(ids))))
        params.extend(ids)
        params.append(group)

    all_device_ids = [i for _, ids in settings.device_groups for i in ids]

    sql = SQL.format(
        cases        = '\n'.join(cases),
        device_ids   = _placeholders(len(all_device_ids)),
        provider_ids = _placeholders(len(settings.provider_ids)),
    )
    params.extend([window.start_text, window.end_text])
    params.extend(all_device_ids)
    params.extend(settings.provider_ids)
    return sql, tuple(params)


def _checked_price(text: str) -> str:
    """Returns `text` unchanged; ValueError if it is not a decimal-comma price."""
    parse_price(text)
    return text


def decode_row(record: Sequence[Any]) -> DestinationPriceRow:
    device_group, destination, prefix, price, duration = record
    price_text = _checked_price(db_text(price) or '0')
    return DestinationPriceRow(
        device_group = db_text(device_group) or '',
        destination  = db_text(destination) or '',
        prefix       = db_text(prefix) or '',
        price        = price_text,
        duration     = db_int(duration),
    )


def render(rows: List[DestinationPriceRow], settings: Settings) -> List[List[str]]:
    lines = []
    for r in rows:
        geo = classify_prefix(r.prefix, r.destination)
        lines.append([
            r.device_group,
            geo.display_name,
            r.destination,
            geo.formatted,
            r.price,
            str(r.duration),
            minutes_to_hours(r.duration),
            average_price_per_minute(r.price, r.duration, settings.average_decimals),
        ])
    return lines


REPORT = ReportDefinition(
    name        = 'prices-by-destination',
    aliases     = ('morCallsPricesByDestinationsByDeviceGroupsByProviders',),
    summary     = 'Export call prices per destination, grouped by device group, filtered by providers and devices.',
    header      = HEADER,
    build_query = build_query,
    decode_row  = decode_row,
    render      = render,
)
