"""
morexport/reports
One ReportDefinition per export, registered by command name.
"""

from typing import List

from morexport.report import ReportDefinition
from morexport.reports import (
    incoming_calls_duration,
    max_calls_per_day_by_country,
    numbers_activity_by_provider,
    outgoing_duration_by_line_type,
    prices_by_destination,
)

REPORTS: List[ReportDefinition] = [
    incoming_calls_duration.REPORT,
    outgoing_duration_by_line_type.REPORT,
    numbers_activity_by_provider.REPORT,
    max_calls_per_day_by_country.REPORT,
    prices_by_destination.REPORT,
]


def get_report(name: str) -> ReportDefinition:
    """Look up a report by name or legacy command alias."""
    for report in REPORTS:
        if name == report.name or name in report.aliases:
            return report
    raise KeyError(name)
